"""
Scoring engine for orchestration sessions.
Calculates the five sub-metrics, the weighted overall score and its quality tier.
"""

import logging
import math
from typing import Awaitable, Callable, Dict, Optional, TYPE_CHECKING

from .signals import (
    NOT_SPECIFIED,
    Complexity,
    OrchestrationSignals,
    QualityTier,
    ScoreBand,
    ScoringMetrics,
    ScoringWeights,
    SessionScore,
)

if TYPE_CHECKING:
    from .config import Config

logger = logging.getLogger(__name__)

WeightProvider = Callable[[], Awaitable[Optional[ScoringWeights]]]

DEFAULT_WEIGHTS = ScoringWeights()

SCORE_VERSION = "1.0"

# Distinct skills a session of each complexity is expected to use
EXPECTED_SKILLS: Dict[str, int] = {"simple": 2, "moderate": 5, "complex": 10}

SCORE_BANDS: Dict[str, ScoreBand] = {
    "simple": ScoreBand(min=60, target=75, excellent=90),
    "moderate": ScoreBand(min=70, target=80, excellent=92),
    "complex": ScoreBand(min=75, target=85, excellent=95),
}


def _clamp(value: float) -> float:
    return max(0.0, min(100.0, value))


def _round_one_decimal(value: float) -> float:
    """Round half up to one decimal place."""
    return math.floor(value * 10 + 0.5) / 10


class ScoringEngine:
    """Calculates session scores from extracted orchestration signals."""

    def __init__(self, config: Optional["Config"] = None):
        """
        Initialize scoring engine.

        Args:
            config: Optional configuration; its scoring_weights, when set,
                replace the default weights
        """
        self.config = config

    @property
    def default_weights(self) -> ScoringWeights:
        if self.config is not None and self.config.scoring_weights is not None:
            return self.config.scoring_weights
        return DEFAULT_WEIGHTS

    async def resolve_weights(
        self,
        weights: Optional[ScoringWeights] = None,
        weight_provider: Optional[WeightProvider] = None
    ) -> ScoringWeights:
        """
        Pick the weights for a scoring call.

        Explicit weights win, then a non-None provider result, then defaults.
        Provider failures fall back to defaults and are only logged.

        Args:
            weights: Explicitly supplied weights
            weight_provider: Async zero-argument weight lookup

        Returns:
            ScoringWeights to use
        """
        if weights is not None:
            return weights

        if weight_provider is not None:
            try:
                provided = await weight_provider()
            except Exception as e:
                logger.warning(f"Weight provider failed, using defaults: {e}")
                provided = None
            if provided is not None:
                return provided

        return self.default_weights

    async def score(
        self,
        signals: OrchestrationSignals,
        session_id: str,
        weights: Optional[ScoringWeights] = None,
        weight_provider: Optional[WeightProvider] = None
    ) -> SessionScore:
        """
        Score a session, consulting the weight provider at most once.

        Args:
            signals: Extracted orchestration signals
            session_id: Identifier to stamp on the result
            weights: Explicit weights (take precedence over the provider)
            weight_provider: Optional async weight lookup

        Returns:
            SessionScore
        """
        resolved = await self.resolve_weights(weights, weight_provider)
        return self.compute(signals, session_id, resolved)

    def compute(
        self,
        signals: OrchestrationSignals,
        session_id: str,
        weights: Optional[ScoringWeights] = None
    ) -> SessionScore:
        """
        Synchronously score a session with already-resolved weights.

        Args:
            signals: Extracted orchestration signals
            session_id: Identifier to stamp on the result
            weights: Weights to use (default: engine default weights)

        Returns:
            SessionScore
        """
        weights = weights or self.default_weights

        breakdown = ScoringMetrics(
            skill_diversity=self.calculate_skill_diversity(signals),
            decision_depth=self.calculate_decision_depth(signals),
            error_recovery_rate=self.calculate_error_recovery_rate(signals),
            compound_learning_signals=self.calculate_compound_learning_signals(signals),
            orchestration_mastery=self.calculate_orchestration_mastery(signals),
        )

        total_score = (
            breakdown.skill_diversity * weights.skill_diversity +
            breakdown.decision_depth * weights.decision_depth +
            breakdown.error_recovery_rate * weights.error_recovery_rate +
            breakdown.compound_learning_signals * weights.compound_learning_signals +
            breakdown.orchestration_mastery * weights.orchestration_mastery
        )

        # Weights are not forced to sum to 1.0
        total_score = _round_one_decimal(_clamp(total_score))

        return SessionScore(
            session_id=session_id,
            overall_score=total_score,
            breakdown=breakdown,
            weights=weights,
            version=SCORE_VERSION,
        )

    @staticmethod
    def calculate_skill_diversity(signals: OrchestrationSignals) -> float:
        unique_skills = len(set(signals.skills_invoked))
        complexity = signals.metadata.complexity or "moderate"
        return _clamp(unique_skills / EXPECTED_SKILLS[complexity] * 100)

    @staticmethod
    def calculate_decision_depth(signals: OrchestrationSignals) -> float:
        """
        Blend decision quantity, tradeoff depth and chosen-path clarity.

        quantity = 100 * count / 5, depth = 100 * avg tradeoffs / 3,
        clarity = 100 * share with an explicit chosen path.
        Weighted 0.3 / 0.4 / 0.3.
        """
        decisions = signals.decision_points
        if not decisions:
            return 0.0

        quantity_score = min(len(decisions) / 5 * 100, 100)
        avg_tradeoffs = sum(len(d.tradeoffs) for d in decisions) / len(decisions)
        depth_score = min(avg_tradeoffs / 3 * 100, 100)
        with_chosen_path = sum(
            1 for d in decisions
            if d.chosen_path and d.chosen_path != NOT_SPECIFIED
        )
        clarity_score = with_chosen_path / len(decisions) * 100

        return _clamp(quantity_score * 0.3 + depth_score * 0.4 + clarity_score * 0.3)

    @staticmethod
    def calculate_error_recovery_rate(signals: OrchestrationSignals) -> float:
        errors = signals.errors_recovered
        # No errors is neutral, neither penalized nor perfect
        if not errors:
            return 70.0
        with_recovery = sum(
            1 for e in errors
            if e.recovery and e.recovery != NOT_SPECIFIED
        )
        return _clamp(with_recovery / len(errors) * 100)

    @staticmethod
    def calculate_compound_learning_signals(signals: OrchestrationSignals) -> float:
        learnings = len(signals.compound_learnings)
        if learnings == 0:
            return 0.0
        return _clamp(learnings / 5 * 100)

    @staticmethod
    def calculate_orchestration_mastery(signals: OrchestrationSignals) -> float:
        """
        Score delegation to sub-agents.

        Without agents the score is capped at 20 no matter how many skills
        were used. With agents, quantity (100 * agents / 5) is blended 0.6/0.4
        with a ratio quality that is 100 for agent/skill ratios in [0.3, 0.7],
        rises linearly from 0 below 0.3, and falls linearly to 0 at 1.0.
        """
        agents = len(signals.agents_spawned)
        skills = len(signals.skills_invoked)

        if agents == 0:
            return min(skills / 10 * 20, 20.0)

        quantity_score = min(agents / 5 * 100, 100)
        ratio = agents / max(skills, 1)

        if 0.3 <= ratio <= 0.7:
            quality_score = 100.0
        elif ratio < 0.3:
            quality_score = ratio / 0.3 * 100
        else:
            quality_score = max((1 - (ratio - 0.7) / 0.3) * 100, 0.0)

        return _clamp(quantity_score * 0.6 + quality_score * 0.4)

    @staticmethod
    def classify_quality(score: float) -> QualityTier:
        """
        Map an overall score to its quality tier.

        Args:
            score: Overall score (0-100)

        Returns:
            QualityTier with tier name and fixed description
        """
        if score >= 90:
            return QualityTier(tier="exceptional", description="Top 5% — Production-ready orchestration mastery")
        elif score >= 80:
            return QualityTier(tier="excellent", description="Top 20% — Strong orchestration patterns")
        elif score >= 70:
            return QualityTier(tier="good", description="Above average — Solid execution")
        elif score >= 60:
            return QualityTier(tier="fair", description="Functional — Room for improvement")
        return QualityTier(tier="poor", description="Below benchmark — Needs significant refinement")

    @staticmethod
    def expected_score(complexity: Complexity) -> ScoreBand:
        """Expected score band for a complexity tier, for reporting only."""
        return SCORE_BANDS[complexity]


async def score_session(
    signals: OrchestrationSignals,
    session_id: str,
    weights: Optional[ScoringWeights] = None,
    weight_provider: Optional[WeightProvider] = None
) -> SessionScore:
    """Score a session with a default engine."""
    return await ScoringEngine().score(signals, session_id, weights, weight_provider)
