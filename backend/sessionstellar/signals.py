"""
Signal and score models for session scoring.
Each model is an immutable value object validated on construction.
"""

from datetime import datetime, timezone
from typing import List, Optional, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .patterns import invalid_token_reason


Complexity = Literal["simple", "moderate", "complex"]

NOT_SPECIFIED = "Not specified"


class _ValueModel(BaseModel):
    """Frozen model serialized with camelCase keys."""
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class DecisionPoint(_ValueModel):
    """A decision with the tradeoffs weighed and the path taken."""
    description: str = Field(min_length=1)
    tradeoffs: List[str] = Field(default_factory=list)
    chosen_path: str = NOT_SPECIFIED


class ErrorRecovery(_ValueModel):
    """An error hit during the session and how it was handled."""
    error: str = Field(min_length=1)
    recovery: str = NOT_SPECIFIED


class SessionMetadata(_ValueModel):
    duration: Optional[int] = Field(default=None, ge=0)  # minutes
    project_type: Optional[str] = None
    complexity: Optional[Complexity] = None


class OrchestrationSignals(_ValueModel):
    """All signals extracted from one session document."""
    skills_invoked: List[str] = Field(default_factory=list)
    agents_spawned: List[str] = Field(default_factory=list)
    decision_points: List[DecisionPoint] = Field(default_factory=list)
    errors_recovered: List[ErrorRecovery] = Field(default_factory=list)
    compound_learnings: List[str] = Field(default_factory=list)
    metadata: SessionMetadata = Field(default_factory=SessionMetadata)

    @field_validator("skills_invoked", "agents_spawned")
    @classmethod
    def _check_tokens(cls, tokens: List[str]) -> List[str]:
        for token in tokens:
            if token != token.lower():
                raise ValueError(f"token must be lowercase: {token!r}")
            reason = invalid_token_reason(token)
            if reason:
                raise ValueError(f"invalid token {token!r}: {reason}")
        return tokens

    @field_validator("compound_learnings")
    @classmethod
    def _check_learnings(cls, learnings: List[str]) -> List[str]:
        if any(not item.strip() for item in learnings):
            raise ValueError("learning statements must not be empty")
        return learnings


class ScoringMetrics(_ValueModel):
    """The five sub-metrics, each on a 0-100 scale."""
    skill_diversity: float = Field(ge=0, le=100)
    decision_depth: float = Field(ge=0, le=100)
    error_recovery_rate: float = Field(ge=0, le=100)
    compound_learning_signals: float = Field(ge=0, le=100)
    orchestration_mastery: float = Field(ge=0, le=100)


class ScoringWeights(_ValueModel):
    """Per-metric weights. Expected to sum to 1.0 but not enforced."""
    skill_diversity: float = Field(default=0.20, ge=0)
    decision_depth: float = Field(default=0.25, ge=0)
    error_recovery_rate: float = Field(default=0.20, ge=0)
    compound_learning_signals: float = Field(default=0.20, ge=0)
    orchestration_mastery: float = Field(default=0.15, ge=0)


class SessionScore(_ValueModel):
    """Scoring result for a session."""
    session_id: str = Field(min_length=1)
    overall_score: float = Field(ge=0, le=100)
    breakdown: ScoringMetrics
    weights: ScoringWeights
    version: str = "1.0"
    scored_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class QualityTier(_ValueModel):
    tier: Literal["poor", "fair", "good", "excellent", "exceptional"]
    description: str


class ScoreBand(_ValueModel):
    """Expected overall score range for a complexity tier."""
    min: float
    target: float
    excellent: float
