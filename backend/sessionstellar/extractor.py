"""
Signal extraction module for session scoring.
Extracts orchestration signals from markdown and plain-text transcripts.
"""

import logging
from typing import Any, Dict, List, Optional

from .patterns import (
    REGISTRY,
    UNION,
    CONCAT,
    FIRST,
    Category,
    DURATION,
    PROJECT_TYPE,
    COMPLEXITY,
    invalid_token_reason,
)
from .signals import (
    NOT_SPECIFIED,
    Complexity,
    DecisionPoint,
    ErrorRecovery,
    OrchestrationSignals,
    SessionMetadata,
)

logger = logging.getLogger(__name__)


def derive_complexity(signal_count: int) -> Complexity:
    """
    Classify session complexity from the number of extracted signals.

    Args:
        signal_count: Skills + agents + decisions found in the session

    Returns:
        'simple' below 5, 'moderate' below 15, otherwise 'complex'
    """
    if signal_count < 5:
        return "simple"
    elif signal_count < 15:
        return "moderate"
    return "complex"


def _unique(values: List[str]) -> List[str]:
    return list(dict.fromkeys(values))


class SignalExtractor:
    """Extracts orchestration signals from prose session transcripts."""

    def __init__(self, registry: Optional[Dict[str, Category]] = None):
        """
        Initialize signal extractor.

        Args:
            registry: Category name to rule set mapping (default: built-in registry)
        """
        self.registry = registry if registry is not None else REGISTRY

    def extract(self, text: str) -> OrchestrationSignals:
        """
        Extract every signal category from a transcript.

        Never fails on malformed or signal-free text; missing patterns
        yield empty collections.

        Args:
            text: Markdown or plain-text transcript

        Returns:
            OrchestrationSignals with complexity always set
        """
        skills = self.extract_skills(text)
        agents = self.extract_agents(text)
        decisions = self.extract_decisions(text)
        errors = self.extract_errors(text)
        learnings = self.extract_learnings(text)

        # Derived complexity must agree with the counts reported above
        metadata = self.extract_metadata(text, len(skills) + len(agents) + len(decisions))

        logger.debug(
            f"Extracted skills={len(skills)} agents={len(agents)} "
            f"decisions={len(decisions)} errors={len(errors)} "
            f"learnings={len(learnings)} complexity={metadata.complexity}"
        )

        return OrchestrationSignals(
            skills_invoked=skills,
            agents_spawned=agents,
            decision_points=decisions,
            errors_recovered=errors,
            compound_learnings=learnings,
            metadata=metadata,
        )

    def _run(self, category_name: str, text: str) -> List[Any]:
        """
        Evaluate a category's rules according to its merge policy.

        Args:
            category_name: Registry key
            text: Text to search in

        Returns:
            Raw rule results in rule order
        """
        category = self.registry.get(category_name)
        if category is None:
            return []

        if category.merge == FIRST:
            for rule in category.rules:
                if rule.applies(text):
                    return rule.apply(text)
            return []

        results: List[Any] = []
        for rule in category.rules:
            if rule.applies(text):
                results.extend(rule.apply(text))
        if category.merge == UNION:
            return _unique(results)
        return results

    def _tokens(self, category_name: str, text: str) -> List[str]:
        tokens = [token.lower() for token in self._run(category_name, text)]
        return _unique([token for token in tokens if invalid_token_reason(token) is None])

    def extract_skills(self, text: str) -> List[str]:
        """
        Collect skill names from slash mentions, directives, callouts,
        invoke traces and the "Skills Invoked" section.

        Args:
            text: Transcript text

        Returns:
            Distinct lowercase skill names in first-seen order
        """
        return self._tokens('skills', text)

    def extract_agents(self, text: str) -> List[str]:
        """
        Collect sub-agent names from Task traces, callouts, "spawning the X
        agent" phrases and the agents section.

        Args:
            text: Transcript text

        Returns:
            Distinct lowercase agent names in first-seen order
        """
        return self._tokens('agents', text)

    def extract_decisions(self, text: str) -> List[DecisionPoint]:
        """
        Collect decisions from all three structural forms, in rule order.

        Args:
            text: Transcript text

        Returns:
            List of DecisionPoint; entries without a description are dropped
        """
        decisions = []
        for item in self._run('decisions', text):
            if not item['description']:
                continue
            decisions.append(DecisionPoint(
                description=item['description'],
                tradeoffs=item['tradeoffs'],
                chosen_path=item['chosen_path'] or NOT_SPECIFIED,
            ))
        return decisions

    def extract_errors(self, text: str) -> List[ErrorRecovery]:
        """
        Collect error/recovery pairs.

        ``### Error N:`` headings take precedence; the inline
        ``Error: ... Recovery: ...`` form is only used when no heading exists.

        Args:
            text: Transcript text

        Returns:
            List of ErrorRecovery in document order
        """
        return [
            ErrorRecovery(error=item['error'], recovery=item['recovery'] or NOT_SPECIFIED)
            for item in self._run('errors', text)
            if item['error']
        ]

    def extract_learnings(self, text: str) -> List[str]:
        return _unique([item.strip() for item in self._run('learnings', text) if item.strip()])

    def extract_metadata(self, text: str, signal_count: int) -> SessionMetadata:
        """
        Read duration, project type and complexity fields.

        Args:
            text: Transcript text
            signal_count: Skills + agents + decisions already extracted,
                used to derive complexity when it is not declared

        Returns:
            SessionMetadata with complexity always set
        """
        duration = None
        match = DURATION.search(text)
        if match:
            duration = int(match.group(1) or match.group(2))

        project_type = None
        match = PROJECT_TYPE.search(text)
        if match:
            project_type = (match.group(1) or match.group(2)).strip() or None

        match = COMPLEXITY.search(text)
        if match:
            complexity = (match.group(1) or match.group(2)).lower()
        else:
            complexity = derive_complexity(signal_count)

        return SessionMetadata(
            duration=duration,
            project_type=project_type,
            complexity=complexity,
        )
