"""
Record-mode extraction for line-delimited JSON session logs.

Each non-blank line is one JSON object with a ``type`` of skill, agent,
decision, error or learning. Lines are interpreted independently: a line
that cannot be decoded or validated is skipped and the rest still count.
"""

import json
import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError

from .extractor import derive_complexity
from .patterns import invalid_token_reason
from .signals import (
    NOT_SPECIFIED,
    DecisionPoint,
    ErrorRecovery,
    OrchestrationSignals,
    SessionMetadata,
)

logger = logging.getLogger(__name__)

RECORD_TYPES = ('skill', 'agent', 'decision', 'error', 'learning')


def _token(record: Dict[str, Any]) -> Optional[str]:
    name = record.get('name')
    if not isinstance(name, str):
        return None
    token = name.strip().lower()
    if invalid_token_reason(token):
        return None
    return token


def parse_records(content: str) -> OrchestrationSignals:
    """
    Build signals from a JSON Lines document.

    No deduplication is applied: every valid record contributes one entry.

    Args:
        content: JSONL text

    Returns:
        OrchestrationSignals with complexity derived from record counts
    """
    skills = []
    agents = []
    decisions = []
    errors = []
    learnings = []
    skipped = 0

    for line_no, line in enumerate(content.splitlines(), start=1):
        if not line.strip():
            continue

        try:
            record = json.loads(line)
            if not isinstance(record, dict) or record.get('type') not in RECORD_TYPES:
                raise ValueError(f"unrecognized record type: {record!r:.60}")

            kind = record['type']
            if kind in ('skill', 'agent'):
                token = _token(record)
                if token is None:
                    raise ValueError(f"invalid {kind} name: {record.get('name')!r}")
                (skills if kind == 'skill' else agents).append(token)

            elif kind == 'decision':
                decisions.append(DecisionPoint(
                    description=record.get('description') or '',
                    tradeoffs=record.get('tradeoffs') or [],
                    chosen_path=record.get('chosenPath') or NOT_SPECIFIED,
                ))

            elif kind == 'error':
                errors.append(ErrorRecovery(
                    error=record.get('error') or '',
                    recovery=record.get('recovery') or NOT_SPECIFIED,
                ))

            else:
                statement = record.get('pattern') or record.get('learning') or ''
                if not isinstance(statement, str) or not statement.strip():
                    raise ValueError("learning record without pattern or learning text")
                learnings.append(statement.strip())

        except (ValueError, RecursionError, ValidationError) as e:
            # json.JSONDecodeError is a ValueError; deeply nested lines hit RecursionError
            skipped += 1
            logger.debug(f"Skipping record line {line_no}: {e}")

    if skipped:
        logger.info(f"Skipped {skipped} invalid record line(s)")

    metadata = SessionMetadata(
        complexity=derive_complexity(len(skills) + len(agents) + len(decisions))
    )

    return OrchestrationSignals(
        skills_invoked=skills,
        agents_spawned=agents,
        decision_points=decisions,
        errors_recovered=errors,
        compound_learnings=learnings,
        metadata=metadata,
    )
