"""
Score history store.
Keeps one JSON document per scored session under the repository root.
"""

import logging
import os
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ValidationError

from .signals import OrchestrationSignals, SessionScore

logger = logging.getLogger(__name__)


class SignalCounts(BaseModel):
    skills: int
    agents: int
    decisions: int
    learnings: int


class StoredScore(BaseModel):
    """A saved scoring run."""
    file: str
    score: SessionScore
    signals: SignalCounts
    savedAt: datetime


class ScoreStore:
    """File-backed access layer for saved session scores."""

    def __init__(self, root: str, scores_dir: str = ".sessionstellar/scores"):
        """
        Initialize score store.

        Args:
            root: Repository root the scores directory is relative to
            scores_dir: Relative directory holding score files
        """
        self.path = os.path.join(root, scores_dir)

    def save(
        self,
        file: str,
        score: SessionScore,
        signals: OrchestrationSignals,
        saved_at: Optional[datetime] = None
    ) -> str:
        """
        Write a score entry.

        Args:
            file: Session file the score belongs to (repository-relative)
            score: SessionScore to save
            signals: Signals the score was computed from
            saved_at: Save timestamp (default: now, UTC)

        Returns:
            Path of the written file
        """
        os.makedirs(self.path, exist_ok=True)
        saved_at = saved_at or datetime.now(timezone.utc)

        entry = StoredScore(
            file=file,
            score=score,
            signals=SignalCounts(
                skills=len(signals.skills_invoked),
                agents=len(signals.agents_spawned),
                decisions=len(signals.decision_points),
                learnings=len(signals.compound_learnings),
            ),
            savedAt=saved_at,
        )

        filename = f"{saved_at.date().isoformat()}-{score.session_id[:8]}.json"
        target = os.path.join(self.path, filename)
        with open(target, 'w', encoding='utf-8') as f:
            f.write(entry.model_dump_json(by_alias=True, indent=2))

        logger.debug(f"Saved score {score.overall_score} for {file} to {target}")
        return target

    def recent(self, limit: int = 5) -> List[StoredScore]:
        """
        Get the newest saved scores.

        Unreadable or malformed entries are skipped.

        Args:
            limit: Maximum number of entries

        Returns:
            Entries ordered newest first (by file name)
        """
        if not os.path.isdir(self.path):
            return []

        names = sorted(
            (name for name in os.listdir(self.path) if name.endswith('.json')),
            reverse=True,
        )[:limit]

        entries = []
        for name in names:
            try:
                with open(os.path.join(self.path, name), 'r', encoding='utf-8') as f:
                    entries.append(StoredScore.model_validate_json(f.read()))
            except (OSError, ValidationError) as e:
                logger.warning(f"Skipping unreadable score file {name}: {e}")
        return entries
