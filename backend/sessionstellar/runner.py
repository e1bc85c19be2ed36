"""
Recent-commit runner with parallel execution.

Scores the session files touched by the last commit with timeout
protection and failure isolation.
"""

import logging
import os
import subprocess
import uuid
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FuturesTimeoutError
from dataclasses import dataclass, field
from typing import List, Optional

from .config import Config
from .engine import ScoringEngine
from .history import ScoreStore
from .parser import parse_session_file, sanitize
from .signals import QualityTier, ScoringWeights, SessionScore

logger = logging.getLogger(__name__)


@dataclass
class FileResult:
    """Result of scoring a single session file."""
    path: str
    status: str  # 'OK', 'SKIPPED' or 'ERROR'
    error_message: Optional[str] = None
    score: Optional[SessionScore] = None
    quality: Optional[QualityTier] = None


@dataclass
class RecentResult:
    """Result of scoring every session file in the last commit."""
    file_results: List[FileResult] = field(default_factory=list)

    @property
    def scored(self) -> List[FileResult]:
        return [r for r in self.file_results if r.status == "OK"]


class RecentCommitRunner:
    """
    Scores session files from the last commit.

    Features:
    - Parallel execution with ThreadPoolExecutor
    - Timeout protection per file
    - Failure isolation (one bad file doesn't affect others)
    - Files without skill, agent or decision signals are skipped, not saved
    """

    def __init__(
        self,
        config: Config,
        git_root: str,
        engine: Optional[ScoringEngine] = None,
        store: Optional[ScoreStore] = None
    ):
        """
        Initialize runner.

        Args:
            config: Config with extensions, limits and worker settings
            git_root: Repository root
            engine: ScoringEngine (default: one built from config)
            store: ScoreStore (default: one rooted at git_root)
        """
        self.config = config
        self.git_root = git_root
        self.engine = engine or ScoringEngine(config)
        self.store = store or ScoreStore(git_root, config.scores_dir)

    def committed_files(self) -> List[str]:
        """
        List files touched by HEAD.

        Returns:
            Repository-relative paths (the initial commit included);
            empty if git fails (e.g. no commits yet)
        """
        try:
            out = subprocess.run(
                ['git', 'diff-tree', '--root', '--no-commit-id', '-r', '--name-only', 'HEAD'],
                cwd=self.git_root,
                capture_output=True,
                text=True,
                check=True,
            ).stdout
        except (OSError, subprocess.CalledProcessError) as e:
            logger.warning(f"Could not list committed files: {e}")
            return []
        return [line for line in out.strip().split('\n') if line]

    def session_files(self, paths: List[str]) -> List[str]:
        extensions = tuple(ext.lower() for ext in self.config.session_extensions)
        return [p for p in paths if p.lower().endswith(extensions)]

    def score_recent(self, weights: Optional[ScoringWeights] = None) -> RecentResult:
        """
        Score all session files in the last commit in parallel.
        Continue on individual failures.

        Args:
            weights: Already-resolved weights (default: engine defaults)

        Returns:
            RecentResult with one FileResult per session file
        """
        paths = self.session_files(self.committed_files())
        result = RecentResult()
        if not paths:
            return result

        with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
            future_map = {
                executor.submit(self._score_file, path, weights): path
                for path in paths
            }

            for future, path in future_map.items():
                try:
                    file_result = future.result(timeout=self.config.timeout)
                    if file_result.status == "OK":
                        logger.info(
                            f"[{path}] score={file_result.score.overall_score} "
                            f"tier={file_result.quality.tier}"
                        )
                except FuturesTimeoutError:
                    file_result = FileResult(path=path, status="ERROR", error_message="Timeout")
                    logger.error(f"[{path}] Timeout after {self.config.timeout}s")
                except Exception as e:
                    file_result = FileResult(path=path, status="ERROR", error_message=str(e))
                    logger.error(f"[{path}] Error: {e}")
                result.file_results.append(file_result)

        return result

    def _score_file(self, rel_path: str, weights: Optional[ScoringWeights]) -> FileResult:
        """
        Read, score and save one session file.

        Args:
            rel_path: Repository-relative path
            weights: Weights to score with

        Returns:
            FileResult; SKIPPED when the file is gone or carries no signals
        """
        abs_path = os.path.join(self.git_root, rel_path)
        if not os.path.exists(abs_path):
            return FileResult(path=rel_path, status="SKIPPED", error_message="File not found")

        with open(abs_path, 'r', encoding='utf-8') as f:
            content = sanitize(f.read())

        signals = parse_session_file(
            content, os.path.basename(rel_path), self.config.max_input_bytes
        )

        # Only score files that look like sessions
        if not (signals.skills_invoked or signals.decision_points or signals.agents_spawned):
            return FileResult(path=rel_path, status="SKIPPED", error_message="No session signals")

        score = self.engine.compute(signals, str(uuid.uuid4()), weights)
        self.store.save(rel_path, score, signals)

        return FileResult(
            path=rel_path,
            status="OK",
            score=score,
            quality=self.engine.classify_quality(score.overall_score),
        )
