"""
Command-line interface for SessionStellar.

Usage:
    sessionstellar score <file>     Score a session file
    sessionstellar score -          Read from stdin
    sessionstellar enable           Install git post-commit hook
    sessionstellar disable          Remove the git hook
    sessionstellar status           Show hook status and recent scores
    sessionstellar score-recent     Score session files in the last commit (used by the hook)
"""

import argparse
import asyncio
import json
import logging
import os
import sys
import uuid
from typing import List, Optional

import yaml

from . import __version__
from . import hooks
from .config import Config, find_config, load_config, yaml_weight_provider
from .engine import ScoringEngine
from .errors import InputTooLarge
from .history import ScoreStore
from .parser import parse_session_file, sanitize
from .report import Painter, Style, TIER_STYLES, format_compact, format_report
from .runner import RecentCommitRunner

logger = logging.getLogger(__name__)


class CliError(Exception):
    """User-facing failure; printed without a traceback."""


def _load_config(args) -> Config:
    if args.config:
        return load_config(args.config)
    return find_config(hooks.find_git_root() or os.getcwd())


def _require_git_root() -> str:
    git_root = hooks.find_git_root()
    if not git_root:
        raise CliError("Not inside a git repository.")
    return git_root


def _read_input(path: str):
    """Return (content, filename) for a path or '-' for stdin."""
    if path == '-':
        return sys.stdin.read(), 'session.md'
    file_path = os.path.abspath(path)
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            return f.read(), os.path.basename(file_path)
    except (OSError, UnicodeDecodeError):
        raise CliError(f"Cannot read file: {file_path}")


def cmd_score(args) -> int:
    config = _load_config(args)
    content, filename = _read_input(args.file)

    try:
        signals = parse_session_file(sanitize(content), filename, config.max_input_bytes)
    except InputTooLarge as e:
        raise CliError(str(e))

    engine = ScoringEngine(config)
    provider = yaml_weight_provider(args.weights) if args.weights else None
    score = asyncio.run(engine.score(signals, str(uuid.uuid4()), weight_provider=provider))
    quality = engine.classify_quality(score.overall_score)
    logger.debug(f"Scored {filename}: {score.overall_score} ({quality.tier})")

    if args.json:
        payload = {
            'overallScore': score.overall_score,
            'tier': quality.tier,
            'description': quality.description,
            'breakdown': score.breakdown.model_dump(by_alias=True),
            'signals': {
                'skills': signals.skills_invoked,
                'agents': len(signals.agents_spawned),
                'decisions': len(signals.decision_points),
                'errorsRecovered': len(signals.errors_recovered),
                'learnings': len(signals.compound_learnings),
                'complexity': signals.metadata.complexity,
            },
            'sessionId': score.session_id,
            'scoredAt': score.scored_at.isoformat(),
        }
        sys.stdout.write(json.dumps(payload, indent=2, ensure_ascii=False) + '\n')
    else:
        sys.stdout.write(format_report(score, quality, signals, __version__) + '\n')
    return 0


def cmd_enable(args) -> int:
    git_root = _require_git_root()
    paint = Painter()

    if hooks.install_hook(git_root) == hooks.ALREADY_INSTALLED:
        sys.stdout.write(
            paint(Style.yellow, 'already installed') +
            '  SessionStellar hook is already in .git/hooks/post-commit\n'
        )
        return 0

    sys.stdout.write('\n'.join([
        '',
        f"  {paint(Style.green + Style.bold, '✓')} SessionStellar hook installed",
        f"  {paint(Style.gray, 'Hook path   ')}  .git/hooks/post-commit",
        f"  {paint(Style.gray, 'Scores saved')}  .sessionstellar/scores/ (gitignored)",
        '',
        f"  {paint(Style.gray, 'Session files (.md, .txt, .jsonl) committed to this repo')}",
        f"  {paint(Style.gray, 'will be scored automatically on every commit.')}",
        '',
        f"  {paint(Style.gray, 'Disable anytime:')}  sessionstellar disable",
        '',
        '',
    ]))
    return 0


def cmd_disable(args) -> int:
    git_root = _require_git_root()
    status = hooks.remove_hook(git_root)

    if status == hooks.NO_HOOK_FILE:
        sys.stdout.write('No post-commit hook found, nothing to remove.\n')
    elif status == hooks.NOT_INSTALLED:
        sys.stdout.write('SessionStellar hook not found in .git/hooks/post-commit.\n')
    else:
        paint = Painter()
        sys.stdout.write(f"{paint(Style.green + Style.bold, '✓')} SessionStellar hook removed.\n")
    return 0


def cmd_status(args) -> int:
    git_root = _require_git_root()
    config = _load_config(args)
    paint = Painter()

    installed = hooks.hook_installed(git_root)
    state = paint(Style.green, '✓ installed') if installed else paint(Style.gray, '✗ not installed')
    sys.stdout.write(f"\n  {paint(Style.bold, 'Hook')}  {state}\n")

    if not installed:
        sys.stdout.write(f"\n  Run {paint(Style.cyan, 'sessionstellar enable')} to install.\n\n")
        return 0

    entries = ScoreStore(git_root, config.scores_dir).recent(config.status_limit)
    if not entries:
        sys.stdout.write(f"\n  {paint(Style.gray, 'No scores yet. Commit a session file to score it.')}\n\n")
        return 0

    sys.stdout.write(f"\n  {paint(Style.bold, 'Recent scores')}\n\n")
    for entry in entries:
        quality = ScoringEngine.classify_quality(entry.score.overall_score)
        tier_style = TIER_STYLES.get(quality.tier, Style.white)
        sys.stdout.write(
            f"  {paint(Style.gray, entry.savedAt.date().isoformat())}  "
            f"{paint(Style.cyan + Style.bold, str(entry.score.overall_score).rjust(5))}  "
            f"{paint(tier_style, quality.tier.ljust(12))}  "
            f"{paint(Style.gray, os.path.basename(entry.file))}\n"
        )
    sys.stdout.write('\n')
    return 0


def cmd_score_recent(args) -> int:
    # Runs from the hook: stay quiet outside a repository
    git_root = hooks.find_git_root()
    if not git_root:
        return 0

    runner = RecentCommitRunner(_load_config(args), git_root)
    result = runner.score_recent()
    for file_result in result.scored:
        sys.stdout.write(format_compact(file_result.path, file_result.score, file_result.quality) + '\n')
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='sessionstellar',
        description='Score AI orchestration sessions from the terminal.',
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('--config', help='Path to a sessionstellar.yaml config file')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')

    subparsers = parser.add_subparsers(dest='command', metavar='<command>')
    subparsers.required = True

    score = subparsers.add_parser('score', help='Score a session file')
    score.add_argument('file', help="Session file (.md, .txt, .jsonl) or '-' for stdin")
    score.add_argument('--json', action='store_true', help='Output raw JSON')
    score.add_argument('--weights', help='YAML file with scoring_weights to score with')
    score.set_defaults(handler=cmd_score)

    enable = subparsers.add_parser('enable', help='Install git post-commit hook (auto-score on commit)')
    enable.set_defaults(handler=cmd_enable)

    disable = subparsers.add_parser('disable', help='Remove the git hook')
    disable.set_defaults(handler=cmd_disable)

    status = subparsers.add_parser('status', help='Show hook status and recent scores')
    status.set_defaults(handler=cmd_status)

    recent = subparsers.add_parser('score-recent', help='Score session files in the last commit')
    recent.set_defaults(handler=cmd_score_recent)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stderr,
    )

    try:
        return args.handler(args)
    except (CliError, FileNotFoundError, ValueError, yaml.YAMLError) as e:
        # ValueError covers config problems and InputTooLarge
        paint = Painter(sys.stderr.isatty())
        sys.stderr.write(f"{paint(Style.red, 'error')}  {e}\n")
        return 1


if __name__ == '__main__':
    sys.exit(main())
