"""
Score rendering for the terminal and for markdown consumers.
"""

import os
import sys
from typing import List, Optional, Tuple

from .engine import ScoringEngine
from .signals import OrchestrationSignals, QualityTier, SessionScore


class Style:
    reset = '\x1b[0m'
    bold = '\x1b[1m'
    blue = '\x1b[34m'
    cyan = '\x1b[36m'
    green = '\x1b[32m'
    yellow = '\x1b[33m'
    red = '\x1b[31m'
    white = '\x1b[97m'
    gray = '\x1b[90m'


TIER_STYLES = {
    'exceptional': Style.cyan + Style.bold,
    'excellent': Style.green + Style.bold,
    'good': Style.green,
    'fair': Style.yellow,
    'poor': Style.red,
}


class Painter:
    """Applies ANSI styles only when writing to a terminal."""

    def __init__(self, enabled: Optional[bool] = None):
        if enabled is None:
            enabled = sys.stdout.isatty() and 'NO_COLOR' not in os.environ
        self.enabled = enabled

    def __call__(self, style: str, text: str) -> str:
        return f"{style}{text}{Style.reset}" if self.enabled else text


def metric_rows(score: SessionScore) -> List[Tuple[str, float, float]]:
    """(label, value, weight) for each sub-metric, in display order."""
    b = score.breakdown
    w = score.weights
    return [
        ('Skill Diversity', b.skill_diversity, w.skill_diversity),
        ('Decision Depth', b.decision_depth, w.decision_depth),
        ('Error Recovery', b.error_recovery_rate, w.error_recovery_rate),
        ('Compound Learning', b.compound_learning_signals, w.compound_learning_signals),
        ('Orchestration', b.orchestration_mastery, w.orchestration_mastery),
    ]


def _percent(weight: float) -> str:
    return f"({round(weight * 100)}%)"


def bar(value: float, width: int = 20) -> str:
    filled = max(0, min(width, round(value / 100 * width)))
    return '█' * filled + '░' * (width - filled)


def _skill_list(skills: List[str], limit: int) -> str:
    shown = ', '.join(skills[:limit])
    return shown + (' …' if len(skills) > limit else '')


def format_report(
    score: SessionScore,
    quality: QualityTier,
    signals: OrchestrationSignals,
    version: str,
    paint: Optional[Painter] = None
) -> str:
    """
    Render the full terminal report for one session.

    Args:
        score: SessionScore to render
        quality: Quality tier of the overall score
        signals: Signals the score was computed from
        version: Tool version shown in the header
        paint: Painter (default: colour when stdout is a TTY)

    Returns:
        Multi-line report text
    """
    paint = paint or Painter()
    tier_style = TIER_STYLES.get(quality.tier, Style.white)
    complexity = signals.metadata.complexity or 'moderate'
    band = ScoringEngine.expected_score(complexity)

    def bar_line(label: str, value: float, weight: float) -> str:
        filled = round(value / 100 * 20)
        return (
            f"  {paint(Style.white, label.ljust(17))}  {paint(Style.gray, _percent(weight).ljust(5))}  "
            f"{paint(Style.cyan, '█' * filled)}{paint(Style.gray, '░' * (20 - filled))}  "
            f"{paint(Style.cyan + Style.bold, str(round(value)).rjust(3))}"
        )

    def count_line(label: str, count: int, extra: str = '') -> str:
        return f"  {paint(Style.gray, label.ljust(10))}  {paint(Style.white, str(count).rjust(3))}  {extra}".rstrip()

    skills = signals.skills_invoked
    skill_text = paint(Style.gray, _skill_list(skills, 6) if skills else 'none detected')

    lines = [
        '',
        f"  {paint(Style.bold + Style.white, 'SessionStellar')}  {paint(Style.gray, f'v{version}')}",
        '',
        f"  {paint(Style.bold + tier_style, str(score.overall_score))} {paint(Style.gray, '/ 100')}  "
        f"{paint(tier_style, quality.tier.upper())}",
        f"  {paint(Style.gray, quality.description)}",
        f"  {paint(Style.gray, f'Target for {complexity} sessions: {band.target:g} (excellent {band.excellent:g})')}",
        '',
    ]
    lines.extend(bar_line(label, value, weight) for label, value, weight in metric_rows(score))
    lines.extend([
        '',
        f"  {paint(Style.gray, '─' * 54)}",
        '',
        f"  {paint(Style.bold, 'Signals detected')}",
        '',
        count_line('Skills', len(skills), skill_text),
        count_line('Agents', len(signals.agents_spawned)),
        count_line('Decisions', len(signals.decision_points)),
        count_line('Errors', len(signals.errors_recovered)),
        count_line('Learnings', len(signals.compound_learnings)),
        f"  {paint(Style.gray, 'Complexity')}  {paint(Style.white, '   ' + complexity)}",
        '',
    ])
    return '\n'.join(lines)


def format_compact(path: str, score: SessionScore, quality: QualityTier, paint: Optional[Painter] = None) -> str:
    """Two-line summary printed from the post-commit hook."""
    paint = paint or Painter()
    tier_style = TIER_STYLES.get(quality.tier, Style.white)
    return (
        f"\n  {paint(Style.bold + Style.white, 'SessionStellar')}  {paint(Style.gray, os.path.basename(path))}\n"
        f"  {paint(Style.bold + tier_style, str(score.overall_score))} {paint(Style.gray, '/ 100')}  "
        f"{paint(tier_style, quality.tier.upper())}  {paint(Style.gray, quality.description)}\n"
    )


def format_markdown(score: SessionScore, quality: QualityTier, signals: OrchestrationSignals) -> str:
    """Render a score as a markdown table for tool-calling clients."""
    skills = signals.skills_invoked
    skill_suffix = f" ({_skill_list(skills, 5)})" if skills else ''

    lines = [
        '## SessionStellar Score',
        '',
        f"**{score.overall_score} / 100** — {quality.tier.upper()}",
        f"_{quality.description}_",
        '',
        '### Breakdown',
        '',
        '| Metric | Score | Bar |',
        '|--------|------:|-----|',
    ]
    for label, value, weight in metric_rows(score):
        lines.append(f"| {label} {_percent(weight)} | {value:.0f} | `{bar(value, 10)}` |")
    lines.extend([
        '',
        '### Signals Detected',
        '',
        f"- **Skills**: {len(skills)}{skill_suffix}",
        f"- **Agents spawned**: {len(signals.agents_spawned)}",
        f"- **Decision points**: {len(signals.decision_points)}",
        f"- **Errors recovered**: {len(signals.errors_recovered)}",
        f"- **Compound learnings**: {len(signals.compound_learnings)}",
        f"- **Complexity**: {signals.metadata.complexity or 'moderate'}",
    ])
    return '\n'.join(lines)
