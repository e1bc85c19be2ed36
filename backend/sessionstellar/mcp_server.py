"""
SessionStellar MCP server.

Exposes session scoring as tools for MCP-capable agents over STDIO.

Usage:
    sessionstellar-mcp
    python -m sessionstellar.mcp_server
"""

import logging
import os
import sys
import uuid

from mcp.server.fastmcp import FastMCP

from . import __version__
from . import hooks
from .config import Config, find_config
from .engine import ScoringEngine
from .parser import parse_session_file, sanitize
from .report import format_markdown

logger = logging.getLogger(__name__)

mcp = FastMCP("sessionstellar")


def _load_config() -> Config:
    """Read sessionstellar.yaml from the enclosing repository, or the working directory."""
    return find_config(hooks.find_git_root() or os.getcwd())


async def render_score(content: str, filename: str) -> str:
    """
    Parse, score and render a session as markdown.

    Args:
        content: Session text
        filename: Filename hint for format detection

    Returns:
        Markdown report
    """
    config = _load_config()
    engine = ScoringEngine(config)

    signals = parse_session_file(sanitize(content), filename, config.max_input_bytes)
    score = await engine.score(signals, str(uuid.uuid4()))
    quality = engine.classify_quality(score.overall_score)
    logger.info(f"Scored {filename}: {score.overall_score} ({quality.tier})")
    return format_markdown(score, quality, signals)


@mcp.tool()
async def score_session(content: str, filename: str = "session.md") -> str:
    """
    Score an AI orchestration session transcript.

    Returns a 0-100 composite score across 5 metrics: Skill Diversity (20%),
    Decision Depth (25%), Error Recovery (20%), Compound Learning (20%) and
    Orchestration Mastery (15%).

    Args:
        content: Full text content of the session transcript
        filename: Filename for format detection: .md (markdown), .txt (plain text)
            or .jsonl (JSON Lines). Defaults to session.md.
    """
    if not content or not isinstance(content, str):
        raise ValueError("content must be a non-empty string")
    return await render_score(content, filename or "session.md")


@mcp.tool()
async def score_session_file(path: str) -> str:
    """
    Score a session file by its path on disk.

    Args:
        path: Absolute or relative path to the session file (.md, .txt or .jsonl)
    """
    if not path or not isinstance(path, str):
        raise ValueError("path must be a non-empty string")

    file_path = os.path.abspath(path)
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            content = f.read()
    except (OSError, UnicodeDecodeError):
        raise ValueError(f"Cannot read file: {path}")

    return await render_score(content, os.path.basename(file_path))


def main():
    # stdout carries the protocol, so logs go to stderr
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stderr,
    )
    logger.info(f"SessionStellar MCP server {__version__} starting")
    mcp.run()


if __name__ == '__main__':
    main()
