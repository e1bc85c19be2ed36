"""
Format dispatcher for session files.

Routes ``.jsonl`` content to record mode and everything else (markdown or
plain text) to prose mode, after enforcing the input size limit.
"""

import logging
import re
from typing import Literal

from .errors import InputTooLarge
from .extractor import SignalExtractor
from .records import parse_records
from .signals import OrchestrationSignals

logger = logging.getLogger(__name__)

SessionFormat = Literal["markdown", "text", "jsonl"]

MAX_INPUT_BYTES = 2 * 1024 * 1024

# C0 controls except tab, newline and carriage return
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F]")

_extractor = SignalExtractor()


def sanitize(text: str) -> str:
    """Strip control characters that never occur in real transcripts."""
    return _CONTROL_CHARS.sub('', text)


def detect_format(filename: str) -> SessionFormat:
    """
    Pick the session format from a filename hint.

    Args:
        filename: File name or path

    Returns:
        'jsonl' for line-delimited records, 'markdown' for .md, otherwise 'text'
    """
    lowered = filename.lower()
    if lowered.endswith('.jsonl'):
        return "jsonl"
    elif lowered.endswith('.md'):
        return "markdown"
    return "text"


def parse_session(content: str, format: SessionFormat) -> OrchestrationSignals:
    """
    Extract signals in the mode matching a declared format.

    Markdown and plain text share prose extraction.
    """
    if format == "jsonl":
        return parse_records(content)
    return _extractor.extract(content)


def parse_session_file(
    content: str,
    filename: str,
    max_bytes: int = MAX_INPUT_BYTES
) -> OrchestrationSignals:
    """
    Size-check session content and extract its signals.

    Args:
        content: Raw session text
        filename: Filename hint used for format detection
        max_bytes: Maximum UTF-8 encoded size (default: 2 MiB)

    Returns:
        Extracted OrchestrationSignals

    Raises:
        InputTooLarge: If content is larger than max_bytes
    """
    size = len(content.encode('utf-8'))
    if size > max_bytes:
        raise InputTooLarge(size, max_bytes)

    format = detect_format(filename)
    logger.debug(f"Parsing {filename} as {format} ({size} bytes)")
    return parse_session(content, format)
