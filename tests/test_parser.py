import pytest

from sessionstellar.errors import InputTooLarge
from sessionstellar.parser import MAX_INPUT_BYTES, detect_format, parse_session_file, sanitize


@pytest.mark.parametrize("filename,expected", [
    ("session.jsonl", "jsonl"),
    ("SESSION.JSONL", "jsonl"),
    ("notes.md", "markdown"),
    ("notes.txt", "text"),
    ("transcript", "text"),
])
def test_detect_format(filename, expected):
    assert detect_format(filename) == expected


def test_jsonl_uses_record_mode(sample_records):
    signals = parse_session_file(sample_records, "session.jsonl")
    assert signals.skills_invoked == ["tdd", "tdd"]


def test_markdown_and_text_extract_identically(sample_session):
    assert parse_session_file(sample_session, "a.md") == parse_session_file(sample_session, "a.txt")


def test_input_at_limit_is_accepted():
    signals = parse_session_file("a" * MAX_INPUT_BYTES, "big.txt")
    assert signals.decision_points == []


def test_input_over_limit_is_rejected():
    with pytest.raises(InputTooLarge) as exc_info:
        parse_session_file("a" * (MAX_INPUT_BYTES + 1), "big.txt")

    assert exc_info.value.size == MAX_INPUT_BYTES + 1
    assert exc_info.value.limit == MAX_INPUT_BYTES


def test_limit_counts_encoded_bytes():
    # two bytes per character in UTF-8
    with pytest.raises(InputTooLarge):
        parse_session_file("é" * 6, "x.md", max_bytes=10)
    parse_session_file("é" * 5, "x.md", max_bytes=10)


def test_sanitize_strips_control_characters():
    assert sanitize("a\x00b\x07\tc\r\n\x1f") == "ab\tc\r\n"
