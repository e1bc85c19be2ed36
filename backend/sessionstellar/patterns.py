"""
Pattern registry for session signal extraction.

Each signal category owns an ordered list of independent rules evaluated
over the same text. A category's merge policy decides how rule results
combine:

- ``union``: all rules run, results are merged and deduplicated
- ``concat``: all rules run, results are appended in rule order
- ``first``: only the first rule whose guard matches runs

Rules return plain values (tokens, statements, or field dictionaries);
the extractor turns them into models.
"""

import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, FrozenSet, List, Optional, Tuple


UNION = "union"
CONCAT = "concat"
FIRST = "first"

TOKEN = r"([a-z][a-z0-9-]+)"

# Span inside one invoke block; never crosses into the next opener or closer
INVOKE_BODY = r"(?:(?!</?invoke)[\s\S])*?"

# Generic structural words that show up in file paths, not skill names
STOP_WORDS: FrozenSet[str] = frozenset([
    'src', 'lib', 'components', 'app', 'utils', 'pages', 'api',
    'node', 'modules', 'dist', 'build', 'public', 'tests', 'test',
    'docs', 'assets', 'styles', 'hooks', 'types', 'config',
    'skills', 'invoked',
])

FILE_EXTENSION = re.compile(
    r"\.(ts|tsx|js|jsx|py|md|json|sql|css|html|yml|yaml|toml|txt)$",
    re.IGNORECASE,
)

SECTION_ECHO_WORDS: FrozenSet[str] = frozenset(['agents', 'spawned', 'no'])


def invalid_token_reason(token: str) -> Optional[str]:
    """
    Check a skill or agent token against the validity filter.

    Args:
        token: Candidate token

    Returns:
        Reason the token is rejected, or None if it is valid
    """
    if not token:
        return "empty"
    if '/' in token or '\\' in token:
        return "contains a path separator"
    if FILE_EXTENSION.search(token):
        return "looks like a file name"
    if token.lower() in STOP_WORDS:
        return "generic structural word"
    return None


@dataclass(frozen=True)
class TokenRule:
    """Harvests the first capture group of every match, optionally inside a section."""
    name: str
    pattern: re.Pattern
    section: Optional[re.Pattern] = None
    exclude: FrozenSet[str] = frozenset()

    def applies(self, text: str) -> bool:
        return True

    def apply(self, text: str) -> List[str]:
        scope = text
        if self.section is not None:
            match = self.section.search(text)
            if not match:
                return []
            scope = match.group(0)

        found = []
        for match in self.pattern.finditer(scope):
            value = (match.group(1) or '').strip()
            if value and value.lower() not in self.exclude:
                found.append(value)
        return found


@dataclass(frozen=True)
class BlockRule:
    """Runs a structured block parser, gated on an optional guard pattern."""
    name: str
    parse: Callable[[str], List[Any]]
    guard: Optional[re.Pattern] = None

    def applies(self, text: str) -> bool:
        return self.guard is None or bool(self.guard.search(text))

    def apply(self, text: str) -> List[Any]:
        return self.parse(text)


@dataclass(frozen=True)
class Category:
    name: str
    merge: str
    rules: Tuple[Any, ...]


def _icase(pattern: str, flags: int = 0) -> re.Pattern:
    return re.compile(pattern, re.IGNORECASE | flags)


def _first_line(block: str) -> str:
    match = re.match(r"\s*([^\n]+)", block)
    return match.group(1).strip() if match else ''


def _field(block: str, label: str) -> Optional[str]:
    """Value of a ``Label:`` or ``**Label**:`` line inside a block."""
    match = re.search(rf"(?:\*\*)?{label}(?:\*\*)?:\s*([^\n]+)", block, re.IGNORECASE)
    return match.group(1).strip() if match else None


# Decisions

INLINE_DECISION = _icase(
    r"(?:📋\s*)?Decision(?:\s+Point)?:\s*(.+?)"
    r"(?:\nTradeoffs?:\s*(.+?))?"
    r"(?:\nChosen(?:\s+Path)?:\s*(.+?))?"
    r"(?=\n\n|\Z)",
    re.DOTALL,
)

MARKDOWN_DECISION = _icase(
    r"####\s*Decision\s+\d+:(.+?)\n"
    r"-\s*\*\*Description\*\*:\s*(.+?)\n"
    r"-\s*\*\*Tradeoffs\*\*:([\s\S]*?)\n"
    r"-\s*\*\*Chosen Path\*\*:\s*(.+?)"
    r"(?=\n\n|####|\Z)",
    re.DOTALL,
)

DECISION_HEADING = _icase(r"###\s*Decision\s+\d+:")

TRADEOFFS_CONSIDERED = _icase(
    r"(?:\*\*)?Tradeoffs?\s+Considered(?:\*\*)?:\s*\n([\s\S]*?)(?:(?:\*\*)?Chosen Path|###|##|\Z)"
)

FIELD_LABEL_LINE = _icase(r"^(?:\*\*)?(?:Description|Tradeoffs|Chosen)")

BULLET_PREFIX = re.compile(r"^\s*[-*]\s*")


def parse_inline_decisions(text: str) -> List[Dict[str, Any]]:
    """``Decision: ...`` / ``Tradeoffs: a, b`` / ``Chosen Path: ...`` blocks."""
    decisions = []
    for match in INLINE_DECISION.finditer(text):
        tradeoffs_raw = (match.group(2) or '').strip()
        tradeoffs = [t.strip() for t in re.split(r"[,;]", tradeoffs_raw)] if tradeoffs_raw else []
        decisions.append({
            'description': (match.group(1) or '').strip(),
            'tradeoffs': [t for t in tradeoffs if t],
            'chosen_path': (match.group(3) or '').strip(),
        })
    return decisions


def parse_markdown_decisions(text: str) -> List[Dict[str, Any]]:
    """``#### Decision N: title`` followed by bold-labeled bullet fields."""
    decisions = []
    for match in MARKDOWN_DECISION.finditer(text):
        lines = (match.group(3) or '').strip().split('\n')
        tradeoffs = [re.sub(r"^\s*-\s*", '', line).strip() for line in lines]
        decisions.append({
            'description': (match.group(2) or '').strip(),
            'tradeoffs': [t for t in tradeoffs if t],
            'chosen_path': (match.group(4) or '').strip(),
        })
    return decisions


def parse_heading_decisions(text: str) -> List[Dict[str, Any]]:
    """``### Decision N: title`` blocks with a "Tradeoffs Considered" list."""
    decisions = []
    for block in DECISION_HEADING.split(text)[1:]:
        title = _first_line(block)
        description = _field(block, 'Description') or ''

        tradeoffs = []
        match = TRADEOFFS_CONSIDERED.search(block)
        if match:
            for line in match.group(1).strip().split('\n'):
                item = BULLET_PREFIX.sub('', line).strip()
                if item and not FIELD_LABEL_LINE.match(item):
                    tradeoffs.append(item)

        if description and title:
            description = f"{title}: {description}"
        decisions.append({
            'description': description,
            'tradeoffs': tradeoffs,
            'chosen_path': _field(block, 'Chosen Path') or '',
        })
    return decisions


# Errors

ERROR_HEADING = _icase(r"###\s*Error\s+\d+:")

INLINE_ERROR = _icase(
    r"(?:⚠️\s*)?Error:\s*(.+?)(?:\nRecovery:\s*(.+?))?(?=\n\n|Error:|\Z)",
    re.DOTALL,
)


def parse_heading_errors(text: str) -> List[Dict[str, str]]:
    """``### Error N: title`` blocks with Error and Recovery fields."""
    errors = []
    for block in ERROR_HEADING.split(text)[1:]:
        title = _first_line(block)
        error = _field(block, 'Error') or ''
        if error and title:
            error = f"{title}: {error}"
        errors.append({'error': error, 'recovery': _field(block, 'Recovery') or ''})
    return errors


def parse_inline_errors(text: str) -> List[Dict[str, str]]:
    return [
        {'error': (m.group(1) or '').strip(), 'recovery': (m.group(2) or '').strip()}
        for m in INLINE_ERROR.finditer(text)
    ]


# Learnings

LEARNING_HEADING = _icase(
    r"###\s*Learning\s+\d+:\s*(.+?)(?:\n|\Z)([\s\S]*?)(?=\n###|\n##|\Z)",
    re.DOTALL,
)


def parse_learning_headings(text: str) -> List[str]:
    """``### Learning N: title``, joined with the first paragraph of its body."""
    learnings = []
    for match in LEARNING_HEADING.finditer(text):
        title = (match.group(1) or '').strip()
        if not title:
            continue
        first_paragraph = (match.group(2) or '').strip().split('\n\n')[0].strip()
        learnings.append(f"{title}: {first_paragraph}" if first_paragraph else title)
    return learnings


# Metadata

DURATION = _icase(
    r"\*\*Duration\*\*:\s*(\d+)\s*(?:minutes?|mins?)|Duration:\s*(\d+)\s*(?:minutes?|mins?)"
)
PROJECT_TYPE = _icase(
    r"\*\*Project\s+Type\*\*:\s*(.+?)(?=\n|\Z)|Project(?:\s+Type)?:\s*(.+?)(?=\n|\Z)"
)
COMPLEXITY = _icase(
    r"\*\*Complexity\*\*:\s*(simple|moderate|complex)|Complexity:\s*(simple|moderate|complex)"
)


# Sections

SKILLS_SECTION = _icase(r"###?\s*🔧?\s*Skills?\s+Invoked[\s\S]*?(?=###|\Z)")
AGENTS_SECTION = _icase(
    r"###?\s*(?:🤖\s*)?(?:Agents?\s+(?:Spawned|Activity)|Agent\s+Activity)[\s\S]*?(?=###|##\s|\Z)"
)
LEARNINGS_SECTION = _icase(r"###?\s*🔄?\s*Compound\s+Learnings[\s\S]*?(?=###|##\s|\Z)")


REGISTRY: Dict[str, Category] = {
    'skills': Category('skills', UNION, (
        TokenRule('slash-mention', _icase(rf"/{TOKEN}")),
        TokenRule('skill-directive', _icase(rf"Skill:\s*{TOKEN}")),
        TokenRule('skill-callout', _icase(rf"🔧\s*Skill\s+Activation:\s*`?{TOKEN}`?")),
        TokenRule('skill-invoke-trace', _icase(
            rf'<invoke name="Skill">{INVOKE_BODY}<parameter name="skill">{TOKEN}<'
        )),
        TokenRule(
            'skills-section',
            _icase(rf"^[\s-]*{TOKEN}", re.MULTILINE),
            section=SKILLS_SECTION,
            exclude=frozenset(['skills', 'invoked']),
        ),
    )),
    'agents': Category('agents', UNION, (
        TokenRule('task-invoke-trace', _icase(
            rf'<invoke name="Task">{INVOKE_BODY}<parameter name="subagent_type">{TOKEN}<'
        )),
        TokenRule('agent-callout', _icase(rf"🤖\s*Agent\s+spawned:\s*`?{TOKEN}`?")),
        TokenRule('spawning-phrase', _icase(rf"spawning\s+(?:the\s+)?{TOKEN}\s+agent")),
        TokenRule(
            'agents-section-numbered',
            _icase(rf"^\d+\.\s*{TOKEN}", re.MULTILINE),
            section=AGENTS_SECTION,
            exclude=SECTION_ECHO_WORDS,
        ),
        TokenRule(
            'agents-section-bullet-call',
            _icase(rf"^[\s-]+{TOKEN}\s*\(", re.MULTILINE),
            section=AGENTS_SECTION,
            exclude=SECTION_ECHO_WORDS,
        ),
        TokenRule(
            'agents-section-bullet',
            _icase(rf"^\s*[-*]\s*{TOKEN}(?:\s|$|\()", re.MULTILINE),
            section=AGENTS_SECTION,
            exclude=SECTION_ECHO_WORDS,
        ),
    )),
    # Not deduplicated across forms: a decision written in two forms counts twice
    'decisions': Category('decisions', CONCAT, (
        BlockRule('inline-decision', parse_inline_decisions),
        BlockRule('markdown-decision', parse_markdown_decisions),
        BlockRule('heading-decision', parse_heading_decisions),
    )),
    'errors': Category('errors', FIRST, (
        BlockRule('heading-error', parse_heading_errors, guard=ERROR_HEADING),
        BlockRule('inline-error', parse_inline_errors),
    )),
    'learnings': Category('learnings', UNION, (
        TokenRule('pattern-learned', _icase(r"Pattern\s+learned:\s*(.+?)(?=\n|\Z)")),
        TokenRule('learning-callout', _icase(r"🔄\s*Compound\s+Learning:\s*(.+?)(?=\n|\Z)")),
        TokenRule('key-insight', _icase(r"Key\s+insight:\s*(.+?)(?=\n|\Z)")),
        TokenRule(
            'learnings-section',
            _icase(r"^\d+\.\s*\*\*Pattern\*\*:\s*(.+?)(?=\n|\Z)", re.MULTILINE),
            section=LEARNINGS_SECTION,
        ),
        BlockRule('learning-heading', parse_learning_headings),
    )),
}
