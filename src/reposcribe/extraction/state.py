"""Heading-driven parse state machine for summary responses.

The parser is a single left-to-right pass over response lines. Its state is
either idle or active on one summary field; transitions are pure functions
returning the next state and, when a field's text is complete, the flushed
(field, text) pair.

- A heading line for field F flushes the active field and activates F.
- Any other line is appended to the active field's buffer (ignored when idle).
- End of input flushes the active field.

Headings are recognized independent of order, so missing or reordered
headings degrade gracefully.
"""

import re
from dataclasses import dataclass

from reposcribe.models.analysis import SummaryField

# Field name aliases (regex fragments), English and Korean
FIELD_ALIASES: dict[SummaryField, str] = {
    SummaryField.PROJECT_INTRO: (
        r"project\s+intro(?:duction)?|project\s+overview|project\s+summary"
        r"|overview|introduction|프로젝트\s*소개"
    ),
    SummaryField.TECH_STACK: (
        r"tech(?:nology|nical)?\s+stack|technologies(?:\s+used)?|기술\s*스택"
    ),
    SummaryField.ARCHITECTURE: (
        r"architecture(?:\s+notes|\s+overview)?|system\s+architecture|아키텍처(?:\s*설명)?"
    ),
    SummaryField.REFACTORING: (
        r"refactoring(?:\s+history)?|refactorings|리팩토링(?:\s*내역)?"
    ),
    SummaryField.COLLABORATION: (
        r"collaboration(?:\s+(?:flow|patterns?|process))?|협업\s*(?:흐름|방식)"
    ),
    SummaryField.RESUME_BULLETS: (
        r"r[eé]sum[eé](?:\s+(?:bullets?|bullet\s+points|highlights|points))?"
        r"|이력서용?\s*bullet(?:\s*정리)?|이력서용?\s*(?:정리|요약)"
    ),
}

_BOLD = r"(?:\*\*|__)"


def _heading_pattern(alias: str) -> re.Pattern[str]:
    return re.compile(
        r"^\s*(?P<hashes>#{1,6})?\s*"
        rf"(?P<bold>{_BOLD})?\s*"
        r"(?P<number>\d{1,2}\s*[.):]\s*)?"
        rf"{_BOLD}?\s*"
        rf"(?P<name>{alias})\s*"
        rf"{_BOLD}?\s*"
        r"(?P<colon>[:：])?\s*"
        rf"{_BOLD}?\s*"
        r"(?P<rest>.*?)\s*$",
        re.IGNORECASE,
    )


_HEADING_PATTERNS: tuple[tuple[SummaryField, re.Pattern[str]], ...] = tuple(
    (field, _heading_pattern(alias)) for field, alias in FIELD_ALIASES.items()
)


@dataclass(frozen=True)
class HeadingMatch:
    """A recognized section heading.

    Attributes:
        field: Field the heading introduces
        inline_text: Text following the heading on the same line
    """

    field: SummaryField
    inline_text: str = ""


def match_heading(line: str) -> HeadingMatch | None:
    """Recognize a section heading line.

    A heading must carry a marker (markdown ``#``, a number such as ``1.``
    or bold) or be a bare field name ending in a colon. Inline text after
    the heading is allowed only with a ``#`` or bold marker and a colon
    separator; a bare number is not enough, since numbered list items such
    as ``2. Architecture: ...`` are ordinary content.

    Args:
        line: One response line

    Returns:
        HeadingMatch, or None if the line is not a heading
    """
    if not line.strip():
        return None

    for field, pattern in _HEADING_PATTERNS:
        match = pattern.match(line)
        if match is None:
            continue

        inline_marker = bool(match.group("hashes") or match.group("bold"))
        marked = inline_marker or bool(match.group("number"))
        has_colon = bool(match.group("colon"))
        rest = match.group("rest").strip().strip("*_").strip()

        if rest:
            if inline_marker and has_colon:
                return HeadingMatch(field=field, inline_text=rest)
            continue
        if marked or has_colon:
            return HeadingMatch(field=field)

    return None


@dataclass(frozen=True)
class IdleState:
    """No field is active; lines are ignored."""


@dataclass(frozen=True)
class ActiveState:
    """Accumulating lines for one field.

    Attributes:
        field: Active field
        lines: Lines accumulated so far
    """

    field: SummaryField
    lines: tuple[str, ...] = ()


ParseState = IdleState | ActiveState

# Completed (field, text) pair emitted by a transition
Flushed = tuple[SummaryField, str]


def flush(state: ParseState) -> Flushed | None:
    """Return the completed text of the active field, if any."""
    if isinstance(state, ActiveState):
        return state.field, "\n".join(state.lines).strip()
    return None


def step(state: ParseState, line: str) -> tuple[ParseState, Flushed | None]:
    """Advance the parser by one line.

    Args:
        state: Current state
        line: Next response line

    Returns:
        Tuple of (next state, flushed field text or None)
    """
    heading = match_heading(line)
    if heading is not None:
        lines = (heading.inline_text,) if heading.inline_text else ()
        return ActiveState(field=heading.field, lines=lines), flush(state)

    if isinstance(state, ActiveState):
        return ActiveState(field=state.field, lines=state.lines + (line.rstrip(),)), None

    return state, None


def finish(state: ParseState) -> Flushed | None:
    """End-of-input transition: flush the last active field."""
    return flush(state)


def parse_sections(text: str) -> dict[SummaryField, str]:
    """Split a response into field texts.

    A field whose heading appears more than once accumulates all of its
    sections, separated by blank lines.

    Args:
        text: Raw response text

    Returns:
        Mapping of field to text for every heading found
    """
    sections: dict[SummaryField, str] = {}

    def record(flushed: Flushed | None) -> None:
        if flushed is None:
            return
        field, body = flushed
        if field in sections and sections[field]:
            sections[field] = f"{sections[field]}\n\n{body}" if body else sections[field]
        else:
            sections[field] = body

    state: ParseState = IdleState()
    for line in text.splitlines():
        state, flushed = step(state, line)
        record(flushed)
    record(finish(state))

    return sections
