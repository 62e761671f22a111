"""Resume bullet parsing with a ranked fallback chain.

Tiers are attempted in order and the first non-empty result wins:
1. "Achievement N:" sub-headings
2. Bullet glyphs (•, -, *) and numbered list items
3. "title: content" lines
4. Sentence boundaries, grouped into fixed-size chunks

If every tier comes back empty, the whole text becomes one bullet titled
"Summary".
"""

import re
from collections.abc import Callable

from reposcribe.models.analysis import ResumeBullet

SENTENCES_PER_BULLET = 2
MAX_TITLE_CHARS = 80

_ACHIEVEMENT_MARKER = re.compile(
    r"^\s*(?:[-*•]\s+)?(?:#{1,6}\s*)?(?:\*\*|__)?\s*"
    r"(?:achievement|성과)\s*(?P<number>\d+)\s*(?:\*\*|__)?\s*[:.)]\s*(?:\*\*|__)?\s*"
    r"(?P<title>.*?)\s*(?:\*\*|__)?\s*$",
    re.IGNORECASE,
)
_BULLET = re.compile(r"^\s*(?:[•*]|-(?!-)|\d{1,2}[.)])\s+(?P<text>.+?)\s*$")
_NUMBERED_PREFIX = re.compile(r"^\s*\d{1,2}[.)]\s+")
_TITLE_CONTENT = re.compile(
    r"^\s*(?:\*\*|__)?(?P<title>[^:：\n]{2,%d}?)(?:\*\*|__)?\s*[:：]\s*(?:\*\*|__)?\s*(?P<content>\S.*?)\s*$"
    % MAX_TITLE_CHARS
)
_SENTENCE_BOUNDARY = re.compile(r"(?<=[.!?。])\s+")


def _clean(text: str) -> str:
    """Strip markdown emphasis and surrounding whitespace."""
    return re.sub(r"(\*\*|__)", "", text).strip()


def _clean_title(text: str) -> str:
    """Clean a title and drop a leading list number such as ``1.``."""
    return _clean(_NUMBERED_PREFIX.sub("", _clean(text)))


def _split_title_content(text: str, default_title: str) -> ResumeBullet:
    match = _TITLE_CONTENT.match(text)
    if match and not match.group("content").startswith("//"):
        return ResumeBullet(title=_clean_title(match.group("title")), content=_clean(match.group("content")))
    return ResumeBullet(title=default_title, content=_clean(text))


def split_achievements(text: str) -> list[ResumeBullet]:
    """Tier 1: split on "Achievement N:" sub-headings."""
    bullets: list[ResumeBullet] = []
    current: tuple[str, str, list[str]] | None = None

    def close() -> None:
        if current is None:
            return
        number, title, lines = current
        content = _clean(" ".join(line.strip() for line in lines if line.strip()))
        default_title = f"Achievement {number}"
        if content:
            bullets.append(ResumeBullet(title=_clean(title) or default_title, content=content))
        elif title:
            bullets.append(ResumeBullet(title=default_title, content=_clean(title)))

    for line in text.splitlines():
        match = _ACHIEVEMENT_MARKER.match(line)
        if match:
            close()
            current = (match.group("number"), match.group("title"), [])
        elif current is not None:
            # Leading bullet glyphs on content lines are dropped
            current[2].append(re.sub(r"^\s*[-*•]\s+", "", line))
    close()

    return bullets


def split_bullet_glyphs(text: str) -> list[ResumeBullet]:
    """Tier 2: split on bullet glyphs; continuation lines join the previous item."""
    items: list[str] = []
    for line in text.splitlines():
        match = _BULLET.match(line)
        if match:
            items.append(match.group("text"))
        elif items and line.strip():
            items[-1] = f"{items[-1]} {line.strip()}"

    return [
        _split_title_content(item, f"Achievement {index}")
        for index, item in enumerate(items, start=1)
        if _clean(item)
    ]


def split_title_content(text: str) -> list[ResumeBullet]:
    """Tier 3: one bullet per "title: content" line."""
    bullets: list[ResumeBullet] = []
    for line in text.splitlines():
        match = _TITLE_CONTENT.match(line)
        if match and not match.group("content").startswith("//"):
            bullets.append(
                ResumeBullet(title=_clean_title(match.group("title")), content=_clean(match.group("content")))
            )
    return bullets


def split_sentences(text: str, chunk_size: int = SENTENCES_PER_BULLET) -> list[ResumeBullet]:
    """Tier 4: group sentences into fixed-size chunks."""
    sentences = [s.strip() for s in _SENTENCE_BOUNDARY.split(_clean(" ".join(text.split()))) if s.strip()]
    chunks = [sentences[i : i + chunk_size] for i in range(0, len(sentences), chunk_size)]
    return [
        ResumeBullet(title=f"Achievement {index}", content=" ".join(chunk))
        for index, chunk in enumerate(chunks, start=1)
    ]


TIERS: tuple[Callable[[str], list[ResumeBullet]], ...] = (
    split_achievements,
    split_bullet_glyphs,
    split_title_content,
    split_sentences,
)


def parse_resume_bullets(text: str) -> list[ResumeBullet]:
    """Parse resume bullets with the ranked fallback chain.

    Args:
        text: Resume bullets section text

    Returns:
        Parsed bullets; empty only when the text is blank
    """
    if not text.strip():
        return []

    for tier in TIERS:
        bullets = tier(text)
        if bullets:
            return bullets

    return [ResumeBullet(title="Summary", content=text.strip())]
