"""Summary extraction: heading state machine, bullet tiers, typed draft."""

from reposcribe.extraction.bullets import parse_resume_bullets
from reposcribe.extraction.extractor import SectionExtractor
from reposcribe.extraction.state import (
    ActiveState,
    IdleState,
    ParseState,
    finish,
    match_heading,
    parse_sections,
    step,
)

__all__ = [
    "ActiveState",
    "IdleState",
    "ParseState",
    "SectionExtractor",
    "finish",
    "match_heading",
    "parse_resume_bullets",
    "parse_sections",
    "step",
]
