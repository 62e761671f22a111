"""Typed summary extraction from freeform completion text.

Turns the raw response into a SummaryDraft:
- section texts come from the heading state machine (``state.py``)
- a deterministically detected tech stack overrides the model's text, which
  is kept only as the profile's ``other`` note
- resume bullets go through the ranked fallback chain (``bullets.py``)
- fields whose heading never appeared default to the start of the response

Extraction never raises: a formatting mismatch yields a degraded summary
instead of discarding an expensive completion.
"""

import logging

from reposcribe.extraction.bullets import parse_resume_bullets
from reposcribe.extraction.state import parse_sections
from reposcribe.models.analysis import ResumeBullet, SummaryDraft, SummaryField, TechStackProfile
from reposcribe.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_EXCERPT_CHARS = 500


def default_excerpt(raw_text: str, limit: int = DEFAULT_EXCERPT_CHARS) -> str:
    """First ``limit`` characters of the response, used for missing fields."""
    return raw_text.strip()[:limit] or raw_text[:limit]


class SectionExtractor:
    """Parses completion text into a SummaryDraft."""

    def __init__(self, excerpt_chars: int = DEFAULT_EXCERPT_CHARS) -> None:
        self.excerpt_chars = excerpt_chars

    def extract(
        self,
        raw_text: str,
        detected_stack: TechStackProfile | None = None,
    ) -> SummaryDraft:
        """Extract a typed summary.

        Args:
            raw_text: Raw completion text
            detected_stack: Deterministically detected technologies

        Returns:
            SummaryDraft; minimally populated in the worst case
        """
        try:
            return self._extract(raw_text, detected_stack)
        except Exception:
            logger.exception("Section extraction failed; returning minimal summary")
            excerpt = default_excerpt(raw_text or "", self.excerpt_chars)
            return SummaryDraft(
                project_intro=excerpt,
                tech_stack=detected_stack or TechStackProfile(),
                resume_bullets=[ResumeBullet(title="Summary", content=excerpt)],
            )

    def _extract(
        self,
        raw_text: str,
        detected_stack: TechStackProfile | None,
    ) -> SummaryDraft:
        sections = parse_sections(raw_text)
        excerpt = default_excerpt(raw_text, self.excerpt_chars)

        missing = [f.value for f in SummaryField if not sections.get(f, "").strip()]
        if missing:
            logger.structured(
                logging.INFO,
                f"Summary headings missing for {len(missing)} fields; using response excerpt",
                missing_fields=missing,
                headings_found=len(SummaryField) - len(missing),
            )

        def text_for(field: SummaryField) -> str:
            return sections.get(field, "").strip() or excerpt

        draft = SummaryDraft()
        draft.project_intro = text_for(SummaryField.PROJECT_INTRO)
        draft.architecture_notes = text_for(SummaryField.ARCHITECTURE)
        draft.refactoring_history = text_for(SummaryField.REFACTORING)
        draft.collaboration_flow = text_for(SummaryField.COLLABORATION)

        model_tech_text = sections.get(SummaryField.TECH_STACK, "").strip()
        if detected_stack is not None and not detected_stack.is_empty:
            draft.tech_stack = detected_stack.with_note(model_tech_text)
        else:
            logger.info("No detected tech stack; keeping model text only as a note (low confidence)")
            draft.tech_stack = TechStackProfile(other=model_tech_text or excerpt)

        bullets_text = text_for(SummaryField.RESUME_BULLETS)
        bullets = parse_resume_bullets(bullets_text)
        draft.resume_bullets = bullets or [ResumeBullet(title="Summary", content=bullets_text)]

        logger.debug(
            "Extracted summary: %d sections, %d resume bullets",
            len(sections),
            len(draft.resume_bullets),
        )
        return draft
