"""
Generates structured analyst insights for a LoanJSON record.

One completion call per insight: category template + grounding summary in, raw analyst
text out, then section parsing and recommendation extraction. Records are read, never
mutated.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

import structlog

from services.capabilities import CompletionCapability
from services.errors import InvalidCategory
from services.prompts import INSIGHT_TITLES, build_category_prompt
from services.recommendations import find_recommendation_section, split_bullets
from services.section_parser import Section, parse_sections

logger = structlog.get_logger(__name__)

INSIGHT_CATEGORIES = ("explain", "risk", "esg", "summary-voice")
SUMMARY_VOICE = "summary-voice"


@dataclass
class InsightPayload:
    title: str
    subtitle: str
    sections: list[Section]
    raw_text: str
    recommendations: Optional[list[str]] = field(default=None)

    def to_dict(self) -> dict[str, Any]:
        """camelCase response body; recommendations is omitted when there are none."""
        out: dict[str, Any] = {
            "title": self.title,
            "subtitle": self.subtitle,
            "sections": [s.to_dict() for s in self.sections],
        }
        if self.recommendations:
            out["recommendations"] = list(self.recommendations)
        out["rawText"] = self.raw_text
        return out


def parse_category(value: Any) -> str:
    if value not in INSIGHT_CATEGORIES:
        raise InvalidCategory("Invalid insight type")
    return value


def structure_insight(category: str, text: str) -> InsightPayload:
    """Parse raw analyst text into the insight payload for a validated category."""
    sections = parse_sections(text)
    rec_section = find_recommendation_section(sections)
    recommendations: list[str] = []
    if rec_section is not None:
        # Surfaced only through the recommendations field, even when no bullet survives
        recommendations = split_bullets(rec_section.content)
        sections = [s for s in sections if s is not rec_section]
    titles = INSIGHT_TITLES[category]
    return InsightPayload(
        title=titles["title"],
        subtitle=titles["subtitle"],
        sections=sections,
        raw_text=text,
        recommendations=recommendations or None,
    )


class InsightOrchestrator:
    def __init__(self, completion: CompletionCapability) -> None:
        self.completion = completion

    async def generate_insight(
        self,
        record: dict[str, Any],
        category: str,
        current_insight: Optional[str] = None,
    ) -> InsightPayload:
        category = parse_category(category)
        prompt = build_category_prompt(category, record, current_insight)
        log = logger.bind(category=category, loan_id=record.get("loan_id"))
        log.info("insight_requested", prompt_chars=len(prompt))

        text = await self.completion.generate(prompt)

        payload = structure_insight(category, text)
        log.info(
            "insight_generated",
            sections=len(payload.sections),
            recommendations=len(payload.recommendations or []),
        )
        return payload
