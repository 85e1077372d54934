from __future__ import annotations

import re
from typing import Optional, Sequence

from services.section_parser import Section

RECOMMENDATION_KEYWORDS = ("recommendation", "mitigation")
MIN_RECOMMENDATION_CHARS = 10

_BULLET = re.compile(r"[•\-*]\s+")


def find_recommendation_section(sections: Sequence[Section]) -> Optional[Section]:
    """First section whose heading mentions recommendations or mitigation (case-insensitive)."""
    for section in sections:
        heading = section.heading.casefold()
        if any(keyword in heading for keyword in RECOMMENDATION_KEYWORDS):
            return section
    return None


def split_bullets(content: str) -> list[str]:
    # Text before the first bullet is an intro (or empty) and is dropped
    items = (item.strip() for item in _BULLET.split(content)[1:])
    return [item for item in items if len(item) > MIN_RECOMMENDATION_CHARS]


def extract_recommendations(sections: Sequence[Section]) -> list[str]:
    section = find_recommendation_section(sections)
    if section is None:
        return []
    return split_bullets(section.content)
