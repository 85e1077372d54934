"""
Best-effort segmentation of analyst prose into (heading, content) sections.

Paragraphs are separated by blank lines. A paragraph's first line is treated as a
heading when it is short and either capitalised or followed by more lines. Short
capitalised sentences can be misread as headings; that imprecision is accepted.
"""
from __future__ import annotations

import re
from dataclasses import asdict, dataclass

HEADING_MAX_CHARS = 80

_PARAGRAPH_BREAK = re.compile(r"\n\n+")
_HEADING_MARKERS = re.compile(r"^[#*\s]+")
_TRAILING_COLON = re.compile(r"[:：]$")
_UPPERCASE_START = re.compile(r"^[A-Z]")


@dataclass(frozen=True)
class Section:
    heading: str
    content: str

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


def clean_heading_line(line: str) -> str:
    """Strip markdown heading/emphasis markers and surrounding whitespace."""
    return _HEADING_MARKERS.sub("", line).strip()


def looks_like_heading(first_line: str, line_count: int) -> bool:
    """first_line must already be cleaned with clean_heading_line."""
    return len(first_line) < HEADING_MAX_CHARS and (
        bool(_UPPERCASE_START.match(first_line)) or line_count > 1
    )


def _parse_paragraph(paragraph: str) -> Section:
    lines = paragraph.split("\n")
    first_line = clean_heading_line(lines[0])
    if looks_like_heading(first_line, len(lines)) and len(lines) > 1:
        return Section(
            heading=_TRAILING_COLON.sub("", first_line),
            content=" ".join(lines[1:]).strip(),
        )
    return Section(heading="", content=paragraph.strip())


def parse_sections(text: str) -> list[Section]:
    sections = [_parse_paragraph(p) for p in _PARAGRAPH_BREAK.split(text)]
    return [s for s in sections if s.content]
