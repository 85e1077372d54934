from __future__ import annotations

import re
from typing import Any

from services.insight_orchestrator import SUMMARY_VOICE, InsightOrchestrator

_SPEECH_MARKUP = re.compile(r"[*#_~`>]")


def strip_speech_markup(text: str) -> str:
    """Remove markdown emphasis, heading, quote and code characters; wording is untouched."""
    return _SPEECH_MARKUP.sub("", text)


async def reduce_for_speech(
    orchestrator: InsightOrchestrator,
    raw_insight_text: str,
    record: dict[str, Any],
) -> str:
    """Compress a previous insight into a short spoken summary ready for the speech capability."""
    summary = await orchestrator.generate_insight(record, SUMMARY_VOICE, current_insight=raw_insight_text)
    return strip_speech_markup(summary.raw_text)
