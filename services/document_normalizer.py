"""
Turns a raw loan document into a LoanJSON record.

Policy: try structured first, degrade to AI-assisted structuring. JSON uploads that parse
and pass the minimal LoanJSON check are returned unchanged with no completion call.
Everything else (including malformed JSON) goes to the completion capability once.
"""
from __future__ import annotations

import json
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Literal

import structlog

from services.capabilities import CompletionCapability
from services.errors import InvalidAiRecord, UnparsableAiOutput, UnparsableInput
from services.schema_validator import is_valid_loan_record, validate_loan_structure

logger = structlog.get_logger(__name__)

SCHEMA_TYPE = "LoanJSON-Standard"
MSG_PASSTHROUGH = "File uploaded and analyzed successfully"
MSG_CONVERTED = "File converted to LoanJSON and analyzed"
TRUNCATION_MARKER = "\n\n[...document truncated...]\n\n"

STRUCTURING_PROMPT = """You are a professional banking document processor. Convert the loan document below into a standardized LoanJSON object.

The object MUST contain every one of these top-level fields:
- metadata: {{ "version": "1.0", "last_updated": "{timestamp}", "schema_type": "{schema_type}" }}
- loan_id: string
- borrower: {{ name, jurisdiction, sector, credit_rating }}
- loan_terms: {{ principal: {{ amount, currency }}, interest_rate: {{ type, base, margin, current_all_in }}, maturity_date, origination_date }}
- covenants: array of {{ id, description, threshold, unit, current_value, status: "compliant" | "breached", last_check }}
- risk_engine: {{ health_score (integer 0-100), trend: "stable" | "increasing" | "decreasing", prediction: {{ probability_of_default (0-1), horizon: "90d", factors: string[] }} }}
- timeline: array of {{ date, event, description, type: "origination" | "amendment" | "review" | "payment" | "breach" }}

RULES
- Dates are ISO-8601 (YYYY-MM-DD).
- Populate every field from the document text. Where data is missing, use a conservative estimate based on sector norms and mark it clearly as estimated (for example by appending "(estimated)" to the relevant description).
- Order the timeline chronologically, oldest first.

OUTPUT REQUIREMENTS
- Return ONLY the JSON object (application/json). No markdown, no commentary.

Document content:

{document_text}
"""


@dataclass
class NormalizationResult:
    record: dict[str, Any]
    source: Literal["passthrough", "ai"]
    message: str


def declares_json(file_name: str, declared_type: str) -> bool:
    return declared_type == "application/json" or file_name.lower().endswith(".json")


def parse_candidate_json(content: str) -> dict[str, Any]:
    """Parse uploaded JSON and apply the minimal LoanJSON gate; raises UnparsableInput."""
    try:
        candidate = json.loads(content)
    except (json.JSONDecodeError, TypeError) as e:
        raise UnparsableInput("Uploaded JSON could not be parsed") from e
    if not is_valid_loan_record(candidate):
        raise UnparsableInput("Uploaded JSON is missing loan_id, borrower or loan_terms")
    return candidate


def strip_code_fence(raw: str) -> str:
    cleaned = raw.strip()
    if cleaned.startswith("```"):
        m = re.search(r"```(?:json)?\s*([\s\S]*?)```", cleaned)
        if m:
            cleaned = m.group(1).strip()
    return cleaned


def parse_ai_record(raw: str) -> dict[str, Any]:
    try:
        data = json.loads(strip_code_fence(raw))
    except json.JSONDecodeError as e:
        raise UnparsableAiOutput("Failed to parse converted loan data", details=str(e)) from e
    if not isinstance(data, dict):
        raise UnparsableAiOutput("Failed to parse converted loan data", details="expected a JSON object")
    return data


def prepare_document_text(text: str, max_chars: int) -> str:
    """Keep head and tail of very long documents; key terms usually sit at both ends."""
    if max_chars <= 0 or len(text) <= max_chars:
        return text
    half = max_chars // 2
    return text[:half] + TRUNCATION_MARKER + text[-half:]


def build_structuring_prompt(document_text: str, now: datetime | None = None) -> str:
    timestamp = (now or datetime.now(timezone.utc)).isoformat()
    return STRUCTURING_PROMPT.format(
        timestamp=timestamp,
        schema_type=SCHEMA_TYPE,
        document_text=document_text,
    )


class DocumentNormalizer:
    """Produces LoanJSON from uploaded content; at most one completion call per normalize()."""

    def __init__(
        self,
        completion: CompletionCapability,
        *,
        max_input_chars: int = 150_000,
        strict: bool = False,
    ) -> None:
        self.completion = completion
        self.max_input_chars = max_input_chars
        self.strict = strict

    async def normalize(self, content: str, file_name: str, declared_type: str) -> NormalizationResult:
        log = logger.bind(file_name=file_name, declared_type=declared_type)

        if declares_json(file_name, declared_type):
            try:
                record = parse_candidate_json(content)
            except UnparsableInput as e:
                log.info("json_passthrough_rejected", reason=e.message)
            else:
                log.info("json_passthrough", loan_id=record.get("loan_id"))
                return NormalizationResult(record=record, source="passthrough", message=MSG_PASSTHROUGH)

        prompt = build_structuring_prompt(prepare_document_text(content, self.max_input_chars))
        raw = await self.completion.generate(prompt, json_output=True)
        record = parse_ai_record(raw)

        if self.strict:
            problems = [] if is_valid_loan_record(record) else ["loan_id, borrower or loan_terms missing"]
            problems += validate_loan_structure(record)
            if problems:
                log.warning("ai_record_rejected", problems=problems[:10])
                raise InvalidAiRecord("Converted loan data failed validation", details="; ".join(problems))

        log.info("ai_structured", loan_id=record.get("loan_id"))
        return NormalizationResult(record=record, source="ai", message=MSG_CONVERTED)
