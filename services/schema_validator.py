"""
LoanJSON shape checks.

is_valid_loan_record is the shallow gate that decides pass-through vs AI structuring.
validate_loan_structure is the deep check used only when strict AI validation is on.
"""
from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from schemas.loan import LoanRecordSchema

REQUIRED_FIELDS = ("loan_id", "borrower", "loan_terms")


def is_valid_loan_record(candidate: Any) -> bool:
    """True iff loan_id, borrower and loan_terms are present and not None. Never raises."""
    if not isinstance(candidate, dict):
        return False
    return all(candidate.get(field) is not None for field in REQUIRED_FIELDS)


def validate_loan_structure(record: Any) -> list[str]:
    """
    Validate a record against the full LoanJSON models.
    Returns readable problems like "loan_terms.principal.amount: Input should be greater than 0";
    an empty list means the record is structurally valid.
    """
    if not isinstance(record, dict):
        return ["record: expected a JSON object"]
    try:
        LoanRecordSchema.model_validate(record)
    except ValidationError as e:
        problems = []
        for err in e.errors():
            loc = ".".join(str(part) for part in err["loc"]) or "record"
            problems.append(f"{loc}: {err['msg']}")
        return problems
    return []
