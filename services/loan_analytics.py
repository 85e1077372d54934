"""
Deterministic derivations shown alongside a loan record: health-score risk band,
covenant compliance summary, a date-sorted timeline and timeline statistics.
Covenant status is taken from the record as-is; nothing here recomputes it.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date, datetime, timezone
from typing import Any, Optional

LOW_RISK_MIN_SCORE = 80
MODERATE_RISK_MIN_SCORE = 60

RISK_DESCRIPTIONS = {
    "LOW RISK": (
        "Strong credit quality with minimal default probability. Loan exhibits healthy covenant "
        "compliance and stable borrower performance metrics."
    ),
    "MODERATE RISK": (
        "Acceptable risk profile with some areas requiring monitoring. Borrower shows satisfactory "
        "performance with manageable covenant compliance challenges."
    ),
    "HIGH RISK": (
        "Elevated credit risk requiring immediate attention. Multiple covenant breaches and declining "
        "trend indicate potential default scenarios within forecast horizon."
    ),
}


@dataclass
class RiskAssessment:
    level: str
    description: str
    health_score: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def risk_level(health_score: float) -> str:
    if health_score >= LOW_RISK_MIN_SCORE:
        return "LOW RISK"
    if health_score >= MODERATE_RISK_MIN_SCORE:
        return "MODERATE RISK"
    return "HIGH RISK"


def risk_assessment(health_score: Any) -> RiskAssessment:
    """Band a 0-100 health score; a missing or non-numeric score counts as 0."""
    if isinstance(health_score, bool) or not isinstance(health_score, (int, float)):
        health_score = 0
    level = risk_level(health_score)
    return RiskAssessment(level=level, description=RISK_DESCRIPTIONS[level], health_score=int(health_score))


def covenant_summary(covenants: Any) -> dict[str, Any]:
    items = [c for c in covenants if isinstance(c, dict)] if isinstance(covenants, list) else []
    breached = [c for c in items if c.get("status") == "breached"]
    compliant = [c for c in items if c.get("status") == "compliant"]
    rate = round(len(compliant) / len(items) * 100, 1) if items else 0.0
    return {
        "total": len(items),
        "compliant": len(compliant),
        "breached": len(breached),
        "compliance_rate": rate,
        "breached_covenants": breached,
    }


def parse_event_date(value: Any) -> Optional[datetime]:
    """ISO-8601 date or datetime to a naive UTC datetime; None when unparseable."""
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def sort_timeline(events: Any, newest_first: bool = True) -> list[dict[str, Any]]:
    """
    Sort timeline events by date without trusting input order.
    Events with missing or unparseable dates go last; ties keep their original order.
    """
    items = [e for e in events if isinstance(e, dict)] if isinstance(events, list) else []
    dated = [(parse_event_date(e.get("date")), e) for e in items]
    known = [pair for pair in dated if pair[0] is not None]
    unknown = [e for d, e in dated if d is None]
    known.sort(key=lambda pair: pair[0], reverse=newest_first)
    return [e for _, e in known] + unknown


def timeline_stats(events: Any, today: Optional[date] = None) -> dict[str, Any]:
    items = [e for e in events if isinstance(e, dict)] if isinstance(events, list) else []
    today = today or datetime.now(timezone.utc).date()
    origination = next((e for e in items if e.get("type") == "origination"), None)
    origin_date = parse_event_date(origination.get("date")) if origination else None
    return {
        "total_events": len(items),
        "days_since_origination": (today - origin_date.date()).days if origin_date else None,
        "amendments": sum(1 for e in items if e.get("type") == "amendment"),
        "breaches": sum(1 for e in items if e.get("type") == "breach"),
    }


def loan_overview(record: dict[str, Any], today: Optional[date] = None) -> dict[str, Any]:
    risk_engine = record.get("risk_engine") if isinstance(record.get("risk_engine"), dict) else {}
    return {
        "loan_id": str(record.get("loan_id") or ""),
        "risk_assessment": risk_assessment(risk_engine.get("health_score")).to_dict(),
        "covenants": covenant_summary(record.get("covenants")),
        "timeline": sort_timeline(record.get("timeline")),
        "timeline_stats": timeline_stats(record.get("timeline"), today=today),
    }
