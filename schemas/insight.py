from __future__ import annotations

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    """Accepts and emits camelCase keys (frontend) while using snake_case attributes."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ConvertLoanRequest(_CamelModel):
    content: str
    file_name: str = ""
    file_type: str = ""


class ConvertLoanResponse(_CamelModel):
    success: Literal[True] = True
    data: dict[str, Any]
    message: str


class InsightRequest(_CamelModel):
    loan_data: dict[str, Any]
    # Checked by the orchestrator: missing, null or unknown values all map to a 400
    insight_type: Any = None
    current_insight: Optional[str] = None


class InsightSectionSchema(BaseModel):
    heading: str
    content: str


class InsightResponse(_CamelModel):
    title: str
    subtitle: str
    sections: list[InsightSectionSchema]
    recommendations: Optional[list[str]] = None
    raw_text: str


class VoiceSummaryRequest(_CamelModel):
    loan_data: dict[str, Any]
    current_insight: str = Field(..., min_length=1)


class VoiceSummaryResponse(_CamelModel):
    text: str


class TtsRequest(_CamelModel):
    text: str = Field(..., min_length=1)


class StoredLoanSummary(_CamelModel):
    loan_id: str
    file_name: Optional[str] = None
    source: str
    borrower_name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class RiskAssessmentSchema(_CamelModel):
    level: str
    description: str
    health_score: int


class CovenantSummarySchema(_CamelModel):
    total: int
    compliant: int
    breached: int
    compliance_rate: float
    breached_covenants: list[dict[str, Any]]


class TimelineStatsSchema(_CamelModel):
    total_events: int
    days_since_origination: Optional[int] = None
    amendments: int
    breaches: int


class LoanOverviewResponse(_CamelModel):
    loan_id: str
    risk_assessment: RiskAssessmentSchema
    covenants: CovenantSummarySchema
    timeline: list[dict[str, Any]]
    timeline_stats: TimelineStatsSchema
