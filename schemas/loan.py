"""
Structural schema for the canonical LoanJSON record.

The pipeline carries records as plain dicts; these models document the shape and back
the deep structural check used when strict validation of AI output is enabled.
Unknown extra keys are allowed everywhere.
"""
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

CovenantStatus = Literal["compliant", "breached"]
RiskTrend = Literal["stable", "increasing", "decreasing"]
TimelineEventType = Literal["origination", "amendment", "review", "payment", "breach"]


class _LoanPart(BaseModel):
    model_config = ConfigDict(extra="allow")


class LoanMetadataSchema(_LoanPart):
    """Record metadata; schema_type names the standard (e.g. LoanJSON-Standard)."""
    version: str
    last_updated: str
    schema_type: str


class BorrowerSchema(_LoanPart):
    """Borrower identity. Strings only, no normalization."""
    name: str
    jurisdiction: Optional[str] = None
    sector: Optional[str] = None
    credit_rating: Optional[str] = None


class PrincipalSchema(_LoanPart):
    amount: float = Field(..., gt=0, description="Principal amount")
    currency: str = Field(..., min_length=3, max_length=3, description="ISO-4217-like code")


class InterestRateSchema(_LoanPart):
    type: Optional[str] = None
    base: Optional[Union[str, float]] = None
    margin: Optional[float] = None
    current_all_in: Optional[float] = None


class LoanTermsSchema(_LoanPart):
    """Commercial terms. maturity_date after origination_date is not enforced."""
    principal: PrincipalSchema
    interest_rate: InterestRateSchema
    maturity_date: str
    origination_date: str


class CovenantSchema(_LoanPart):
    """A covenant; status is authoritative and never recomputed from the numbers."""
    id: str
    description: str
    threshold: float
    unit: Optional[str] = None
    current_value: float
    status: CovenantStatus
    last_check: Optional[str] = None


class PredictionSchema(_LoanPart):
    probability_of_default: float = Field(..., ge=0, le=1)
    horizon: str = "90d"
    factors: list[str] = Field(default_factory=list)


class RiskEngineSchema(_LoanPart):
    health_score: int = Field(..., ge=0, le=100)
    trend: RiskTrend
    prediction: PredictionSchema


class TimelineEventSchema(_LoanPart):
    date: str
    event: str
    description: Optional[str] = None
    type: TimelineEventType


class LoanRecordSchema(_LoanPart):
    """Full LoanJSON record."""
    metadata: LoanMetadataSchema
    loan_id: str = Field(..., min_length=1)
    borrower: BorrowerSchema
    loan_terms: LoanTermsSchema
    covenants: list[CovenantSchema] = Field(default_factory=list)
    risk_engine: RiskEngineSchema
    timeline: list[TimelineEventSchema] = Field(default_factory=list)
