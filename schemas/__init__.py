from schemas.insight import (
    ConvertLoanRequest,
    ConvertLoanResponse,
    CovenantSummarySchema,
    InsightRequest,
    InsightResponse,
    InsightSectionSchema,
    LoanOverviewResponse,
    RiskAssessmentSchema,
    StoredLoanSummary,
    TimelineStatsSchema,
    TtsRequest,
    VoiceSummaryRequest,
    VoiceSummaryResponse,
)
from schemas.loan import (
    BorrowerSchema,
    CovenantSchema,
    LoanRecordSchema,
    LoanTermsSchema,
    RiskEngineSchema,
    TimelineEventSchema,
)

__all__ = [
    "ConvertLoanRequest",
    "ConvertLoanResponse",
    "CovenantSummarySchema",
    "InsightRequest",
    "InsightResponse",
    "InsightSectionSchema",
    "LoanOverviewResponse",
    "RiskAssessmentSchema",
    "StoredLoanSummary",
    "TimelineStatsSchema",
    "TtsRequest",
    "VoiceSummaryRequest",
    "VoiceSummaryResponse",
    "BorrowerSchema",
    "CovenantSchema",
    "LoanRecordSchema",
    "LoanTermsSchema",
    "RiskEngineSchema",
    "TimelineEventSchema",
]
