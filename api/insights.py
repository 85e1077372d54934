from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from api.deps import get_completion
from schemas.insight import InsightRequest, InsightResponse, VoiceSummaryRequest, VoiceSummaryResponse
from services.capabilities import CompletionCapability
from services.errors import ConfigurationMissing, InvalidCategory, LoanInsightError
from services.insight_orchestrator import SUMMARY_VOICE, InsightOrchestrator
from services.voice_summary import reduce_for_speech

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api", tags=["insights"])

MSG_INVALID_TYPE = "Invalid insight type"
MSG_MISSING_INSIGHT = "currentInsight is required for summary-voice"
MSG_API_KEY_MISSING = "API key not configured. Please set {env_var} environment variable."
MSG_INSIGHT_FAILED = "Failed to generate AI insight. Please check your API configuration."


def _error_details(e: Exception) -> str:
    if isinstance(e, LoanInsightError) and e.details:
        return e.details
    return str(e)


def _insight_failure(e: Exception, **context) -> JSONResponse:
    if isinstance(e, ConfigurationMissing):
        logger.error("insight_failed", reason="configuration_missing", error=e.message, **context)
        message = MSG_API_KEY_MISSING.format(env_var=e.env_var or "the completion provider API key")
        return JSONResponse(status_code=500, content={"error": message})
    logger.exception("insight_failed", **context)
    return JSONResponse(status_code=500, content={"error": MSG_INSIGHT_FAILED, "details": _error_details(e)})


@router.post("/generate-insight", response_model=InsightResponse, response_model_exclude_none=True)
async def generate_insight(body: InsightRequest, completion: CompletionCapability = Depends(get_completion)):
    if body.insight_type == SUMMARY_VOICE and not body.current_insight:
        return JSONResponse(status_code=400, content={"error": MSG_MISSING_INSIGHT})
    orchestrator = InsightOrchestrator(completion)
    try:
        payload = await orchestrator.generate_insight(body.loan_data, body.insight_type, body.current_insight)
    except InvalidCategory:
        logger.info("insight_rejected", insight_type=repr(body.insight_type))
        return JSONResponse(status_code=400, content={"error": MSG_INVALID_TYPE})
    except Exception as e:
        return _insight_failure(e, insight_type=body.insight_type)
    return payload.to_dict()


@router.post("/voice-summary", response_model=VoiceSummaryResponse)
async def voice_summary(body: VoiceSummaryRequest, completion: CompletionCapability = Depends(get_completion)):
    """Short markup-free spoken summary of a previously generated insight."""
    orchestrator = InsightOrchestrator(completion)
    try:
        text = await reduce_for_speech(orchestrator, body.current_insight, body.loan_data)
    except Exception as e:
        return _insight_failure(e, insight_type=SUMMARY_VOICE)
    return {"text": text}
