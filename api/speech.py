import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, Response

from api.deps import get_speech
from schemas.insight import TtsRequest
from services.capabilities import SpeechCapability
from services.errors import ConfigurationMissing

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api", tags=["speech"])

MSG_AUDIO_FAILED = "Failed to generate audio."


@router.post("/tts")
async def text_to_speech(body: TtsRequest, speech: SpeechCapability = Depends(get_speech)):
    try:
        audio = await speech.synthesize(body.text)
    except ConfigurationMissing as e:
        logger.error("tts_failed", reason="configuration_missing")
        return JSONResponse(status_code=500, content={"error": e.message})
    except Exception:
        logger.exception("tts_failed", text_chars=len(body.text))
        return JSONResponse(status_code=500, content={"error": MSG_AUDIO_FAILED})
    return Response(content=audio, media_type="audio/mpeg")
