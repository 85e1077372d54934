from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import settings
from database import close_db, init_db
from utils.log import configure_logging
from api.insights import router as insights_router
from api.loans import router as loans_router
from api.speech import router as speech_router

configure_logging(settings.log_level, settings.log_format)
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    logger.info(
        "startup",
        app=settings.app_name,
        completion_provider=settings.completion_provider,
        strict_ai_validation=settings.strict_ai_validation,
    )
    yield
    await close_db()
    logger.info("shutdown")


app = FastAPI(
    title=settings.app_name,
    description="Loan document normalization and AI analyst insights API",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(loans_router)
app.include_router(insights_router)
app.include_router(speech_router)


@app.get("/health")
async def health():
    return {"status": "ok"}
