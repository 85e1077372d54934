from __future__ import annotations

import json
import time
from typing import Any

import structlog
from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.responses import JSONResponse, Response
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_completion, get_settings
from config import Settings
from database import get_db
from models import StoredLoan
from pdf_ingestion.reader import read_document_text
from schemas.insight import ConvertLoanRequest, ConvertLoanResponse, LoanOverviewResponse, StoredLoanSummary
from services.capabilities import CompletionCapability
from services.document_normalizer import DocumentNormalizer
from services.errors import ConfigurationMissing, InvalidAiRecord, UnparsableAiOutput, UnparsableInput
from services.loan_analytics import loan_overview
from services.loan_store import get_loan, list_loans, save_loan

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api", tags=["loans"])

MSG_AI_NOT_CONFIGURED = "AI configuration missing. Please set {env_var}."
MSG_UNPARSABLE = "Failed to parse converted loan data"
MSG_UNSUPPORTED = "Invalid or unsupported loan document"
MSG_STORAGE_FAILED = "Converted loan data could not be saved"
MSG_LOAN_NOT_FOUND = "Loan not found"


def _failure(status_code: int, error: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": error})


async def _convert(
    content: str,
    file_name: str,
    file_type: str,
    db: AsyncSession,
    completion: CompletionCapability,
    settings: Settings,
) -> Any:
    normalizer = DocumentNormalizer(
        completion,
        max_input_chars=settings.normalizer_max_input_chars,
        strict=settings.strict_ai_validation,
    )
    try:
        result = await normalizer.normalize(content, file_name, file_type)
    except ConfigurationMissing as e:
        logger.error("convert_failed", file_name=file_name, reason="configuration_missing", error=e.message)
        return _failure(500, MSG_AI_NOT_CONFIGURED.format(env_var=e.env_var or "the completion provider API key"))
    except UnparsableAiOutput as e:
        logger.warning("convert_failed", file_name=file_name, reason="unparsable_ai_output", details=e.details)
        return _failure(422, MSG_UNPARSABLE)
    except InvalidAiRecord as e:
        logger.warning("convert_failed", file_name=file_name, reason="invalid_ai_record", details=e.details)
        return _failure(422, e.message)
    except Exception:
        logger.exception("convert_failed", file_name=file_name)
        return _failure(500, MSG_UNSUPPORTED)

    try:
        await save_loan(db, result.record, file_name=file_name or None, source=result.source)
    except Exception:
        await db.rollback()
        logger.exception("convert_failed", file_name=file_name, reason="storage_failed", source=result.source)
        return _failure(500, MSG_STORAGE_FAILED)
    return {"success": True, "data": result.record, "message": result.message}


@router.post("/convert-loan", response_model=ConvertLoanResponse)
async def convert_loan(
    body: ConvertLoanRequest,
    db: AsyncSession = Depends(get_db),
    completion: CompletionCapability = Depends(get_completion),
    settings: Settings = Depends(get_settings),
):
    return await _convert(body.content, body.file_name, body.file_type, db, completion, settings)


@router.post("/convert-loan/upload", response_model=ConvertLoanResponse)
async def upload_loan_document(
    file: UploadFile = File(...),
    db: AsyncSession = Depends(get_db),
    completion: CompletionCapability = Depends(get_completion),
    settings: Settings = Depends(get_settings),
):
    """Multipart variant for .json, .txt and .pdf documents."""
    file_name = file.filename or ""
    content_type = file.content_type or ""
    raw = await file.read()
    try:
        content = read_document_text(raw, file_name, content_type)
    except UnparsableInput as e:
        return _failure(e.status_code, e.message)
    return await _convert(content, file_name, content_type, db, completion, settings)


async def _require_loan(db: AsyncSession, loan_id: str) -> StoredLoan:
    stored = await get_loan(db, loan_id)
    if not stored:
        raise HTTPException(status_code=404, detail=MSG_LOAN_NOT_FOUND)
    return stored


@router.get("/loans")
async def get_loans(db: AsyncSession = Depends(get_db)):
    loans = await list_loans(db)
    out = []
    for s in loans:
        borrower = s.data.get("borrower") if isinstance(s.data, dict) else None
        summary = StoredLoanSummary(
            loan_id=s.loan_id,
            file_name=s.file_name,
            source=s.source,
            borrower_name=borrower.get("name") if isinstance(borrower, dict) else None,
            created_at=s.created_at,
            updated_at=s.updated_at,
        )
        out.append(summary.model_dump(mode="json", by_alias=True))
    return out


@router.get("/loans/{loan_id}")
async def get_loan_record(loan_id: str, db: AsyncSession = Depends(get_db)):
    stored = await _require_loan(db, loan_id)
    return stored.data


@router.get("/loans/{loan_id}/download")
async def download_loan_record(loan_id: str, db: AsyncSession = Depends(get_db)):
    stored = await _require_loan(db, loan_id)
    file_name = f"loan-{stored.loan_id}-{int(time.time() * 1000)}.json"
    return Response(
        content=json.dumps(stored.data, indent=2),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{file_name}"'},
    )


@router.get("/loans/{loan_id}/overview")
async def get_loan_overview(loan_id: str, db: AsyncSession = Depends(get_db)):
    stored = await _require_loan(db, loan_id)
    overview = LoanOverviewResponse.model_validate({**loan_overview(stored.data), "loan_id": stored.loan_id})
    return overview.model_dump(mode="json", by_alias=True)
