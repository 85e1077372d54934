from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Optional

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from models import StoredLoan

logger = structlog.get_logger(__name__)


def store_key(record: dict[str, Any]) -> str:
    """loan_id when present; AI output is not guaranteed to carry one."""
    loan_id = record.get("loan_id")
    if loan_id is None or str(loan_id).strip() == "":
        return f"loan-{uuid.uuid4().hex[:12]}"
    return str(loan_id)


async def _upsert(
    session: AsyncSession,
    loan_id: str,
    record: dict[str, Any],
    file_name: Optional[str],
    source: str,
) -> StoredLoan:
    now = datetime.now(timezone.utc)
    stored = await session.get(StoredLoan, loan_id)
    if stored is None:
        stored = StoredLoan(
            loan_id=loan_id,
            file_name=file_name,
            source=source,
            data=record,
            created_at=now,
            updated_at=now,
        )
        session.add(stored)
    else:
        stored.file_name = file_name
        stored.source = source
        stored.data = record
        stored.updated_at = now
    await session.flush()
    return stored


async def save_loan(
    session: AsyncSession,
    record: dict[str, Any],
    *,
    file_name: Optional[str],
    source: str,
) -> StoredLoan:
    """
    Insert or replace the stored record for its loan_id. The record itself is not modified.
    If a concurrent request inserts the same loan_id between the lookup and the flush,
    the transaction is rolled back and the write is retried once as an update.
    """
    loan_id = store_key(record)
    try:
        stored = await _upsert(session, loan_id, record, file_name, source)
    except IntegrityError:
        await session.rollback()
        logger.info("loan_save_conflict", loan_id=loan_id)
        stored = await _upsert(session, loan_id, record, file_name, source)
    logger.info("loan_saved", loan_id=loan_id, source=source)
    return stored


async def get_loan(session: AsyncSession, loan_id: str) -> Optional[StoredLoan]:
    return await session.get(StoredLoan, loan_id)


async def list_loans(session: AsyncSession) -> list[StoredLoan]:
    result = await session.execute(select(StoredLoan).order_by(StoredLoan.updated_at.desc()))
    return list(result.scalars().all())
