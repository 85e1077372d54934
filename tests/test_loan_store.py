"""
Tests for persisting converted loans, on a private in-memory database.
Run from project root: python -m pytest tests/test_loan_store.py -v
"""
import unittest
from unittest.mock import patch

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from database import init_db, make_engine
from fakes import sample_loan_record
from services.loan_store import get_loan, list_loans, save_loan, store_key


class TestLoanStore(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.engine = make_engine("sqlite+aiosqlite:///:memory:")
        await init_db(self.engine)
        self.sessions = async_sessionmaker(self.engine, class_=AsyncSession, expire_on_commit=False)

    async def asyncTearDown(self):
        await self.engine.dispose()

    async def test_same_loan_id_replaces_row(self):
        record = sample_loan_record()
        async with self.sessions() as session:
            await save_loan(session, record, file_name="a.json", source="passthrough")
            await session.commit()
        updated = sample_loan_record()
        updated["risk_engine"]["health_score"] = 41
        async with self.sessions() as session:
            await save_loan(session, updated, file_name="b.txt", source="ai")
            await session.commit()
        async with self.sessions() as session:
            loans = await list_loans(session)
        self.assertEqual(len(loans), 1)
        self.assertEqual(loans[0].source, "ai")
        self.assertEqual(loans[0].data["risk_engine"]["health_score"], 41)

    async def test_concurrent_insert_retried_as_update(self):
        async with self.sessions() as session:
            await save_loan(session, sample_loan_record(), file_name="first.json", source="passthrough")
            await session.commit()

        async with self.sessions() as session:
            real_get = AsyncSession.get
            lookups = []

            async def stale_get(sess, *args, **kwargs):
                # The first lookup misses the row another request already committed
                lookups.append(args)
                if len(lookups) == 1:
                    return None
                return await real_get(sess, *args, **kwargs)

            with patch.object(AsyncSession, "get", stale_get):
                await save_loan(session, sample_loan_record(), file_name="second.json", source="ai")
            await session.commit()
        self.assertEqual(len(lookups), 2)

        async with self.sessions() as session:
            stored = await get_loan(session, "LN-2024-0042")
        self.assertEqual(stored.file_name, "second.json")
        self.assertEqual(stored.source, "ai")

    async def test_record_without_loan_id_gets_generated_key(self):
        record = sample_loan_record()
        del record["loan_id"]
        self.assertTrue(store_key(record).startswith("loan-"))
        async with self.sessions() as session:
            stored = await save_loan(session, record, file_name=None, source="ai")
            await session.commit()
        self.assertTrue(stored.loan_id.startswith("loan-"))
        self.assertNotIn("loan_id", record)


if __name__ == "__main__":
    unittest.main()
