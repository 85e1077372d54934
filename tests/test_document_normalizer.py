"""
Tests for LoanJSON normalization: JSON pass-through vs AI structuring.
Run from project root: python -m pytest tests/test_document_normalizer.py -v
"""
import json
import unittest

from fakes import FakeCompletion, UnconfiguredCompletion, sample_loan_record
from services.document_normalizer import (
    MSG_CONVERTED,
    MSG_PASSTHROUGH,
    DocumentNormalizer,
    build_structuring_prompt,
    prepare_document_text,
    strip_code_fence,
)
from services.errors import CapabilityUnavailable, ConfigurationMissing, InvalidAiRecord, UnparsableAiOutput


class TestJsonPassthrough(unittest.IsolatedAsyncioTestCase):
    async def test_valid_minimal_json_returned_unchanged(self):
        completion = FakeCompletion()
        normalizer = DocumentNormalizer(completion)
        content = '{"loan_id":"L1","borrower":{},"loan_terms":{}}'
        result = await normalizer.normalize(content, "upload.txt", "application/json")
        self.assertEqual(result.record, {"loan_id": "L1", "borrower": {}, "loan_terms": {}})
        self.assertEqual(result.source, "passthrough")
        self.assertEqual(result.message, MSG_PASSTHROUGH)
        self.assertEqual(completion.calls, [])

    async def test_json_suffix_is_enough(self):
        completion = FakeCompletion()
        record = sample_loan_record()
        result = await DocumentNormalizer(completion).normalize(json.dumps(record), "Loan.JSON", "")
        self.assertEqual(result.record, record)
        self.assertEqual(completion.calls, [])

    async def test_passthrough_needs_no_credentials(self):
        result = await DocumentNormalizer(UnconfiguredCompletion()).normalize(
            json.dumps(sample_loan_record()), "loan.json", "application/json"
        )
        self.assertEqual(result.source, "passthrough")


class TestAiStructuring(unittest.IsolatedAsyncioTestCase):
    async def test_malformed_json_falls_back_to_ai(self):
        completion = FakeCompletion(response=json.dumps(sample_loan_record()))
        result = await DocumentNormalizer(completion).normalize('{"loan_id": "L1",', "loan.json", "application/json")
        self.assertEqual(result.source, "ai")
        self.assertEqual(result.message, MSG_CONVERTED)
        self.assertEqual(len(completion.calls), 1)
        self.assertTrue(completion.calls[0]["json_output"])

    async def test_json_failing_minimal_check_falls_back_to_ai(self):
        completion = FakeCompletion(response=json.dumps(sample_loan_record()))
        await DocumentNormalizer(completion).normalize('{"loan_id": "L1"}', "loan.json", "application/json")
        self.assertEqual(len(completion.calls), 1)
        self.assertIn('{"loan_id": "L1"}', completion.calls[0]["prompt"])

    async def test_plain_text_invokes_completion_once(self):
        completion = FakeCompletion(response=json.dumps(sample_loan_record()))
        text = "Facility Agreement between Nordwind Energie GmbH and the Lenders..."
        result = await DocumentNormalizer(completion).normalize(text, "agreement.txt", "text/plain")
        self.assertEqual(len(completion.calls), 1)
        self.assertIn(text, completion.calls[0]["prompt"])
        self.assertEqual(result.record["loan_id"], "LN-2024-0042")

    async def test_ai_output_is_trusted_by_default(self):
        completion = FakeCompletion(response='{"loan_id": "X", "unexpected": true}')
        result = await DocumentNormalizer(completion).normalize("text", "a.txt", "text/plain")
        self.assertEqual(result.record, {"loan_id": "X", "unexpected": True})

    async def test_code_fenced_ai_output(self):
        completion = FakeCompletion(response='```json\n{"loan_id": "F1"}\n```')
        result = await DocumentNormalizer(completion).normalize("text", "a.txt", "text/plain")
        self.assertEqual(result.record, {"loan_id": "F1"})

    async def test_unparsable_ai_output(self):
        completion = FakeCompletion(response="Sorry, I cannot help with that.")
        with self.assertRaises(UnparsableAiOutput) as ctx:
            await DocumentNormalizer(completion).normalize("text", "a.txt", "text/plain")
        self.assertEqual(ctx.exception.status_code, 422)
        self.assertEqual(len(completion.calls), 1)

    async def test_non_object_ai_output(self):
        completion = FakeCompletion(response="[1, 2, 3]")
        with self.assertRaises(UnparsableAiOutput):
            await DocumentNormalizer(completion).normalize("text", "a.txt", "text/plain")

    async def test_missing_configuration(self):
        completion = UnconfiguredCompletion()
        with self.assertRaises(ConfigurationMissing):
            await DocumentNormalizer(completion).normalize("text", "a.txt", "text/plain")

    async def test_capability_failure_is_not_retried(self):
        completion = FakeCompletion(error=CapabilityUnavailable("Gemini completion failed"))
        with self.assertRaises(CapabilityUnavailable):
            await DocumentNormalizer(completion).normalize("text", "a.txt", "text/plain")
        self.assertEqual(len(completion.calls), 1)


class TestStrictMode(unittest.IsolatedAsyncioTestCase):
    async def test_strict_accepts_complete_record(self):
        completion = FakeCompletion(response=json.dumps(sample_loan_record()))
        result = await DocumentNormalizer(completion, strict=True).normalize("text", "a.txt", "text/plain")
        self.assertEqual(result.record["loan_id"], "LN-2024-0042")

    async def test_strict_rejects_incomplete_record(self):
        completion = FakeCompletion(response='{"loan_id": "X"}')
        with self.assertRaises(InvalidAiRecord) as ctx:
            await DocumentNormalizer(completion, strict=True).normalize("text", "a.txt", "text/plain")
        self.assertIn("borrower", ctx.exception.details)


class TestPromptHelpers(unittest.TestCase):
    def test_prompt_lists_every_top_level_field(self):
        prompt = build_structuring_prompt("DOC")
        for field in ("metadata", "loan_id", "borrower", "loan_terms", "covenants", "risk_engine", "timeline"):
            self.assertIn(field, prompt)
        self.assertIn("chronologically", prompt)
        self.assertIn("estimated", prompt)
        self.assertTrue(prompt.rstrip().endswith("DOC"))

    def test_prepare_document_text_truncates_middle(self):
        text = "A" * 60 + "B" * 60
        prepared = prepare_document_text(text, 100)
        self.assertTrue(prepared.startswith("A" * 50))
        self.assertTrue(prepared.endswith("B" * 50))
        self.assertIn("[...document truncated...]", prepared)
        self.assertEqual(prepare_document_text("short", 100), "short")

    def test_strip_code_fence(self):
        self.assertEqual(strip_code_fence('```\n{"a": 1}\n```'), '{"a": 1}')
        self.assertEqual(strip_code_fence(' {"a": 1} '), '{"a": 1}')


if __name__ == "__main__":
    unittest.main()
