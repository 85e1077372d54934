"""Test doubles for the external capabilities plus a representative LoanJSON record."""
import copy

from services.errors import ConfigurationMissing


class FakeCompletion:
    """Returns a canned response (or raises) and records every prompt it receives."""

    def __init__(self, response="", error=None):
        self.response = response
        self.error = error
        self.calls = []

    async def generate(self, prompt, *, json_output=False):
        self.calls.append({"prompt": prompt, "json_output": json_output})
        if self.error is not None:
            raise self.error
        return self.response


class UnconfiguredCompletion(FakeCompletion):
    def __init__(self):
        super().__init__(error=ConfigurationMissing("GEMINI_API_KEY is not configured", env_var="GEMINI_API_KEY"))


class FakeSpeech:
    def __init__(self, audio=b"ID3fake-mp3", error=None):
        self.audio = audio
        self.error = error
        self.texts = []

    async def synthesize(self, text):
        self.texts.append(text)
        if self.error is not None:
            raise self.error
        return self.audio


_SAMPLE_LOAN = {
    "metadata": {"version": "1.0", "last_updated": "2024-06-01T00:00:00Z", "schema_type": "LoanJSON-Standard"},
    "loan_id": "LN-2024-0042",
    "borrower": {
        "name": "Nordwind Energie GmbH",
        "jurisdiction": "DE",
        "sector": "Renewable Energy",
        "credit_rating": "BBB",
    },
    "loan_terms": {
        "principal": {"amount": 25000000, "currency": "EUR"},
        "interest_rate": {"type": "floating", "base": "EURIBOR", "margin": 2.25, "current_all_in": 5.9},
        "maturity_date": "2030-03-31",
        "origination_date": "2023-03-31",
    },
    "covenants": [
        {
            "id": "COV-1",
            "description": "Debt Service Coverage Ratio",
            "threshold": 1.25,
            "unit": "ratio",
            "current_value": 1.1,
            "status": "breached",
            "last_check": "2024-05-31",
        },
        {
            "id": "COV-2",
            "description": "Turbine availability",
            "threshold": 95,
            "unit": "percent",
            "current_value": 97.5,
            "status": "compliant",
            "last_check": "2024-05-31",
        },
    ],
    "risk_engine": {
        "health_score": 64,
        "trend": "decreasing",
        "prediction": {
            "probability_of_default": 0.082,
            "horizon": "90d",
            "factors": ["DSCR breach", "Lower wind yields"],
        },
    },
    "timeline": [
        {"date": "2024-05-31", "event": "DSCR breach", "description": "DSCR fell to 1.10x", "type": "breach"},
        {"date": "2023-03-31", "event": "Origination", "description": "Facility signed", "type": "origination"},
        {"date": "2023-11-15", "event": "Amendment", "description": "Margin step-up", "type": "amendment"},
    ],
}


def sample_loan_record():
    return copy.deepcopy(_SAMPLE_LOAN)
