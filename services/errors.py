"""
Error taxonomy for the normalization and insight pipelines.
Each error carries the HTTP status the API layer maps it to.
"""
from __future__ import annotations


class LoanInsightError(Exception):
    status_code = 500

    def __init__(self, message: str, *, details: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class ConfigurationMissing(LoanInsightError):
    """A capability credential is absent. Raised before any network attempt."""
    status_code = 500

    def __init__(self, message: str, *, env_var: str | None = None, details: str | None = None) -> None:
        super().__init__(message, details=details)
        self.env_var = env_var


class UnparsableInput(LoanInsightError):
    """Candidate input could not be parsed or failed the minimal LoanJSON check."""
    status_code = 400


class UnparsableAiOutput(LoanInsightError):
    """The completion capability returned text that is not JSON."""
    status_code = 422


class InvalidAiRecord(LoanInsightError):
    """AI output parsed but failed structural validation (strict mode only)."""
    status_code = 422


class CapabilityUnavailable(LoanInsightError):
    """Transport or provider failure while calling an external capability."""
    status_code = 500


class SpeechUnavailable(CapabilityUnavailable):
    pass


class InvalidCategory(LoanInsightError):
    status_code = 400
