from models.loan import StoredLoan

__all__ = [
    "StoredLoan",
]
