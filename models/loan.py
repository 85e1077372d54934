from sqlalchemy import JSON, Column, DateTime, String, func

from database import Base


class StoredLoan(Base):
    __tablename__ = "loan_records"

    # loan_id from the record; re-normalizing the same loan replaces the row
    loan_id = Column(String(128), primary_key=True, index=True)
    file_name = Column(String(512), nullable=True)
    source = Column(String(32), nullable=False)  # passthrough | ai
    # LoanJSON exactly as returned by the normalizer
    data = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
