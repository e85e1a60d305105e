"""SQLAlchemy models for Taxxy storage."""

from datetime import datetime

from sqlalchemy import JSON, Boolean, Column, Date, DateTime, Float, Index, Integer, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class CorrectionRecord(Base):
    """Append-only log of user corrections to AI classifications."""

    __tablename__ = "corrections"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(255), nullable=False, index=True)
    transaction_id = Column(Integer, nullable=True)  # traceability only, not used for matching
    transaction_description = Column(Text, nullable=False)
    original_purpose = Column(String(20), nullable=False, default="unknown")
    corrected_purpose = Column(String(20), nullable=False, default="unknown")
    original_reason = Column(Text, nullable=False, default="")
    corrected_reason = Column(Text, nullable=False, default="")
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index("idx_corrections_user_recent", "user_id", "created_at"),
    )

    def __repr__(self):
        return f"<CorrectionRecord(id={self.id}, user={self.user_id}, {self.original_purpose}->{self.corrected_purpose})>"


class TransactionRecord(Base):
    """A user's transaction together with its latest classification."""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=False)
    amount = Column(Float, nullable=False)
    date = Column(Date, nullable=False)

    # Classification
    tag = Column(String(255), nullable=True)
    category = Column(String(100), nullable=False, default="unassigned")
    confidence = Column(Float, nullable=True)
    purpose = Column(String(20), nullable=True)
    is_write_off = Column(Boolean, nullable=False, default=False)
    write_off_reason = Column(Text, nullable=False, default="")
    learned_from = Column(Integer, nullable=False, default=0)
    correction_influence = Column(Float, nullable=False, default=0.0)
    classified_at = Column(DateTime, nullable=True)
    reviewed = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index("idx_transactions_dedupe", "user_id", "date", "amount"),
    )

    def __repr__(self):
        return f"<TransactionRecord(id={self.id}, user={self.user_id}, amount={self.amount})>"


class TaxProfileRecord(Base):
    """One tax profile per user, used as prompt context."""

    __tablename__ = "tax_profiles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(255), nullable=False, unique=True)
    profile = Column(JSON, nullable=False)
    onboarding_completed = Column(Boolean, nullable=False, default=True)
    last_review_date = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<TaxProfileRecord(user={self.user_id})>"
