"""Database manager for transactions and tax profiles."""

import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Tuple

from taxxy.agents.classification.model import ClassificationResult
from taxxy.database.models import TaxProfileRecord, TransactionRecord
from taxxy.database.schema import get_session_factory, init_database, session_scope

logger = logging.getLogger(__name__)

TransactionKey = Tuple[date, str, float]


def transaction_key(tx_date: date, description: str, amount: float) -> TransactionKey:
    """Duplicate-detection key for a transaction."""
    return (tx_date, description.strip(), round(float(amount), 2))


def transaction_to_dict(record: TransactionRecord) -> Dict[str, Any]:
    """Convert a transaction row to a plain dictionary."""
    return {
        "id": record.id,
        "description": record.description,
        "amount": record.amount,
        "date": record.date.isoformat() if record.date else None,
        "tag": record.tag,
        "category": record.category,
        "confidence": record.confidence,
        "purpose": record.purpose,
        "write_off": {
            "is_write_off": bool(record.is_write_off),
            "reason": record.write_off_reason or "",
        },
        "learned_from": record.learned_from or 0,
        "correction_influence": record.correction_influence or 0.0,
        "reviewed": bool(record.reviewed),
        "classified_at": record.classified_at.isoformat() if record.classified_at else None,
    }


class TaxxyDBManager:
    """Manages transaction and tax profile persistence."""

    def __init__(self, db_path: Path, echo: bool = False):
        """
        Initialize database manager.

        Args:
            db_path: Path to SQLite database file
            echo: Whether to echo SQL queries (for debugging)
        """
        self.db_path = db_path
        self.engine = init_database(db_path, echo=echo)
        self.Session = get_session_factory(self.engine)

    # ==================== Transactions ====================

    def insert_transaction(
        self,
        owner: str,
        description: str,
        amount: float,
        tx_date: date,
        category: Optional[str] = None,
    ) -> TransactionRecord:
        """Insert one transaction and return the stored row."""
        return self.insert_transactions(
            owner,
            [{"description": description, "amount": amount, "date": tx_date, "category": category}],
        )[0]

    def insert_transactions(self, owner: str, rows: List[Dict[str, Any]]) -> List[TransactionRecord]:
        """
        Insert transactions in a single database transaction.

        Args:
            owner: User identifier
            rows: Dicts with description, amount, date and optional category

        Returns:
            Stored rows with ids assigned
        """
        records = [
            TransactionRecord(
                user_id=owner,
                description=row["description"],
                amount=float(row["amount"]),
                date=row["date"],
                category=row.get("category") or "unassigned",
                reviewed=False,
            )
            for row in rows
        ]
        with session_scope(self.Session) as session:
            session.add_all(records)
        logger.info(f"Inserted {len(records)} transactions for user {owner}")
        return records

    def get_transaction(self, owner: str, transaction_id: int) -> Optional[TransactionRecord]:
        with session_scope(self.Session, commit=False) as session:
            return (
                session.query(TransactionRecord)
                .filter(
                    TransactionRecord.id == transaction_id,
                    TransactionRecord.user_id == owner,
                )
                .first()
            )

    def list_transactions(self, owner: str) -> List[TransactionRecord]:
        with session_scope(self.Session, commit=False) as session:
            return (
                session.query(TransactionRecord)
                .filter(TransactionRecord.user_id == owner)
                .order_by(TransactionRecord.date.desc(), TransactionRecord.id.desc())
                .all()
            )

    def existing_transaction_keys(self, owner: str) -> Set[TransactionKey]:
        """Keys of every stored transaction of the owner, for duplicate detection."""
        with session_scope(self.Session, commit=False) as session:
            rows = (
                session.query(
                    TransactionRecord.date,
                    TransactionRecord.description,
                    TransactionRecord.amount,
                )
                .filter(TransactionRecord.user_id == owner)
                .all()
            )
            return {transaction_key(d, desc, amt) for d, desc, amt in rows}

    def apply_classification(
        self, owner: str, transaction_id: int, result: ClassificationResult
    ) -> Optional[TransactionRecord]:
        """Write a classification result onto the owner's transaction."""
        return self.update_transaction(
            owner,
            transaction_id,
            tag=result.tag,
            category=result.category,
            confidence=result.confidence,
            purpose=result.purpose,
            is_write_off=result.write_off.is_write_off,
            write_off_reason=result.write_off.reason,
            learned_from=result.learned_from,
            correction_influence=result.correction_influence,
            classified_at=datetime.utcnow(),
            reviewed=False,
        )

    def update_transaction(
        self, owner: str, transaction_id: int, **fields: Any
    ) -> Optional[TransactionRecord]:
        """
        Update columns of the owner's transaction.

        Returns:
            Updated row, or None if the transaction does not exist for owner
        """
        with session_scope(self.Session) as session:
            record = (
                session.query(TransactionRecord)
                .filter(
                    TransactionRecord.id == transaction_id,
                    TransactionRecord.user_id == owner,
                )
                .first()
            )
            if record is None:
                return None
            for name, value in fields.items():
                setattr(record, name, value)
            return record

    # ==================== Tax profiles ====================

    def get_tax_profile(self, owner: str) -> Optional[Dict[str, Any]]:
        with session_scope(self.Session, commit=False) as session:
            record = (
                session.query(TaxProfileRecord)
                .filter(TaxProfileRecord.user_id == owner)
                .first()
            )
            if record is None:
                return None
            return dict(record.profile or {})

    def tax_profile_context(self, owner: str) -> Optional[Dict[str, Any]]:
        """Tax profile for prompt context; None when it cannot be loaded."""
        try:
            return self.get_tax_profile(owner)
        except Exception as e:
            logger.warning(f"Could not load tax profile for user {owner}: {e}")
            return None

    def upsert_tax_profile(self, owner: str, profile: Dict[str, Any]) -> Dict[str, Any]:
        """Create or replace the owner's tax profile."""
        with session_scope(self.Session) as session:
            record = (
                session.query(TaxProfileRecord)
                .filter(TaxProfileRecord.user_id == owner)
                .first()
            )
            if record is None:
                record = TaxProfileRecord(user_id=owner, profile=dict(profile))
                session.add(record)
                logger.info(f"Created tax profile for user {owner}")
            else:
                record.profile = dict(profile)
                logger.info(f"Updated tax profile for user {owner}")
            record.onboarding_completed = True
            record.last_review_date = datetime.utcnow()
        return dict(profile)
