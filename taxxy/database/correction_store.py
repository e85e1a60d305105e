"""Storage backends for the append-only correction log."""

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import replace
from typing import List

from taxxy.agents.classification.model import Correction
from taxxy.database.models import CorrectionRecord
from taxxy.database.schema import session_scope

logger = logging.getLogger(__name__)


class CorrectionStore(ABC):
    """Abstract correction log. Records are inserted and read, never updated."""

    @abstractmethod
    def add(self, correction: Correction) -> Correction:
        """
        Append a correction.

        Args:
            correction: Correction to store (id is ignored)

        Returns:
            Stored correction with its assigned id

        Raises:
            ValueError: If the correction has no owner
        """
        pass

    @abstractmethod
    def list_recent(self, owner: str, limit: int = 50) -> List[Correction]:
        """
        Get the most recent corrections of one owner, newest first.

        Args:
            owner: User identifier
            limit: Maximum number of records

        Returns:
            List of corrections belonging to owner
        """
        pass

    @abstractmethod
    def list_for_owner(self, owner: str) -> List[Correction]:
        """Get every correction of one owner, newest first."""
        pass


def _require_owner(correction: Correction) -> None:
    if not correction.owner:
        raise ValueError("Correction must have an owner")


class SQLCorrectionStore(CorrectionStore):
    """Correction log in the SQL database."""

    def __init__(self, session_factory):
        """
        Initialize store.

        Args:
            session_factory: SQLAlchemy session factory
        """
        self.Session = session_factory

    def add(self, correction: Correction) -> Correction:
        _require_owner(correction)
        record = CorrectionRecord(
            user_id=correction.owner,
            transaction_id=correction.transaction_id,
            transaction_description=correction.transaction_description or "",
            original_purpose=correction.original_purpose,
            corrected_purpose=correction.corrected_purpose,
            original_reason=correction.original_reason or "",
            corrected_reason=correction.corrected_reason or "",
            created_at=correction.timestamp,
        )
        # Single insert in its own transaction
        with session_scope(self.Session) as session:
            session.add(record)
            session.flush()
            stored = self._to_correction(record)

        logger.info(f"Stored correction {stored.id} for user {stored.owner}")
        return stored

    def list_recent(self, owner: str, limit: int = 50) -> List[Correction]:
        with session_scope(self.Session, commit=False) as session:
            records = (
                session.query(CorrectionRecord)
                .filter(CorrectionRecord.user_id == owner)
                .order_by(CorrectionRecord.created_at.desc(), CorrectionRecord.id.desc())
                .limit(limit)
                .all()
            )
            return [self._to_correction(r) for r in records]

    def list_for_owner(self, owner: str) -> List[Correction]:
        with session_scope(self.Session, commit=False) as session:
            records = (
                session.query(CorrectionRecord)
                .filter(CorrectionRecord.user_id == owner)
                .order_by(CorrectionRecord.created_at.desc(), CorrectionRecord.id.desc())
                .all()
            )
            return [self._to_correction(r) for r in records]

    @staticmethod
    def _to_correction(record: CorrectionRecord) -> Correction:
        return Correction(
            id=record.id,
            owner=record.user_id,
            transaction_id=record.transaction_id,
            transaction_description=record.transaction_description,
            original_purpose=record.original_purpose,
            corrected_purpose=record.corrected_purpose,
            original_reason=record.original_reason or "",
            corrected_reason=record.corrected_reason or "",
            timestamp=record.created_at,
        )


class InMemoryCorrectionStore(CorrectionStore):
    """List-backed correction log (thread-safe)."""

    def __init__(self):
        self._corrections: List[Correction] = []
        self._next_id = 1
        self._lock = threading.Lock()

    def add(self, correction: Correction) -> Correction:
        _require_owner(correction)
        with self._lock:
            stored = replace(correction, id=self._next_id)
            self._next_id += 1
            self._corrections.append(stored)
        return stored

    def _newest_first(self, owner: str) -> List[Correction]:
        with self._lock:
            owned = [c for c in reversed(self._corrections) if c.owner == owner]
        # Stable sort keeps later inserts ahead on equal timestamps
        return sorted(owned, key=lambda c: c.timestamp, reverse=True)

    def list_recent(self, owner: str, limit: int = 50) -> List[Correction]:
        return self._newest_first(owner)[:limit]

    def list_for_owner(self, owner: str) -> List[Correction]:
        return self._newest_first(owner)

    def __len__(self) -> int:
        with self._lock:
            return len(self._corrections)
