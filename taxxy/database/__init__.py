"""Database module for transactions, tax profiles and the correction log."""

from taxxy.database.correction_store import (
    CorrectionStore,
    InMemoryCorrectionStore,
    SQLCorrectionStore,
)
from taxxy.database.db_manager import TaxxyDBManager

__all__ = [
    "CorrectionStore",
    "InMemoryCorrectionStore",
    "SQLCorrectionStore",
    "TaxxyDBManager",
]
