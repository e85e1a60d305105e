"""Transaction service: creation, classification, human edits and bulk import.

Human edits to purpose or write-off reason append a Correction to the log,
which later classifications retrieve as examples.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple

from taxxy.agents.classification.agent import TransactionClassifier
from taxxy.agents.classification.model import (
    PURPOSES,
    ClassificationRequest,
    ClassificationResult,
    Correction,
)
from taxxy.config import get_config
from taxxy.database.correction_store import CorrectionStore
from taxxy.database.db_manager import TaxxyDBManager, transaction_key
from taxxy.database.models import TransactionRecord
from taxxy.exceptions import InvalidTransactionError, TransactionNotFoundError

logger = logging.getLogger(__name__)

DATE_FORMATS = ("%Y-%m-%d", "%m/%d/%Y", "%m-%d-%Y", "%Y/%m/%d")


@dataclass
class ImportSummary:
    """Outcome of a bulk import."""

    imported: int = 0
    skipped: int = 0
    ai_classified: int = 0
    needs_review: int = 0
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "imported": self.imported,
            "skipped": self.skipped,
            "ai_classified": self.ai_classified,
            "needs_review": self.needs_review,
            "errors": self.errors,
        }


def parse_date(value: Any) -> Optional[date]:
    """
    Parse a transaction date.

    Accepts date/datetime objects, ISO strings (with or without time) and
    MM/DD/YYYY, MM-DD-YYYY, YYYY/MM/DD.

    Returns:
        date, or None if the value cannot be parsed
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value:
        return None

    cleaned = str(value).strip()
    try:
        return datetime.fromisoformat(cleaned.replace("Z", "+00:00")).date()
    except ValueError:
        pass

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(cleaned, fmt).date()
        except ValueError:
            continue

    logger.warning(f"Could not parse date: {cleaned}")
    return None


def parse_amount(value: Any) -> Optional[float]:
    """Parse an amount like '-1,234.50' or '$12'. Zero and non-numbers give None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        amount = float(value)
    else:
        cleaned = str(value).strip().replace(",", "").replace("$", "")
        try:
            amount = float(cleaned)
        except ValueError:
            return None
    if amount != amount or amount == 0:  # NaN or zero
        return None
    return amount


class TransactionService:
    """Creates, classifies and updates a user's transactions."""

    def __init__(
        self,
        db: TaxxyDBManager,
        classifier: TransactionClassifier,
        correction_store: CorrectionStore,
        max_workers: Optional[int] = None,
        review_threshold: Optional[float] = None,
    ):
        """
        Initialize transaction service

        Args:
            db: Database manager for transactions and tax profiles
            classifier: Transaction classifier
            correction_store: Correction log that receives human edits
            max_workers: Thread pool size for bulk classification
            review_threshold: Confidence below which a result needs review
        """
        settings = get_config().classification
        self.db = db
        self.classifier = classifier
        self.correction_store = correction_store
        self.max_workers = max_workers or settings.max_workers
        self.review_threshold = settings.review_threshold if review_threshold is None else review_threshold

    # ==================== Classification ====================

    def classify_description(
        self,
        owner: str,
        description: str,
        amount: Optional[float] = None,
        tax_profile: Optional[Dict[str, Any]] = None,
    ) -> ClassificationResult:
        """Classify a description, with the tax profile as prompt context when given."""
        request = ClassificationRequest(description=description, amount=amount, tax_profile=tax_profile)
        return self.classifier.classify(request, owner)

    # ==================== CRUD ====================

    def create_transaction(
        self,
        owner: str,
        description: str,
        amount: Any,
        tx_date: Any,
        category: Optional[str] = None,
    ) -> TransactionRecord:
        """
        Store a transaction and classify it.

        Classification never fails creation; on failure the stored row keeps
        the fixed low-confidence result.

        Raises:
            InvalidTransactionError: If description, amount or date is missing or invalid
        """
        description = (description or "").strip()
        parsed_amount = parse_amount(amount)
        parsed_date = parse_date(tx_date)
        if not description or parsed_amount is None or parsed_date is None:
            raise InvalidTransactionError("Missing required fields: description, amount, date")

        record = self.db.insert_transaction(owner, description, parsed_amount, parsed_date, category)
        tax_profile = self.db.tax_profile_context(owner)
        result = self.classify_description(owner, description, parsed_amount, tax_profile)
        logger.info(
            f"Classified transaction {record.id}: {result.purpose} "
            f"(confidence {result.confidence:.2f}, learned from {result.learned_from})"
        )
        return self.db.apply_classification(owner, record.id, result) or record

    def get_transaction(self, owner: str, transaction_id: int) -> TransactionRecord:
        record = self.db.get_transaction(owner, transaction_id)
        if record is None:
            raise TransactionNotFoundError(f"Transaction {transaction_id} not found")
        return record

    def list_transactions(self, owner: str) -> List[TransactionRecord]:
        return self.db.list_transactions(owner)

    def update_classification(
        self,
        owner: str,
        transaction_id: int,
        purpose: Optional[str] = None,
        is_write_off: Optional[bool] = None,
        reason: Optional[str] = None,
        category: Optional[str] = None,
        tag: Optional[str] = None,
    ) -> Tuple[TransactionRecord, Optional[Correction]]:
        """
        Apply a human edit to a transaction's classification.

        A correction is appended only when the purpose or the write-off
        reason actually changes.

        Returns:
            (updated transaction, stored correction or None)

        Raises:
            TransactionNotFoundError: If the transaction does not exist for owner
            InvalidTransactionError: If purpose is not business/personal
        """
        if purpose is not None and purpose not in PURPOSES:
            raise InvalidTransactionError(f"purpose must be one of {', '.join(PURPOSES)}")

        record = self.get_transaction(owner, transaction_id)
        original_purpose = record.purpose or "unknown"
        original_reason = record.write_off_reason or ""
        corrected_purpose = purpose if purpose is not None else original_purpose
        corrected_reason = reason if reason is not None else original_reason

        updates: Dict[str, Any] = {"reviewed": True}
        if purpose is not None:
            updates["purpose"] = purpose
        if reason is not None:
            updates["write_off_reason"] = reason
        if is_write_off is not None:
            updates["is_write_off"] = is_write_off
        if category is not None:
            updates["category"] = category
        if tag is not None:
            updates["tag"] = tag

        updated = self.db.update_transaction(owner, transaction_id, **updates)
        if updated is None:
            raise TransactionNotFoundError(f"Transaction {transaction_id} not found")

        correction = None
        if corrected_purpose != original_purpose or corrected_reason != original_reason:
            correction = self.correction_store.add(
                Correction(
                    owner=owner,
                    transaction_id=transaction_id,
                    transaction_description=record.description,
                    original_purpose=original_purpose,
                    corrected_purpose=corrected_purpose,
                    original_reason=original_reason,
                    corrected_reason=corrected_reason,
                )
            )

        return updated, correction

    # ==================== Bulk import ====================

    def import_transactions(self, owner: str, rows: List[Dict[str, Any]]) -> ImportSummary:
        """
        Import parsed rows, skipping duplicates, and classify them concurrently.

        Args:
            owner: User identifier
            rows: Dicts with date, description and amount

        Returns:
            ImportSummary
        """
        summary = ImportSummary()
        seen = self.db.existing_transaction_keys(owner)
        to_insert: List[Dict[str, Any]] = []

        for row in rows:
            raw_date = row.get("date")
            parsed_date = parse_date(raw_date)
            if parsed_date is None:
                summary.errors.append(f"Invalid date format: {raw_date}")
                continue

            raw_amount = row.get("amount")
            amount = parse_amount(raw_amount)
            if amount is None:
                summary.errors.append(f"Invalid amount: {raw_amount}")
                continue

            description = str(row.get("description") or "").strip()
            if not description:
                summary.errors.append("Missing description")
                continue

            key = transaction_key(parsed_date, description, amount)
            if key in seen:
                summary.skipped += 1
                continue
            seen.add(key)

            to_insert.append({
                "date": parsed_date,
                "description": description,
                "amount": amount,
                "category": row.get("category"),
            })

        if not to_insert:
            return summary

        records = self.db.insert_transactions(owner, to_insert)
        summary.imported = len(records)

        tax_profile = self.db.tax_profile_context(owner)
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            results = list(executor.map(
                lambda r: self.classify_description(owner, r.description, r.amount, tax_profile),
                records,
            ))

        for record, result in zip(records, results):
            self.db.apply_classification(owner, record.id, result)
            if result.needs_review(self.review_threshold):
                summary.needs_review += 1
            else:
                summary.ai_classified += 1

        logger.info(
            f"Imported {summary.imported} transactions for user {owner} "
            f"({summary.skipped} duplicates skipped, {len(summary.errors)} errors)"
        )
        return summary
