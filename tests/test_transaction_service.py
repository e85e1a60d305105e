"""Tests for the transaction service and its SQL storage."""

from datetime import date, datetime

import pytest

from conftest import OTHER_OWNER, OWNER, FakeLM, make_client
from taxxy.agents.classification.agent import TransactionClassifier
from taxxy.exceptions import InvalidTransactionError, TransactionNotFoundError
from taxxy.services.transaction_service import TransactionService, parse_amount, parse_date

LOW_CONFIDENCE = '{"tag": "misc", "category": "other", "confidence": 0.3, "purpose": "personal"}'


@pytest.fixture
def service(db, store, classifier):
    return TransactionService(db, classifier, store, max_workers=2, review_threshold=0.7)


@pytest.mark.parametrize("value, expected", [
    ("2024-03-15", date(2024, 3, 15)),
    ("2024-03-15T10:22:00Z", date(2024, 3, 15)),
    ("03/15/2024", date(2024, 3, 15)),
    ("03-15-2024", date(2024, 3, 15)),
    (datetime(2024, 3, 15, 8, 0), date(2024, 3, 15)),
    (date(2024, 3, 15), date(2024, 3, 15)),
    ("15.03.2024", None),
    ("", None),
    (None, None),
])
def test_parse_date(value, expected):
    assert parse_date(value) == expected


@pytest.mark.parametrize("value, expected", [
    ("-12.50", -12.5),
    ("$1,234.00", 1234.0),
    (42, 42.0),
    ("0", None),
    (0.0, None),
    ("abc", None),
    (None, None),
    (True, None),
])
def test_parse_amount(value, expected):
    assert parse_amount(value) == expected


class TestCreateTransaction:
    def test_creates_and_classifies(self, service):
        record = service.create_transaction(OWNER, "Adobe Creative Cloud", "-54.99", "2024-03-01")

        assert record.id is not None
        assert record.amount == -54.99
        assert record.purpose == "business"
        assert record.category == "software"
        assert record.confidence == pytest.approx(0.8)
        assert record.is_write_off is True
        assert record.classified_at is not None
        assert record.reviewed is False

    def test_uses_stored_tax_profile(self, service, db, fake_lm):
        db.upsert_tax_profile(OWNER, {"business_type": "photography studio"})

        service.create_transaction(OWNER, "Camera lens", -899, "2024-03-01")

        assert "photography studio" in fake_lm.last_prompt

    @pytest.mark.parametrize("description, amount, tx_date", [
        ("", -5, "2024-01-01"),
        ("Coffee", 0, "2024-01-01"),
        ("Coffee", "abc", "2024-01-01"),
        ("Coffee", -5, "yesterday"),
    ])
    def test_rejects_invalid_input(self, service, description, amount, tx_date):
        with pytest.raises(InvalidTransactionError):
            service.create_transaction(OWNER, description, amount, tx_date)

    def test_classification_failure_does_not_fail_creation(self, db, store):
        classifier = TransactionClassifier(
            store, client=make_client(FakeLM(ConnectionError("down"))), enable_tracing=False
        )
        service = TransactionService(db, classifier, store)

        record = service.create_transaction(OWNER, "Mystery charge", -10, "2024-01-01")

        assert record.confidence == 0.05
        assert record.purpose == "personal"


class TestReadTransactions:
    def test_owner_scoped(self, service):
        mine = service.create_transaction(OWNER, "Adobe", -10, "2024-01-01")
        service.create_transaction(OTHER_OWNER, "Adobe", -10, "2024-01-01")

        assert [r.id for r in service.list_transactions(OWNER)] == [mine.id]
        assert service.get_transaction(OWNER, mine.id).description == "Adobe"
        with pytest.raises(TransactionNotFoundError):
            service.get_transaction(OTHER_OWNER, mine.id)

    def test_listed_newest_first(self, service):
        older = service.create_transaction(OWNER, "Older", -1, "2024-01-01")
        newer = service.create_transaction(OWNER, "Newer", -1, "2024-02-01")

        assert [r.id for r in service.list_transactions(OWNER)] == [newer.id, older.id]


class TestUpdateClassification:
    def test_purpose_change_records_correction(self, service, store):
        record = service.create_transaction(OWNER, "Adobe Creative Cloud", -54.99, "2024-03-01")

        updated, correction = service.update_classification(
            OWNER, record.id, purpose="personal", reason="Family photo editing"
        )

        assert updated.purpose == "personal"
        assert updated.write_off_reason == "Family photo editing"
        assert updated.reviewed is True
        assert correction is not None
        assert correction.owner == OWNER
        assert correction.transaction_id == record.id
        assert correction.original_purpose == "business"
        assert correction.corrected_purpose == "personal"
        assert correction.original_reason == "Business software"
        assert correction.corrected_reason == "Family photo editing"
        assert len(store) == 1

    def test_correction_feeds_next_classification(self, service, fake_lm):
        record = service.create_transaction(OWNER, "Adobe Creative Cloud", -54.99, "2024-03-01")
        service.update_classification(OWNER, record.id, purpose="personal")

        second = service.create_transaction(OWNER, "Adobe Creative Cloud", -54.99, "2024-04-01")

        assert second.learned_from == 1
        assert 'Pattern 1: "Adobe Creative Cloud"' in fake_lm.last_prompt

    def test_unchanged_values_record_nothing(self, service, store):
        record = service.create_transaction(OWNER, "Adobe", -10, "2024-01-01")

        updated, correction = service.update_classification(
            OWNER, record.id, purpose="business", category="design-tools"
        )

        assert correction is None
        assert updated.category == "design-tools"
        assert updated.reviewed is True
        assert len(store) == 0

    def test_invalid_purpose(self, service):
        record = service.create_transaction(OWNER, "Adobe", -10, "2024-01-01")
        with pytest.raises(InvalidTransactionError):
            service.update_classification(OWNER, record.id, purpose="mixed")

    def test_unknown_transaction(self, service):
        with pytest.raises(TransactionNotFoundError):
            service.update_classification(OWNER, 999, purpose="business")


class TestImportTransactions:
    def test_import_summary(self, service):
        rows = [
            {"date": "2024-03-01", "description": "Adobe Creative Cloud", "amount": "-54.99"},
            {"date": "03/02/2024", "description": "Staples", "amount": -20},
            # duplicate of the first row within the batch
            {"date": "2024-03-01", "description": "Adobe Creative Cloud ", "amount": -54.99},
            {"date": "not a date", "description": "Bad", "amount": -1},
            {"date": "2024-03-03", "description": "Zero", "amount": 0},
            {"date": "2024-03-03", "description": "", "amount": -3},
        ]

        summary = service.import_transactions(OWNER, rows)

        assert summary.imported == 2
        assert summary.skipped == 1
        assert summary.ai_classified == 2
        assert summary.needs_review == 0
        assert len(summary.errors) == 3
        assert "Invalid date format: not a date" in summary.errors
        assert len(service.list_transactions(OWNER)) == 2
        assert all(r.classified_at is not None for r in service.list_transactions(OWNER))

    def test_skips_rows_already_stored(self, service):
        service.create_transaction(OWNER, "Staples", -20, "2024-03-02")

        summary = service.import_transactions(
            OWNER, [{"date": "03-02-2024", "description": "Staples", "amount": "-20.00"}]
        )

        assert summary.imported == 0
        assert summary.skipped == 1

    def test_low_confidence_counts_as_needs_review(self, db, store):
        classifier = TransactionClassifier(store, client=make_client(FakeLM(LOW_CONFIDENCE)), enable_tracing=False)
        service = TransactionService(db, classifier, store, max_workers=3, review_threshold=0.7)
        rows = [
            {"date": "2024-03-0%d" % day, "description": f"Charge {day}", "amount": -day}
            for day in range(1, 5)
        ]

        summary = service.import_transactions(OWNER, rows)

        assert summary.imported == 4
        assert summary.needs_review == 4
        assert summary.ai_classified == 0

    def test_other_owner_rows_are_not_duplicates(self, service):
        service.create_transaction(OTHER_OWNER, "Staples", -20, "2024-03-02")

        summary = service.import_transactions(
            OWNER, [{"date": "2024-03-02", "description": "Staples", "amount": -20}]
        )

        assert summary.imported == 1


def test_tax_profile_upsert(db):
    assert db.get_tax_profile(OWNER) is None

    db.upsert_tax_profile(OWNER, {"business_type": "bakery"})
    db.upsert_tax_profile(OWNER, {"business_type": "cafe", "state": "WA"})

    assert db.get_tax_profile(OWNER) == {"business_type": "cafe", "state": "WA"}
    assert db.get_tax_profile(OTHER_OWNER) is None


def test_unreadable_tax_profile_does_not_block_creation(service, db, fake_lm, monkeypatch):
    def broken(owner):
        raise RuntimeError("database is locked")

    monkeypatch.setattr(db, "get_tax_profile", broken)

    record = service.create_transaction(OWNER, "Adobe Creative Cloud", -54.99, "2024-03-01")

    assert db.tax_profile_context(OWNER) is None
    assert record.confidence == pytest.approx(0.8)
    assert "USER TAX PROFILE" not in fake_lm.last_prompt
