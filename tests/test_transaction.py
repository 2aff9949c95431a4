"""Tests for the transaction store."""

from datetime import date
from decimal import Decimal

import pytest

from smartledger.domain.categories import UNCATEGORIZED_IN, UNCATEGORIZED_OUT
from smartledger.domain.entities import TransactionType
from smartledger.domain.errors import NotFoundError, ValidationError
from smartledger.domain.transaction import normalize_confidence, normalize_type


def test_insert_batch_normalizes_rows(transaction_service, sample_account):
    """Test defaults for type, category and confidence."""
    transactions, errors = transaction_service.insert_batch(
        [
            {"date": "05/01/2025", "description": "Ενοίκιο Ιανουαρίου", "amount": "-1.200,00"},
            {
                "id": "ai-7",
                "date": "2025-01-06",
                "description": "Customer payment",
                "amount": 300,
                "type": "credit",
                "categoryCode": "invoice_payment_full",
                "confidence": 0.92,
                "counterparty": "ACME SA",
                "reasoning": "Matches invoice 17",
            },
        ],
        upload_id=None,
        account_id=sample_account.id,
    )

    assert errors == []
    rent, payment = transactions

    assert rent.date == date(2025, 1, 5)
    assert rent.description == "Ενοίκιο Ιανουαρίου"
    assert rent.amount == Decimal("1200.00")
    assert rent.type is TransactionType.DEBIT
    assert rent.category_code == UNCATEGORIZED_OUT
    assert rent.confidence == 0.5
    assert not rent.is_posted

    assert payment.type is TransactionType.CREDIT
    assert payment.category_code == "INVOICE_PAYMENT_FULL"
    assert payment.confidence == pytest.approx(0.92)
    assert payment.counterparty == "ACME SA"
    assert payment.reasoning == "Matches invoice 17"
    assert payment.source_id == "ai-7"


def test_insert_batch_unknown_category_uses_type_sentinel(transaction_service, sample_account):
    transactions, errors = transaction_service.insert_batch(
        [{"date": "2025-01-05", "amount": 10, "type": "CREDIT", "categoryCode": "LOTTERY_WIN"}],
        upload_id=None,
        account_id=sample_account.id,
    )

    assert errors == []
    assert transactions[0].category_code == UNCATEGORIZED_IN


def test_insert_batch_keeps_malformed_rows(transaction_service, sample_account):
    """Test unparsable fields are stored as None with a post error, not dropped."""
    transactions, errors = transaction_service.insert_batch(
        [
            {"date": "sometime soon", "amount": 10, "type": "DEBIT"},
            {"date": "2025-01-05", "amount": "ten", "type": "DEBIT"},
            {"date": "2025-01-05", "amount": 10, "type": "REFUND"},
            {"date": "2025-01-05", "amount": 10, "type": "DEBIT"},
        ],
        upload_id=None,
        account_id=sample_account.id,
    )

    assert len(transactions) == 4
    assert transactions[0].date is None and transactions[0].post_error
    assert transactions[1].amount is None and transactions[1].post_error
    assert transactions[2].type is None and "REFUND" in transactions[2].post_error
    assert transactions[3].post_error is None
    assert [e.split(":")[0] for e in errors] == ["Row 1", "Row 2", "Row 3"]


def test_query_filters(transaction_service, sample_account):
    transaction_service.insert_batch(
        [
            {"date": "2025-01-05", "amount": 100, "type": "CREDIT", "description": "Invoice 1"},
            {"date": "2025-01-10", "amount": 40, "type": "DEBIT", "description": "Rent", "counterparty": "Landlord"},
            {"date": "2025-02-01", "amount": 5, "type": "DEBIT", "categoryCode": "BANK_FEES"},
        ],
        upload_id=None,
        account_id=sample_account.id,
    )

    january = transaction_service.query(start_date=date(2025, 1, 1), end_date=date(2025, 1, 31))
    assert [t.date for t in january] == [date(2025, 1, 10), date(2025, 1, 5)]

    assert len(transaction_service.query(txn_type="debit")) == 2
    assert len(transaction_service.query(category_code="bank_fees")) == 1
    assert [t.description for t in transaction_service.query(search="landlord")] == ["Rent"]
    assert len(transaction_service.query(posted=False)) == 3
    assert len(transaction_service.query(posted=True)) == 0


def test_query_pagination(transaction_service, sample_account):
    rows = [{"date": f"2025-01-{day:02d}", "amount": day, "type": "DEBIT"} for day in range(1, 6)]
    transaction_service.insert_batch(rows, upload_id=None, account_id=sample_account.id)

    page = transaction_service.query(limit=2, offset=1)

    assert [t.date.day for t in page] == [4, 3]


def test_query_rejects_unknown_type(transaction_service):
    with pytest.raises(ValidationError):
        transaction_service.query(txn_type="SIDEWAYS")


def test_get_not_found(transaction_service):
    with pytest.raises(NotFoundError):
        transaction_service.get(123)


def test_update_marks_manual(transaction_service, sample_account, store):
    (txn,) = store(sample_account.id, {"date": "2025-01-05", "amount": 12, "type": "DEBIT"})

    updated = transaction_service.update(txn.id, category_code="bank_fees", notes="Monthly fee")

    assert updated.category_code == "BANK_FEES"
    assert updated.notes == "Monthly fee"
    assert updated.is_manual
    assert updated.amount == txn.amount
    assert updated.date == txn.date
    assert updated.type == txn.type


def test_update_rejects_unknown_category(transaction_service, sample_account, store):
    (txn,) = store(sample_account.id, {"date": "2025-01-05", "amount": 12, "type": "DEBIT"})

    with pytest.raises(ValidationError, match="Unknown category"):
        transaction_service.update(txn.id, category_code="LOTTERY")


@pytest.mark.parametrize(
    "value, expected",
    [(None, 0.5), ("0.8", 0.8), (1.7, 1.0), (-3, 0.0), ("high", 0.5), (float("nan"), 0.5)],
)
def test_normalize_confidence(value, expected):
    assert normalize_confidence(value) == pytest.approx(expected)


def test_normalize_type():
    assert normalize_type(None) is TransactionType.DEBIT
    assert normalize_type(" credit ") is TransactionType.CREDIT
    with pytest.raises(ValueError):
        normalize_type("TRANSFER")


def test_insert_batch_rejects_out_of_range_amounts(transaction_service, sample_account):
    """Test exponent and oversized amounts become unposted rows instead of corrupt values."""
    transactions, errors = transaction_service.insert_batch(
        [
            {"date": "2025-01-05", "amount": "1e400", "type": "DEBIT"},
            {"date": "2025-01-05", "amount": "12345678901234567.89", "type": "DEBIT"},
            {"date": "2025-01-05", "amount": 1e20, "type": "CREDIT"},
            {"date": "2025-01-05", "amount": Decimal("1E+400"), "type": "CREDIT"},
        ],
        upload_id=None,
        account_id=sample_account.id,
    )

    assert len(transactions) == 4
    for txn in transactions:
        assert txn.amount is None
        assert txn.post_error
    assert [e.split(":")[0] for e in errors] == ["Row 1", "Row 2", "Row 3", "Row 4"]


def test_insert_batch_rounds_to_cents_half_even(transaction_service, sample_account):
    transactions, errors = transaction_service.insert_batch(
        [
            {"date": "2025-01-05", "amount": "10.005", "type": "DEBIT"},
            {"date": "2025-01-05", "amount": "10.015", "type": "DEBIT"},
            {"date": "2025-01-05", "amount": "1.234,567", "type": "DEBIT"},
        ],
        upload_id=None,
        account_id=sample_account.id,
    )

    assert errors == []
    assert [t.amount for t in transactions] == [Decimal("10.00"), Decimal("10.02"), Decimal("1234.57")]
    assert all(t.post_error is None for t in transactions)
