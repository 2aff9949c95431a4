"""Tests for domain entities and the category catalog."""

import pytest
from dataclasses import FrozenInstanceError
from datetime import datetime, UTC
from decimal import Decimal

from smartledger.domain.categories import (
    CATEGORIES,
    UNCATEGORIZED_IN,
    UNCATEGORIZED_OUT,
    get_category,
    normalize_category_code,
)
from smartledger.domain.entities import Account, IngestionResult, TransactionType


class TestTransactionType:
    """Tests for TransactionType sign handling."""

    def test_signed(self):
        assert TransactionType.CREDIT.signed(Decimal("100")) == Decimal("100")
        assert TransactionType.DEBIT.signed(Decimal("40")) == Decimal("-40")

    def test_signed_ignores_input_sign(self):
        """Test a negative magnitude is not negated twice."""
        assert TransactionType.DEBIT.signed(Decimal("-40")) == Decimal("-40")
        assert TransactionType.CREDIT.signed(Decimal("-5")) == Decimal("5")


class TestAccount:
    """Tests for Account entity."""

    def test_account_immutability(self):
        now = datetime.now(UTC)
        account = Account(
            id=1,
            account_number=None,
            account_name="Main",
            account_type="checking",
            currency="EUR",
            opening_balance=Decimal("0"),
            current_balance=Decimal("0"),
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        with pytest.raises(FrozenInstanceError):
            account.current_balance = Decimal("5")


def test_ingestion_result_unposted_count():
    result = IngestionResult(upload_id=1, account_id=2, transaction_count=5, posted_count=3)

    assert result.unposted_count == 2
    assert result.errors == []


class TestCategories:
    """Tests for the category catalog."""

    def test_codes_are_unique(self):
        codes = [c.code for c in CATEGORIES]
        assert len(codes) == len(set(codes))

    def test_sentinels_are_typed(self):
        assert get_category(UNCATEGORIZED_IN).type is TransactionType.CREDIT
        assert get_category(UNCATEGORIZED_OUT).type is TransactionType.DEBIT

    @pytest.mark.parametrize(
        "code, txn_type, expected",
        [
            ("RENT", TransactionType.DEBIT, "RENT"),
            (" payroll ", TransactionType.DEBIT, "PAYROLL"),
            ("MYSTERY", TransactionType.CREDIT, UNCATEGORIZED_IN),
            (None, TransactionType.DEBIT, UNCATEGORIZED_OUT),
            (42, None, UNCATEGORIZED_OUT),
        ],
    )
    def test_normalize_category_code(self, code, txn_type, expected):
        assert normalize_category_code(code, txn_type) == expected
