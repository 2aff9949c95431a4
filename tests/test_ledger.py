"""Tests for ledger posting and running balances."""

import threading
from unittest.mock import patch
from datetime import date
from decimal import Decimal

import pytest

from smartledger.domain.errors import ConflictError, NotFoundError, ValidationError
from smartledger.domain.ledger import MAX_DESCRIPTION_LENGTH, AccountLocks, get_account_locks


def _signed_sum(entries):
    return sum((e.signed_amount for e in entries), Decimal("0"))


def test_alternating_credit_debit(ledger_service, account_service, sample_account, store):
    """Test CREDIT 100 / DEBIT 40 alternating yields 100, 60, 160, 120, ..."""
    rows = [
        {"date": "2025-01-05", "amount": 100 if i % 2 == 0 else 40, "type": "CREDIT" if i % 2 == 0 else "DEBIT"}
        for i in range(8)
    ]
    for txn in store(sample_account.id, *rows):
        ledger_service.post(txn)

    entries = ledger_service.get_account_ledger(sample_account.id)
    assert [e.running_balance for e in entries] == [
        Decimal(v) for v in ("100", "60", "160", "120", "220", "180", "280", "240")
    ]
    assert account_service.get_account(sample_account.id).current_balance == Decimal(60 * 8 // 2)


def test_end_to_end_example(ledger_service, account_service, sample_account, store):
    txns = store(
        sample_account.id,
        {"date": "2025-01-05", "amount": 100, "type": "CREDIT"},
        {"date": "2025-01-05", "amount": 40, "type": "DEBIT"},
    )
    first = ledger_service.post(txns[0])
    second = ledger_service.post(txns[1])

    assert first.running_balance == Decimal("100")
    assert second.running_balance == Decimal("60")
    assert account_service.get_account(sample_account.id).current_balance == Decimal("60")


def test_post_links_transaction(ledger_service, transaction_service, sample_account, store):
    (txn,) = store(
        sample_account.id,
        {"date": "2025-01-05", "amount": 25, "type": "DEBIT", "description": "Fee", "reasoning": "Bank charge"},
    )

    entry = ledger_service.post(txn)
    stored = transaction_service.get(txn.id)

    assert stored.ledger_entry_id == entry.id
    assert stored.is_posted
    assert entry.transaction_id == txn.id
    assert entry.amount == Decimal("25")
    assert entry.notes == "Bank charge"
    assert entry.description == "Fee"


def test_opening_balance_seeds_first_entry(ledger_service, account_service, funded_account, store):
    (txn,) = store(funded_account.id, {"date": "2025-01-05", "amount": 30, "type": "DEBIT"})

    entry = ledger_service.post(txn)

    assert entry.running_balance == Decimal("970.00")
    assert account_service.get_balance(funded_account.id).net_change == Decimal("-30")


def test_back_dated_post_resequences_later_entries(ledger_service, account_service, sample_account, store):
    """Test the prefix-sum invariant holds when a post lands before existing entries."""
    late, early = store(
        sample_account.id,
        {"date": "2025-01-10", "amount": 100, "type": "CREDIT"},
        {"date": "2025-01-03", "amount": 30, "type": "DEBIT"},
    )
    ledger_service.post(late)
    ledger_service.post(early)

    entries = ledger_service.get_account_ledger(sample_account.id)
    assert [e.entry_date for e in entries] == [date(2025, 1, 3), date(2025, 1, 10)]
    assert [e.running_balance for e in entries] == [Decimal("-30"), Decimal("70")]
    assert account_service.get_account(sample_account.id).current_balance == Decimal("70")


def test_same_date_entries_keep_insertion_order(ledger_service, sample_account, store):
    txns = store(
        sample_account.id,
        {"date": "2025-01-05", "amount": 1, "type": "CREDIT", "description": "a"},
        {"date": "2025-01-05", "amount": 2, "type": "CREDIT", "description": "b"},
        {"date": "2025-01-05", "amount": 3, "type": "CREDIT", "description": "c"},
    )
    for txn in txns:
        ledger_service.post(txn)

    entries = ledger_service.get_account_ledger(sample_account.id)
    assert [e.description for e in entries] == ["a", "b", "c"]
    assert [e.running_balance for e in entries] == [Decimal("1"), Decimal("3"), Decimal("6")]


def test_post_twice_conflicts(ledger_service, sample_account, store):
    (txn,) = store(sample_account.id, {"date": "2025-01-05", "amount": 10, "type": "DEBIT"})
    ledger_service.post(txn)

    with pytest.raises(ConflictError, match="already posted"):
        ledger_service.post(txn)
    assert len(ledger_service.get_account_ledger(sample_account.id)) == 1


def test_post_malformed_row_rejected(ledger_service, sample_account, store):
    (txn,) = store(sample_account.id, {"date": "??", "amount": 10, "type": "DEBIT"})

    with pytest.raises(ValidationError, match="cannot be posted"):
        ledger_service.post(txn)
    assert ledger_service.get_account_ledger(sample_account.id) == []


def test_failed_post_leaves_no_entry(
    ledger_service, account_service, transaction_service, sample_account, store
):
    """Test a post to an inactive account writes nothing and records the reason."""
    (ok,) = store(sample_account.id, {"date": "2025-01-04", "amount": 50, "type": "CREDIT"})
    ledger_service.post(ok)
    (txn,) = store(sample_account.id, {"date": "2025-01-05", "amount": 10, "type": "DEBIT"})
    account_service.update_account(sample_account.id, is_active=False)

    with pytest.raises(ValidationError, match="inactive"):
        ledger_service.post(txn)

    stored = transaction_service.get(txn.id)
    assert stored.ledger_entry_id is None
    assert "inactive" in stored.post_error
    assert len(ledger_service.get_account_ledger(sample_account.id)) == 1
    assert account_service.get_account(sample_account.id).current_balance == Decimal("50")


def test_retry_after_failure(ledger_service, account_service, transaction_service, sample_account, store):
    (txn,) = store(sample_account.id, {"date": "2025-01-05", "amount": 10, "type": "DEBIT"})
    account_service.update_account(sample_account.id, is_active=False)
    with pytest.raises(ValidationError):
        ledger_service.post(txn)

    # A plain post refuses while the earlier failure is on record
    account_service.update_account(sample_account.id, is_active=True)
    with pytest.raises(ValidationError):
        ledger_service.post(transaction_service.get(txn.id))

    entry = ledger_service.retry(txn.id)

    assert entry.running_balance == Decimal("-10")
    assert transaction_service.get(txn.id).post_error is None


def test_retry_unknown_transaction(ledger_service):
    with pytest.raises(NotFoundError):
        ledger_service.retry(404)


def test_description_truncated(ledger_service, transaction_service, sample_account, store):
    (txn,) = store(sample_account.id, {"date": "2025-01-05", "amount": 1, "type": "DEBIT", "description": "x" * 400})

    entry = ledger_service.post(txn)

    assert len(entry.description) == MAX_DESCRIPTION_LENGTH
    assert len(transaction_service.get(txn.id).description) == 400


def test_get_account_ledger_date_bounds(ledger_service, sample_account, store):
    for txn in store(
        sample_account.id,
        {"date": "2025-01-01", "amount": 1, "type": "CREDIT"},
        {"date": "2025-02-01", "amount": 2, "type": "CREDIT"},
        {"date": "2025-03-01", "amount": 3, "type": "CREDIT"},
    ):
        ledger_service.post(txn)

    entries = ledger_service.get_account_ledger(
        sample_account.id, date_from=date(2025, 1, 15), date_to=date(2025, 2, 15)
    )

    assert [e.amount for e in entries] == [Decimal("2")]
    with pytest.raises(NotFoundError):
        ledger_service.get_account_ledger(999)


def test_account_locks_are_per_account():
    locks = AccountLocks()

    assert locks.get(1) is locks.get(1)
    assert locks.get(1) is not locks.get(2)


def test_services_share_locks_per_database(temp_db, ledger_service, reconciliation_service):
    assert ledger_service.locks is reconciliation_service.locks
    assert get_account_locks(temp_db) is ledger_service.locks


def test_concurrent_posts_to_same_account(temp_db, ledger_service, account_service, sample_account, store):
    """Test concurrent posts to one account serialize into a consistent ledger."""
    txns = store(
        sample_account.id,
        *[
            {"date": f"2025-01-{(i % 5) + 1:02d}", "amount": 10 + i, "type": "CREDIT" if i % 3 else "DEBIT"}
            for i in range(12)
        ],
    )
    errors = []

    def worker(chunk):
        try:
            for txn in chunk:
                ledger_service.post(txn)
        except Exception as e:  # pragma: no cover - reported below
            errors.append(e)
        finally:
            temp_db.disconnect()

    threads = [threading.Thread(target=worker, args=(txns[i::3],)) for i in range(3)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    temp_db.refresh()
    entries = ledger_service.get_account_ledger(sample_account.id)
    assert len(entries) == 12

    balance = Decimal("0")
    for entry in entries:
        balance += entry.signed_amount
        assert entry.running_balance == balance
    assert account_service.get_account(sample_account.id).current_balance == _signed_sum(entries)


def test_balance_write_failure_keeps_entry_posted(
    temp_db, ledger_service, transaction_service, reconciliation_service, account_service, sample_account, store
):
    """Test a failed current_balance write after commit neither fails the post nor blocks it."""
    (txn,) = store(sample_account.id, {"date": "2025-01-05", "amount": 25, "type": "CREDIT"})

    with patch.object(temp_db, "set_account_balance", side_effect=RuntimeError("disk I/O error")):
        entry = ledger_service.post(txn)

    stored = transaction_service.get(txn.id)
    assert stored.ledger_entry_id == entry.id
    assert stored.post_error is None
    assert account_service.get_account(sample_account.id).current_balance == Decimal("0")

    with pytest.raises(ConflictError):
        ledger_service.retry(txn.id)
    assert reconciliation_service.recompute_balance(sample_account.id) == Decimal("25")
