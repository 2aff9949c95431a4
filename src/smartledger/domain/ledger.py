"""Ledger posting service.

Turns transactions into signed ledger entries with running balances. For any
account, entries ordered by (entry_date, created_at, id) form a prefix sum
seeded at the account's opening balance, and the account's current balance
equals that sum.
"""

import threading
import weakref
from contextlib import contextmanager
from datetime import date
from decimal import Decimal
from typing import Iterator, Optional

from smartledger.database.base import Database
from smartledger.domain.entities import (
    Account as AccountEntity,
    LedgerEntry as LedgerEntryEntity,
    Transaction as TransactionEntity,
)
from smartledger.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    account_inactive,
    account_not_found,
    already_posted,
    transaction_not_found,
)
from smartledger.logging_config import get_logger

logger = get_logger(__name__)

MAX_DESCRIPTION_LENGTH = 255


class AccountLocks:
    """One lock per account, so writes to the same account are serialized."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[int, threading.Lock] = {}

    def get(self, account_id: int) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(account_id)
            if lock is None:
                lock = self._locks[account_id] = threading.Lock()
            return lock

    @contextmanager
    def hold(self, account_id: int) -> Iterator[None]:
        """Hold the account's lock for the duration of the block."""
        with self.get(account_id):
            yield


_locks_by_database: "weakref.WeakKeyDictionary[Database, AccountLocks]" = weakref.WeakKeyDictionary()
_registry_guard = threading.Lock()


def get_account_locks(db: Database) -> AccountLocks:
    """Return the lock set shared by every service built on the same database."""
    with _registry_guard:
        locks = _locks_by_database.get(db)
        if locks is None:
            locks = _locks_by_database[db] = AccountLocks()
        return locks


def compute_balance(db: Database, account: AccountEntity) -> Decimal:
    """Sum the opening balance and every signed entry amount for an account."""
    balance = account.opening_balance
    for entry in db.list_ledger_entries(account.id):
        balance += entry.signed_amount
    return balance


def store_balance(db: Database, account: AccountEntity) -> Decimal:
    """Recompute and persist an account's current balance. Caller holds the lock."""
    balance = compute_balance(db, account)
    db.set_account_balance(account.id, balance)
    if balance != account.current_balance:
        logger.debug(
            "account_balance_updated",
            account_id=account.id,
            previous=str(account.current_balance),
            current=str(balance),
        )
    return balance


class LedgerService:
    """Service for posting transactions to the ledger."""

    def __init__(self, db: Database, locks: Optional[AccountLocks] = None):
        """Initialize ledger service.

        Args:
            db: Database instance
            locks: Per-account locks; defaults to the set shared for this database
        """
        self.db = db
        self.locks = locks or get_account_locks(db)

    def post(self, transaction: TransactionEntity) -> LedgerEntryEntity:
        """Post a transaction as a new ledger entry.

        Args:
            transaction: Stored transaction to post

        Returns:
            The created ledger entry

        Raises:
            ConflictError: If the transaction is already posted
            ValidationError: If the transaction cannot be posted (missing
                date/amount/type, earlier normalization error, inactive account)
            NotFoundError: If the transaction or its account does not exist
        """
        return self._post(transaction.id, transaction.account_id, retrying=False)

    def retry(self, transaction_id: int) -> LedgerEntryEntity:
        """Re-attempt posting a transaction whose earlier post failed."""
        txn = self.db.get_transaction(transaction_id)
        if txn is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        return self._post(txn.id, txn.account_id, retrying=True)

    def _post(self, transaction_id: int, account_id: int, retrying: bool) -> LedgerEntryEntity:
        with self.locks.hold(account_id):
            self.db.refresh()
            txn = self.db.get_transaction(transaction_id)
            if txn is None:
                raise NotFoundError(transaction_not_found(transaction_id))
            if txn.is_posted:
                raise ConflictError(already_posted(txn.id, txn.ledger_entry_id))

            missing = [
                name
                for name, value in (("date", txn.date), ("amount", txn.amount), ("type", txn.type))
                if value is None
            ]
            if missing:
                reason = txn.post_error or f"missing {', '.join(missing)}"
                raise ValidationError(f"Transaction {txn.id} cannot be posted: {reason}")
            if txn.post_error and not retrying:
                raise ValidationError(f"Transaction {txn.id} cannot be posted: {txn.post_error}")

            try:
                account, entry, resequenced = self._append(txn)
            except Exception as e:
                self._record_failure(txn.id, e)
                raise

            # The entry is committed; a stale current_balance is repaired by recompute
            try:
                current = str(store_balance(self.db, account))
            except Exception:
                logger.exception("account_balance_not_updated", account_id=account.id, entry_id=entry.id)
                current = None

            logger.info(
                "ledger_entry_created",
                entry_id=entry.id,
                transaction_id=txn.id,
                account_id=account.id,
                running_balance=str(entry.running_balance),
                current_balance=current,
                resequenced=resequenced,
            )
            return entry

    def _append(self, txn: TransactionEntity) -> tuple[AccountEntity, LedgerEntryEntity, int]:
        account = self.db.get_account(txn.account_id)
        if account is None:
            raise NotFoundError(account_not_found(txn.account_id))
        if not account.is_active:
            raise ValidationError(account_inactive(account.id))

        previous = self.db.get_last_ledger_entry(account.id, on_or_before=txn.date)
        previous_balance = previous.running_balance if previous else account.opening_balance
        amount = abs(txn.amount)
        running_balance = previous_balance + txn.type.signed(amount)

        # Entries dated after a back-dated post shift by its amount
        updates = {}
        balance = running_balance
        for later in self.db.list_ledger_entries(account.id, after_date=txn.date):
            balance += later.signed_amount
            if later.running_balance != balance:
                updates[later.id] = balance

        entry = self.db.insert_ledger_entry(
            account_id=account.id,
            transaction_id=txn.id,
            entry_date=txn.date,
            entry_type=txn.type.value,
            amount=amount,
            running_balance=running_balance,
            description=(txn.description or "")[:MAX_DESCRIPTION_LENGTH],
            notes=txn.reasoning,
            running_balance_updates=updates,
        )
        return account, entry, len(updates)

    def _record_failure(self, transaction_id: int, error: Exception) -> None:
        try:
            self.db.set_transaction_post_error(transaction_id, str(error) or type(error).__name__)
        except Exception:
            logger.exception("post_error_not_recorded", transaction_id=transaction_id)
        logger.warning("ledger_post_failed", transaction_id=transaction_id, error=str(error))

    def get_account_ledger(
        self,
        account_id: int,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> list[LedgerEntryEntity]:
        """List an account's ledger entries in ledger order.

        Raises:
            NotFoundError: If the account does not exist
            ValidationError: If date_from is after date_to
        """
        if self.db.get_account(account_id) is None:
            raise NotFoundError(account_not_found(account_id))
        if date_from is not None and date_to is not None and date_from > date_to:
            raise ValidationError("Start date must be on or before end date")
        return self.db.list_ledger_entries(account_id, start_date=date_from, end_date=date_to)
