"""Balance reconciliation domain service."""

from typing import Optional
from datetime import date, datetime, UTC
from decimal import Decimal
from smartledger.database.base import Database
from smartledger.domain.entities import AccountSummary, LedgerEntry as LedgerEntryEntity, TransactionType
from smartledger.domain.errors import (
    NotFoundError,
    ValidationError,
    account_not_found,
    ledger_entry_not_found,
)
from smartledger.domain.ledger import AccountLocks, get_account_locks, store_balance
from smartledger.logging_config import get_logger

logger = get_logger(__name__)


class ReconciliationService:
    """Service for recomputing balances and reconciling ledger entries."""

    def __init__(self, db: Database, locks: Optional[AccountLocks] = None):
        """Initialize reconciliation service.

        Args:
            db: Database instance
            locks: Per-account locks; defaults to the set shared for this database
        """
        self.db = db
        self.locks = locks or get_account_locks(db)

    def recompute_balance(self, account_id: int) -> Decimal:
        """Recalculate an account's current balance from its ledger entries.

        Safe to repeat: it always converges to opening balance plus the
        signed sum of the entries.

        Raises:
            NotFoundError: If the account does not exist
        """
        with self.locks.hold(account_id):
            self.db.refresh()
            account = self.db.get_account(account_id)
            if account is None:
                raise NotFoundError(account_not_found(account_id))
            balance = store_balance(self.db, account)
        logger.info("balance_recomputed", account_id=account_id, current_balance=str(balance))
        return balance

    def reconcile_entry(
        self, entry_id: int, reconciliation_date: Optional[datetime] = None
    ) -> LedgerEntryEntity:
        """Mark a ledger entry as reconciled.

        Reconciling an already reconciled entry changes nothing and keeps
        the original reconciliation date.

        Args:
            entry_id: Ledger entry ID
            reconciliation_date: When the entry was confirmed; defaults to now

        Returns:
            The ledger entry after reconciliation

        Raises:
            NotFoundError: If the entry does not exist
        """
        entry = self.db.get_ledger_entry(entry_id)
        if entry is None:
            raise NotFoundError(ledger_entry_not_found(entry_id))
        if entry.reconciled:
            return entry

        if reconciliation_date is None:
            reconciliation_date = datetime.now(UTC)
        elif not isinstance(reconciliation_date, datetime):
            reconciliation_date = datetime.combine(reconciliation_date, datetime.min.time())
        self.db.mark_ledger_entry_reconciled(entry_id, reconciliation_date)
        logger.info("ledger_entry_reconciled", entry_id=entry_id, account_id=entry.account_id)
        return self.db.get_ledger_entry(entry_id)

    def get_account_summary(
        self,
        account_id: int,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> AccountSummary:
        """Aggregate an account's ledger entries, optionally date-bounded.

        Raises:
            NotFoundError: If the account does not exist
            ValidationError: If date_from is after date_to
        """
        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))
        if date_from is not None and date_to is not None and date_from > date_to:
            raise ValidationError("Start date must be on or before end date")

        entries = self.db.list_ledger_entries(account_id, start_date=date_from, end_date=date_to)
        total_credits = sum(
            (e.amount for e in entries if e.entry_type is TransactionType.CREDIT), Decimal("0")
        )
        total_debits = sum(
            (e.amount for e in entries if e.entry_type is TransactionType.DEBIT), Decimal("0")
        )

        last = self.db.get_last_ledger_entry(account_id, on_or_before=date_to)
        final_balance = last.running_balance if last else account.opening_balance

        return AccountSummary(
            account_id=account_id,
            total_credits=total_credits,
            total_debits=total_debits,
            net_flow=total_credits - total_debits,
            total_entries=len(entries),
            reconciled_entries=sum(1 for e in entries if e.reconciled),
            final_balance=final_balance,
        )

    def verify_running_balances(self, account_id: int) -> list[int]:
        """Return IDs of entries whose stored running balance is wrong."""
        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))

        mismatched = []
        balance = account.opening_balance
        for entry in self.db.list_ledger_entries(account_id):
            balance += entry.signed_amount
            if entry.running_balance != balance:
                mismatched.append(entry.id)
        if mismatched:
            logger.warning("running_balance_mismatch", account_id=account_id, entries=mismatched)
        return mismatched
