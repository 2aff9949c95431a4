"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Optional, Any
from datetime import date, datetime
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from smartledger.domain.entities import (
    Account,
    Upload,
    Transaction,
    LedgerEntry,
    UploadStatus,
)


class Database(ABC):
    """Abstract database interface for smartledger.

    Every method is a single unit of work: it either commits all of its
    writes or rolls back and re-raises.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    @abstractmethod
    def refresh(self) -> None:
        """Discard cached rows so the next reads see the latest committed state."""
        pass

    # Account operations
    @abstractmethod
    def create_account(
        self,
        account_name: str,
        account_number: Optional[str] = None,
        account_type: str = "checking",
        currency: str = "EUR",
        opening_balance: Decimal = Decimal("0"),
    ) -> int:
        """Create a new account with current balance equal to opening balance.

        Returns account ID. Raises ConflictError if account_number is taken.
        """
        pass

    @abstractmethod
    def get_account(self, account_id: int) -> Optional[Account]:
        """Get account by ID."""
        pass

    @abstractmethod
    def get_account_by_number(self, account_number: str) -> Optional[Account]:
        """Get account by external account number, active or not."""
        pass

    @abstractmethod
    def list_accounts(self, include_inactive: bool = False) -> list[Account]:
        """List accounts, newest first."""
        pass

    @abstractmethod
    def update_account(
        self,
        account_id: int,
        account_name: Optional[str] = None,
        account_type: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> None:
        """Update the mutable account fields that are not None."""
        pass

    @abstractmethod
    def set_account_balance(self, account_id: int, balance: Decimal) -> None:
        """Persist the account's current balance."""
        pass

    # Upload operations
    @abstractmethod
    def create_upload(
        self,
        file_name: Optional[str] = None,
        file_type: Optional[str] = None,
        account_id: Optional[int] = None,
    ) -> int:
        """Create an upload in processing state. Returns upload ID."""
        pass

    @abstractmethod
    def get_upload(self, upload_id: int) -> Optional[Upload]:
        """Get upload by ID."""
        pass

    @abstractmethod
    def list_uploads(self) -> list[Upload]:
        """List uploads, newest first."""
        pass

    @abstractmethod
    def update_upload(
        self,
        upload_id: int,
        status: Optional[UploadStatus] = None,
        transaction_count: Optional[int] = None,
        error_message: Optional[str] = None,
        account_id: Optional[int] = None,
    ) -> None:
        """Update the upload fields that are not None."""
        pass

    # Transaction operations
    @abstractmethod
    def insert_transactions(self, rows: list[dict[str, Any]]) -> list[Transaction]:
        """Insert a batch of normalized transaction rows atomically.

        Returns the stored transactions in input order.
        """
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        category_code: Optional[str] = None,
        txn_type: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        search: Optional[str] = None,
        account_id: Optional[int] = None,
        upload_id: Optional[int] = None,
        posted: Optional[bool] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[Transaction]:
        """List transactions with optional filters, newest date first.

        Args:
            search: Case-insensitive substring of description or counterparty
            posted: True for transactions with a ledger entry, False for those without
        """
        pass

    @abstractmethod
    def update_transaction(
        self,
        transaction_id: int,
        category_code: Optional[str] = None,
        notes: Optional[str] = None,
        is_manual: Optional[bool] = None,
    ) -> None:
        """Update the user-editable transaction fields that are not None."""
        pass

    @abstractmethod
    def set_transaction_post_error(self, transaction_id: int, post_error: Optional[str]) -> None:
        """Record (or clear) why a transaction could not be posted."""
        pass

    # Ledger operations
    @abstractmethod
    def insert_ledger_entry(
        self,
        account_id: int,
        transaction_id: int,
        entry_date: date,
        entry_type: str,
        amount: Decimal,
        running_balance: Decimal,
        description: str,
        notes: Optional[str] = None,
        running_balance_updates: Optional[dict[int, Decimal]] = None,
    ) -> LedgerEntry:
        """Insert a ledger entry and link it to its transaction atomically.

        Args:
            running_balance_updates: New running balances for existing entries
                (entry ID -> balance), applied in the same unit of work
        """
        pass

    @abstractmethod
    def get_ledger_entry(self, entry_id: int) -> Optional[LedgerEntry]:
        """Get ledger entry by ID."""
        pass

    @abstractmethod
    def get_last_ledger_entry(
        self, account_id: int, on_or_before: Optional[date] = None
    ) -> Optional[LedgerEntry]:
        """Get the latest entry in ledger order, optionally dated on or before a date."""
        pass

    @abstractmethod
    def list_ledger_entries(
        self,
        account_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        after_date: Optional[date] = None,
    ) -> list[LedgerEntry]:
        """List an account's entries in ledger order (entry_date, created_at, id).

        Args:
            after_date: Only entries dated strictly after this date
        """
        pass

    @abstractmethod
    def mark_ledger_entry_reconciled(self, entry_id: int, reconciliation_date: datetime) -> None:
        """Mark an entry and its transaction reconciled."""
        pass
