"""Domain model entities for smartledger.

These are pure data classes representing ledger concepts, independent of
database schema. Services return them; the database layer builds them from
ORM rows through the mappers.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional


class TransactionType(str, Enum):
    """Direction of a cash movement. The sign lives here, never in the amount."""

    CREDIT = "CREDIT"
    DEBIT = "DEBIT"

    def signed(self, amount: Decimal) -> Decimal:
        """Return amount with the sign this type implies."""
        amount = abs(amount)
        return amount if self is TransactionType.CREDIT else -amount


class UploadStatus(str, Enum):
    """Processing state of an upload batch."""

    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class Account:
    """Bank account domain entity."""

    id: int
    account_number: Optional[str]
    account_name: str
    account_type: str
    currency: str
    opening_balance: Decimal
    current_balance: Decimal
    is_active: bool
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class AccountInfo:
    """Account metadata that accompanies an extracted statement."""

    account_number: Optional[str] = None
    account_name: Optional[str] = None
    account_type: Optional[str] = None
    currency: Optional[str] = None
    opening_balance: Optional[Decimal] = None

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> "AccountInfo":
        """Build from categorizer (camelCase) or API (snake_case) keys."""

        def pick(*keys: str) -> Any:
            for key in keys:
                value = data.get(key)
                if value not in (None, ""):
                    return value
            return None

        number = pick("accountNumber", "account_number")
        opening = pick("openingBalance", "opening_balance")
        try:
            opening_balance = Decimal(str(opening)) if opening is not None else None
        except InvalidOperation:
            raise ValueError(f"Invalid opening balance '{opening}'")
        return cls(
            account_number=str(number).strip() if number is not None else None,
            account_name=pick("accountName", "account_name", "name"),
            account_type=pick("accountType", "account_type"),
            currency=pick("currency"),
            opening_balance=opening_balance,
        )


@dataclass(frozen=True)
class Upload:
    """Ingestion batch domain entity."""

    id: int
    file_name: Optional[str]
    file_type: Optional[str]
    status: UploadStatus
    transaction_count: int
    error_message: Optional[str]
    account_id: Optional[int]
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class Transaction:
    """Categorized transaction domain entity.

    ``date``, ``amount`` and ``type`` are None only for rows that failed
    normalization; those rows carry a ``post_error`` and are never posted.
    """

    id: int
    upload_id: Optional[int]
    account_id: int
    date: Optional[date]
    description: str
    amount: Optional[Decimal]
    type: Optional[TransactionType]
    category_code: str
    confidence: float
    counterparty: Optional[str]
    reasoning: Optional[str]
    notes: Optional[str]
    source_id: Optional[str]
    is_manual: bool
    reconciled: bool
    ledger_entry_id: Optional[int]
    post_error: Optional[str]
    created_at: datetime
    updated_at: datetime

    @property
    def is_posted(self) -> bool:
        return self.ledger_entry_id is not None


@dataclass(frozen=True)
class LedgerEntry:
    """Immutable signed cash movement with a running balance snapshot."""

    id: int
    account_id: int
    transaction_id: int
    entry_date: date
    entry_type: TransactionType
    amount: Decimal
    running_balance: Decimal
    description: str
    notes: Optional[str]
    reconciled: bool
    reconciliation_date: Optional[datetime]
    created_at: datetime

    @property
    def signed_amount(self) -> Decimal:
        return self.entry_type.signed(self.amount)


@dataclass(frozen=True)
class AccountBalance:
    """Balance view of an account."""

    account_id: int
    current: Decimal
    opening: Decimal
    net_change: Decimal


@dataclass(frozen=True)
class AccountSummary:
    """Aggregation over an account's ledger entries, optionally date-bounded."""

    account_id: int
    total_credits: Decimal
    total_debits: Decimal
    net_flow: Decimal
    total_entries: int
    reconciled_entries: int
    final_balance: Decimal


@dataclass(frozen=True)
class Category:
    """Entry of the fixed category catalog."""

    code: str
    name: str
    type: TransactionType


@dataclass
class IngestionResult:
    """Outcome of one ingestion run."""

    upload_id: int
    account_id: int
    transaction_count: int = 0
    posted_count: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def unposted_count(self) -> int:
        return self.transaction_count - self.posted_count


@dataclass(frozen=True)
class ReportSummary:
    """Income and expense totals over stored transactions."""

    income: Decimal
    expenses: Decimal
    net_cash_flow: Decimal
    transaction_count: int


@dataclass(frozen=True)
class CategoryBreakdown:
    """Totals for one (category, type) group."""

    category_code: str
    type: TransactionType
    count: int
    total: Decimal
