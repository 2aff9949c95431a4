"""Account domain service."""

from decimal import Decimal
from typing import Optional
from smartledger.database.base import Database
from smartledger.domain.entities import Account as AccountEntity, AccountBalance, AccountInfo
from smartledger.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    account_inactive,
    account_not_found,
)
from smartledger.logging_config import get_logger
from smartledger.utils.amount_parser import to_money

logger = get_logger(__name__)

DEFAULT_ACCOUNT_NUMBER = "__default__"
DEFAULT_ACCOUNT_NAME = "Default Account"
DEFAULT_ACCOUNT_TYPE = "checking"
DEFAULT_CURRENCY = "EUR"


class AccountService:
    """Service for managing accounts (the account registry)."""

    def __init__(self, db: Database):
        """Initialize account service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_account(
        self,
        account_name: str,
        account_number: Optional[str] = None,
        account_type: str = DEFAULT_ACCOUNT_TYPE,
        currency: str = DEFAULT_CURRENCY,
        opening_balance: Decimal = Decimal("0"),
    ) -> int:
        """Create a new account.

        Args:
            account_name: Display name
            account_number: External account number, unique when present
            account_type: Account type (checking, savings, ...)
            currency: ISO currency code
            opening_balance: Balance before the first ledger entry

        Returns:
            Account ID

        Raises:
            ValidationError: If the name is empty, the number is reserved or the
                opening balance does not fit in a money column
            ConflictError: If the account number already exists
        """
        if not account_name or not account_name.strip():
            raise ValidationError("Account name must not be empty")
        if account_number == DEFAULT_ACCOUNT_NUMBER:
            raise ValidationError(f"Account number '{DEFAULT_ACCOUNT_NUMBER}' is reserved")
        try:
            opening_balance = to_money(Decimal(opening_balance))
        except ValueError as e:
            raise ValidationError(f"Invalid opening balance: {e}") from e

        account_id = self.db.create_account(
            account_name=account_name.strip(),
            account_number=account_number or None,
            account_type=account_type,
            currency=currency,
            opening_balance=opening_balance,
        )
        logger.info("account_created", account_id=account_id, account_number=account_number)
        return account_id

    def get_account(self, account_id: int) -> AccountEntity:
        """Get account by ID.

        Raises:
            NotFoundError: If the account does not exist
        """
        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))
        return account

    def find_by_number(self, account_number: str) -> Optional[AccountEntity]:
        return self.db.get_account_by_number(account_number)

    def list_accounts(self, include_inactive: bool = False) -> list[AccountEntity]:
        """List accounts, newest first."""
        return self.db.list_accounts(include_inactive=include_inactive)

    def update_account(
        self,
        account_id: int,
        account_name: Optional[str] = None,
        account_type: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> AccountEntity:
        """Update the mutable account fields.

        Only name, type and the active flag can change; number, currency and
        balances are fixed or owned by the ledger.

        Raises:
            NotFoundError: If the account does not exist
            ValidationError: If the new name is empty
        """
        self.get_account(account_id)
        if account_name is not None and not account_name.strip():
            raise ValidationError("Account name must not be empty")

        self.db.update_account(
            account_id,
            account_name=account_name.strip() if account_name is not None else None,
            account_type=account_type,
            is_active=is_active,
        )
        return self.get_account(account_id)

    def get_balance(self, account_id: int) -> AccountBalance:
        """Get current, opening and net change for an account."""
        account = self.get_account(account_id)
        return AccountBalance(
            account_id=account.id,
            current=account.current_balance,
            opening=account.opening_balance,
            net_change=account.current_balance - account.opening_balance,
        )

    def resolve_or_create_account(self, account_info: Optional[AccountInfo]) -> int:
        """Resolve statement account metadata to an account ID.

        A known account number returns the existing account. Unknown numbers,
        or metadata without a number, create a new account. Missing metadata
        falls back to the default account.

        Raises:
            ConflictError: If the number belongs to a deactivated account
        """
        if account_info is None:
            return self.get_default_account_id()

        number = account_info.account_number
        if number:
            existing = self.db.get_account_by_number(number)
            if existing is not None:
                return self._require_active(existing)

        name = account_info.account_name or (f"Account {number}" if number else "Imported Account")
        try:
            account_id = self.db.create_account(
                account_name=name,
                account_number=number or None,
                account_type=account_info.account_type or DEFAULT_ACCOUNT_TYPE,
                currency=account_info.currency or DEFAULT_CURRENCY,
                opening_balance=account_info.opening_balance or Decimal("0"),
            )
        except ConflictError:
            # Another writer created the same number between lookup and insert
            existing = self.db.get_account_by_number(number) if number else None
            if existing is None:
                raise
            return self._require_active(existing)

        logger.info("account_created", account_id=account_id, account_number=number)
        return account_id

    def _require_active(self, account: AccountEntity) -> int:
        if not account.is_active:
            raise ConflictError(account_inactive(account.id))
        return account.id

    def get_default_account_id(self) -> int:
        """Return the default account ID, creating the account on first use."""
        existing = self.db.get_account_by_number(DEFAULT_ACCOUNT_NUMBER)
        if existing is not None:
            return existing.id
        try:
            return self.db.create_account(
                account_name=DEFAULT_ACCOUNT_NAME,
                account_number=DEFAULT_ACCOUNT_NUMBER,
            )
        except ConflictError:
            existing = self.db.get_account_by_number(DEFAULT_ACCOUNT_NUMBER)
            if existing is None:
                raise
            return existing.id
