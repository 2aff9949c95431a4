"""Utility for resolving account arguments to IDs."""

from __future__ import annotations

from typing import TYPE_CHECKING

from smartledger.domain.errors import NotFoundError

if TYPE_CHECKING:
    from smartledger.domain.account import AccountService


def resolve_account(account_service: AccountService, account: str | int) -> int:
    """Resolve an account ID, account number or account name to an account ID.

    Args:
        account_service: AccountService instance
        account: Account ID (int or numeric string), account number, or name

    Returns:
        Account ID

    Raises:
        NotFoundError: If no account matches
    """
    # If it's already an integer, use it as ID
    if isinstance(account, int):
        return account_service.get_account(account).id

    value = str(account).strip()
    if value.isdigit():
        try:
            return account_service.get_account(int(value)).id
        except NotFoundError:
            # Numeric account numbers are common, so fall through
            pass

    by_number = account_service.find_by_number(value)
    if by_number is not None:
        return by_number.id

    for acc in account_service.list_accounts(include_inactive=True):
        if acc.account_name == value:
            return acc.id

    raise NotFoundError(f"Account '{account}' not found")
