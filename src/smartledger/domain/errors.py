"""Shared domain error messages and error types."""

from typing import Optional


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations or repeated transitions."""


class IngestionError(DomainError):
    """A fatal ingestion stage failed and the upload was marked failed."""

    def __init__(self, message: str, upload_id: Optional[int] = None):
        super().__init__(message)
        self.upload_id = upload_id


def account_not_found(account_id: int) -> str:
    """Return message for missing account."""
    return f"Account {account_id} not found"


def account_inactive(account_id: int) -> str:
    """Return message for an operation on a deactivated account."""
    return f"Account {account_id} is inactive"


def transaction_not_found(transaction_id: int) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def ledger_entry_not_found(entry_id: int) -> str:
    """Return message for missing ledger entry."""
    return f"Ledger entry {entry_id} not found"


def upload_not_found(upload_id: int) -> str:
    """Return message for missing upload."""
    return f"Upload {upload_id} not found"


def unknown_category(code: str) -> str:
    """Return message for a category code outside the catalog."""
    return f"Unknown category code '{code}'"


def already_posted(transaction_id: int, entry_id: int) -> str:
    """Return message when a transaction already has a ledger entry."""
    return f"Transaction {transaction_id} is already posted as ledger entry {entry_id}"


def upload_already_finished(upload_id: int, status: str) -> str:
    """Return message when an upload has already left the processing state."""
    return f"Upload {upload_id} is already {status}"
