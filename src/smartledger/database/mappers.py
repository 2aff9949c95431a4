"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic: enums, Decimal normalization and
nullable flags are resolved here so the domain never sees ORM rows.
"""

from decimal import Decimal
from typing import Optional

from smartledger.domain import entities as domain
from smartledger.database.models import (
    Account as ORMAccount,
    Upload as ORMUpload,
    Transaction as ORMTransaction,
    LedgerEntry as ORMLedgerEntry,
)


def _money(value) -> Decimal:
    return Decimal(value if value is not None else 0)


def _optional_money(value) -> Optional[Decimal]:
    return None if value is None else Decimal(value)


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        id=orm_account.id,
        account_number=orm_account.account_number,
        account_name=orm_account.account_name,
        account_type=orm_account.account_type,
        currency=orm_account.currency,
        opening_balance=_money(orm_account.opening_balance),
        current_balance=_money(orm_account.current_balance),
        is_active=bool(orm_account.is_active),
        created_at=orm_account.created_at,
        updated_at=orm_account.updated_at,
    )


def upload_to_domain(orm_upload: ORMUpload) -> domain.Upload:
    """Convert SQLAlchemy Upload model to domain Upload entity."""
    return domain.Upload(
        id=orm_upload.id,
        file_name=orm_upload.file_name,
        file_type=orm_upload.file_type,
        status=domain.UploadStatus(orm_upload.status),
        transaction_count=orm_upload.transaction_count or 0,
        error_message=orm_upload.error_message,
        account_id=orm_upload.account_id,
        created_at=orm_upload.created_at,
        updated_at=orm_upload.updated_at,
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    txn_type = orm_transaction.type
    return domain.Transaction(
        id=orm_transaction.id,
        upload_id=orm_transaction.upload_id,
        account_id=orm_transaction.account_id,
        date=orm_transaction.date,
        description=orm_transaction.description or "",
        amount=_optional_money(orm_transaction.amount),
        type=domain.TransactionType(txn_type) if txn_type is not None else None,
        category_code=orm_transaction.category_code,
        confidence=orm_transaction.confidence,
        counterparty=orm_transaction.counterparty,
        reasoning=orm_transaction.reasoning,
        notes=orm_transaction.notes,
        source_id=orm_transaction.source_id,
        is_manual=bool(orm_transaction.is_manual),
        reconciled=bool(orm_transaction.reconciled),
        ledger_entry_id=orm_transaction.ledger_entry_id,
        post_error=orm_transaction.post_error,
        created_at=orm_transaction.created_at,
        updated_at=orm_transaction.updated_at,
    )


def ledger_entry_to_domain(orm_entry: ORMLedgerEntry) -> domain.LedgerEntry:
    """Convert SQLAlchemy LedgerEntry model to domain LedgerEntry entity."""
    return domain.LedgerEntry(
        id=orm_entry.id,
        account_id=orm_entry.account_id,
        transaction_id=orm_entry.transaction_id,
        entry_date=orm_entry.entry_date,
        entry_type=domain.TransactionType(orm_entry.entry_type),
        amount=_money(orm_entry.amount),
        running_balance=_money(orm_entry.running_balance),
        description=orm_entry.description or "",
        notes=orm_entry.notes,
        reconciled=bool(orm_entry.reconciled),
        reconciliation_date=orm_entry.reconciliation_date,
        created_at=orm_entry.created_at,
    )
