"""Transaction domain service."""

from typing import Any, Optional
from datetime import date
from smartledger.database.base import Database
from smartledger.domain.categories import is_known_category, normalize_category_code
from smartledger.domain.entities import Transaction as TransactionEntity, TransactionType
from smartledger.domain.errors import (
    NotFoundError,
    ValidationError,
    transaction_not_found,
    unknown_category,
)
from smartledger.logging_config import get_logger
from smartledger.utils.amount_parser import parse_amount, to_money
from smartledger.utils.date_parser import parse_date

logger = get_logger(__name__)

DEFAULT_CONFIDENCE = 0.5


def normalize_type(value: Any) -> TransactionType:
    """Normalize a CREDIT/DEBIT marker. Missing values default to DEBIT.

    Raises:
        ValueError: If the value is present but not a known type
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return TransactionType.DEBIT
    if isinstance(value, TransactionType):
        return value
    try:
        return TransactionType(str(value).strip().upper())
    except ValueError:
        raise ValueError(f"Unknown transaction type '{value}'")


def normalize_confidence(value: Any) -> float:
    """Clamp confidence to [0, 1]; missing or non-numeric becomes 0.5."""
    if value is None or isinstance(value, bool):
        return DEFAULT_CONFIDENCE
    try:
        confidence = float(value)
    except (TypeError, ValueError):
        return DEFAULT_CONFIDENCE
    if confidence != confidence:  # NaN
        return DEFAULT_CONFIDENCE
    return min(max(confidence, 0.0), 1.0)


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value)
    return text if text.strip() else None


def normalize_row(raw: dict[str, Any]) -> tuple[dict[str, Any], list[str]]:
    """Normalize one untrusted candidate into storable column values.

    Unparsable date, amount or type do not reject the row: the field is
    stored as None and the reasons are returned, so the row stays visible
    but is never posted.

    Returns:
        Tuple of (column values, list of problems)
    """
    problems = []

    txn_date = None
    try:
        txn_date = parse_date(raw.get("date"))
    except ValueError as e:
        problems.append(str(e))

    amount = None
    try:
        parsed = abs(parse_amount(raw.get("amount")))
        amount = to_money(parsed)
        if amount != parsed:
            logger.warning("transaction_amount_rounded", raw=str(parsed), stored=str(amount))
    except ValueError as e:
        problems.append(str(e))

    txn_type = None
    try:
        txn_type = normalize_type(raw.get("type"))
    except ValueError as e:
        problems.append(str(e))

    source_id = raw.get("id")
    values = {
        "date": txn_date,
        "description": "" if raw.get("description") is None else str(raw["description"]),
        "amount": amount,
        "type": txn_type.value if txn_type is not None else None,
        "category_code": normalize_category_code(
            raw.get("categoryCode", raw.get("category_code")), txn_type
        ),
        "confidence": normalize_confidence(raw.get("confidence")),
        "counterparty": _optional_text(raw.get("counterparty")),
        "reasoning": _optional_text(raw.get("reasoning")),
        "notes": _optional_text(raw.get("notes")),
        "source_id": str(source_id) if source_id is not None else None,
        "post_error": "; ".join(problems) if problems else None,
    }
    return values, problems


class TransactionService:
    """Service for storing and querying categorized transactions."""

    def __init__(self, db: Database):
        """Initialize transaction service.

        Args:
            db: Database instance
        """
        self.db = db

    def insert_batch(
        self,
        raw_transactions: list[dict[str, Any]],
        upload_id: Optional[int],
        account_id: int,
        is_manual: bool = False,
    ) -> tuple[list[TransactionEntity], list[str]]:
        """Normalize and insert a batch of transactions in one unit of work.

        Every input row is stored, in input order. Rows with unparsable
        fields carry a post_error and are reported as row-level errors.

        Args:
            raw_transactions: Candidate dicts from the categorizer or a user
            upload_id: Upload batch the rows belong to, None for manual entry
            account_id: Account the rows belong to
            is_manual: Whether the rows were entered by hand

        Returns:
            Tuple of (stored transactions, row-level error messages)
        """
        rows = []
        errors = []
        for index, raw in enumerate(raw_transactions, start=1):
            if not isinstance(raw, dict):
                raise ValidationError(f"Row {index}: expected an object, got {type(raw).__name__}")
            values, problems = normalize_row(raw)
            if problems:
                errors.append(f"Row {index}: {'; '.join(problems)}")
                logger.warning("transaction_row_invalid", row=index, problems=problems)
            values.update(upload_id=upload_id, account_id=account_id, is_manual=is_manual)
            rows.append(values)

        if not rows:
            return [], errors

        transactions = self.db.insert_transactions(rows)
        logger.info(
            "transactions_inserted",
            count=len(transactions),
            upload_id=upload_id,
            account_id=account_id,
            invalid=len(errors),
        )
        return transactions, errors

    def get(self, transaction_id: int) -> TransactionEntity:
        """Get transaction by ID.

        Raises:
            NotFoundError: If the transaction does not exist
        """
        txn = self.db.get_transaction(transaction_id)
        if txn is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        return txn

    def query(
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
    ) -> list[TransactionEntity]:
        """List transactions with filters, newest first.

        Args:
            category_code: Optional catalog code filter
            txn_type: Optional CREDIT/DEBIT filter
            start_date: Optional start date filter (inclusive)
            end_date: Optional end date filter (inclusive)
            search: Optional substring over description and counterparty
            account_id: Optional account filter
            upload_id: Optional upload batch filter
            posted: True for posted only, False for unposted only
            limit: Optional page size
            offset: Rows to skip

        Returns:
            List of transaction entities

        Raises:
            ValidationError: If the type filter or pagination is invalid
        """
        if txn_type is not None:
            try:
                txn_type = TransactionType(txn_type.upper()).value
            except ValueError:
                raise ValidationError(f"Unknown transaction type '{txn_type}'")
        if limit is not None and limit < 0:
            raise ValidationError("Limit must not be negative")
        if offset < 0:
            raise ValidationError("Offset must not be negative")

        return self.db.list_transactions(
            category_code=category_code.upper() if category_code else None,
            txn_type=txn_type,
            start_date=start_date,
            end_date=end_date,
            search=search,
            account_id=account_id,
            upload_id=upload_id,
            posted=posted,
            limit=limit,
            offset=offset,
        )

    def update(
        self,
        transaction_id: int,
        category_code: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> TransactionEntity:
        """Apply a manual correction and mark the transaction as manual.

        Amount, date and type never change here; the ledger depends on them.

        Raises:
            NotFoundError: If the transaction does not exist
            ValidationError: If the category code is not in the catalog
        """
        self.get(transaction_id)

        if category_code is not None:
            category_code = category_code.strip().upper()
            if not is_known_category(category_code):
                raise ValidationError(unknown_category(category_code))

        self.db.update_transaction(
            transaction_id,
            category_code=category_code,
            notes=notes,
            is_manual=True,
        )
        logger.info("transaction_updated", transaction_id=transaction_id, category_code=category_code)
        return self.get(transaction_id)
