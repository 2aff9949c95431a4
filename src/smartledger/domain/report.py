"""Reporting domain service (read-only aggregation over stored transactions)."""

from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from smartledger.database.base import Database
from smartledger.domain.entities import (
    CategoryBreakdown,
    ReportSummary,
    Transaction,
    TransactionType,
)
from smartledger.domain.errors import ValidationError


class ReportService:
    """Service for income/expense summaries and category breakdowns."""

    def __init__(self, db: Database):
        """Initialize report service.

        Args:
            db: Database instance
        """
        self.db = db

    def get_filtered_transactions(
        self,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        account_id: Optional[int] = None,
    ) -> list[Transaction]:
        """Get transactions with a usable date, amount and type."""
        if date_from is not None and date_to is not None and date_from > date_to:
            raise ValidationError("Start date must be on or before end date")
        transactions = self.db.list_transactions(
            start_date=date_from, end_date=date_to, account_id=account_id
        )
        return [
            t
            for t in transactions
            if t.date is not None and t.amount is not None and t.type is not None
        ]

    def get_summary(
        self,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        account_id: Optional[int] = None,
    ) -> ReportSummary:
        """Total income and expenses over the filtered transactions.

        Args:
            date_from: Optional start date filter (inclusive)
            date_to: Optional end date filter (inclusive)
            account_id: Optional account filter

        Returns:
            ReportSummary with income, expenses and net cash flow
        """
        transactions = self.get_filtered_transactions(date_from, date_to, account_id)
        income = _total(t for t in transactions if t.type is TransactionType.CREDIT)
        expenses = _total(t for t in transactions if t.type is TransactionType.DEBIT)
        return ReportSummary(
            income=income,
            expenses=expenses,
            net_cash_flow=income - expenses,
            transaction_count=len(transactions),
        )

    def get_category_breakdown(
        self,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        account_id: Optional[int] = None,
    ) -> list[CategoryBreakdown]:
        """Group transactions by (category, type), largest total first."""
        groups: dict[tuple[str, TransactionType], list[Transaction]] = {}
        for txn in self.get_filtered_transactions(date_from, date_to, account_id):
            groups.setdefault((txn.category_code, txn.type), []).append(txn)

        breakdown = [
            CategoryBreakdown(
                category_code=code,
                type=txn_type,
                count=len(items),
                total=_total(items),
            )
            for (code, txn_type), items in groups.items()
        ]
        breakdown.sort(key=lambda b: (-b.total, b.category_code))
        return breakdown


def _total(transactions: Iterable[Transaction]) -> Decimal:
    return sum((t.amount for t in transactions), Decimal("0"))
