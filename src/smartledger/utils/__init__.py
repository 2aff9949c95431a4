"""Utility functions for smartledger."""

from smartledger.utils.date_parser import parse_date
from smartledger.utils.amount_parser import parse_amount
from smartledger.utils.account_resolver import resolve_account

__all__ = ["parse_date", "parse_amount", "resolve_account"]
