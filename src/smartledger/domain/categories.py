"""Fixed category catalog used to classify transactions."""

from typing import Any, Optional

from smartledger.domain.entities import Category, TransactionType

UNCATEGORIZED_IN = "UNCATEGORIZED_IN"
UNCATEGORIZED_OUT = "UNCATEGORIZED_OUT"

CATEGORIES = [
    # Income
    Category("INVOICE_PAYMENT_FULL", "Full invoice payment received", TransactionType.CREDIT),
    Category("INVOICE_PAYMENT_PARTIAL", "Partial invoice payment received", TransactionType.CREDIT),
    Category("CAPITAL_RAISE", "Capital increase from shareholders", TransactionType.CREDIT),
    Category("INTEREST_INCOME", "Bank interest earned", TransactionType.CREDIT),
    Category("EXPENSE_REFUND", "Refund of previously paid expenses", TransactionType.CREDIT),
    Category("LOAN_RECEIVED", "Loan funds received", TransactionType.CREDIT),
    Category("INTERCOMPANY_IN", "Transfer from related company", TransactionType.CREDIT),
    Category("ATM_DEPOSIT", "Cash deposited via ATM", TransactionType.CREDIT),
    Category(UNCATEGORIZED_IN, "Unknown income source", TransactionType.CREDIT),
    # Expenses
    Category("SUPPLIER_PAYMENT", "Payment to supplier/vendor", TransactionType.DEBIT),
    Category("LOAN_REPAYMENT", "Loan principal or interest payment", TransactionType.DEBIT),
    Category("BANK_FEES", "Bank charges and fees", TransactionType.DEBIT),
    Category("TAX_PAYMENT", "Tax payments (VAT, income tax, etc)", TransactionType.DEBIT),
    Category("PAYROLL", "Employee salaries and wages", TransactionType.DEBIT),
    Category("RENT", "Office/property rent payment", TransactionType.DEBIT),
    Category("UTILITIES", "Electricity, water, internet, phone", TransactionType.DEBIT),
    Category("ADMIN_EXPENSES", "Office supplies, admin costs", TransactionType.DEBIT),
    Category("ATM_WITHDRAWAL", "Cash withdrawn from ATM", TransactionType.DEBIT),
    Category(UNCATEGORIZED_OUT, "Unknown expense", TransactionType.DEBIT),
]

_BY_CODE = {category.code: category for category in CATEGORIES}


def get_category(code: str) -> Optional[Category]:
    """Look up a catalog entry by code."""
    return _BY_CODE.get(code)


def is_known_category(code: Any) -> bool:
    return isinstance(code, str) and code in _BY_CODE


def uncategorized_for(txn_type: Optional[TransactionType]) -> str:
    """Return the uncategorized sentinel for a transaction direction."""
    if txn_type is TransactionType.CREDIT:
        return UNCATEGORIZED_IN
    return UNCATEGORIZED_OUT


def normalize_category_code(code: Any, txn_type: Optional[TransactionType]) -> str:
    """Return a catalog code, replacing missing or unknown codes with the sentinel.

    Codes coming from the categorizer are untrusted free-form text, so they are
    matched case-insensitively and never rejected.
    """
    if isinstance(code, str):
        candidate = code.strip().upper()
        if candidate in _BY_CODE:
            return candidate
    return uncategorized_for(txn_type)
