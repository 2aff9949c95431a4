"""Domain layer for smartledger application."""

# Services are imported lazily: the database layer imports domain.entities,
# and the services import the database layer.
_SERVICES = {
    "AccountService": "smartledger.domain.account",
    "TransactionService": "smartledger.domain.transaction",
    "LedgerService": "smartledger.domain.ledger",
    "ReconciliationService": "smartledger.domain.reconciliation",
    "IngestionService": "smartledger.domain.ingestion",
    "ReportService": "smartledger.domain.report",
}

__all__ = list(_SERVICES)


def __getattr__(name):
    if name in _SERVICES:
        import importlib

        return getattr(importlib.import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
