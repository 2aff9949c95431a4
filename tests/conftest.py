"""Shared pytest fixtures for smartledger tests."""

import tempfile
import os
from decimal import Decimal
import pytest

from smartledger.database.factories import create_sqlite_database
from smartledger.domain.account import AccountService
from smartledger.domain.ingestion import IngestionService
from smartledger.domain.ledger import LedgerService
from smartledger.domain.reconciliation import ReconciliationService
from smartledger.domain.report import ReportService
from smartledger.domain.transaction import TransactionService


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def account_service(temp_db):
    """Create an AccountService with a temporary database."""
    return AccountService(temp_db)


@pytest.fixture
def transaction_service(temp_db):
    """Create a TransactionService with a temporary database."""
    return TransactionService(temp_db)


@pytest.fixture
def ledger_service(temp_db):
    """Create a LedgerService with a temporary database."""
    return LedgerService(temp_db)


@pytest.fixture
def reconciliation_service(temp_db):
    """Create a ReconciliationService with a temporary database."""
    return ReconciliationService(temp_db)


@pytest.fixture
def ingestion_service(temp_db):
    """Create an IngestionService with a temporary database."""
    return IngestionService(temp_db)


@pytest.fixture
def report_service(temp_db):
    """Create a ReportService with a temporary database."""
    return ReportService(temp_db)


@pytest.fixture
def sample_account(account_service):
    """Create a sample account with zero opening balance."""
    account_id = account_service.create_account(
        account_name="Operating Account", account_number="GR1601101250000000012300695"
    )
    return account_service.get_account(account_id)


@pytest.fixture
def funded_account(account_service):
    """Create a sample account with a non-zero opening balance."""
    account_id = account_service.create_account(
        account_name="Savings", account_number="DE89370400440532013000", opening_balance=Decimal("1000.00")
    )
    return account_service.get_account(account_id)


@pytest.fixture
def store(transaction_service):
    """Insert raw rows for an account and return the stored transactions."""

    def _store(account_id, *raw_rows, upload_id=None):
        transactions, _ = transaction_service.insert_batch(
            list(raw_rows), upload_id=upload_id, account_id=account_id
        )
        return transactions

    return _store


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
