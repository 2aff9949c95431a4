"""SQLAlchemy models for the smartledger database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Boolean,
    Float,
    Index,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session
from sqlalchemy.pool import StaticPool

Base = declarative_base()


def _now() -> datetime:
    return datetime.now(UTC)


class Account(Base):
    """Bank account model."""

    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True)
    account_number = Column(String, unique=True, nullable=True)
    account_name = Column(String, nullable=False)
    account_type = Column(String, nullable=False, default="checking")
    currency = Column(String(3), nullable=False, default="EUR")
    opening_balance = Column(Numeric(14, 2), nullable=False, default=0)
    current_balance = Column(Numeric(14, 2), nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=_now, nullable=False)
    updated_at = Column(DateTime, default=_now, onupdate=_now, nullable=False)

    # Relationships
    transactions = relationship("Transaction", back_populates="account")
    ledger_entries = relationship("LedgerEntry", back_populates="account")


class Upload(Base):
    """Upload batch model."""

    __tablename__ = "uploads"

    id = Column(Integer, primary_key=True)
    file_name = Column(String, nullable=True)
    file_type = Column(String, nullable=True)
    status = Column(String, nullable=False, default="processing")
    transaction_count = Column(Integer, nullable=False, default=0)
    error_message = Column(Text, nullable=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)
    updated_at = Column(DateTime, default=_now, onupdate=_now, nullable=False)

    # Relationships
    transactions = relationship("Transaction", back_populates="upload")


class Transaction(Base):
    """Categorized transaction model."""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    upload_id = Column(Integer, ForeignKey("uploads.id"), nullable=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)
    date = Column(Date, nullable=True)
    description = Column(Text, nullable=False, default="")
    amount = Column(Numeric(14, 2), nullable=True)
    type = Column(String, nullable=True)
    category_code = Column(String, nullable=False)
    confidence = Column(Float, nullable=False, default=0.5)
    counterparty = Column(String, nullable=True)
    reasoning = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    source_id = Column(String, nullable=True)
    is_manual = Column(Boolean, nullable=False, default=False)
    reconciled = Column(Boolean, nullable=False, default=False)
    ledger_entry_id = Column(Integer, nullable=True)
    post_error = Column(Text, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)
    updated_at = Column(DateTime, default=_now, onupdate=_now, nullable=False)

    __table_args__ = (Index("ix_transactions_account_date", "account_id", "date"),)

    # Relationships
    account = relationship("Account", back_populates="transactions")
    upload = relationship("Upload", back_populates="transactions")


class LedgerEntry(Base):
    """Ledger entry model. One row per posted transaction."""

    __tablename__ = "ledger_entries"

    id = Column(Integer, primary_key=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)
    transaction_id = Column(Integer, ForeignKey("transactions.id"), unique=True, nullable=False)
    entry_date = Column(Date, nullable=False)
    entry_type = Column(String, nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    running_balance = Column(Numeric(14, 2), nullable=False)
    description = Column(String(255), nullable=False, default="")
    notes = Column(Text, nullable=True)
    reconciled = Column(Boolean, nullable=False, default=False)
    reconciliation_date = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)

    __table_args__ = (
        Index("ix_ledger_entries_account_order", "account_id", "entry_date", "created_at", "id"),
    )

    # Relationships
    account = relationship("Account", back_populates="ledger_entries")


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        # One shared connection, otherwise every session sees an empty database
        engine = create_engine(
            database_url,
            echo=False,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
