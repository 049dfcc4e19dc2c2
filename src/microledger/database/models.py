"""SQLAlchemy models for the microledger database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Text,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


class Account(Base):
    """Chart-of-accounts model carrying the cached balance."""

    __tablename__ = "accounts"

    code = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    account_type = Column(String, nullable=False, index=True)
    parent_code = Column(String, ForeignKey("accounts.code"), nullable=True)
    description = Column(String, nullable=True)
    opening_balance = Column(Numeric(14, 2), nullable=False, default=0)
    balance = Column(Numeric(14, 2), nullable=False, default=0)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )

    # Relationships
    parent = relationship("Account", remote_side=[code], backref="children")


class Transaction(Base):
    """Journal entry header model."""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    date = Column(Date, nullable=False, index=True)
    transaction_type = Column(String, nullable=False, index=True)
    reference = Column(String, nullable=False, index=True)
    description = Column(String, nullable=False, default="")
    party = Column(String, nullable=True, index=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    lines = relationship(
        "JournalLine",
        back_populates="transaction",
        order_by="JournalLine.position",
        cascade="all, delete-orphan",
    )


class JournalLine(Base):
    """One debit or credit line of a journal entry."""

    __tablename__ = "journal_lines"

    id = Column(Integer, primary_key=True)
    transaction_id = Column(Integer, ForeignKey("transactions.id"), nullable=False, index=True)
    position = Column(Integer, nullable=False)
    account_code = Column(String, ForeignKey("accounts.code"), nullable=False, index=True)
    debit = Column(Numeric(14, 2), nullable=False, default=0)
    credit = Column(Numeric(14, 2), nullable=False, default=0)
    description = Column(String, nullable=True)

    # Relationships
    transaction = relationship("Transaction", back_populates="lines")


class Setting(Base):
    """Key/value configuration documents (JSON text)."""

    __tablename__ = "settings"

    key = Column(String, primary_key=True)
    value = Column(Text, nullable=False)


class TaxSettlement(Base):
    """Tax payment/refund record attached to its transaction."""

    __tablename__ = "tax_settlements"

    id = Column(Integer, primary_key=True)
    transaction_id = Column(Integer, ForeignKey("transactions.id"), nullable=False)
    date = Column(Date, nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    method = Column(String, nullable=False)
    kind = Column(String, nullable=False)
    reference = Column(String, nullable=False)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


class ReturnRecord(Base):
    """Sales or purchase return metadata attached to its transaction."""

    __tablename__ = "returns"

    id = Column(Integer, primary_key=True)
    transaction_id = Column(Integer, ForeignKey("transactions.id"), nullable=False)
    kind = Column(String, nullable=False, index=True)
    date = Column(Date, nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    tax_amount = Column(Numeric(14, 2), nullable=False, default=0)
    party = Column(String, nullable=True)
    invoice_reference = Column(String, nullable=True)
    reason = Column(String, nullable=True)
    details = Column(String, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
