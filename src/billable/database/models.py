"""SQLAlchemy models for billable database."""

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
    UniqueConstraint,
    create_engine,
    event,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


class Setting(Base):
    """Single-row ledger settings model."""

    __tablename__ = "settings"

    id = Column(Integer, primary_key=True)
    company_name = Column(String, nullable=True)
    main_currency = Column(String(3), nullable=False, default="EUR")
    iban = Column(String, nullable=True)
    bic = Column(String, nullable=True)
    email = Column(String, nullable=True)
    address = Column(Text, nullable=True)
    vat_id = Column(String, nullable=True)


class BankAccount(Base):
    """Bank account model."""

    __tablename__ = "bank_accounts"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    iban = Column(String, nullable=False)
    bic = Column(String, nullable=True)
    currency = Column(String(3), nullable=True)
    is_default = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


class Client(Base):
    """Client model."""

    __tablename__ = "clients"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    currency = Column(String(3), nullable=True)
    hourly_rate = Column(Numeric(10, 2), nullable=True)
    payment_terms_days = Column(Integer, nullable=True)
    default_vat_rate = Column(Numeric(5, 2), default=0, nullable=False)
    email = Column(String, nullable=True)
    address = Column(Text, nullable=True)
    vat_id = Column(String, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    projects = relationship("Project", back_populates="client")
    invoices = relationship("Invoice", back_populates="client")


class Project(Base):
    """Project model."""

    __tablename__ = "projects"

    id = Column(Integer, primary_key=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False)
    name = Column(String, nullable=False)
    hourly_rate = Column(Numeric(10, 2), nullable=True)
    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    client = relationship("Client", back_populates="projects")
    work_entries = relationship("WorkEntry", back_populates="project", cascade="all, delete-orphan")


class WorkEntry(Base):
    """Work entry model (time or fixed-price work)."""

    __tablename__ = "work_entries"

    id = Column(Integer, primary_key=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False)
    invoice_id = Column(Integer, ForeignKey("invoices.id"), nullable=True)
    date = Column(Date, nullable=False)
    hours = Column(Numeric(8, 2), nullable=True)
    amount = Column(Numeric(12, 2), nullable=True)
    hourly_rate = Column(Numeric(10, 2), nullable=True)
    entry_type = Column(String, default="time", nullable=False)
    status = Column(String, default="unbilled", nullable=False)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    project = relationship("Project", back_populates="work_entries")
    invoice = relationship("Invoice", back_populates="work_entries")
    line_item_links = relationship(
        "InvoiceLineItemWorkEntry", back_populates="work_entry", cascade="all, delete-orphan"
    )


class Invoice(Base):
    """Invoice model."""

    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True)
    number = Column(String, unique=True, nullable=False)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False)
    status = Column(String, default="draft", nullable=False)
    currency = Column(String(3), nullable=True)
    issue_date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=False)
    period_start = Column(Date, nullable=True)
    period_end = Column(Date, nullable=True)
    paid_at = Column(Date, nullable=True)
    total_hours = Column(Numeric(10, 2), default=0, nullable=False)
    total_amount = Column(Numeric(12, 2), default=0, nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    client = relationship("Client", back_populates="invoices")
    line_items = relationship(
        "InvoiceLineItem",
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="InvoiceLineItem.position",
    )
    work_entries = relationship("WorkEntry", back_populates="invoice")


class InvoiceLineItem(Base):
    """Invoice line item model."""

    __tablename__ = "invoice_line_items"

    id = Column(Integer, primary_key=True)
    invoice_id = Column(Integer, ForeignKey("invoices.id"), nullable=False)
    line_type = Column(String, default="fixed", nullable=False)
    description = Column(Text, nullable=False)
    quantity = Column(Numeric(10, 2), nullable=True)
    unit_price = Column(Numeric(12, 2), nullable=True)
    amount = Column(Numeric(12, 2), nullable=False)
    vat_rate = Column(Numeric(5, 2), default=0, nullable=False)
    position = Column(Integer, nullable=False)

    # Positions are unique per invoice; swaps go through a free slot
    __table_args__ = (UniqueConstraint("invoice_id", "position", name="uq_line_item_position"),)

    # Relationships
    invoice = relationship("Invoice", back_populates="line_items")
    work_entry_links = relationship(
        "InvoiceLineItemWorkEntry", back_populates="line_item", cascade="all, delete-orphan"
    )


class InvoiceLineItemWorkEntry(Base):
    """Join row linking a line item to the work entries it bills."""

    __tablename__ = "invoice_line_item_work_entries"

    id = Column(Integer, primary_key=True)
    invoice_line_item_id = Column(Integer, ForeignKey("invoice_line_items.id"), nullable=False)
    work_entry_id = Column(Integer, ForeignKey("work_entries.id"), nullable=False)

    __table_args__ = (
        UniqueConstraint("invoice_line_item_id", "work_entry_id", name="uq_line_item_work_entry"),
    )

    # Relationships
    line_item = relationship("InvoiceLineItem", back_populates="work_entry_links")
    work_entry = relationship("WorkEntry", back_populates="line_item_links")


class ExchangeRate(Base):
    """Dated exchange rate into the main currency."""

    __tablename__ = "exchange_rates"

    id = Column(Integer, primary_key=True)
    currency = Column(String(3), nullable=False)
    date = Column(Date, nullable=False)
    rate = Column(Numeric(18, 6), nullable=False)
    amount = Column(Integer, default=1, nullable=False)

    __table_args__ = (UniqueConstraint("currency", "date", name="uq_exchange_rate_currency_date"),)


class MoneyTransaction(Base):
    """Bank transaction model."""

    __tablename__ = "money_transactions"

    id = Column(Integer, primary_key=True)
    source = Column(String, nullable=False)
    external_id = Column(String, nullable=True)
    transaction_type = Column(String, nullable=False)
    reference = Column(String, nullable=True)
    amount = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(3), nullable=False)
    transacted_on = Column(Date, nullable=False)
    description = Column(Text, nullable=True)
    invoice_id = Column(Integer, ForeignKey("invoices.id"), nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (UniqueConstraint("source", "external_id", name="uq_transaction_source_external_id"),)


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """Turn on foreign key enforcement for SQLite connections."""
    if type(dbapi_connection).__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
