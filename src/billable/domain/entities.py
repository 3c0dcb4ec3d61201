"""Domain model entities for billable.

These are pure data classes representing business concepts, independent of
database schema. Services receive and return these; the SQLAlchemy models
never leave the database package.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional

from billable.domain import totals


class EntryType(str, Enum):
    """How a work entry is priced."""

    TIME = "time"
    FIXED = "fixed"


class WorkStatus(str, Enum):
    """Billing status of a work entry."""

    UNBILLED = "unbilled"
    INVOICED = "invoiced"


class InvoiceStatus(str, Enum):
    """Invoice lifecycle status. Transitions only move forward."""

    DRAFT = "draft"
    FINAL = "final"
    PAID = "paid"


class LineType(str, Enum):
    """Kind of invoice line item."""

    TIME_AGGREGATE = "time_aggregate"
    FIXED = "fixed"


class TransactionType(str, Enum):
    """Direction of a money transaction."""

    INCOME = "income"
    EXPENSE = "expense"


class PaymentFormat(str, Enum):
    """Payment QR payload standard."""

    EPC = "epc"
    SPAYD = "spayd"


@dataclass(frozen=True)
class Client:
    """Client domain entity."""

    id: int
    name: str
    currency: Optional[str]
    hourly_rate: Optional[Decimal]
    payment_terms_days: Optional[int]
    default_vat_rate: Decimal
    created_at: datetime
    email: Optional[str] = None
    address: Optional[str] = None
    vat_id: Optional[str] = None


@dataclass(frozen=True)
class Project:
    """Project domain entity.

    ``client_hourly_rate`` is the owning client's rate, carried along so the
    effective rate can be resolved without another lookup.
    """

    id: int
    client_id: int
    name: str
    hourly_rate: Optional[Decimal]
    active: bool
    created_at: datetime
    client_hourly_rate: Optional[Decimal] = None

    @property
    def effective_hourly_rate(self) -> Optional[Decimal]:
        """Project rate, falling back to the client rate."""
        if self.hourly_rate is not None:
            return self.hourly_rate
        return self.client_hourly_rate


@dataclass(frozen=True)
class WorkEntry:
    """Work entry domain entity (time or fixed-price work)."""

    id: int
    project_id: int
    date: date
    hours: Optional[Decimal]
    amount: Optional[Decimal]
    hourly_rate: Optional[Decimal]
    entry_type: EntryType
    status: WorkStatus
    invoice_id: Optional[int]
    description: Optional[str]
    created_at: datetime

    def calculated_amount(self, fallback_rate: Optional[Decimal] = None) -> Optional[Decimal]:
        """Return the billable amount of this entry.

        An explicit amount wins. Otherwise hours are multiplied by the rate
        captured on the entry, or by ``fallback_rate`` when none was
        captured. Returns None when no rate is known.
        """
        if self.amount is not None:
            return self.amount
        if self.hours is None:
            return None
        rate = self.hourly_rate if self.hourly_rate is not None else fallback_rate
        if rate is None:
            return None
        return self.hours * rate


@dataclass(frozen=True)
class InvoiceLineItem:
    """Invoice line item domain entity."""

    id: int
    invoice_id: int
    line_type: LineType
    description: str
    quantity: Optional[Decimal]
    unit_price: Optional[Decimal]
    amount: Decimal
    vat_rate: Decimal
    position: int
    work_entry_ids: tuple[int, ...] = ()

    @property
    def vat_amount(self) -> Decimal:
        return totals.line_vat(self.amount, self.vat_rate)


@dataclass(frozen=True)
class Invoice:
    """Invoice domain entity with its line items in position order."""

    id: int
    number: str
    client_id: int
    status: InvoiceStatus
    currency: Optional[str]
    issue_date: date
    due_date: date
    period_start: Optional[date]
    period_end: Optional[date]
    paid_at: Optional[date]
    total_hours: Decimal
    total_amount: Decimal
    notes: Optional[str]
    created_at: datetime
    line_items: tuple[InvoiceLineItem, ...] = ()

    @property
    def is_draft(self) -> bool:
        return self.status == InvoiceStatus.DRAFT

    @property
    def subtotal(self) -> Decimal:
        return totals.subtotal(self.line_items)

    @property
    def total_vat(self) -> Decimal:
        return totals.total_vat(self.line_items)

    @property
    def grand_total(self) -> Decimal:
        return totals.grand_total(self.line_items)

    @property
    def vat_totals_by_rate(self) -> dict[Decimal, Decimal]:
        return totals.vat_totals_by_rate(self.line_items)


@dataclass(frozen=True)
class ExchangeRate:
    """Dated exchange rate: ``rate`` main-currency units per ``amount`` units of ``currency``."""

    id: int
    currency: str
    date: date
    rate: Decimal
    amount: int

    @property
    def unit_rate(self) -> Decimal:
        """Main-currency value of a single unit of ``currency``."""
        return self.rate / Decimal(self.amount)


@dataclass(frozen=True)
class MoneyTransaction:
    """Bank transaction domain entity."""

    id: int
    source: str
    external_id: Optional[str]
    transaction_type: TransactionType
    reference: Optional[str]
    amount: Decimal
    currency: str
    transacted_on: date
    description: Optional[str]
    invoice_id: Optional[int]
    created_at: datetime


@dataclass(frozen=True)
class BankAccount:
    """Bank account domain entity."""

    id: int
    name: str
    iban: str
    bic: Optional[str]
    currency: Optional[str]
    is_default: bool
    created_at: datetime


@dataclass(frozen=True)
class Settings:
    """Ledger-wide configuration: company identity, main currency, banking defaults."""

    id: int
    company_name: Optional[str]
    main_currency: str
    iban: Optional[str] = None
    bic: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    vat_id: Optional[str] = None


@dataclass(frozen=True)
class PreviewLineItem:
    """Line item as it would be created from unbilled work."""

    line_type: LineType
    description: str
    quantity: Optional[Decimal]
    amount: Decimal
    vat_rate: Decimal
    work_entry_ids: tuple[int, ...]
    project_id: Optional[int] = None
    unit_price: Optional[Decimal] = None


@dataclass(frozen=True)
class InvoicePreview:
    """Read-only projection of the draft an InvoiceBuilder would create."""

    client: Client
    period_start: date
    period_end: date
    issue_date: date
    due_date: date
    total_hours: Decimal
    total_amount: Decimal
    currency: Optional[str]
    line_items: tuple[PreviewLineItem, ...]
    work_entry_ids: tuple[int, ...]


@dataclass(frozen=True)
class BuildResult:
    """Outcome of creating a draft invoice."""

    success: bool
    invoice: Optional[Invoice] = None
    errors: tuple[str, ...] = ()


@dataclass(frozen=True)
class MatchResult:
    """Outcome of matching one transaction to an invoice."""

    success: bool
    transaction_id: int
    invoice: Optional[Invoice] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class MatchSummary:
    """Outcome of a batch match run."""

    results: tuple[MatchResult, ...] = field(default_factory=tuple)

    @property
    def matched(self) -> int:
        return sum(1 for result in self.results if result.success)

    @property
    def failed(self) -> int:
        return sum(1 for result in self.results if not result.success)


@dataclass(frozen=True)
class MainCurrencyTotal:
    """Sum of invoice totals in the main currency."""

    amount: Decimal
    currency: str
    missing_exchange_rates: bool


@dataclass(frozen=True)
class UnbilledClientSummary:
    """Unbilled work of a single client."""

    client_id: int
    client_name: str
    currency: Optional[str]
    project_count: int
    total_hours: Decimal
    total_amount: Decimal
