"""Mapper functions to convert SQLAlchemy models into domain entities.

This layer isolates the conversion logic so the domain never sees ORM
objects or raw column values (statuses stored as strings become enums,
line items are loaded in position order with their linked entries).
"""

from decimal import Decimal

from billable.domain import entities as domain
from billable.database.models import (
    BankAccount as ORMBankAccount,
    Client as ORMClient,
    ExchangeRate as ORMExchangeRate,
    Invoice as ORMInvoice,
    InvoiceLineItem as ORMInvoiceLineItem,
    MoneyTransaction as ORMMoneyTransaction,
    Project as ORMProject,
    Setting as ORMSetting,
    WorkEntry as ORMWorkEntry,
)


def client_to_domain(orm_client: ORMClient) -> domain.Client:
    """Convert SQLAlchemy Client model to domain Client entity."""
    return domain.Client(
        id=orm_client.id,
        name=orm_client.name,
        currency=orm_client.currency,
        hourly_rate=orm_client.hourly_rate,
        payment_terms_days=orm_client.payment_terms_days,
        default_vat_rate=orm_client.default_vat_rate if orm_client.default_vat_rate is not None else Decimal("0"),
        created_at=orm_client.created_at,
        email=orm_client.email,
        address=orm_client.address,
        vat_id=orm_client.vat_id,
    )


def project_to_domain(orm_project: ORMProject) -> domain.Project:
    """Convert SQLAlchemy Project model to domain Project entity."""
    client = orm_project.client
    return domain.Project(
        id=orm_project.id,
        client_id=orm_project.client_id,
        name=orm_project.name,
        hourly_rate=orm_project.hourly_rate,
        active=orm_project.active,
        created_at=orm_project.created_at,
        client_hourly_rate=client.hourly_rate if client is not None else None,
    )


def work_entry_to_domain(orm_entry: ORMWorkEntry) -> domain.WorkEntry:
    """Convert SQLAlchemy WorkEntry model to domain WorkEntry entity."""
    return domain.WorkEntry(
        id=orm_entry.id,
        project_id=orm_entry.project_id,
        date=orm_entry.date,
        hours=orm_entry.hours,
        amount=orm_entry.amount,
        hourly_rate=orm_entry.hourly_rate,
        entry_type=domain.EntryType(orm_entry.entry_type),
        status=domain.WorkStatus(orm_entry.status),
        invoice_id=orm_entry.invoice_id,
        description=orm_entry.description,
        created_at=orm_entry.created_at,
    )


def line_item_to_domain(orm_item: ORMInvoiceLineItem) -> domain.InvoiceLineItem:
    """Convert SQLAlchemy InvoiceLineItem model to domain InvoiceLineItem entity."""
    return domain.InvoiceLineItem(
        id=orm_item.id,
        invoice_id=orm_item.invoice_id,
        line_type=domain.LineType(orm_item.line_type),
        description=orm_item.description,
        quantity=orm_item.quantity,
        unit_price=orm_item.unit_price,
        amount=orm_item.amount,
        vat_rate=orm_item.vat_rate if orm_item.vat_rate is not None else Decimal("0"),
        position=orm_item.position,
        work_entry_ids=tuple(sorted(link.work_entry_id for link in orm_item.work_entry_links)),
    )


def invoice_to_domain(orm_invoice: ORMInvoice) -> domain.Invoice:
    """Convert SQLAlchemy Invoice model to domain Invoice entity."""
    line_items = sorted(orm_invoice.line_items, key=lambda item: item.position)
    return domain.Invoice(
        id=orm_invoice.id,
        number=orm_invoice.number,
        client_id=orm_invoice.client_id,
        status=domain.InvoiceStatus(orm_invoice.status),
        currency=orm_invoice.currency,
        issue_date=orm_invoice.issue_date,
        due_date=orm_invoice.due_date,
        period_start=orm_invoice.period_start,
        period_end=orm_invoice.period_end,
        paid_at=orm_invoice.paid_at,
        total_hours=orm_invoice.total_hours if orm_invoice.total_hours is not None else Decimal("0"),
        total_amount=orm_invoice.total_amount if orm_invoice.total_amount is not None else Decimal("0"),
        notes=orm_invoice.notes,
        created_at=orm_invoice.created_at,
        line_items=tuple(line_item_to_domain(item) for item in line_items),
    )


def exchange_rate_to_domain(orm_rate: ORMExchangeRate) -> domain.ExchangeRate:
    """Convert SQLAlchemy ExchangeRate model to domain ExchangeRate entity."""
    return domain.ExchangeRate(
        id=orm_rate.id,
        currency=orm_rate.currency,
        date=orm_rate.date,
        rate=orm_rate.rate,
        amount=orm_rate.amount,
    )


def money_transaction_to_domain(orm_txn: ORMMoneyTransaction) -> domain.MoneyTransaction:
    """Convert SQLAlchemy MoneyTransaction model to domain MoneyTransaction entity."""
    return domain.MoneyTransaction(
        id=orm_txn.id,
        source=orm_txn.source,
        external_id=orm_txn.external_id,
        transaction_type=domain.TransactionType(orm_txn.transaction_type),
        reference=orm_txn.reference,
        amount=orm_txn.amount,
        currency=orm_txn.currency,
        transacted_on=orm_txn.transacted_on,
        description=orm_txn.description,
        invoice_id=orm_txn.invoice_id,
        created_at=orm_txn.created_at,
    )


def bank_account_to_domain(orm_account: ORMBankAccount) -> domain.BankAccount:
    """Convert SQLAlchemy BankAccount model to domain BankAccount entity."""
    return domain.BankAccount(
        id=orm_account.id,
        name=orm_account.name,
        iban=orm_account.iban,
        bic=orm_account.bic,
        currency=orm_account.currency,
        is_default=orm_account.is_default,
        created_at=orm_account.created_at,
    )


def setting_to_domain(orm_setting: ORMSetting) -> domain.Settings:
    """Convert SQLAlchemy Setting model to domain Settings entity."""
    return domain.Settings(
        id=orm_setting.id,
        company_name=orm_setting.company_name,
        main_currency=orm_setting.main_currency,
        iban=orm_setting.iban,
        bic=orm_setting.bic,
        email=orm_setting.email,
        address=orm_setting.address,
        vat_id=orm_setting.vat_id,
    )
