"""Shared pytest fixtures for billable tests."""

import tempfile
import os
from datetime import date
from decimal import Decimal
import pytest

from billable.database.factories import create_sqlite_database
from billable.domain.bank_account import BankAccountService
from billable.domain.client import ClientService
from billable.domain.exchange_rate import ExchangeRateService
from billable.domain.invoice import InvoiceService
from billable.domain.money_transaction import MoneyTransactionService
from billable.domain.project import ProjectService
from billable.domain.settings import SettingsService
from billable.domain.work_entry import WorkEntryService


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
def settings_service(temp_db):
    """Create a SettingsService with a temporary database."""
    return SettingsService(temp_db)


@pytest.fixture
def settings(settings_service):
    """Bootstrapped settings with CZK as main currency."""
    settings_service.bootstrap(company_name="Acme Consulting s.r.o.", main_currency="CZK")
    return settings_service.update_settings(iban="CZ65 0800 0000 1920 0014 5399", bic="GIBACZPX")


@pytest.fixture
def client_service(temp_db):
    """Create a ClientService with a temporary database."""
    return ClientService(temp_db)


@pytest.fixture
def project_service(temp_db):
    """Create a ProjectService with a temporary database."""
    return ProjectService(temp_db)


@pytest.fixture
def work_entry_service(temp_db):
    """Create a WorkEntryService with a temporary database."""
    return WorkEntryService(temp_db)


@pytest.fixture
def invoice_service(temp_db):
    """Create an InvoiceService with a temporary database."""
    return InvoiceService(temp_db)


@pytest.fixture
def bank_account_service(temp_db):
    """Create a BankAccountService with a temporary database."""
    return BankAccountService(temp_db)


@pytest.fixture
def exchange_rate_service(temp_db):
    """Create an ExchangeRateService with a temporary database."""
    return ExchangeRateService(temp_db)


@pytest.fixture
def money_transaction_service(temp_db):
    """Create a MoneyTransactionService with a temporary database."""
    return MoneyTransactionService(temp_db)


@pytest.fixture
def sample_client(client_service):
    """EUR client billing 100/h with 21% VAT, due in 14 days."""
    client_id = client_service.create_client(
        name="Globex",
        currency="EUR",
        hourly_rate=Decimal("100"),
        payment_terms_days=14,
        default_vat_rate=Decimal("21"),
    )
    return client_service.get_client(client_id)


@pytest.fixture
def sample_project(project_service, sample_client):
    """Project inheriting the client's hourly rate."""
    project_id = project_service.create_project(client_id=sample_client.id, name="Website")
    return project_service.get_project(project_id)


@pytest.fixture
def march_entries(work_entry_service, sample_project):
    """Two time entries (8h and 4h) and one fixed entry in March 2024."""
    return [
        work_entry_service.create_entry(sample_project.id, date(2024, 3, 4), hours=Decimal("8")),
        work_entry_service.create_entry(sample_project.id, date(2024, 3, 5), hours=Decimal("4")),
        work_entry_service.create_entry(
            sample_project.id, date(2024, 3, 20), amount=Decimal("500"), description="Logo design"
        ),
    ]


@pytest.fixture
def draft_invoice(temp_db, sample_client, march_entries):
    """Draft invoice built from the March entries."""
    from billable.domain.invoice_builder import InvoiceBuilder

    result = InvoiceBuilder(
        temp_db,
        client_id=sample_client.id,
        period_start=date(2024, 3, 1),
        period_end=date(2024, 3, 31),
        issue_date=date(2024, 4, 1),
    ).create_draft()
    assert result.success
    return result.invoice


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
