"""Integration tests for the command line interface."""

import base64

import pytest
from billable.cli.main import cli


@pytest.fixture
def run(cli_runner, temp_db):
    """Invoke the CLI against the temporary database."""

    def _run(*args):
        return cli_runner.invoke(cli, ["--db-path", temp_db.database_path, *args])

    return _run


@pytest.fixture
def billed_client(run):
    """Settings, a EUR client with one project and twelve hours of March work."""
    assert run("settings", "init", "--company", "Acme Consulting s.r.o.", "--currency", "czk").exit_code == 0
    assert run("settings", "set", "--iban", "CZ65 0800 0000 1920 0014 5399", "--bic", "GIBACZPX").exit_code == 0
    assert (
        run("client", "add", "Globex", "--currency", "EUR", "--rate", "100", "--terms", "Net 14", "--vat", "21")
        .exit_code
        == 0
    )
    assert run("project", "add", "Globex", "Website").exit_code == 0
    assert run("entry", "add", "1", "--date", "2024-03-04", "--hours", "8").exit_code == 0
    assert run("entry", "add", "1", "--date", "2024-03-05", "--hours", "4").exit_code == 0
    assert run("entry", "add", "1", "--date", "2024-03-20", "--amount", "500", "-d", "Logo design").exit_code == 0
    return "Globex"


def _create(run, client):
    return run(
        "invoice", "create", client, "--start", "2024-03-01", "--end", "2024-03-31", "--issue-date", "2024-04-01"
    )


def test_help_does_not_need_database(cli_runner):
    result = cli_runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    assert "invoice" in result.output


def test_settings_show_before_init(run):
    result = run("settings", "show")

    assert result.exit_code == 1
    assert "settings init" in result.output


def test_settings_roundtrip(run, billed_client):
    result = run("settings", "show")

    assert result.exit_code == 0
    assert "Main currency: CZK" in result.output
    assert "CZ6508000000192000145399" in result.output


def test_client_add_rejects_unreadable_terms(run):
    result = run("client", "add", "Globex", "--terms", "whenever")

    assert result.exit_code == 1
    assert "Could not read payment terms" in result.output


def test_client_add_reports_validation_errors(run):
    result = run("client", "add", "Globex", "--currency", "EURO")

    assert result.exit_code == 1
    assert "Currency must be 3 uppercase letters" in result.output


def test_invoice_preview(run, billed_client):
    result = run("invoice", "preview", billed_client, "--start", "2024-03-01", "--end", "2024-03-31")

    assert result.exit_code == 0
    assert "Website" in result.output
    assert "Logo design" in result.output
    assert "Total amount: 1700.00 EUR" in result.output
    assert "No invoices found." in run("invoice", "list").output


def test_invoice_create_requires_period(run, billed_client):
    result = run("invoice", "create", billed_client)

    assert result.exit_code == 1
    assert "--start and --end, or --period" in result.output


def test_invoice_create_unknown_client(run, billed_client):
    result = _create(run, "Nobody")

    assert result.exit_code == 1
    assert "Client 'Nobody' not found" in result.output


def test_invoice_create_and_show(run, billed_client):
    result = _create(run, billed_client)

    assert result.exit_code == 0
    assert "Created draft invoice 2024-001 (ID: 1) for 2057.00 EUR" in result.output

    shown = run("invoice", "show", "2024-001")
    assert shown.exit_code == 0
    assert "Invoice 2024-001 (draft)" in shown.output
    assert "due 2024-04-15" in shown.output
    assert "2057.00 EUR" in shown.output
    assert "No EUR exchange rate for 2024-04-01" in shown.output


def test_second_create_finds_nothing(run, billed_client):
    _create(run, billed_client)
    result = _create(run, billed_client)

    assert result.exit_code == 1
    assert "No unbilled work entries" in result.output


def test_line_item_editing(run, billed_client):
    _create(run, billed_client)

    assert run("line", "add", "2024-001", "Hosting", "100").exit_code == 0
    moved = run("line", "move", "2024-001", "3", "up")
    assert moved.exit_code == 0
    assert "Moved line item 3 up" in moved.output
    assert run("line", "remove", "2024-001", "1").exit_code == 0

    shown = run("invoice", "show", "1").output
    assert "Website" not in shown
    assert "705.00 EUR" in shown


def test_finalized_invoice_is_locked(run, billed_client):
    _create(run, billed_client)
    assert run("invoice", "finalize", "2024-001").exit_code == 0

    result = run("line", "add", "2024-001", "Hosting", "100")
    assert result.exit_code == 1
    assert "Cannot edit a finalized invoice" in result.output

    deleted = run("invoice", "delete", "2024-001", "--yes")
    assert deleted.exit_code == 1
    assert "Cannot delete a finalized invoice" in deleted.output


def test_delete_draft_releases_work(run, billed_client):
    _create(run, billed_client)

    result = run("invoice", "delete", "2024-001", "--yes")
    assert result.exit_code == 0
    assert "Globex" in run("report", "unbilled").output


def test_payment_reconciliation(run, billed_client):
    """Create, finalize, pay by bank transfer and report revenue."""
    _create(run, billed_client)
    run("invoice", "finalize", "2024-001")
    assert run("txn", "add", "2057.00", "EUR", "--reference", "2024-001", "--date", "2024-04-12").exit_code == 0
    assert run("txn", "add", "99.00", "EUR", "--reference", "unknown").exit_code == 0

    matched = run("txn", "match")
    assert matched.exit_code == 0
    assert "Transaction 1 paid invoice 2024-001" in matched.output
    assert "Matched 1, unmatched 1" in matched.output

    assert "Paid on 2024-04-12" in run("invoice", "show", "2024-001").output

    assert run("rate", "add", "EUR", "2024-04-01", "25").exit_code == 0
    revenue = run("report", "revenue", "--year", "2024")
    assert "Paid revenue: 51425.00 CZK" in revenue.output
    assert "Warning" not in revenue.output


def test_match_single_transaction_failure(run, billed_client):
    _create(run, billed_client)
    run("txn", "add", "2057.00", "EUR", "--reference", "2024-001")

    result = run("txn", "match", "1")

    assert result.exit_code == 1
    assert "No matching invoice found" in result.output


def test_pay_requires_final(run, billed_client):
    _create(run, billed_client)

    result = run("invoice", "pay", "2024-001")

    assert result.exit_code == 1
    assert "Only final invoices can be marked as paid" in result.output


def test_invoice_qr(run, billed_client, tmp_path):
    _create(run, billed_client)

    payload = run("invoice", "qr", "2024-001", "--payload")
    assert payload.exit_code == 0
    assert payload.output.startswith("BCD\n002\n1\nSCT\nGIBACZPX\n")
    assert "EUR2057.00" in payload.output

    data_url = run("invoice", "qr", "2024-001").output.strip()
    assert b"<svg" in base64.b64decode(data_url.split(",", 1)[1])

    output = tmp_path / "qr.svg"
    written = run("invoice", "qr", "2024-001", "--output", str(output))
    assert "Wrote EPC QR code" in written.output
    assert b"<svg" in output.read_bytes()


def test_bank_accounts(run):
    assert run("bank", "add", "Main", "CZ6508000000192000145399").exit_code == 0
    assert run("bank", "add", "Savings", "CZ5508000000001234567899").exit_code == 0

    result = run("bank", "delete", "1")
    assert result.exit_code == 0

    listed = run("bank", "list").output
    assert "Main" not in listed
    assert "* ID:   2" in listed


def test_bank_account_with_invalid_iban(run):
    result = run("bank", "add", "Main", "CZ6608000000192000145399")

    assert result.exit_code == 1
    assert "Iban is not a valid IBAN" in result.output


def test_unknown_invoice(run):
    result = run("invoice", "show", "2024-999")

    assert result.exit_code == 1
    assert "Invoice '2024-999' not found" in result.output


def test_log_level_option(cli_runner, temp_db):
    result = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "--log-level", "debug", "client", "list"]
    )

    assert result.exit_code == 0
    assert "No clients found." in result.output
