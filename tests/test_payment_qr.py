"""Tests for payment QR code payloads and rendering."""

import base64
from datetime import date, datetime
from decimal import Decimal

import pytest

from billable.domain.entities import (
    BankAccount,
    Invoice,
    InvoiceLineItem,
    InvoiceStatus,
    LineType,
    PaymentFormat,
    Settings,
)
from billable.domain.payment_qr import (
    PaymentQrCodeGenerator,
    format_beneficiary_name,
    sanitize_iban,
    sanitize_spayd_text,
    variable_symbol,
)

SETTINGS = Settings(
    id=1,
    company_name="Acme Consulting s.r.o.",
    main_currency="CZK",
    iban="CZ65 0800 0000 1920 0014 5399",
    bic="GIBACZPX",
)


def make_invoice(currency="EUR", amount="1000.00", vat_rate="21", number="2024-001"):
    item = InvoiceLineItem(
        id=1,
        invoice_id=1,
        line_type=LineType.FIXED,
        description="Consulting",
        quantity=None,
        unit_price=None,
        amount=Decimal(amount),
        vat_rate=Decimal(vat_rate),
        position=0,
    )
    return Invoice(
        id=1,
        number=number,
        client_id=1,
        status=InvoiceStatus.FINAL,
        currency=currency,
        issue_date=date(2024, 4, 1),
        due_date=date(2024, 4, 15),
        period_start=None,
        period_end=None,
        paid_at=None,
        total_hours=Decimal("0"),
        total_amount=Decimal(amount),
        notes=None,
        created_at=datetime(2024, 4, 1),
        line_items=(item,),
    )


class TestAvailability:
    def test_eur_uses_epc(self):
        generator = PaymentQrCodeGenerator(make_invoice("EUR"), SETTINGS)

        assert generator.available()
        assert generator.format() == PaymentFormat.EPC

    def test_czk_uses_spayd(self):
        assert PaymentQrCodeGenerator(make_invoice("CZK"), SETTINGS).format() == PaymentFormat.SPAYD

    @pytest.mark.parametrize("currency", ["USD", None])
    def test_unsupported_currency(self, currency):
        generator = PaymentQrCodeGenerator(make_invoice(currency), SETTINGS)

        assert not generator.available()
        assert generator.payload() is None
        assert generator.to_data_url() is None

    def test_requires_iban(self):
        settings = Settings(id=1, company_name="Acme", main_currency="EUR", iban="  ")

        assert not PaymentQrCodeGenerator(make_invoice(), settings).available()

    def test_requires_positive_total(self):
        assert not PaymentQrCodeGenerator(make_invoice(amount="0"), SETTINGS).available()


class TestEpcPayload:
    def test_layout(self):
        """Eleven lines, empty purpose and structured reference."""
        payload = PaymentQrCodeGenerator(make_invoice("EUR"), SETTINGS).payload()

        assert payload.split("\n") == [
            "BCD",
            "002",
            "1",
            "SCT",
            "GIBACZPX",
            "Acme Consulting s.r.o.".ljust(70),
            "CZ6508000000192000145399",
            "EUR1210.00",
            "",
            "",
            "2024-001",
        ]

    def test_bank_account_overrides_settings(self):
        account = BankAccount(
            id=1,
            name="Business",
            iban="DE89 3704 0044 0532 0130 00",
            bic="COBADEFFXXX",
            currency="EUR",
            is_default=True,
            created_at=datetime(2024, 1, 1),
        )
        lines = PaymentQrCodeGenerator(make_invoice("EUR"), SETTINGS, account).payload().split("\n")

        assert lines[4] == "COBADEFFXXX"
        assert lines[5].rstrip() == "Acme Consulting s.r.o."
        assert lines[6] == "DE89370400440532013000"

    def test_missing_bic_leaves_empty_line(self):
        settings = Settings(id=1, company_name="Acme", main_currency="EUR", iban="DE89370400440532013000")

        assert PaymentQrCodeGenerator(make_invoice("EUR"), settings).payload().split("\n")[4] == ""


class TestSpaydPayload:
    def test_layout(self):
        payload = PaymentQrCodeGenerator(make_invoice("CZK", amount="24793.39"), SETTINGS).payload()

        assert payload == (
            "SPD*1.0*ACC:CZ6508000000192000145399+GIBACZPX*AM:30000.00*CC:CZK*MSG:2024-001*X-VS:2024001"
        )

    def test_without_bic(self):
        settings = Settings(id=1, company_name="Acme", main_currency="CZK", iban="CZ6508000000192000145399")
        payload = PaymentQrCodeGenerator(make_invoice("CZK"), settings).payload()

        assert payload.startswith("SPD*1.0*ACC:CZ6508000000192000145399*AM:")

    def test_number_without_digits_has_no_variable_symbol(self):
        payload = PaymentQrCodeGenerator(make_invoice("CZK", number="ABC"), SETTINGS).payload()

        assert "X-VS" not in payload


class TestRendering:
    def test_svg_document(self):
        svg = PaymentQrCodeGenerator(make_invoice("EUR"), SETTINGS).to_svg()

        assert b"<svg" in svg

    def test_data_url(self):
        data_url = PaymentQrCodeGenerator(make_invoice("CZK"), SETTINGS).to_data_url()

        prefix = "data:image/svg+xml;base64,"
        assert data_url.startswith(prefix)
        assert b"<svg" in base64.b64decode(data_url[len(prefix):])


class TestHelpers:
    def test_sanitize_iban(self):
        assert sanitize_iban(" CZ65 0800\t0000 ") == "CZ6508000000"
        assert sanitize_iban(None) == ""

    def test_beneficiary_name_is_fixed_width(self):
        assert len(format_beneficiary_name("Acme")) == 70
        assert format_beneficiary_name("x" * 80) == "x" * 70

    def test_spayd_text(self):
        assert sanitize_spayd_text("Faktura č. 2024/001*") == "Faktura . 2024/001"

    def test_variable_symbol(self):
        assert variable_symbol("2024-001") == "2024001"
        assert variable_symbol("INV-2024-000123") == "2024000123"
        assert variable_symbol("12345678901234") == "1234567890"


def test_invoice_service_prefers_default_account(
    invoice_service, bank_account_service, settings, draft_invoice
):
    """Without an explicit account the default bank account supplies the IBAN."""
    bank_account_service.create_account("Main", "DE89 3704 0044 0532 0130 00", "COBADEFFXXX", "EUR")

    generator = invoice_service.payment_qr(draft_invoice.id, settings)

    assert generator.iban == "DE89370400440532013000"
    assert "EUR2057.00" in generator.payload()


def test_invoice_service_falls_back_to_settings(invoice_service, settings, draft_invoice):
    generator = invoice_service.payment_qr(draft_invoice.id, settings)

    assert generator.iban == "CZ6508000000192000145399"
    assert generator.bic == "GIBACZPX"
