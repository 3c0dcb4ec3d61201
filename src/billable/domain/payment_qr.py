"""Payment QR codes for invoices.

Two payload standards are supported:

- EPC QR code (SEPA Credit Transfer, "BCD" format) for EUR invoices
- SPAYD (Czech "QR Platba") for CZK invoices

Example:
    Render a code for an invoice::

        generator = PaymentQrCodeGenerator(invoice, settings)
        if generator.available():
            data_url = generator.to_data_url()
"""

import base64
import re
from decimal import Decimal
from io import BytesIO
from typing import Optional

import qrcode
import qrcode.image.svg

from billable.domain.entities import BankAccount, Invoice, PaymentFormat, Settings

FORMATS = {
    "EUR": PaymentFormat.EPC,
    "CZK": PaymentFormat.SPAYD,
}

EPC_NAME_LENGTH = 70
EPC_REMITTANCE_LENGTH = 140
SPAYD_MESSAGE_LENGTH = 60
VARIABLE_SYMBOL_LENGTH = 10


def sanitize_iban(iban: Optional[str]) -> str:
    """Strip all whitespace from an IBAN or BIC."""
    return re.sub(r"\s+", "", iban or "")


def format_beneficiary_name(name: Optional[str]) -> str:
    """Pad or cut a company name to exactly the EPC name width."""
    return (name or "").ljust(EPC_NAME_LENGTH)[:EPC_NAME_LENGTH]


def sanitize_spayd_text(text: str) -> str:
    """Keep only characters SPAYD accepts in a message."""
    return re.sub(r"[^A-Za-z0-9 .\-/]", "", text).strip()[:SPAYD_MESSAGE_LENGTH]


def variable_symbol(invoice_number: str) -> str:
    """Digits of an invoice number, e.g. 2024-001 -> 2024001."""
    return re.sub(r"\D", "", invoice_number)[:VARIABLE_SYMBOL_LENGTH]


def format_amount(amount: Decimal) -> str:
    return f"{amount:.2f}"


class PaymentQrCodeGenerator:
    """Encode an invoice's banking details into a payment QR code.

    IBAN and BIC come from ``bank_account`` when one is given and from the
    settings otherwise. The beneficiary name always comes from settings.
    """

    def __init__(self, invoice: Invoice, settings: Settings, bank_account: Optional[BankAccount] = None):
        """Initialize payment QR code generator.

        Args:
            invoice: Invoice to be paid
            settings: Ledger settings (company name, fallback banking details)
            bank_account: Optional account overriding the settings' IBAN/BIC
        """
        self.invoice = invoice
        self.settings = settings
        self.bank_account = bank_account

    @property
    def iban(self) -> str:
        source = self.bank_account if self.bank_account is not None else self.settings
        return sanitize_iban(source.iban)

    @property
    def bic(self) -> str:
        source = self.bank_account if self.bank_account is not None else self.settings
        return sanitize_iban(source.bic)

    def available(self) -> bool:
        """Whether a code can be produced: IBAN set, supported currency, positive total."""
        return (
            bool(self.iban)
            and self.invoice.currency in FORMATS
            and self.invoice.grand_total > 0
        )

    def format(self) -> Optional[PaymentFormat]:
        """Payload standard for the invoice currency, None when unavailable."""
        if not self.available():
            return None
        return FORMATS[self.invoice.currency]

    def payload(self) -> Optional[str]:
        """Text encoded into the QR code, None when unavailable."""
        payment_format = self.format()
        if payment_format == PaymentFormat.EPC:
            return self.epc_payload()
        if payment_format == PaymentFormat.SPAYD:
            return self.spayd_payload()
        return None

    def epc_payload(self) -> str:
        """EPC069-12 version 002 payload, one field per line."""
        return "\n".join(
            [
                "BCD",
                "002",
                "1",
                "SCT",
                self.bic,
                format_beneficiary_name(self.settings.company_name),
                self.iban,
                f"EUR{format_amount(self.invoice.grand_total)}",
                "",
                "",
                self.invoice.number[:EPC_REMITTANCE_LENGTH],
            ]
        )

    def spayd_payload(self) -> str:
        """SPAYD 1.0 payload with the invoice number as variable symbol."""
        account = f"ACC:{self.iban}"
        if self.bic:
            account += f"+{self.bic}"
        parts = [
            "SPD*1.0",
            account,
            f"AM:{format_amount(self.invoice.grand_total)}",
            f"CC:{self.invoice.currency}",
            f"MSG:{sanitize_spayd_text(self.invoice.number)}",
        ]
        symbol = variable_symbol(self.invoice.number)
        if symbol:
            parts.append(f"X-VS:{symbol}")
        return "*".join(parts)

    def to_svg(self) -> Optional[bytes]:
        """Render the payload as a standalone SVG document."""
        payload = self.payload()
        if payload is None:
            return None

        qr = qrcode.QRCode(
            error_correction=qrcode.constants.ERROR_CORRECT_M,
            box_size=10,
            border=4,
            image_factory=qrcode.image.svg.SvgPathImage,
        )
        qr.add_data(payload)
        qr.make(fit=True)

        buffer = BytesIO()
        qr.make_image().save(buffer)
        return buffer.getvalue()

    def to_data_url(self) -> Optional[str]:
        """SVG QR code as a base64 data URL, None when unavailable."""
        svg = self.to_svg()
        if svg is None:
            return None
        return "data:image/svg+xml;base64," + base64.b64encode(svg).decode("ascii")
