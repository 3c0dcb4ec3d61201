"""Domain layer for billable application."""

# Services import the database package, which imports domain entities, so
# they are resolved lazily here.
_SERVICES = {
    "BankAccountService": "billable.domain.bank_account",
    "ClientService": "billable.domain.client",
    "ExchangeRateService": "billable.domain.exchange_rate",
    "InvoiceBuilder": "billable.domain.invoice_builder",
    "InvoiceMatchingService": "billable.domain.matching",
    "InvoiceNumberGenerator": "billable.domain.numbering",
    "InvoiceService": "billable.domain.invoice",
    "MoneyTransactionService": "billable.domain.money_transaction",
    "PaymentQrCodeGenerator": "billable.domain.payment_qr",
    "PositionManager": "billable.domain.positions",
    "ProjectService": "billable.domain.project",
    "ReportingService": "billable.domain.reporting",
    "SettingsService": "billable.domain.settings",
    "WorkEntryService": "billable.domain.work_entry",
}

__all__ = sorted(_SERVICES)


def __getattr__(name):
    if name in _SERVICES:
        from importlib import import_module
        return getattr(import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
