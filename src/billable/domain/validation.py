"""Field validation helpers shared by the domain services.

Each ``check_*`` helper appends messages to a per-field error dict; the
service raises once via :func:`raise_if_errors` so every problem is
reported together and nothing is persisted.
"""

import re
from decimal import Decimal
from typing import Optional

from schwifty import IBAN
from schwifty.exceptions import SchwiftyException

from billable.domain.errors import ValidationError

CURRENCY_PATTERN = re.compile(r"^[A-Z]{3}$")

FieldErrors = dict[str, list[str]]


def add_error(errors: FieldErrors, field: str, message: str) -> None:
    errors.setdefault(field, []).append(message)


def check_present(errors: FieldErrors, field: str, value: Optional[str]) -> None:
    if value is None or not str(value).strip():
        add_error(errors, field, "can't be blank")


def check_currency(errors: FieldErrors, field: str, value: Optional[str]) -> None:
    """Currency codes are optional but must be three uppercase letters."""
    if value is not None and value != "" and not CURRENCY_PATTERN.match(value):
        add_error(errors, field, "must be 3 uppercase letters (e.g., EUR, USD, CZK)")


def check_iban(errors: FieldErrors, field: str, value: Optional[str]) -> None:
    """Blank values are left to :func:`check_present`."""
    if value is None or not value.strip():
        return
    try:
        IBAN(value)
    except SchwiftyException:
        add_error(errors, field, "is not a valid IBAN")


def check_minimum(
    errors: FieldErrors,
    field: str,
    value: Optional[Decimal],
    minimum: Decimal = Decimal("0"),
    inclusive: bool = True,
) -> None:
    if value is None:
        return
    if inclusive and value < minimum:
        add_error(errors, field, f"must be greater than or equal to {minimum}")
    elif not inclusive and value <= minimum:
        add_error(errors, field, f"must be greater than {minimum}")


def check_vat_rate(errors: FieldErrors, field: str, value: Optional[Decimal]) -> None:
    if value is None:
        return
    if value < 0 or value > 100:
        add_error(errors, field, "must be between 0 and 100")


def raise_if_errors(errors: FieldErrors) -> None:
    if errors:
        raise ValidationError.from_errors(errors)


def normalize_currency(value: Optional[str]) -> Optional[str]:
    """Blank currency codes are stored as None."""
    if value is None or not value.strip():
        return None
    return value.strip()
