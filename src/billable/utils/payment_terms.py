"""Legacy payment terms parsing."""

import re
from typing import Optional

_NET_DAYS = re.compile(r"^\s*(?:net\s*)?(\d{1,4})(?:\s*days?)?\s*$", re.IGNORECASE)


def parse_payment_terms(terms: Optional[str]) -> Optional[int]:
    """Extract the number of days from free-text terms such as "Net 30".

    Accepts "Net 30", "net 14 days", "30 days" and "30". Anything else,
    including empty text, yields None so the caller applies no default.
    """
    if terms is None:
        return None
    match = _NET_DAYS.match(terms)
    if match is None:
        return None
    return int(match.group(1))
