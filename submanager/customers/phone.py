"""Phone number normalization to ``"<countryCode> <nationalNumber>"``."""

import re
from typing import Optional, Tuple

from submanager.core.config import settings
from submanager.core.exceptions import ValidationError

# Dialing codes recognized in numbers written without a separator ("+971501234567")
COUNTRY_PHONE_CODES = (
    "+966", "+971", "+974", "+973", "+965", "+968", "+967", "+962", "+961",
    "+963", "+964", "+20", "+970", "+212", "+213", "+216", "+218", "+249",
    "+90", "+92", "+91", "+44", "+49", "+33", "+1",
)

_PREFIXED = re.compile(r"^\s*(\+\d{1,4})[\s\-().]+(.+)$")
_COUNTRY_CODE = re.compile(r"^\+\d{1,4}$")


def _leading_code(digits: str, default_code: str) -> Optional[re.Match]:
    """Longest known dialing code at the start of digits."""
    codes = {code.lstrip("+") for code in COUNTRY_PHONE_CODES}
    codes.add(default_code.lstrip("+"))
    pattern = "|".join(re.escape(code) for code in sorted(codes, key=len, reverse=True))
    return re.match(pattern, digits)


def split_phone(phone: str, default_code: Optional[str] = None) -> Tuple[str, str]:
    """Split a raw phone string into (country code, remaining text)."""
    default_code = default_code or settings.DEFAULT_COUNTRY_CODE
    phone = (phone or "").strip()

    match = _PREFIXED.match(phone)
    if match:
        return match.group(1), match.group(2)
    if phone.startswith("+"):
        digits = re.sub(r"\D", "", phone)
        code = _leading_code(digits, default_code)
        if code is None:
            message = "Unknown country code"
            raise ValidationError(message, fields={"phone": message})
        return "+" + code.group(0), digits[code.end():]
    return default_code, phone


def normalize_phone(phone: str, country_code: Optional[str] = None) -> str:
    """Return the canonical stored form of a phone number.

    An explicit country_code wins over a ``+code`` prefix in the number,
    which wins over DEFAULT_COUNTRY_CODE. Non-digits and leading zeros are
    dropped from the national part.
    """
    if country_code:
        country_code = country_code.strip()
        if not country_code.startswith("+"):
            country_code = "+" + country_code
        if not _COUNTRY_CODE.match(country_code):
            raise ValidationError("Invalid country code", fields={"countryCode": "Invalid country code"})
        _, national = split_phone(phone, country_code)
    else:
        country_code, national = split_phone(phone)

    national = re.sub(r"\D", "", national).lstrip("0")
    if not national:
        raise ValidationError("Phone number is required", fields={"phone": "Phone number is required"})
    return f"{country_code} {national}"
