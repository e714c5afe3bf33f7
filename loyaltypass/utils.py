"""Phone and locale helpers."""

import re

import phonenumbers
from phonenumbers import NumberParseException

from loyaltypass.conf import loyaltypass_settings

# Characters accepted at registration: digits, spaces, dashes, parentheses, leading "+"
PHONE_INPUT_PATTERN = re.compile(r"^\+?[\d\s\-\(\)]+$")


def normalize_phone(value: str, region: str | None = None) -> str:
    """
    Normalize a phone number to E.164 (+14155552671).

    Numbers without a country code are parsed in ``region``
    (defaults to LOYALTYPASS["DEFAULT_REGION"]).

    Returns:
        E.164 string, or "" if the value is not a possible phone number.
    """
    if not value or not isinstance(value, str):
        return ""
    value = value.strip()
    if not PHONE_INPUT_PATTERN.match(value):
        return ""

    try:
        parsed = phonenumbers.parse(value, region or loyaltypass_settings.DEFAULT_REGION)
    except NumberParseException:
        return ""

    if not phonenumbers.is_possible_number(parsed):
        return ""
    return phonenumbers.format_number(parsed, phonenumbers.PhoneNumberFormat.E164)


def resolve_locale(locale: str | None) -> str:
    """Map a requested locale ("es", "es-MX") to a supported one, else the default."""
    supported = loyaltypass_settings.SUPPORTED_LOCALES
    if isinstance(locale, str) and locale:
        candidate = locale.strip().lower().replace("_", "-")
        if candidate in supported:
            return candidate
        base = candidate.split("-", 1)[0]
        if base in supported:
            return base
    return loyaltypass_settings.DEFAULT_LOCALE
