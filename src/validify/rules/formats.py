"""Format predicates used by the parameterless string validators."""

import ipaddress
import logging
import re
import unicodedata
from urllib.parse import urlsplit

import phonenumbers
from email_validator import EmailNotValidError, validate_email
from phonenumbers import NumberParseException

logger = logging.getLogger(__name__)

_CARD_SEPARATORS = re.compile(r"[\s-]")

# (prefix range start, prefix range end, prefix length)
_CARD_PREFIXES = [
    (4, 4, 1),            # Visa
    (51, 55, 2),          # Mastercard
    (2221, 2720, 4),      # Mastercard 2-series
    (34, 34, 2),          # American Express
    (37, 37, 2),
    (6011, 6011, 4),      # Discover
    (65, 65, 2),
    (644, 649, 3),
    (300, 305, 3),        # Diners Club
    (36, 36, 2),
    (38, 38, 2),
    (3528, 3589, 4),      # JCB
    (62, 62, 2),          # UnionPay
]


def is_email(value: str) -> bool:
    """Check the RFC 5322 derived mailbox grammar, without DNS lookups."""
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError as e:
        logger.debug(f"Rejected email {value!r}: {e}")
        return False
    return True


def is_url(value: str) -> bool:
    if not value or any(ch.isspace() for ch in value):
        return False
    try:
        parts = urlsplit(value)
    except ValueError:
        return False
    if not parts.scheme or not parts.netloc:
        return False
    try:
        # Accessing port validates it is numeric and in range
        parts.port
    except ValueError:
        return False
    return parts.hostname is not None


def has_no_control_chars(value: str) -> bool:
    return not any(unicodedata.category(ch) == "Cc" for ch in value)


def luhn_checksum_ok(digits: str) -> bool:
    total = 0
    for position, digit in enumerate(reversed(digits)):
        number = int(digit)
        if position % 2 == 1:
            number *= 2
            if number > 9:
                number -= 9
        total += number
    return total % 10 == 0


def is_credit_card(value: str) -> bool:
    """Length, issuer prefix and Luhn checksum."""
    digits = _CARD_SEPARATORS.sub("", value)
    if not digits.isascii() or not digits.isdigit():
        return False
    if not 12 <= len(digits) <= 19:
        return False
    if not any(start <= int(digits[:size]) <= end for start, end, size in _CARD_PREFIXES):
        return False
    return luhn_checksum_ok(digits)


def is_phone(value: str) -> bool:
    """Validate an international number; no default region is assumed."""
    try:
        number = phonenumbers.parse(value, None)
    except NumberParseException as e:
        logger.debug(f"Rejected phone {value!r}: {e}")
        return False
    return phonenumbers.is_valid_number(number)


def is_ip(value: str, version: int | None = None) -> bool:
    try:
        address = ipaddress.ip_address(value)
    except ValueError:
        return False
    return version is None or address.version == version
