from __future__ import annotations

import re

# Character classes are ASCII-only so quotes, semicolons, angle brackets,
# control bytes and non-ASCII text never reach a store expression.
_USER_ID_RE = re.compile(r"[A-Za-z0-9_-]+")
_ADDRESS_ID_RE = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}",
    re.IGNORECASE,
)
_STREET_RE = re.compile(r"[A-Za-z0-9 \t\n\r\f\v\-'.,#]+")
_SUBURB_RE = re.compile(r"[A-Za-z0-9 \t\n\r\f\v\-'.]+")
_COUNTRY_RE = re.compile(r"[A-Za-z0-9 \t\n\r\f\v\-']+")
_POSTCODE_RE = re.compile(r"[0-9]{4}")

USER_ID_MAX_LEN = 128

STATES = ("NSW", "VIC", "QLD", "WA", "SA", "TAS", "ACT", "NT")
ADDRESS_TYPES = ("billing", "mailing", "residential", "business")


def is_valid_user_id(user_id: str) -> bool:
    if not isinstance(user_id, str) or not 1 <= len(user_id) <= USER_ID_MAX_LEN:
        return False
    return _USER_ID_RE.fullmatch(user_id) is not None


def is_valid_address_id(address_id: str) -> bool:
    return isinstance(address_id, str) and _ADDRESS_ID_RE.fullmatch(address_id) is not None


def is_valid_street_address(value: str) -> bool:
    return isinstance(value, str) and bool(value.strip()) and _STREET_RE.fullmatch(value) is not None


def is_valid_suburb(value: str) -> bool:
    return isinstance(value, str) and bool(value.strip()) and _SUBURB_RE.fullmatch(value) is not None


def is_valid_state(value: str) -> bool:
    return isinstance(value, str) and value.upper() in STATES


def is_valid_country(value: str) -> bool:
    return isinstance(value, str) and bool(value.strip()) and _COUNTRY_RE.fullmatch(value) is not None


def is_valid_postcode(value: str) -> bool:
    return isinstance(value, str) and _POSTCODE_RE.fullmatch(value) is not None


def is_valid_address_type(value: str) -> bool:
    return isinstance(value, str) and value.lower() in ADDRESS_TYPES
