"""Rule Predicates

Pure functions from a field value (and, for parameterized rules, the parsed
parameter) to a validity verdict. Predicates never raise for wrong-typed
values: a value of the wrong type simply fails the rule.

Domain predicates:
    validates_phone("(555) 123-4567")       -> True
    validates_timezone("America/New_York")  -> True
    validates_coordinates("40.7128,-74.0060") -> True

The remaining predicates form the baseline vocabulary (required, min, max,
email, ...) registered by build_default_registry().
"""
from __future__ import annotations

import re
from collections.abc import Mapping, Sized
from decimal import Decimal
from ipaddress import IPv4Address, IPv6Address, ip_address
from typing import Any
from urllib.parse import urlparse
from uuid import UUID
from zoneinfo import ZoneInfo

_PHONE = re.compile(r"\(?([0-9]{3})\)?[ \-.●]?([0-9]{3})[ \-.●]?([0-9]{4})")
# No range check on either number: "200,40" matches.
_COORDINATES = re.compile(r"(-?[0-9]+)(\.[0-9]+)?,(-?[0-9]+)(\.[0-9]+)?")
_EMAIL = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
_ALPHA = re.compile(r"[a-zA-Z]+")
_ALPHANUM = re.compile(r"[a-zA-Z0-9]+")
_NUMERIC = re.compile(r"[-+]?[0-9]+(?:\.[0-9]+)?")

Number = int | float | Decimal


# ============================================================================
# Domain Predicates
# ============================================================================

def validates_phone(value: Any) -> bool:
    """Match a North American style number: optional (area code), 3 digits, 4 digits."""
    return isinstance(value, str) and _PHONE.fullmatch(value) is not None


def validates_timezone(value: Any) -> bool:
    """True if value names a location in the IANA timezone database."""
    if not isinstance(value, str) or not value:
        return False
    try:
        ZoneInfo(value)
    except (KeyError, ValueError, OSError):
        # ZoneInfoNotFoundError is a KeyError subclass
        return False
    return True


def validates_coordinates(value: Any) -> bool:
    """Match a "lat,long" pair of signed decimals."""
    return isinstance(value, str) and _COORDINATES.fullmatch(value) is not None


# ============================================================================
# Parameter Parsers (raise ValueError on malformed parameters)
# ============================================================================

def parse_number(param: str) -> Number:
    """Parse a numeric rule parameter, preferring int."""
    try:
        return int(param)
    except ValueError:
        return float(param)


def parse_options(param: str) -> tuple[str, ...]:
    if not (options := tuple(param.split())):
        raise ValueError("oneof requires at least one option")
    return options


# ============================================================================
# Presence
# ============================================================================

def is_empty(value: Any) -> bool:
    """None, an empty string or an empty collection."""
    if value is None:
        return True
    if isinstance(value, (str, bytes, Mapping, list, tuple, set, frozenset)):
        return len(value) == 0
    return False


def required(value: Any) -> bool:
    return not is_empty(value)


# ============================================================================
# Size and Value Comparisons
# ============================================================================

def _measure(value: Any) -> Number | None:
    """Length for sized values, the value itself for numbers."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        return value
    if isinstance(value, Sized):
        return len(value)
    return None


def length(value: Any, param: Number) -> bool:
    return (measured := _measure(value)) is not None and measured == param


def minimum(value: Any, param: Number) -> bool:
    return (measured := _measure(value)) is not None and measured >= param


def maximum(value: Any, param: Number) -> bool:
    return (measured := _measure(value)) is not None and measured <= param


def greater_than(value: Any, param: Number) -> bool:
    return (measured := _measure(value)) is not None and measured > param


def less_than(value: Any, param: Number) -> bool:
    return (measured := _measure(value)) is not None and measured < param


def equals(value: Any, param: str) -> bool:
    """Strings compare literally, everything else by length or value."""
    if isinstance(value, str):
        return value == param
    try:
        return length(value, parse_number(param))
    except ValueError:
        return False


def not_equals(value: Any, param: str) -> bool:
    if isinstance(value, str):
        return value != param
    try:
        expected = parse_number(param)
    except ValueError:
        return False
    return (measured := _measure(value)) is not None and measured != expected


def one_of(value: Any, param: tuple[str, ...]) -> bool:
    if value is None or isinstance(value, bool):
        return False
    return str(value) in param


# ============================================================================
# Formats
# ============================================================================

def _matches(pattern: re.Pattern, value: Any) -> bool:
    return isinstance(value, str) and pattern.fullmatch(value) is not None


def alpha(value: Any) -> bool:
    return _matches(_ALPHA, value)


def alphanumeric(value: Any) -> bool:
    return _matches(_ALPHANUM, value)


def numeric(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    return isinstance(value, (int, float, Decimal)) or _matches(_NUMERIC, value)


def email(value: Any) -> bool:
    return _matches(_EMAIL, value)


def url(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    parsed = urlparse(value)
    return bool(parsed.scheme) and bool(parsed.netloc or parsed.path)


def uuid(value: Any) -> bool:
    if isinstance(value, UUID):
        return True
    if not isinstance(value, str):
        return False
    try:
        UUID(value)
    except ValueError:
        return False
    return True


def _ip(value: Any) -> IPv4Address | IPv6Address | None:
    if not isinstance(value, (str, IPv4Address, IPv6Address)):
        return None
    try:
        return ip_address(value)
    except ValueError:
        return None


def ip(value: Any) -> bool:
    return _ip(value) is not None


def ipv4(value: Any) -> bool:
    return isinstance(_ip(value), IPv4Address)


def ipv6(value: Any) -> bool:
    return isinstance(_ip(value), IPv6Address)


def _degrees(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        return float(value)
    if _matches(_NUMERIC, value):
        return float(value)
    return None


def latitude(value: Any) -> bool:
    return (deg := _degrees(value)) is not None and -90 <= deg <= 90


def longitude(value: Any) -> bool:
    return (deg := _degrees(value)) is not None and -180 <= deg <= 180
