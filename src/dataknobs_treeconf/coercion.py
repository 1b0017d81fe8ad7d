"""Conversion of raw configuration values to typed results.

Configuration values come from JSON, YAML, text files and environment
variables, so the same setting may arrive as ``5``, ``5.0`` or ``"5"``.
The converters below accept every representation that unambiguously
denotes the requested type and raise :class:`TypeMismatchError` otherwise.

Durations use the same literal grammar as Go's ``time.ParseDuration``:
a signed sequence of decimal numbers, each with a unit suffix, such as
``"300ms"``, ``"-1.5h"`` or ``"2h45m"``. Valid units are ``ns``, ``us``
(or ``µs``), ``ms``, ``s``, ``m`` and ``h``.
"""

import json
import math
import re
from datetime import timedelta
from decimal import Decimal, InvalidOperation
from typing import Any

from .exceptions import TypeMismatchError

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1
UINT64_MAX = 2**64 - 1

TRUE_LITERALS = frozenset(["1", "t", "true", "y", "yes", "on"])
FALSE_LITERALS = frozenset(["0", "f", "false", "n", "no", "off"])

# Duration unit -> microseconds
_DURATION_UNITS = {
    "ns": Decimal("0.001"),
    "us": Decimal(1),
    "µs": Decimal(1),  # micro sign
    "μs": Decimal(1),  # greek mu
    "ms": Decimal(1000),
    "s": Decimal(1_000_000),
    "m": Decimal(60_000_000),
    "h": Decimal(3_600_000_000),
}

_DURATION_PART = re.compile(r"(\d+\.?\d*|\.\d+)(ns|us|µs|μs|ms|s|m|h)")


def to_string(value: Any) -> str:
    """Render a raw value as a string.

    Booleans render as ``"true"``/``"false"``, durations in the duration
    literal grammar, dicts and lists as JSON and None as an empty string.
    """
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    if isinstance(value, timedelta):
        return format_duration(value)
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, default=to_string)
    return str(value)


def to_bool(key: str, value: Any) -> bool:
    """Convert a raw value to a boolean.

    Raises:
        TypeMismatchError: If value is neither a bool nor a boolean literal
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        literal = value.strip().lower()
        if literal in TRUE_LITERALS:
            return True
        if literal in FALSE_LITERALS:
            return False
    raise TypeMismatchError(key, value, "bool")


def _to_integer(key: str, value: Any, expected: str) -> int:
    if isinstance(value, bool):
        raise TypeMismatchError(key, value, expected)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            raise TypeMismatchError(key, value, expected)
        return int(value)
    if isinstance(value, Decimal):
        if not value.is_finite():
            raise TypeMismatchError(key, value, expected)
        return int(value)
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            # 0x1f, 0o17, 0b101
            return int(text, 0)
        except ValueError:
            raise TypeMismatchError(key, value, expected) from None
    raise TypeMismatchError(key, value, expected)


def to_int(key: str, value: Any) -> int:
    """Convert a raw value to a signed 64-bit integer.

    Floats are truncated toward zero. Strings are parsed as decimal, or with
    a ``0x``/``0o``/``0b`` prefix.

    Raises:
        TypeMismatchError: If value is not numeric or out of range
    """
    result = _to_integer(key, value, "int")
    if not INT64_MIN <= result <= INT64_MAX:
        raise TypeMismatchError(key, value, "int", f"Key '{key}': {value!r} out of int64 range")
    return result


def to_uint(key: str, value: Any) -> int:
    """Convert a raw value to an unsigned 64-bit integer.

    Raises:
        TypeMismatchError: If value is not numeric, negative or out of range
    """
    result = _to_integer(key, value, "uint")
    if not 0 <= result <= UINT64_MAX:
        raise TypeMismatchError(key, value, "uint", f"Key '{key}': {value!r} out of uint64 range")
    return result


def to_float(key: str, value: Any) -> float:
    """Convert a raw value to a float.

    Raises:
        TypeMismatchError: If value is not numeric
    """
    if isinstance(value, bool):
        raise TypeMismatchError(key, value, "float")
    if isinstance(value, float):
        return value
    if isinstance(value, Decimal):
        result = float(value)
        if math.isinf(result) and value.is_finite():
            # float(Decimal("1e999")) overflows silently
            raise TypeMismatchError(key, value, "float", f"Key '{key}': {value!r} out of range")
        return result
    if isinstance(value, int):
        try:
            return float(value)
        except OverflowError:
            raise TypeMismatchError(key, value, "float", f"Key '{key}': {value!r} out of range") from None
    if isinstance(value, str):
        try:
            result = float(value.strip())
        except ValueError:
            raise TypeMismatchError(key, value, "float") from None
        if math.isinf(result) and "inf" not in value.lower():
            # float("1e999") overflows silently
            raise TypeMismatchError(key, value, "float", f"Key '{key}': {value!r} out of range")
        return result
    raise TypeMismatchError(key, value, "float")


def parse_duration(text: str) -> timedelta:
    """Parse a duration literal such as ``"1h30m"`` or ``"-250ms"``.

    Args:
        text: Duration literal

    Returns:
        Parsed duration

    Raises:
        ValueError: If text does not follow the duration grammar
    """
    literal = text.strip()
    body = literal
    negative = False
    if body[:1] in ("+", "-"):
        negative = body[0] == "-"
        body = body[1:]
    if body == "0":
        return timedelta(0)
    if not body:
        raise ValueError(f"Invalid duration: {text!r}")

    total = Decimal(0)
    pos = 0
    while pos < len(body):
        match = _DURATION_PART.match(body, pos)
        if match is None:
            raise ValueError(f"Invalid duration: {text!r}")
        try:
            total += Decimal(match.group(1)) * _DURATION_UNITS[match.group(2)]
        except InvalidOperation:
            raise ValueError(f"Invalid duration: {text!r}") from None
        pos = match.end()

    try:
        result = timedelta(microseconds=float(total))
    except OverflowError:
        raise ValueError(f"Duration out of range: {text!r}") from None
    return -result if negative else result


def _trim(number: Decimal) -> str:
    text = format(number, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def format_duration(value: timedelta) -> str:
    """Render a duration in the literal grammar accepted by parse_duration.

    Example:
        >>> format_duration(timedelta(hours=1, minutes=30))
        '1h30m0s'
    """
    micros = value // timedelta(microseconds=1)
    if micros == 0:
        return "0s"
    sign = "-" if micros < 0 else ""
    micros = abs(micros)

    if micros < 1_000:
        return f"{sign}{micros}µs"
    if micros < 1_000_000:
        return f"{sign}{_trim(Decimal(micros) / 1000)}ms"

    hours, rest = divmod(micros, 3_600_000_000)
    minutes, rest = divmod(rest, 60_000_000)
    seconds = _trim(Decimal(rest) / 1_000_000)
    if hours:
        return f"{sign}{hours}h{minutes}m{seconds}s"
    if minutes:
        return f"{sign}{minutes}m{seconds}s"
    return f"{sign}{seconds}s"


def to_duration(key: str, value: Any) -> timedelta:
    """Convert a raw value to a duration.

    Durations are accepted as-is, strings are parsed with
    :func:`parse_duration` and numbers are rendered as strings then parsed,
    so only a bare ``0`` (or ``0.0``) is accepted without a unit.

    Raises:
        TypeMismatchError: If value is not a valid duration
    """
    if isinstance(value, timedelta):
        return value
    if isinstance(value, bool):
        raise TypeMismatchError(key, value, "duration")
    if isinstance(value, float) and value.is_integer():
        # Render 0.0 as "0"
        value = int(value)
    if isinstance(value, (str, int, float, Decimal)):
        try:
            return parse_duration(str(value))
        except ValueError:
            raise TypeMismatchError(key, value, "duration") from None
    raise TypeMismatchError(key, value, "duration")
