"""Primitive parsers for loosely typed filter and record input.

Every parser returns one of three outcomes:

* ``ABSENT`` - nothing was supplied (``None`` or a blank string), so the
  caller may apply a default;
* ``Valid(value)`` - the input parsed and passed its range checks;
* ``Invalid(reason)`` - something was supplied but it is malformed.  The
  caller must fail the whole operation instead of falling back to a default.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import ROUND_HALF_UP, Decimal
from enum import StrEnum
from typing import Any

_IATA_RE = re.compile(r"[A-Z]{3}")
_ISO_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}", re.ASCII)
_TIME_RE = re.compile(r"(\d{2}):(\d{2})", re.ASCII)
_INT_RE = re.compile(r"[-+]?\d+", re.ASCII)
_NUMBER_RE = re.compile(r"[-+]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][-+]?\d+)?", re.ASCII)

_CENT = Decimal("0.01")
# Largest integer a double represents exactly; bigger values overflow the store.
_MAX_SAFE_INTEGER = 2**53 - 1


@dataclass(frozen=True, slots=True)
class Absent:
    """No value was supplied."""


@dataclass(frozen=True, slots=True)
class Valid[T]:
    """A present, well-formed value."""

    value: T


@dataclass(frozen=True, slots=True)
class Invalid:
    """A present but malformed value; ``reason`` is the user-facing message."""

    reason: str


ABSENT = Absent()

type ParseResult[T] = Absent | Valid[T] | Invalid


def is_blank(value: Any) -> bool:
    """Return True for ``None`` and whitespace-only strings."""
    return value is None or (isinstance(value, str) and not value.strip())


# ------------------------------------------------------------------
# Text
# ------------------------------------------------------------------


def parse_text(value: Any, field: str) -> ParseResult[str]:
    """Trimmed non-empty string."""
    if is_blank(value):
        return ABSENT
    if not isinstance(value, str):
        return Invalid(f"{field} must be a string")
    return Valid(value.strip())


def parse_iata(value: Any, field: str) -> ParseResult[str]:
    """Exactly three uppercase Latin letters."""
    if is_blank(value):
        return ABSENT
    if isinstance(value, str) and _IATA_RE.fullmatch(value.strip()):
        return Valid(value.strip())
    return Invalid(f"{field} must be an uppercase 3-letter IATA code")


def parse_choice[E: StrEnum](
    value: Any, field: str, choices: type[E]
) -> ParseResult[E]:
    """Exact (case-sensitive) membership in a string enum."""
    if is_blank(value):
        return ABSENT
    if isinstance(value, str):
        try:
            return Valid(choices(value.strip()))
        except ValueError:
            pass
    allowed = ", ".join(member.value for member in choices)
    return Invalid(f"{field} must be one of: {allowed}")


# ------------------------------------------------------------------
# Calendar
# ------------------------------------------------------------------


def parse_iso_date(value: Any, field: str) -> ParseResult[date]:
    """``YYYY-MM-DD`` naming a real calendar day (``2024-02-30`` is rejected)."""
    if is_blank(value):
        return ABSENT
    if isinstance(value, date) and not isinstance(value, datetime):
        return Valid(value)
    if isinstance(value, str):
        text = value.strip()
        if _ISO_DATE_RE.fullmatch(text):
            try:
                return Valid(date.fromisoformat(text))
            except ValueError:
                pass
    return Invalid(f"{field} must be YYYY-MM-DD")


def parse_time_of_day(value: Any, field: str) -> ParseResult[time]:
    """``HH:MM`` with hours 00-23 and minutes 00-59."""
    if is_blank(value):
        return ABSENT
    if isinstance(value, str):
        m = _TIME_RE.fullmatch(value.strip())
        if m:
            hours, minutes = int(m.group(1)), int(m.group(2))
            if hours <= 23 and minutes <= 59:
                return Valid(time(hours, minutes))
    return Invalid(f"{field} must be HH:MM")


# ------------------------------------------------------------------
# Numbers
# ------------------------------------------------------------------


def _to_number(value: Any) -> int | float | None:
    """Numeric or numeric-string input as a finite, safe-range number, else None."""
    number: int | float | None = None
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        number = value
    elif isinstance(value, str):
        text = value.strip()
        if _INT_RE.fullmatch(text):
            number = int(text)
        elif _NUMBER_RE.fullmatch(text):
            number = float(text)
    # Range before isfinite: float() of a huge int overflows.
    if number is None or abs(number) > _MAX_SAFE_INTEGER:
        return None
    return number if math.isfinite(number) else None


def _to_integer(value: Any) -> int | None:
    number = _to_number(value)
    if number is None:
        return None
    if isinstance(number, float):
        if not number.is_integer():
            return None
        return int(number)
    return number


def parse_integer(value: Any, field: str, message: str) -> ParseResult[int]:
    """Any integral number; *message* is reported when it is not one."""
    if is_blank(value):
        return ABSENT
    number = _to_integer(value)
    if number is None:
        return Invalid(f"{field} {message}")
    return Valid(number)


def parse_positive_int(value: Any, field: str) -> ParseResult[int]:
    if is_blank(value):
        return ABSENT
    number = _to_integer(value)
    if number is None or number <= 0:
        return Invalid(f"{field} must be a positive integer")
    return Valid(number)


def parse_non_negative_int(value: Any, field: str) -> ParseResult[int]:
    if is_blank(value):
        return ABSENT
    number = _to_integer(value)
    if number is None or number < 0:
        return Invalid(f"{field} must be a non-negative integer")
    return Valid(number)


def parse_non_negative_number(value: Any, field: str) -> ParseResult[float]:
    if is_blank(value):
        return ABSENT
    number = _to_number(value)
    if number is None or number < 0:
        return Invalid(f"{field} must be a non-negative number")
    return Valid(float(number))


# ------------------------------------------------------------------
# Booleans
# ------------------------------------------------------------------


def parse_bool(value: Any, field: str, *, textual: bool = False) -> ParseResult[bool]:
    """Strict boolean.

    JSON bodies must carry a real ``true``/``false``.  With ``textual=True``
    (query strings) the tokens ``"true"`` and ``"false"`` are accepted in any
    case; every other token is invalid rather than falsy.
    """
    if value is None:
        return ABSENT
    if isinstance(value, bool):
        return Valid(value)
    if textual:
        if isinstance(value, str):
            token = value.strip().lower()
            if token == "":
                return ABSENT
            if token in ("true", "false"):
                return Valid(token == "true")
        return Invalid(f"{field} must be true or false")
    return Invalid(f"{field} must be a boolean")


def round2(value: float) -> float:
    """Round to cents, halves away from zero (``123.455`` -> ``123.46``)."""
    return float(Decimal(str(value)).quantize(_CENT, rounding=ROUND_HALF_UP))
