"""Numeric and date parsing for scraped and disclosed values.

Every helper returns None instead of raising when the text is not a number.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

_SEPARATORS_RE = re.compile(r"[,\s]")
_INTEGER_RE = re.compile(r"^[+-]?\d+$")
_DECIMAL_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)$")


def strip_separators(text: str | None) -> str:
    if text is None:
        return ""
    return _SEPARATORS_RE.sub("", text)


def parse_int(text: str | None) -> int | None:
    cleaned = strip_separators(text)
    if not _INTEGER_RE.match(cleaned):
        return None
    return int(cleaned)


def parse_decimal(text: str | None) -> Decimal | None:
    cleaned = strip_separators(text)
    if not _DECIMAL_RE.match(cleaned):
        return None
    try:
        return Decimal(cleaned)
    except InvalidOperation:  # pragma: no cover - guarded by the pattern
        return None


def parse_ratio(text: str | None) -> Decimal | None:
    """Parse a percentage such as ``"51.23%"`` into ``Decimal("51.23")``."""
    if text is None:
        return None
    return parse_decimal(text.replace("%", ""))


def parse_date(text: str | None, fmt: str = "%Y.%m.%d") -> date | None:
    if not text:
        return None
    try:
        return datetime.strptime(text.strip(), fmt).date()
    except ValueError:
        return None
