"""Value objects produced by the finance portal scraper."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal


@dataclass(slots=True, frozen=True)
class QuoteSnapshot:
    """Current quote fields; each one is None when the page did not provide it."""

    price: int | None
    per: Decimal | None
    pbr: Decimal | None
    foreign_ratio: Decimal | None


@dataclass(slots=True, frozen=True)
class PricePoint:
    date: date
    open: int
    high: int
    low: int
    close: int
    volume: int
