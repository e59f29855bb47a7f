"""Scraper for quotes and daily prices published by Naver Finance."""

from .models import PricePoint, QuoteSnapshot
from .naver import NaverFinanceClient

__all__ = ["NaverFinanceClient", "PricePoint", "QuoteSnapshot"]
