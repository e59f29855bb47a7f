"""SQLAlchemy models for the tunely collection service."""

from __future__ import annotations

from .company import Company, UserCompany
from .financial import Financial
from .stock import StockData, StockHistory

__all__ = [
    "Company",
    "Financial",
    "StockData",
    "StockHistory",
    "UserCompany",
]
