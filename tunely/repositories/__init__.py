"""Repository layer for database operations."""

from .company import CompanyRepository
from .financial import FinancialRepository
from .stock import StockDataRepository, StockHistoryRepository
from .user_company import UserCompanyRepository

__all__ = [
    "CompanyRepository",
    "FinancialRepository",
    "StockDataRepository",
    "StockHistoryRepository",
    "UserCompanyRepository",
]
