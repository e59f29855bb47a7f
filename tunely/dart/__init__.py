"""Client for the Open DART disclosure API."""

from .client import DartClient
from .models import CorpInfo, CorpSearchResult, FinancialLineItem, ReportCode

__all__ = [
    "CorpInfo",
    "CorpSearchResult",
    "DartClient",
    "FinancialLineItem",
    "ReportCode",
]
