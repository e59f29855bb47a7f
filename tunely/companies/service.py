"""Company registration, lookup and collection entry points."""

from __future__ import annotations

import calendar
import logging
from dataclasses import dataclass
from datetime import date
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from ..collection import CollectionResult, CollectionService
from ..dart import CorpInfo, CorpSearchResult
from ..errors import CompanyNotFoundError
from ..models import Company, Financial, StockHistory
from ..repositories import (
    CompanyRepository,
    FinancialRepository,
    StockHistoryRepository,
    UserCompanyRepository,
)

LOGGER = logging.getLogger(__name__)


class CompanyDirectory(Protocol):
    async def search_by_name(self, query: str) -> list[CorpSearchResult]: ...

    async def lookup_company(self, corp_code: str) -> CorpInfo | None: ...


@dataclass(slots=True)
class QuarterDetail:
    financial: Financial | None
    stock_history: list[StockHistory]


def quarter_date_range(year: int, quarter: int) -> tuple[date, date]:
    """Return the first and last calendar day of a fiscal quarter."""
    if quarter not in (1, 2, 3, 4):
        raise ValueError(f"Quarter must be between 1 and 4, got {quarter}")
    first_month = 3 * (quarter - 1) + 1
    last_month = first_month + 2
    last_day = calendar.monthrange(year, last_month)[1]
    return date(year, first_month, 1), date(year, last_month, last_day)


class CompanyService:
    """Operations behind the company routes.

    Companies are shared between users; each user only adds or removes their
    own registration link.
    """

    def __init__(
        self,
        session: AsyncSession,
        directory: CompanyDirectory,
        collector: CollectionService,
    ) -> None:
        self._companies = CompanyRepository(session)
        self._links = UserCompanyRepository(session)
        self._financials = FinancialRepository(session)
        self._stock_history = StockHistoryRepository(session)
        self._directory = directory
        self._collector = collector

    async def search(self, name: str) -> list[CorpSearchResult]:
        return await self._directory.search_by_name(name)

    async def register(
        self,
        user_id: str,
        corp_code: str,
        corp_name: str,
        stock_code: str | None = None,
    ) -> Company:
        """Register a company for a user.

        The first registration of a corp code creates the company and runs an
        initial collection. Registering a company the user already has is a
        no-op.
        """
        company = await self._companies.get_by_corp_code(corp_code)
        if company is not None and await self._links.get(user_id, company.id) is not None:
            return await self.get(company.id)

        if company is None and stock_code is None:
            stock_code = await self._lookup_stock_code(corp_code)

        company, created = await self._companies.get_or_create(corp_code, corp_name, stock_code)
        await self._links.get_or_create(user_id, company)
        LOGGER.info(
            "Company registered",
            extra={"company_id": company.id, "corp_code": corp_code, "new_company": created},
        )

        if created:
            await self._collector.collect(company.id)

        return await self.get(company.id)

    async def list_for_user(self, user_id: str) -> list[Company]:
        links = await self._links.list_for_user(user_id)
        return [link.company for link in links]

    async def get(self, company_id: int) -> Company:
        company = await self._companies.get_with_relations(company_id)
        if company is None:
            raise CompanyNotFoundError(company_id)
        return company

    async def quarter_detail(self, company_id: int, year: int, quarter: int) -> QuarterDetail:
        company = await self._companies.get_by_id(company_id)
        if company is None:
            raise CompanyNotFoundError(company_id)

        financial = await self._financials.get_by_quarter(company.id, year, quarter)
        if not company.stock_code:
            return QuarterDetail(financial=financial, stock_history=[])

        start, end = quarter_date_range(year, quarter)
        history = await self._stock_history.list_range(company.id, start, end)
        return QuarterDetail(financial=financial, stock_history=history)

    async def delete(self, company_id: int, user_id: str) -> dict[str, bool] | None:
        """Remove the user's registration; the company and its data are kept."""
        link = await self._links.get(user_id, company_id)
        if link is None:
            return None

        await self._links.delete(link)
        LOGGER.info(
            "Company registration removed",
            extra={"company_id": company_id},
        )
        return {"deleted": True}

    async def collect(self, company_id: int) -> CollectionResult:
        return await self._collector.collect(company_id)

    async def _lookup_stock_code(self, corp_code: str) -> str | None:
        info = await self._directory.lookup_company(corp_code)
        if info is None:
            return None
        return info.stock_code
