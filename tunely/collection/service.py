"""Backfill of financial statements, quote snapshots and daily prices."""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from ..crawler import PricePoint, QuoteSnapshot
from ..dart import FinancialLineItem, ReportCode
from ..errors import CompanyNotFoundError
from ..models import Company, Financial, StockData, StockHistory
from ..repositories import (
    CompanyRepository,
    FinancialRepository,
    StockDataRepository,
    StockHistoryRepository,
)
from .lock import CollectionLock, hold_collection_lock
from .metrics import COLLECTION_LATENCY_SECONDS, COLLECTION_ROWS_TOTAL, COLLECTION_RUNS_TOTAL

LOGGER = logging.getLogger(__name__)

REVENUE_ACCOUNT = "매출액"
OPERATING_PROFIT_ACCOUNT = "영업이익"
NET_INCOME_ACCOUNT = "당기순이익"
QUARTERS = (1, 2, 3, 4)


class StatementSource(Protocol):
    async def fetch_financial_statements(
        self, corp_code: str, year: int | str, report_code: ReportCode | str = ...
    ) -> list[FinancialLineItem]: ...


class QuoteSource(Protocol):
    async def fetch_quote_snapshot(self, stock_code: str) -> QuoteSnapshot: ...

    async def fetch_price_history(self, stock_code: str, page_count: int) -> list[PricePoint]: ...


@dataclass(slots=True)
class StatementAmounts:
    revenue: int | None
    operating_profit: int | None
    net_income: int | None


@dataclass(slots=True)
class CollectionResult:
    """Outcome of one collection run.

    ``financial`` is true when the financial stage ran to completion, whether
    or not it wrote rows. ``stock`` and ``history`` are true when the company
    has a stock code and the stage completed.
    """

    financial: bool = False
    stock: bool = False
    history: bool = False
    financial_rows: int = 0
    stock_written: bool = False
    history_rows: int = 0


def extract_statement_amounts(items: Sequence[FinancialLineItem]) -> StatementAmounts:
    """Pick consolidated revenue, operating profit and net income from line items."""

    def consolidated_amount(account_name: str) -> int | None:
        for item in items:
            if item.account_name == account_name and item.is_consolidated:
                return item.normalized_amount()
        return None

    return StatementAmounts(
        revenue=consolidated_amount(REVENUE_ACCOUNT),
        operating_profit=consolidated_amount(OPERATING_PROFIT_ACCOUNT),
        net_income=consolidated_amount(NET_INCOME_ACCOUNT),
    )


def _default_clock() -> datetime:
    return datetime.now(UTC)


class CollectionService:
    """Bring a company's stored data up to date with DART and the finance portal.

    Every upstream call and write happens sequentially within the caller's
    session. Periods already stored are skipped, never updated.

    The session is committed (or rolled back on failure) before the company's
    collection lock is released, so the next holder sees every row written.
    """

    def __init__(
        self,
        session: AsyncSession,
        dart: StatementSource,
        naver: QuoteSource,
        lock: CollectionLock,
        *,
        financial_years: int = 20,
        history_days: int = 600,
        history_page_size: int = 10,
        clock: Callable[[], datetime] = _default_clock,
    ) -> None:
        self._session = session
        self._companies = CompanyRepository(session)
        self._financials = FinancialRepository(session)
        self._stock_data = StockDataRepository(session)
        self._stock_history = StockHistoryRepository(session)
        self._dart = dart
        self._naver = naver
        self._lock = lock
        self._financial_years = financial_years
        self._history_days = history_days
        self._history_page_size = history_page_size
        self._clock = clock

    async def collect(self, company_id: int) -> CollectionResult:
        company = await self._companies.get_by_id(company_id)
        if company is None:
            raise CompanyNotFoundError(company_id)

        # A failed flush expires ORM state, so log from plain values
        company_id = company.id
        corp_code = company.corp_code
        started = time.perf_counter()
        async with hold_collection_lock(self._lock, company_id):
            try:
                result = await self._run(company)
                await self._session.commit()
            except Exception:
                await self._session.rollback()
                COLLECTION_RUNS_TOTAL.labels("failed").inc()
                LOGGER.exception(
                    "Collection failed",
                    extra={"company_id": company_id, "corp_code": corp_code},
                )
                raise
            finally:
                COLLECTION_LATENCY_SECONDS.observe(time.perf_counter() - started)

        COLLECTION_RUNS_TOTAL.labels("succeeded").inc()
        LOGGER.info(
            "Collection finished",
            extra={
                "company_id": company_id,
                "corp_code": corp_code,
                "financial_rows": result.financial_rows,
                "stock_written": result.stock_written,
                "history_rows": result.history_rows,
            },
        )
        return result

    async def _run(self, company: Company) -> CollectionResult:
        now = self._clock()
        result = CollectionResult()

        result.financial_rows = await self._collect_financials(company, now)
        result.financial = True

        if company.stock_code:
            result.stock_written = await self._collect_quote(company, company.stock_code, now)
            result.stock = True

            result.history_rows = await self._collect_history(company, company.stock_code)
            result.history = True

        return result

    async def _collect_financials(self, company: Company, now: datetime) -> int:
        existing = await self._financials.existing_quarters(company.id)
        latest_year = now.year - 1
        staged: list[Financial] = []

        for year in range(latest_year, latest_year - self._financial_years, -1):
            for quarter in QUARTERS:
                if (year, quarter) in existing:
                    continue

                items = await self._dart.fetch_financial_statements(
                    company.corp_code, year, ReportCode.for_quarter(quarter)
                )
                if not items:
                    continue

                amounts = extract_statement_amounts(items)
                staged.append(
                    Financial(
                        company_id=company.id,
                        year=year,
                        quarter=quarter,
                        revenue=amounts.revenue,
                        operating_profit=amounts.operating_profit,
                        net_income=amounts.net_income,
                        collected_at=now.astimezone(UTC),
                    )
                )

        if staged:
            await self._financials.add_all(staged)
            COLLECTION_ROWS_TOTAL.labels("financial").inc(len(staged))
        return len(staged)

    async def _collect_quote(self, company: Company, stock_code: str, now: datetime) -> bool:
        day_start = now.replace(hour=0, minute=0, second=0, microsecond=0)
        day_end = day_start + timedelta(days=1)
        existing = await self._stock_data.get_collected_between(
            company.id, day_start.astimezone(UTC), day_end.astimezone(UTC)
        )
        if existing is not None:
            return False

        snapshot = await self._naver.fetch_quote_snapshot(stock_code)
        await self._stock_data.add(
            StockData(
                company_id=company.id,
                price=snapshot.price,
                per=snapshot.per,
                pbr=snapshot.pbr,
                foreign_ratio=snapshot.foreign_ratio,
                collected_at=now.astimezone(UTC),
            )
        )
        COLLECTION_ROWS_TOTAL.labels("stock_data").inc()
        return True

    async def _collect_history(self, company: Company, stock_code: str) -> int:
        page_count = math.ceil(self._history_days / self._history_page_size)
        points = await self._naver.fetch_price_history(stock_code, page_count)

        by_date = {point.date: point for point in points}
        recent = [by_date[day] for day in sorted(by_date)][-self._history_days :]
        if not recent:
            return 0

        stored = await self._stock_history.existing_dates(
            company.id, recent[0].date, recent[-1].date
        )
        staged = [
            StockHistory(
                company_id=company.id,
                date=point.date,
                open=point.open,
                high=point.high,
                low=point.low,
                close=point.close,
                volume=point.volume,
            )
            for point in recent
            if point.date not in stored
        ]

        if staged:
            await self._stock_history.add_all(staged)
            COLLECTION_ROWS_TOTAL.labels("stock_history").inc(len(staged))
        return len(staged)
