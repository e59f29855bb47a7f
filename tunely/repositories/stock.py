"""Repositories for quote snapshots and daily price history."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import StockData, StockHistory


class StockDataRepository:
    """Repository for quote snapshot operations."""

    def __init__(self, db_session: AsyncSession) -> None:
        """Initialize repository with database session."""
        self.db_session = db_session

    async def get_collected_between(
        self, company_id: int, start: datetime, end: datetime
    ) -> StockData | None:
        """Get a snapshot collected in the half-open interval [start, end).

        Used with the bounds of a calendar day to find today's snapshot.
        """
        stmt = (
            select(StockData)
            .where(
                StockData.company_id == company_id,
                StockData.collected_at >= start,
                StockData.collected_at < end,
            )
            .order_by(desc(StockData.collected_at))
            .limit(1)
        )
        result = await self.db_session.execute(stmt)
        return result.scalar_one_or_none()

    async def add(self, row: StockData) -> None:
        self.db_session.add(row)
        await self.db_session.flush()


class StockHistoryRepository:
    """Repository for daily price history operations."""

    def __init__(self, db_session: AsyncSession) -> None:
        """Initialize repository with database session."""
        self.db_session = db_session

    async def existing_dates(self, company_id: int, start: date, end: date) -> set[date]:
        """Return the trading dates already stored within [start, end]."""
        stmt = select(StockHistory.date).where(
            StockHistory.company_id == company_id,
            StockHistory.date >= start,
            StockHistory.date <= end,
        )
        result = await self.db_session.execute(stmt)
        return set(result.scalars().all())

    async def list_range(self, company_id: int, start: date, end: date) -> list[StockHistory]:
        """List price points within [start, end], oldest first."""
        stmt = (
            select(StockHistory)
            .where(
                StockHistory.company_id == company_id,
                StockHistory.date >= start,
                StockHistory.date <= end,
            )
            .order_by(StockHistory.date)
        )
        result = await self.db_session.execute(stmt)
        return list(result.scalars().all())

    async def add_all(self, rows: Iterable[StockHistory]) -> None:
        self.db_session.add_all(list(rows))
        await self.db_session.flush()
