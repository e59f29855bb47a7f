"""Repository for quarterly financial statements."""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import Financial


class FinancialRepository:
    """Repository for financial statement operations."""

    def __init__(self, db_session: AsyncSession) -> None:
        """Initialize repository with database session."""
        self.db_session = db_session

    async def get_by_quarter(self, company_id: int, year: int, quarter: int) -> Financial | None:
        """Get the statement stored for one fiscal quarter.

        Args:
            company_id: Owning company
            year: Fiscal year
            quarter: Fiscal quarter, 1-4

        Returns:
            Financial object or None if the quarter has not been collected
        """
        stmt = select(Financial).where(
            Financial.company_id == company_id,
            Financial.year == year,
            Financial.quarter == quarter,
        )
        result = await self.db_session.execute(stmt)
        return result.scalar_one_or_none()

    async def existing_quarters(self, company_id: int) -> set[tuple[int, int]]:
        """Return the (year, quarter) pairs already stored for a company."""
        stmt = select(Financial.year, Financial.quarter).where(
            Financial.company_id == company_id
        )
        result = await self.db_session.execute(stmt)
        return {(year, quarter) for year, quarter in result.all()}

    async def add_all(self, rows: Iterable[Financial]) -> None:
        self.db_session.add_all(list(rows))
        await self.db_session.flush()
