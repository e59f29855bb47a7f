"""Repository for company lookups and registration."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..models import Company


class CompanyRepository:
    """Repository for company-related database operations."""

    def __init__(self, db_session: AsyncSession) -> None:
        """Initialize repository with database session."""
        self.db_session = db_session

    async def get_by_id(self, company_id: int) -> Company | None:
        return await self.db_session.get(Company, company_id)

    async def get_by_corp_code(self, corp_code: str) -> Company | None:
        """Get a company by its DART corp code.

        Args:
            corp_code: Eight digit corp code

        Returns:
            Company object or None if not registered
        """
        stmt = select(Company).where(Company.corp_code == corp_code)
        result = await self.db_session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_with_relations(self, company_id: int) -> Company | None:
        """Get a company with its financial statements and quote snapshots loaded."""
        stmt = (
            select(Company)
            .where(Company.id == company_id)
            .options(
                selectinload(Company.financials),
                selectinload(Company.stock_data),
            )
            .execution_options(populate_existing=True)
        )

        result = await self.db_session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_or_create(
        self, corp_code: str, corp_name: str, stock_code: str | None
    ) -> tuple[Company, bool]:
        """Return the company registered under `corp_code`, creating it if needed.

        An existing company is returned unchanged; the name and stock code of
        the first registration win.

        Returns:
            Tuple of (company, created)
        """
        company = await self.get_by_corp_code(corp_code)
        if company is not None:
            return company, False

        company = Company(corp_code=corp_code, corp_name=corp_name, stock_code=stock_code)
        self.db_session.add(company)
        await self.db_session.flush()
        return company, True

    async def list_all(self) -> list[Company]:
        stmt = select(Company).order_by(Company.id)
        result = await self.db_session.execute(stmt)
        return list(result.scalars().all())
