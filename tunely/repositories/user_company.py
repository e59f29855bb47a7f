"""Repository for user registrations of companies."""

from __future__ import annotations

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..models import Company, UserCompany


class UserCompanyRepository:
    """Repository for user-company link operations."""

    def __init__(self, db_session: AsyncSession) -> None:
        """Initialize repository with database session."""
        self.db_session = db_session

    async def get(self, user_id: str, company_id: int) -> UserCompany | None:
        stmt = select(UserCompany).where(
            UserCompany.user_id == user_id,
            UserCompany.company_id == company_id,
        )
        result = await self.db_session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_for_user(self, user_id: str) -> list[UserCompany]:
        """List a user's registrations, most recent first.

        Each link has its company loaded along with the company's financial
        statements and quote snapshots.
        """
        stmt = (
            select(UserCompany)
            .where(UserCompany.user_id == user_id)
            .options(
                selectinload(UserCompany.company).selectinload(Company.financials),
                selectinload(UserCompany.company).selectinload(Company.stock_data),
            )
            .order_by(desc(UserCompany.created_at), desc(UserCompany.id))
            .execution_options(populate_existing=True)
        )

        result = await self.db_session.execute(stmt)
        return list(result.scalars().all())

    async def get_or_create(self, user_id: str, company: Company) -> tuple[UserCompany, bool]:
        """Link `user_id` to `company` unless the link already exists.

        Returns:
            Tuple of (link, created)
        """
        link = await self.get(user_id, company.id)
        if link is not None:
            return link, False

        link = UserCompany(user_id=user_id, company_id=company.id)
        self.db_session.add(link)
        await self.db_session.flush()
        return link, True

    async def delete(self, link: UserCompany) -> None:
        await self.db_session.delete(link)
        await self.db_session.flush()
