"""Company and user registration models."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..db import Base

if TYPE_CHECKING:
    from .financial import Financial
    from .stock import StockData, StockHistory


def utcnow() -> datetime:
    return datetime.now(UTC)


class Company(Base):
    """Filing entity registered by at least one user.

    Identified by its DART corp code. Shared between users; removing a user's
    registration never deletes the company.
    """

    __tablename__ = "companies"

    id: Mapped[int] = mapped_column(primary_key=True)
    corp_code: Mapped[str] = mapped_column(String(8), unique=True, index=True, nullable=False)
    corp_name: Mapped[str] = mapped_column(String(100), nullable=False)
    stock_code: Mapped[str | None] = mapped_column(String(6))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    # Relationships
    financials: Mapped[list[Financial]] = relationship(
        "Financial",
        back_populates="company",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    stock_data: Mapped[list[StockData]] = relationship(
        "StockData",
        back_populates="company",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    stock_history: Mapped[list[StockHistory]] = relationship(
        "StockHistory",
        back_populates="company",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    user_companies: Mapped[list[UserCompany]] = relationship(
        "UserCompany",
        back_populates="company",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return (
            f"<Company(corp_code={self.corp_code!r}, stock_code={self.stock_code!r}, "
            f"corp_name={self.corp_name!r})>"
        )


class UserCompany(Base):
    """Registration of a company by a user.

    Note: user_id is the opaque identifier sent by the frontend in the
    x-user-id header, not a local users table.
    """

    __tablename__ = "user_companies"
    __table_args__ = (
        UniqueConstraint("user_id", "company_id", name="uq_user_companies_user_company"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[str] = mapped_column(String(36), index=True, nullable=False)
    company_id: Mapped[int] = mapped_column(
        ForeignKey("companies.id", ondelete="CASCADE"), index=True, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    # Relationships
    company: Mapped[Company] = relationship("Company", back_populates="user_companies")

    def __repr__(self) -> str:
        return f"<UserCompany(user_id={self.user_id!r}, company_id={self.company_id})>"
