"""Quarterly financial statement summary."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import BigInteger, DateTime, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..db import Base
from .company import utcnow

if TYPE_CHECKING:
    from .company import Company


class Financial(Base):
    """Revenue, operating profit and net income of one fiscal quarter.

    Amounts are consolidated figures in KRW. Quarter 4 holds the annual report.
    """

    __tablename__ = "financials"
    __table_args__ = (
        UniqueConstraint("company_id", "year", "quarter", name="uq_financials_company_period"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    company_id: Mapped[int] = mapped_column(
        ForeignKey("companies.id", ondelete="CASCADE"), index=True, nullable=False
    )
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    quarter: Mapped[int] = mapped_column(Integer, nullable=False)
    revenue: Mapped[int | None] = mapped_column(BigInteger)
    operating_profit: Mapped[int | None] = mapped_column(BigInteger)
    net_income: Mapped[int | None] = mapped_column(BigInteger)
    collected_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    # Relationships
    company: Mapped[Company] = relationship("Company", back_populates="financials")

    def __repr__(self) -> str:
        return (
            f"<Financial(company_id={self.company_id}, year={self.year}, "
            f"quarter={self.quarter})>"
        )
