"""Stock quote snapshots and daily price history."""

from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import BigInteger, Date, DateTime, ForeignKey, Integer, Numeric, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..db import Base
from .company import utcnow

if TYPE_CHECKING:
    from .company import Company


class StockData(Base):
    """Quote snapshot scraped from the finance portal.

    One row per collection day by convention; only a same-day existence check
    enforces it.
    """

    __tablename__ = "stock_data"

    id: Mapped[int] = mapped_column(primary_key=True)
    company_id: Mapped[int] = mapped_column(
        ForeignKey("companies.id", ondelete="CASCADE"), index=True, nullable=False
    )
    price: Mapped[int | None] = mapped_column(Integer)
    per: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))
    pbr: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))
    foreign_ratio: Mapped[Decimal | None] = mapped_column(Numeric(5, 2))
    collected_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, index=True, nullable=False
    )

    # Relationships
    company: Mapped[Company] = relationship("Company", back_populates="stock_data")

    def __repr__(self) -> str:
        return f"<StockData(company_id={self.company_id}, price={self.price})>"


class StockHistory(Base):
    """Daily OHLC prices and traded volume."""

    __tablename__ = "stock_history"
    __table_args__ = (
        UniqueConstraint("company_id", "date", name="uq_stock_history_company_date"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    company_id: Mapped[int] = mapped_column(
        ForeignKey("companies.id", ondelete="CASCADE"), index=True, nullable=False
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    open: Mapped[int] = mapped_column(Integer, nullable=False)
    high: Mapped[int] = mapped_column(Integer, nullable=False)
    low: Mapped[int] = mapped_column(Integer, nullable=False)
    close: Mapped[int] = mapped_column(Integer, nullable=False)
    volume: Mapped[int] = mapped_column(BigInteger, nullable=False)

    # Relationships
    company: Mapped[Company] = relationship("Company", back_populates="stock_history")

    def __repr__(self) -> str:
        return f"<StockHistory(company_id={self.company_id}, date={self.date})>"
