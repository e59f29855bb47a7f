"""Initial schema with companies, user registrations, financials and stock data

Revision ID: 001
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from __future__ import annotations

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Upgrade schema."""
    # Companies table
    op.create_table(
        "companies",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("corp_code", sa.String(length=8), nullable=False),
        sa.Column("corp_name", sa.String(length=100), nullable=False),
        sa.Column("stock_code", sa.String(length=6), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_companies_corp_code"), "companies", ["corp_code"], unique=True)

    # User registrations
    op.create_table(
        "user_companies",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("company_id", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["company_id"], ["companies.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "company_id", name="uq_user_companies_user_company"),
    )
    op.create_index(op.f("ix_user_companies_user_id"), "user_companies", ["user_id"])
    op.create_index(op.f("ix_user_companies_company_id"), "user_companies", ["company_id"])

    # Quarterly financial statements
    op.create_table(
        "financials",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("company_id", sa.Integer(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("quarter", sa.Integer(), nullable=False),
        sa.Column("revenue", sa.BigInteger(), nullable=True),
        sa.Column("operating_profit", sa.BigInteger(), nullable=True),
        sa.Column("net_income", sa.BigInteger(), nullable=True),
        sa.Column("collected_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["company_id"], ["companies.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "company_id", "year", "quarter", name="uq_financials_company_period"
        ),
    )
    op.create_index(op.f("ix_financials_company_id"), "financials", ["company_id"])

    # Quote snapshots
    op.create_table(
        "stock_data",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("company_id", sa.Integer(), nullable=False),
        sa.Column("price", sa.Integer(), nullable=True),
        sa.Column("per", sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column("pbr", sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column("foreign_ratio", sa.Numeric(precision=5, scale=2), nullable=True),
        sa.Column("collected_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["company_id"], ["companies.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_stock_data_company_id"), "stock_data", ["company_id"])
    op.create_index(op.f("ix_stock_data_collected_at"), "stock_data", ["collected_at"])

    # Daily price history
    op.create_table(
        "stock_history",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("company_id", sa.Integer(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("open", sa.Integer(), nullable=False),
        sa.Column("high", sa.Integer(), nullable=False),
        sa.Column("low", sa.Integer(), nullable=False),
        sa.Column("close", sa.Integer(), nullable=False),
        sa.Column("volume", sa.BigInteger(), nullable=False),
        sa.ForeignKeyConstraint(["company_id"], ["companies.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("company_id", "date", name="uq_stock_history_company_date"),
    )
    op.create_index(op.f("ix_stock_history_company_id"), "stock_history", ["company_id"])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index(op.f("ix_stock_history_company_id"), table_name="stock_history")
    op.drop_table("stock_history")
    op.drop_index(op.f("ix_stock_data_collected_at"), table_name="stock_data")
    op.drop_index(op.f("ix_stock_data_company_id"), table_name="stock_data")
    op.drop_table("stock_data")
    op.drop_index(op.f("ix_financials_company_id"), table_name="financials")
    op.drop_table("financials")
    op.drop_index(op.f("ix_user_companies_company_id"), table_name="user_companies")
    op.drop_index(op.f("ix_user_companies_user_id"), table_name="user_companies")
    op.drop_table("user_companies")
    op.drop_index(op.f("ix_companies_corp_code"), table_name="companies")
    op.drop_table("companies")
