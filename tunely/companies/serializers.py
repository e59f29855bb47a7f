"""Conversion of ORM rows into the JSON shapes the dashboard expects."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from ..collection import CollectionResult
from ..dart import CorpSearchResult
from ..models import Company, Financial, StockData, StockHistory


def _as_str(value: int | Decimal | None) -> str | None:
    if value is None:
        return None
    return str(value)


def search_result_to_dict(entry: CorpSearchResult) -> dict[str, Any]:
    return {
        "corpCode": entry.corp_code,
        "corpName": entry.corp_name,
        "stockCode": entry.stock_code,
        "modifyDate": entry.modify_date,
    }


def financial_to_dict(financial: Financial) -> dict[str, Any]:
    return {
        "id": financial.id,
        "year": financial.year,
        "quarter": financial.quarter,
        "revenue": _as_str(financial.revenue),
        "operatingProfit": _as_str(financial.operating_profit),
        "netIncome": _as_str(financial.net_income),
        "collectedAt": financial.collected_at,
    }


def stock_data_to_dict(stock_data: StockData) -> dict[str, Any]:
    return {
        "id": stock_data.id,
        "price": stock_data.price,
        "per": _as_str(stock_data.per),
        "pbr": _as_str(stock_data.pbr),
        "foreignRatio": _as_str(stock_data.foreign_ratio),
        "collectedAt": stock_data.collected_at,
    }


def stock_history_to_dict(point: StockHistory) -> dict[str, Any]:
    return {
        "id": point.id,
        "date": point.date,
        "open": point.open,
        "high": point.high,
        "low": point.low,
        "close": point.close,
        "volume": str(point.volume),
    }


def company_to_dict(company: Company, *, include_relations: bool = False) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "id": company.id,
        "corpCode": company.corp_code,
        "corpName": company.corp_name,
        "stockCode": company.stock_code,
        "createdAt": company.created_at,
    }
    if include_relations:
        financials = sorted(
            company.financials, key=lambda row: (row.year, row.quarter), reverse=True
        )
        snapshots = sorted(company.stock_data, key=lambda row: row.collected_at, reverse=True)
        payload["financials"] = [financial_to_dict(row) for row in financials]
        payload["stockData"] = [stock_data_to_dict(row) for row in snapshots]
    return payload


def collection_result_to_dict(result: CollectionResult) -> dict[str, Any]:
    return {
        "financial": result.financial,
        "stock": result.stock,
        "history": result.history,
        "written": {
            "financials": result.financial_rows,
            "stockData": int(result.stock_written),
            "stockHistory": result.history_rows,
        },
    }
