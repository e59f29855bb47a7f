"""Typed views of Open DART API payloads."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from ..parsing import parse_int

SUCCESS_STATUS = "000"
CONSOLIDATED = "CFS"


class ReportCode(StrEnum):
    """Report period selector of the single-company accounts endpoint."""

    Q1 = "11013"
    HALF = "11012"
    Q3 = "11014"
    ANNUAL = "11011"

    @classmethod
    def for_quarter(cls, quarter: int) -> ReportCode:
        try:
            return _QUARTER_REPORTS[quarter]
        except KeyError:
            raise ValueError(f"Quarter must be between 1 and 4, got {quarter}") from None


_QUARTER_REPORTS = {
    1: ReportCode.Q1,
    2: ReportCode.HALF,
    3: ReportCode.Q3,
    4: ReportCode.ANNUAL,
}


def _blank_to_none(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@dataclass(slots=True, frozen=True)
class CorpInfo:
    """Company overview returned by ``company.json``."""

    corp_code: str
    corp_name: str
    stock_code: str | None
    stock_name: str | None
    ceo_name: str | None
    corp_cls: str | None
    established: str | None
    fiscal_month: str | None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> CorpInfo:
        return cls(
            corp_code=str(payload.get("corp_code", "")).strip(),
            corp_name=str(payload.get("corp_name", "")).strip(),
            stock_code=_blank_to_none(payload.get("stock_code")),
            stock_name=_blank_to_none(payload.get("stock_name")),
            ceo_name=_blank_to_none(payload.get("ceo_nm")),
            corp_cls=_blank_to_none(payload.get("corp_cls")),
            established=_blank_to_none(payload.get("est_dt")),
            fiscal_month=_blank_to_none(payload.get("acc_mt")),
        )


@dataclass(slots=True, frozen=True)
class FinancialLineItem:
    """One account line of a disclosed financial statement.

    ``amount`` is the current-term amount as disclosed, with thousands
    separators.
    """

    account_name: str
    fs_div: str
    statement_div: str
    amount: str
    year: str
    report_code: str

    @property
    def is_consolidated(self) -> bool:
        return self.fs_div == CONSOLIDATED

    def normalized_amount(self) -> int | None:
        return parse_int(self.amount)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> FinancialLineItem:
        return cls(
            account_name=str(payload.get("account_nm", "")).strip(),
            fs_div=str(payload.get("fs_div", "")).strip(),
            statement_div=str(payload.get("sj_div", "")).strip(),
            amount=str(payload.get("thstrm_amount") or "").strip(),
            year=str(payload.get("bsns_year", "")).strip(),
            report_code=str(payload.get("reprt_code", "")).strip(),
        )


@dataclass(slots=True, frozen=True)
class CorpSearchResult:
    """Registry entry of a listed company."""

    corp_code: str
    corp_name: str
    stock_code: str
    modify_date: str
