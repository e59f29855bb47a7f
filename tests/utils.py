from __future__ import annotations

import io
import zipfile
from collections.abc import Iterable
from datetime import date, timedelta
from decimal import Decimal

from tunely.config import Settings
from tunely.crawler import PricePoint, QuoteSnapshot
from tunely.dart import CorpInfo, CorpSearchResult, FinancialLineItem, ReportCode

QUOTE_PAGE = """
<html><body>
  <div class="rate_info">
    <p class="no_today"><em class="no_up"><span class="blind">75,000</span></em></p>
  </div>
  <table class="per_table">
    <tr><td><em id="_per">15.50</em>배</td></tr>
    <tr><td><em id="_pbr">1.20</em>배</td></tr>
  </table>
  <table class="lwidth">
    <tr><th scope="row">시가총액</th><td>447조 7,350억원</td></tr>
    <tr><th scope="row">외국인소진율(B/A)</th><td><em>51.23%</em></td></tr>
  </table>
</body></html>
"""

QUOTE_PAGE_WITHOUT_PER = """
<html><body>
  <p class="no_today"><em class="no_up"><span class="blind">75,000</span></em></p>
  <table class="per_table">
    <tr><td><em id="_per_missing">N/A</em></td></tr>
    <tr><td><em id="_pbr">1.20</em>배</td></tr>
  </table>
  <table class="lwidth">
    <tr><th scope="row">외국인소진율(B/A)</th><td><em>51.23%</em></td></tr>
  </table>
</body></html>
"""

QUOTE_PAGE_WITHOUT_RATIOS = """
<html><body>
  <p class="no_today"><span class="blind">N/A</span></p>
  <table class="lwidth">
    <tr><th scope="row">시가총액</th><td>1,000억원</td></tr>
  </table>
</body></html>
"""


def history_row(day: date, close: int, volume: int = 1_000_000) -> str:
    return (
        "<tr>"
        f'<td align="center"><span class="tah p10 gray03">{day:%Y.%m.%d}</span></td>'
        f'<td class="num"><span class="tah p11">{close:,}</span></td>'
        '<td class="num"><span class="tah p11 red02">500</span></td>'
        f'<td class="num"><span class="tah p11">{close - 500:,}</span></td>'
        f'<td class="num"><span class="tah p11">{close + 1000:,}</span></td>'
        f'<td class="num"><span class="tah p11">{close - 1000:,}</span></td>'
        f'<td class="num"><span class="tah p11">{volume:,}</span></td>'
        "</tr>"
    )


def history_page(rows: Iterable[str]) -> str:
    body = "".join(rows)
    return (
        '<html><body><table class="type2">'
        "<tr><th>날짜</th><th>종가</th><th>전일비</th><th>시가</th>"
        "<th>고가</th><th>저가</th><th>거래량</th></tr>"
        '<tr><td colspan="7" height="8"></td></tr>'
        f"{body}"
        '<tr><td colspan="7" height="8"></td></tr>'
        "</table></body></html>"
    )


def registry_archive(entries: Iterable[tuple[str, str, str]]) -> bytes:
    """Zip a CORPCODE.xml registry built from (corp_code, corp_name, stock_code)."""
    items = "".join(
        "<list>"
        f"<corp_code>{corp_code}</corp_code>"
        f"<corp_name>{corp_name}</corp_name>"
        f"<stock_code>{stock_code}</stock_code>"
        "<modify_date>20240102</modify_date>"
        "</list>"
        for corp_code, corp_name, stock_code in entries
    )
    xml = f'<?xml version="1.0" encoding="UTF-8"?><result>{items}</result>'
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        archive.writestr("CORPCODE.xml", xml.encode("utf-8"))
    return buffer.getvalue()


def statement_payload(revenue: str, operating_profit: str, net_income: str) -> list[dict[str, str]]:
    lines = []
    for fs_div, scale in (("CFS", 1), ("OFS", 2)):
        for account, amount in (
            ("매출액", revenue),
            ("영업이익", operating_profit),
            ("당기순이익", net_income),
        ):
            lines.append(
                {
                    "account_nm": account,
                    "fs_div": fs_div,
                    "sj_div": "IS",
                    "thstrm_amount": amount if scale == 1 else "1",
                    "bsns_year": "2023",
                    "reprt_code": "11011",
                }
            )
    return lines


def default_settings() -> Settings:
    return Settings(dart_api_key="test-key")


class FakeDart:
    """Statement and registry source answering from in-memory data."""

    def __init__(
        self,
        periods: Iterable[tuple[int, int]] = (),
        *,
        registry: Iterable[CorpSearchResult] = (),
        companies: dict[str, CorpInfo] | None = None,
    ) -> None:
        self.periods = set(periods)
        self.registry = list(registry)
        self.companies = companies or {}
        self.statement_calls: list[tuple[str, int, str]] = []

    async def fetch_financial_statements(
        self, corp_code: str, year: int | str, report_code: ReportCode | str = ReportCode.ANNUAL
    ) -> list[FinancialLineItem]:
        year = int(year)
        self.statement_calls.append((corp_code, year, str(report_code)))
        quarter = {"11013": 1, "11012": 2, "11014": 3, "11011": 4}[str(report_code)]
        if (year, quarter) not in self.periods:
            return []
        return [
            FinancialLineItem.from_payload(line)
            for line in statement_payload(
                f"{year * 1000 + quarter:,}", "2,000,000", "-1,500,000"
            )
        ]

    async def search_by_name(self, query: str) -> list[CorpSearchResult]:
        return [entry for entry in self.registry if query in entry.corp_name]

    async def lookup_company(self, corp_code: str) -> CorpInfo | None:
        return self.companies.get(corp_code)


class FakeNaver:
    """Quote source returning a fixed snapshot and a run of trading days."""

    def __init__(self, last_day: date, days: int = 5) -> None:
        self.last_day = last_day
        self.days = days
        self.quote_calls = 0
        self.history_calls: list[int] = []

    async def fetch_quote_snapshot(self, stock_code: str) -> QuoteSnapshot:
        self.quote_calls += 1
        return QuoteSnapshot(
            price=75_000,
            per=Decimal("15.50"),
            pbr=Decimal("1.20"),
            foreign_ratio=Decimal("51.23"),
        )

    async def fetch_price_history(self, stock_code: str, page_count: int) -> list[PricePoint]:
        self.history_calls.append(page_count)
        points = []
        for offset in range(self.days):
            day = self.last_day - timedelta(days=offset)
            points.append(
                PricePoint(
                    date=day,
                    open=70_000,
                    high=76_000,
                    low=69_000,
                    close=75_000 - offset,
                    volume=12_345_678_901,
                )
            )
        # Duplicate the newest day, as overlapping pages do
        points.append(points[0])
        return sorted(points, key=lambda point: point.date)
