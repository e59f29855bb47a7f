"""HTML scraper for Naver Finance quote and daily price pages."""

from __future__ import annotations

import logging
import time
from decimal import Decimal

import httpx
from bs4 import BeautifulSoup, Tag

from ..errors import UpstreamError
from ..parsing import parse_date, parse_decimal, parse_int, parse_ratio
from .metrics import NAVER_DROPPED_ROWS_TOTAL, NAVER_ERRORS_TOTAL, NAVER_REQUEST_LATENCY_SECONDS
from .models import PricePoint, QuoteSnapshot

LOGGER = logging.getLogger(__name__)

DEFAULT_QUOTE_URL = "https://finance.naver.com/item/main.naver"
DEFAULT_HISTORY_URL = "https://finance.naver.com/item/sise_day.naver"
DEFAULT_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"

FOREIGN_RATIO_LABEL = "외국인소진율"
# date, close, change, open, high, low, volume
HISTORY_MIN_COLUMNS = 7


class NaverFinanceClient:
    """Scrape quote snapshots and daily price history for a stock code.

    Extraction is tied to the portal's current markup. Fields whose node is
    missing or not numeric come back as None instead of failing the call.
    """

    SOURCE = "naver"

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        *,
        quote_url: str = DEFAULT_QUOTE_URL,
        history_url: str = DEFAULT_HISTORY_URL,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self._http = http_client
        self._quote_url = quote_url
        self._history_url = history_url
        self._headers = {"User-Agent": user_agent}

    async def fetch_quote_snapshot(self, stock_code: str) -> QuoteSnapshot:
        html = await self._get_page("quote", self._quote_url, {"code": stock_code})
        soup = BeautifulSoup(html, "lxml")
        return QuoteSnapshot(
            price=_parse_price(soup),
            per=parse_decimal(_select_text(soup, "#_per")),
            pbr=parse_decimal(_select_text(soup, "#_pbr")),
            foreign_ratio=_parse_foreign_ratio(soup),
        )

    async def fetch_price_history(self, stock_code: str, page_count: int) -> list[PricePoint]:
        """Fetch `page_count` pages of daily prices, oldest first.

        Pages are requested one after another; the portal throttles clients
        that fetch in parallel.
        """
        points: list[PricePoint] = []
        for page in range(1, page_count + 1):
            html = await self._get_page(
                "history", self._history_url, {"code": stock_code, "page": str(page)}
            )
            points.extend(parse_history_page(html))
        points.sort(key=lambda point: point.date)
        return points

    async def _get_page(self, page: str, url: str, params: dict[str, str]) -> str:
        started = time.perf_counter()
        try:
            response = await self._http.get(url, params=params, headers=self._headers)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            NAVER_ERRORS_TOTAL.labels(page).inc()
            LOGGER.error(
                "Finance portal request failed",
                extra={"page": page, "params": params, "error": str(exc)},
            )
            raise UpstreamError(self.SOURCE, str(exc)) from exc
        finally:
            NAVER_REQUEST_LATENCY_SECONDS.labels(page).observe(time.perf_counter() - started)
        return response.text


def parse_history_page(html: str) -> list[PricePoint]:
    """Extract daily price rows from one history page.

    Separator, header and summary rows are skipped.
    """
    soup = BeautifulSoup(html, "lxml")
    points: list[PricePoint] = []
    for row in soup.select("table.type2 tr"):
        point = _parse_history_row(row)
        if point is None:
            if row.find("td") is not None:
                NAVER_DROPPED_ROWS_TOTAL.inc()
            continue
        points.append(point)
    return points


def _parse_history_row(row: Tag) -> PricePoint | None:
    cells = [cell.get_text(strip=True) for cell in row.find_all("td")]
    if len(cells) < HISTORY_MIN_COLUMNS:
        return None

    day = parse_date(cells[0])
    close = parse_int(cells[1])
    if day is None or close is None:
        return None

    open_, high, low, volume = (parse_int(cells[index]) for index in (3, 4, 5, 6))
    if open_ is None or high is None or low is None or volume is None:
        return None

    return PricePoint(date=day, open=open_, high=high, low=low, close=close, volume=volume)


def _select_text(soup: BeautifulSoup, selector: str) -> str | None:
    node = soup.select_one(selector)
    if node is None:
        return None
    return node.get_text(strip=True)


def _parse_price(soup: BeautifulSoup) -> int | None:
    return parse_int(_select_text(soup, "p.no_today .blind"))


def _parse_foreign_ratio(soup: BeautifulSoup) -> Decimal | None:
    table = soup.select_one("table.lwidth")
    if table is None:
        return None
    for row in table.find_all("tr"):
        header = row.find("th")
        if header is None or FOREIGN_RATIO_LABEL not in header.get_text():
            continue
        cell = row.find("td")
        ratio = parse_ratio(cell.get_text(strip=True) if cell is not None else None)
        if ratio is not None:
            return ratio
    return None
