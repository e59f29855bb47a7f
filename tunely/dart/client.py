"""HTTP client for the Open DART disclosure API."""

from __future__ import annotations

import asyncio
import io
import logging
import time
import zipfile
from typing import Any
from xml.etree import ElementTree as ET

import httpx

from ..errors import UpstreamError
from .metrics import DART_EMPTY_RESPONSES_TOTAL, DART_ERRORS_TOTAL, DART_REQUEST_LATENCY_SECONDS
from .models import SUCCESS_STATUS, CorpInfo, CorpSearchResult, FinancialLineItem, ReportCode

LOGGER = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://opendart.fss.or.kr/api"
REGISTRY_MEMBER = "CORPCODE.xml"
SEARCH_RESULT_LIMIT = 20


class DartClient:
    """Fetch company overviews, financial statements and the corp code registry.

    Upstream "no data" statuses are absorbed (None or an empty list); transport
    failures and HTTP error responses raise UpstreamError.
    """

    SOURCE = "dart"

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_key: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        registry_cache_ttl: float = 3600,
    ) -> None:
        self._http = http_client
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._registry_cache_ttl = registry_cache_ttl
        self._registry: list[CorpSearchResult] | None = None
        self._registry_loaded_at = 0.0
        self._registry_lock = asyncio.Lock()

    async def lookup_company(self, corp_code: str) -> CorpInfo | None:
        payload = await self._get_json("company.json", {"corp_code": corp_code})
        if not self._is_success("company.json", payload):
            return None
        return CorpInfo.from_payload(payload)

    async def fetch_financial_statements(
        self,
        corp_code: str,
        year: int | str,
        report_code: ReportCode | str = ReportCode.ANNUAL,
    ) -> list[FinancialLineItem]:
        """Fetch the major account lines of one periodic report.

        Args:
            corp_code: Eight digit corp code
            year: Business year of the report
            report_code: Report period selector, annual by default

        Returns:
            Line items for both consolidated and separate statements, or an
            empty list when DART has nothing for the period
        """
        payload = await self._get_json(
            "fnlttSinglAcnt.json",
            {
                "corp_code": corp_code,
                "bsns_year": str(year),
                "reprt_code": str(report_code),
            },
        )
        if not self._is_success("fnlttSinglAcnt.json", payload):
            return []
        return [FinancialLineItem.from_payload(item) for item in payload.get("list") or []]

    async def search_by_name(self, query: str) -> list[CorpSearchResult]:
        """Find listed companies whose name contains `query`.

        Entries without a stock code are never returned. Results keep the
        registry order and are capped at twenty.
        """
        needle = query.strip()
        if not needle:
            return []

        registry = await self._load_registry()
        matches: list[CorpSearchResult] = []
        for entry in registry:
            if needle in entry.corp_name:
                matches.append(entry)
                if len(matches) == SEARCH_RESULT_LIMIT:
                    break
        return matches

    async def _load_registry(self) -> list[CorpSearchResult]:
        async with self._registry_lock:
            if self._registry is not None and not self._registry_expired():
                return self._registry

            content = await self._get_bytes("corpCode.xml")
            registry = parse_registry_archive(content)
            LOGGER.info("Loaded corp code registry", extra={"listed_entries": len(registry)})
            if self._registry_cache_ttl > 0:
                self._registry = registry
                self._registry_loaded_at = time.monotonic()
            return registry

    def _registry_expired(self) -> bool:
        return time.monotonic() - self._registry_loaded_at >= self._registry_cache_ttl

    def _is_success(self, endpoint: str, payload: dict[str, Any]) -> bool:
        status = str(payload.get("status", ""))
        if status == SUCCESS_STATUS:
            return True
        DART_EMPTY_RESPONSES_TOTAL.labels(endpoint, status or "missing").inc()
        LOGGER.debug(
            "DART returned no data",
            extra={"endpoint": endpoint, "status": status, "detail": payload.get("message")},
        )
        return False

    async def _get_json(self, endpoint: str, params: dict[str, str]) -> dict[str, Any]:
        response = await self._request(endpoint, params)
        try:
            payload = response.json()
        except ValueError as exc:
            DART_ERRORS_TOTAL.labels(endpoint).inc()
            raise UpstreamError(self.SOURCE, f"{endpoint} returned invalid JSON") from exc
        if not isinstance(payload, dict):
            DART_ERRORS_TOTAL.labels(endpoint).inc()
            raise UpstreamError(self.SOURCE, f"{endpoint} returned an unexpected payload")
        return payload

    async def _get_bytes(self, endpoint: str) -> bytes:
        response = await self._request(endpoint, {})
        return response.content

    async def _request(self, endpoint: str, params: dict[str, str]) -> httpx.Response:
        started = time.perf_counter()
        try:
            response = await self._http.get(
                f"{self._base_url}/{endpoint}",
                params={"crtfc_key": self._api_key, **params},
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            DART_ERRORS_TOTAL.labels(endpoint).inc()
            LOGGER.error(
                "DART request failed",
                extra={"endpoint": endpoint, "error": str(exc)},
            )
            raise UpstreamError(self.SOURCE, str(exc)) from exc
        finally:
            DART_REQUEST_LATENCY_SECONDS.labels(endpoint).observe(time.perf_counter() - started)
        return response


def parse_registry_archive(content: bytes) -> list[CorpSearchResult]:
    """Parse the zipped corp code registry into listed-company entries."""
    try:
        with zipfile.ZipFile(io.BytesIO(content)) as archive:
            member = _registry_member(archive)
            xml_payload = archive.read(member)
        return parse_registry_xml(xml_payload)
    except (zipfile.BadZipFile, KeyError, ET.ParseError) as exc:
        # DART answers errors such as an invalid key with a plain XML body.
        raise UpstreamError(DartClient.SOURCE, f"corp code registry unreadable: {exc}") from exc


def parse_registry_xml(payload: bytes | str) -> list[CorpSearchResult]:
    root = ET.fromstring(payload)
    entries: list[CorpSearchResult] = []
    for item in root.iter("list"):
        stock_code = _child_text(item, "stock_code")
        if not stock_code:
            continue
        entries.append(
            CorpSearchResult(
                corp_code=_child_text(item, "corp_code"),
                corp_name=_child_text(item, "corp_name"),
                stock_code=stock_code,
                modify_date=_child_text(item, "modify_date"),
            )
        )
    return entries


def _registry_member(archive: zipfile.ZipFile) -> str:
    names = archive.namelist()
    if REGISTRY_MEMBER in names:
        return REGISTRY_MEMBER
    for name in names:
        if name.lower().endswith(".xml"):
            return name
    raise KeyError(REGISTRY_MEMBER)


def _child_text(element: ET.Element, tag: str) -> str:
    child = element.find(tag)
    if child is None or child.text is None:
        return ""
    return child.text.strip()
