"""Refresh stored data for every registered company.

Runs the same collection as ``POST /companies/{id}/collect`` for each company,
one after another, committing after each one. Meant to be scheduled (cron,
k8s CronJob) so dashboards stay current without user action.

Usage:
    python -m scripts.collect_all
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from zoneinfo import ZoneInfo

import httpx

from tunely.collection import CollectionService, build_collection_lock
from tunely.config import get_settings
from tunely.crawler import NaverFinanceClient
from tunely.dart import DartClient
from tunely.db import close_db, get_session_factory
from tunely.errors import CollectionInProgressError, UpstreamError
from tunely.log_config import configure_logging
from tunely.repositories import CompanyRepository

LOGGER = logging.getLogger("scripts.collect_all")


async def collect_all() -> tuple[int, int]:
    """Collect every company. Returns (succeeded, skipped)."""
    settings = get_settings()
    session_factory = get_session_factory(settings)
    timezone = ZoneInfo(settings.collector_timezone)
    lock = build_collection_lock(
        settings.redis_url, timeout_seconds=settings.collection_lock_timeout_seconds
    )

    async with session_factory() as session:
        company_ids = [company.id for company in await CompanyRepository(session).list_all()]

    succeeded = skipped = 0
    client_options = {"timeout": settings.http_request_timeout, "follow_redirects": True}
    async with httpx.AsyncClient(**client_options) as client:
        dart = DartClient(
            client,
            settings.dart_api_key,
            base_url=settings.dart_api_root,
            registry_cache_ttl=settings.corp_registry_cache_ttl_seconds,
        )
        naver = NaverFinanceClient(
            client,
            quote_url=str(settings.naver_quote_url),
            history_url=str(settings.naver_history_url),
            user_agent=settings.naver_user_agent,
        )
        for company_id in company_ids:
            async with session_factory() as session:
                collector = CollectionService(
                    session,
                    dart,
                    naver,
                    lock,
                    financial_years=settings.collector_financial_years,
                    history_days=settings.collector_history_days,
                    history_page_size=settings.collector_history_page_size,
                    clock=lambda: datetime.now(timezone),
                )
                try:
                    await collector.collect(company_id)
                    succeeded += 1
                except (UpstreamError, CollectionInProgressError) as exc:
                    skipped += 1
                    LOGGER.warning(
                        "Skipping company",
                        extra={"company_id": company_id, "reason": str(exc)},
                    )

    await lock.close()
    return succeeded, skipped


async def main() -> None:
    """Main entry point."""
    configure_logging(get_settings().log_level)
    try:
        succeeded, skipped = await collect_all()
    finally:
        await close_db()
    LOGGER.info("Collection sweep finished", extra={"succeeded": succeeded, "skipped": skipped})


if __name__ == "__main__":
    asyncio.run(main())
