from __future__ import annotations

from datetime import date, datetime
from zoneinfo import ZoneInfo

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tunely.collection import CollectionService, InMemoryCollectionLock
from tunely.companies import CompanyService
from tunely.companies.service import quarter_date_range
from tunely.dart import CorpInfo, CorpSearchResult
from tunely.errors import CompanyNotFoundError
from tunely.models import Financial, StockHistory, UserCompany

from .utils import FakeDart, FakeNaver

SAMSUNG = CorpInfo(
    corp_code="00126380",
    corp_name="삼성전자(주)",
    stock_code="005930",
    stock_name="삼성전자",
    ceo_name=None,
    corp_cls="Y",
    established=None,
    fiscal_month="12",
)


def _build(
    db_session: AsyncSession, dart: FakeDart | None = None
) -> tuple[CompanyService, FakeDart, FakeNaver]:
    dart = dart or FakeDart(
        periods={(2023, 4), (2023, 3), (2022, 4)},
        companies={SAMSUNG.corp_code: SAMSUNG},
    )
    naver = FakeNaver(last_day=date(2024, 6, 14), days=5)
    collector = CollectionService(
        db_session,
        dart,
        naver,
        InMemoryCollectionLock(),
        financial_years=2,
        history_days=5,
        clock=lambda: datetime(2024, 6, 15, 10, 0, tzinfo=ZoneInfo("Asia/Seoul")),
    )
    return CompanyService(db_session, dart, collector), dart, naver


async def _count(db_session: AsyncSession, model: type) -> int:
    return (await db_session.execute(select(func.count()).select_from(model))).scalar_one()


def test_quarter_date_range() -> None:
    assert quarter_date_range(2024, 1) == (date(2024, 1, 1), date(2024, 3, 31))
    assert quarter_date_range(2024, 2) == (date(2024, 4, 1), date(2024, 6, 30))
    assert quarter_date_range(2023, 4) == (date(2023, 10, 1), date(2023, 12, 31))
    with pytest.raises(ValueError):
        quarter_date_range(2024, 0)


@pytest.mark.asyncio
async def test_register_new_company_collects_immediately(db_session: AsyncSession) -> None:
    service, dart, naver = _build(db_session)

    company = await service.register("user-1", "00126380", "삼성전자", "005930")

    assert company.corp_code == "00126380"
    assert {(row.year, row.quarter) for row in company.financials} == {
        (2023, 4),
        (2023, 3),
        (2022, 4),
    }
    assert len(company.stock_data) == 1
    assert naver.quote_calls == 1
    assert await _count(db_session, StockHistory) == 5


@pytest.mark.asyncio
async def test_register_without_stock_code_uses_company_overview(
    db_session: AsyncSession,
) -> None:
    service, _, naver = _build(db_session)

    company = await service.register("user-1", "00126380", "삼성전자")

    assert company.stock_code == "005930"
    assert naver.quote_calls == 1


@pytest.mark.asyncio
async def test_register_unknown_overview_keeps_company_without_ticker(
    db_session: AsyncSession,
) -> None:
    service, _, naver = _build(db_session, FakeDart(periods={(2023, 4)}))

    company = await service.register("user-1", "00999999", "비상장회사")

    assert company.stock_code is None
    assert len(company.financials) == 1
    assert company.stock_data == []
    assert naver.quote_calls == 0


@pytest.mark.asyncio
async def test_register_shared_company_only_links_user(db_session: AsyncSession) -> None:
    service, dart, naver = _build(db_session)
    first = await service.register("user-1", "00126380", "삼성전자", "005930")
    dart.statement_calls.clear()

    second = await service.register("user-2", "00126380", "삼성전자", "005930")

    assert second.id == first.id
    assert dart.statement_calls == []
    assert naver.quote_calls == 1
    assert await _count(db_session, UserCompany) == 2


@pytest.mark.asyncio
async def test_register_same_company_twice_is_idempotent(db_session: AsyncSession) -> None:
    service, dart, _ = _build(db_session)
    first = await service.register("user-1", "00126380", "삼성전자", "005930")
    dart.statement_calls.clear()

    again = await service.register("user-1", "00126380", "삼성전자", "005930")

    assert again.id == first.id
    assert dart.statement_calls == []
    assert await _count(db_session, UserCompany) == 1


@pytest.mark.asyncio
async def test_list_for_user_only_returns_own_companies(db_session: AsyncSession) -> None:
    service, _, _ = _build(db_session)
    await service.register("user-1", "00126380", "삼성전자", "005930")
    await service.register("user-2", "00164779", "SK하이닉스", "000660")

    mine = await service.list_for_user("user-1")
    others = await service.list_for_user("user-2")
    nobody = await service.list_for_user("user-3")

    assert [company.corp_code for company in mine] == ["00126380"]
    assert [company.corp_code for company in others] == ["00164779"]
    assert nobody == []


@pytest.mark.asyncio
async def test_delete_removes_link_but_keeps_company_data(db_session: AsyncSession) -> None:
    service, _, _ = _build(db_session)
    company = await service.register("user-1", "00126380", "삼성전자", "005930")
    await service.register("user-2", "00126380", "삼성전자", "005930")

    assert await service.delete(company.id, "user-1") == {"deleted": True}
    assert await service.delete(company.id, "user-1") is None
    assert await service.list_for_user("user-1") == []

    kept = await service.get(company.id)
    assert len(kept.financials) == 3
    assert [item.corp_code for item in await service.list_for_user("user-2")] == ["00126380"]


@pytest.mark.asyncio
async def test_get_unknown_company_raises(db_session: AsyncSession) -> None:
    service, _, _ = _build(db_session)

    with pytest.raises(CompanyNotFoundError):
        await service.get(404)
    with pytest.raises(CompanyNotFoundError):
        await service.quarter_detail(404, 2024, 1)


@pytest.mark.asyncio
async def test_quarter_detail(db_session: AsyncSession) -> None:
    service, _, _ = _build(db_session)
    company = await service.register("user-1", "00126380", "삼성전자", "005930")

    annual = await service.quarter_detail(company.id, 2023, 4)
    assert isinstance(annual.financial, Financial)
    assert annual.financial.revenue == 2023 * 1000 + 4
    assert annual.stock_history == []

    current = await service.quarter_detail(company.id, 2024, 2)
    assert current.financial is None
    assert [point.date for point in current.stock_history] == [
        date(2024, 6, 10),
        date(2024, 6, 11),
        date(2024, 6, 12),
        date(2024, 6, 13),
        date(2024, 6, 14),
    ]


@pytest.mark.asyncio
async def test_search_delegates_to_registry(db_session: AsyncSession) -> None:
    entry = CorpSearchResult(
        corp_code="00126380", corp_name="삼성전자", stock_code="005930", modify_date="20240102"
    )
    service, _, _ = _build(db_session, FakeDart(registry=[entry]))

    assert await service.search("삼성") == [entry]
    assert await service.search("LG") == []


@pytest.mark.asyncio
async def test_samsung_end_to_end_second_collect_writes_no_financials(
    db_session: AsyncSession,
) -> None:
    service, dart, _ = _build(db_session)
    company = await service.register("user-1", "00126380", "삼성전자", "005930")
    await db_session.commit()

    result = await service.collect(company.id)

    assert result.financial is True
    assert result.financial_rows == 0
    assert result.history_rows == 0
    assert result.stock_written is False
    assert await _count(db_session, Financial) == 3
