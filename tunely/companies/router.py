"""Company routes consumed by the dashboard."""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, HTTPException, Path, Query, status

from .dependencies import CompanyServiceDep, UserIdDep
from .schemas import RegisterCompanyRequest
from .serializers import (
    collection_result_to_dict,
    company_to_dict,
    financial_to_dict,
    search_result_to_dict,
    stock_history_to_dict,
)

router = APIRouter(prefix="/companies", tags=["companies"])


@router.get("/search")
async def search_companies(
    _: UserIdDep,
    service: CompanyServiceDep,
    name: Annotated[str, Query(min_length=1, max_length=100)],
) -> list[dict[str, Any]]:
    """Search listed companies in the DART corp code registry by name."""
    results = await service.search(name)
    return [search_result_to_dict(entry) for entry in results]


@router.post("", status_code=status.HTTP_201_CREATED)
async def register_company(
    user_id: UserIdDep,
    service: CompanyServiceDep,
    body: RegisterCompanyRequest,
) -> dict[str, Any]:
    """Register a company for the caller; new companies are collected immediately."""
    company = await service.register(user_id, body.corp_code, body.corp_name, body.stock_code)
    return company_to_dict(company, include_relations=True)


@router.get("")
async def list_companies(
    user_id: UserIdDep,
    service: CompanyServiceDep,
) -> list[dict[str, Any]]:
    """List the caller's companies with their statements and quote snapshots."""
    companies = await service.list_for_user(user_id)
    return [company_to_dict(company, include_relations=True) for company in companies]


@router.get("/{company_id}")
async def get_company(
    _: UserIdDep,
    service: CompanyServiceDep,
    company_id: int,
) -> dict[str, Any]:
    company = await service.get(company_id)
    return company_to_dict(company, include_relations=True)


@router.get("/{company_id}/quarters/{year}/{quarter}")
async def get_quarter_detail(
    _: UserIdDep,
    service: CompanyServiceDep,
    company_id: int,
    year: Annotated[int, Path(ge=1990, le=2100)],
    quarter: Annotated[int, Path(ge=1, le=4)],
) -> dict[str, Any]:
    """Financial statement and daily prices of one calendar quarter."""
    detail = await service.quarter_detail(company_id, year, quarter)
    return {
        "financial": financial_to_dict(detail.financial) if detail.financial else None,
        "stockHistory": [stock_history_to_dict(point) for point in detail.stock_history],
    }


@router.post("/{company_id}/collect")
async def collect_company(
    _: UserIdDep,
    service: CompanyServiceDep,
    company_id: int,
) -> dict[str, Any]:
    result = await service.collect(company_id)
    return collection_result_to_dict(result)


@router.delete("/{company_id}")
async def delete_company(
    user_id: UserIdDep,
    service: CompanyServiceDep,
    company_id: int,
) -> dict[str, bool]:
    """Remove the caller's registration. Shared company data is kept."""
    result = await service.delete(company_id, user_id)
    if result is None:
        raise HTTPException(status_code=404, detail="Company not registered for this user")
    return result
