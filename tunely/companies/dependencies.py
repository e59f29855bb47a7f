from __future__ import annotations

from datetime import datetime
from typing import Annotated
from zoneinfo import ZoneInfo

from fastapi import Depends, Header, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..collection import CollectionLock, CollectionService
from ..config import Settings, get_settings
from ..crawler import NaverFinanceClient
from ..dart import DartClient
from ..db import get_db_session
from .service import CompanyService

USER_ID_MAX_LENGTH = 36

SettingsDep = Annotated[Settings, Depends(get_settings)]
SessionDep = Annotated[AsyncSession, Depends(get_db_session)]


def get_user_id(
    x_user_id: Annotated[str | None, Header(alias="x-user-id")] = None,
) -> str:
    """Opaque caller identity from the x-user-id header.

    The header is a partition key chosen by the frontend, not a credential.
    """
    user_id = (x_user_id or "").strip()
    if not user_id:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail="Missing x-user-id header")
    if len(user_id) > USER_ID_MAX_LENGTH:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail="x-user-id header is too long")
    return user_id


def get_dart_client(request: Request) -> DartClient:
    return request.app.state.dart_client


def get_naver_client(request: Request) -> NaverFinanceClient:
    return request.app.state.naver_client


def get_collection_lock(request: Request) -> CollectionLock:
    return request.app.state.collection_lock


def get_collection_service(
    db: SessionDep,
    settings: SettingsDep,
    dart: Annotated[DartClient, Depends(get_dart_client)],
    naver: Annotated[NaverFinanceClient, Depends(get_naver_client)],
    lock: Annotated[CollectionLock, Depends(get_collection_lock)],
) -> CollectionService:
    timezone = ZoneInfo(settings.collector_timezone)
    return CollectionService(
        db,
        dart,
        naver,
        lock,
        financial_years=settings.collector_financial_years,
        history_days=settings.collector_history_days,
        history_page_size=settings.collector_history_page_size,
        clock=lambda: datetime.now(timezone),
    )


def get_company_service(
    db: SessionDep,
    dart: Annotated[DartClient, Depends(get_dart_client)],
    collector: Annotated[CollectionService, Depends(get_collection_service)],
) -> CompanyService:
    return CompanyService(db, dart, collector)


UserIdDep = Annotated[str, Depends(get_user_id)]
CompanyServiceDep = Annotated[CompanyService, Depends(get_company_service)]
