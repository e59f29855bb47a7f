import logging
import time
import uuid
from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Any, cast

import httpx
from fastapi import FastAPI, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app

from .collection import build_collection_lock
from .companies import router as companies_router
from .config import get_settings, parse_cors_origins
from .crawler import NaverFinanceClient
from .dart import DartClient
from .db import close_db, init_db
from .errors import CollectionInProgressError, CompanyNotFoundError, UpstreamError
from .log_config import configure_logging

LOGGER = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application lifecycle: startup and shutdown events."""
    # Startup
    settings = get_settings()
    configure_logging(settings.log_level)
    init_db(settings)
    http_client = httpx.AsyncClient(timeout=settings.http_request_timeout, follow_redirects=True)
    collection_lock = build_collection_lock(
        settings.redis_url, timeout_seconds=settings.collection_lock_timeout_seconds
    )
    state = cast(Any, app.state)
    state.http_client = http_client
    state.dart_client = DartClient(
        http_client,
        settings.dart_api_key,
        base_url=settings.dart_api_root,
        registry_cache_ttl=settings.corp_registry_cache_ttl_seconds,
    )
    state.naver_client = NaverFinanceClient(
        http_client,
        quote_url=str(settings.naver_quote_url),
        history_url=str(settings.naver_history_url),
        user_agent=settings.naver_user_agent,
    )
    state.collection_lock = collection_lock
    yield
    # Shutdown
    await collection_lock.close()
    await http_client.aclose()
    await close_db()


app = FastAPI(
    title="Tunely API",
    description="Financial disclosure and stock data collection API",
    version="0.1.0",
    docs_url="/api-docs",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=parse_cors_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "x-user-id"],
)

app.include_router(companies_router)
app.mount("/metrics", make_asgi_app())


@app.middleware("http")
async def log_requests(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    """Log one line per request with its status code and duration."""
    request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
    started = time.perf_counter()
    context = {"request_id": request_id, "method": request.method, "path": request.url.path}
    try:
        response = await call_next(request)
    except Exception as exc:
        LOGGER.error(
            "Request failed",
            extra={
                **context,
                "status_code": 500,
                "duration_ms": round((time.perf_counter() - started) * 1000, 1),
                "error": type(exc).__name__,
            },
        )
        raise
    LOGGER.info(
        "Request handled",
        extra={
            **context,
            "status_code": response.status_code,
            "duration_ms": round((time.perf_counter() - started) * 1000, 1),
        },
    )
    response.headers["x-request-id"] = request_id
    return response


@app.exception_handler(CompanyNotFoundError)
async def company_not_found_handler(_: Request, exc: CompanyNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})


@app.exception_handler(CollectionInProgressError)
async def collection_in_progress_handler(
    _: Request, exc: CollectionInProgressError
) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)})


@app.exception_handler(UpstreamError)
async def upstream_error_handler(_: Request, exc: UpstreamError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"detail": "Upstream data source unavailable", "source": exc.source},
    )


@app.get("/health", tags=["health"])
def health() -> dict[str, str]:
    """Basic readiness probe used by compose and CI smoke tests."""
    return {"status": "ok"}
