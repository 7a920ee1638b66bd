"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from config.settings import settings
from src.pm_common.database import check_database, engine
from src.pm_common.errors import AppError, error_name
from src.pm_common.redis_client import check_redis, close_redis
from src.pm_common.response import error_response
from src.pm_event.api.admin_router import router as admin_event_router
from src.pm_event.api.router import router as event_router
from src.pm_gateway.api.router import router as dev_scripts_router
from src.pm_gateway.middleware.request_log import RequestLogMiddleware
from src.pm_position.api.router import router as position_router
from src.pm_quote.api.router import router as quote_router
from src.pm_wager.api.router import router as wager_router
from src.pm_wallet.api.router import router as wallet_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Fail fast on an unreachable ledger database or quote store."""
    await check_database()
    await check_redis()
    logger.info("%s started", settings.APP_NAME)
    yield
    await engine.dispose()
    await close_redis()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(RequestLogMiddleware)


def _request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def _error(request: Request, status_code: int, code: int, message: str) -> JSONResponse:
    resp = error_response(error_name(status_code), code, message, _request_id(request))
    return JSONResponse(status_code=status_code, content=resp.model_dump())


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return _error(request, exc.http_status, exc.code, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', '')}"
        for err in exc.errors()
    )
    return _error(request, 400, 9000, details or "Invalid request")


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error(request, 500, 9002, "Internal server error")


app.include_router(event_router)
app.include_router(admin_event_router)
app.include_router(quote_router)
app.include_router(wager_router)
app.include_router(position_router)
app.include_router(wallet_router)
app.include_router(dev_scripts_router)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
