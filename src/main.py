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
from fastapi.responses import JSONResponse

from config.settings import settings
from src.ap_admin.api.router import router as admin_router
from src.ap_common.database import check_database, engine
from src.ap_common.errors import AppError
from src.ap_common.redis_client import close_redis, ping_redis
from src.ap_common.response import error_response
from src.ap_gateway.api.router import router as auth_router
from src.ap_gateway.middleware.rate_limit import RateLimitMiddleware
from src.ap_gateway.middleware.request_log import RequestLogMiddleware
from src.ap_scenario.api.router import router as scenario_router
from src.ap_stealing.api.router import router as stealing_router
from src.ap_wallet.api.router import router as wallet_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger("ap.request")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: PostgreSQL must answer, Redis may be down. Shutdown: dispose."""
    await check_database()
    redis_ok = await ping_redis()
    logger.info("%s started redis=%s", settings.APP_NAME, "up" if redis_ok else "down")
    yield
    await engine.dispose()
    await close_redis()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


# Added last runs first: request ids exist before rate limiting
app.add_middleware(RateLimitMiddleware)
app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    resp = error_response(exc.code, exc.message, exc.details)
    request_id = getattr(request.state, "request_id", None)
    if request_id:
        resp.request_id = request_id
    headers = None
    if exc.http_status == 429 and exc.details:
        headers = {"Retry-After": str(exc.details.get("retry_after", 60))}
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
        headers=headers,
    )


app.include_router(auth_router, prefix="/api/v1")
app.include_router(wallet_router, prefix="/api/v1")
app.include_router(scenario_router, prefix="/api/v1")
app.include_router(stealing_router, prefix="/api/v1")
app.include_router(admin_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
