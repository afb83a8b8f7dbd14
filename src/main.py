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
from sqlalchemy import text

from config.settings import settings
from src.au_auction.api.router import cron_router
from src.au_auction.api.router import router as auction_router
from src.au_bid.api.router import router as bid_router
from src.au_common.currencies import list_currencies
from src.au_common.database import engine
from src.au_common.errors import AppError
from src.au_common.response import ApiResponse, error_response, success_response
from src.au_discussion.api.router import router as discussion_router
from src.au_gateway.middleware.request_log import RequestLogMiddleware
from src.au_item.api.router import router as item_router
from src.au_membership.api.router import router as member_router
from src.au_notification.api.router import router as notification_router
from src.bootstrap import build_services, register_email_handlers

logger = logging.getLogger("au.app")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify DB connection, subscribe email handlers. Shutdown: drain and dispose."""
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    handlers = register_email_handlers(app.state.services.bus)
    yield
    handlers.unregister(app.state.services.bus)
    pending = app.state.services.bus.pending
    if pending:
        logger.info("Waiting for %d in-flight event handlers", pending)
    await app.state.services.bus.drain()
    await engine.dispose()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)
app.state.services = build_services()


app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    resp = error_response(exc.code, exc.message, exc.details)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


app.include_router(auction_router, prefix="/api/v1")
app.include_router(member_router, prefix="/api/v1")
app.include_router(item_router, prefix="/api/v1")
app.include_router(bid_router, prefix="/api/v1")
app.include_router(discussion_router, prefix="/api/v1")
app.include_router(notification_router, prefix="/api/v1")
app.include_router(cron_router, prefix="/api/v1")


@app.get("/api/v1/currencies")
async def currencies(request: Request) -> ApiResponse:
    data = [{"code": c.code, "name": c.name, "symbol": c.symbol} for c in list_currencies()]
    return success_response(data, request)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
