"""FastAPI application entry point — wires everything together.

Usage:
    python -m devispro.main

Serves the REST API under /api plus a health check.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm.exc import StaleDataError

from devispro.api import clients, company, dashboard, invoices, quotes
from devispro.config import settings
from devispro.db.engine import db_lifespan
from devispro.events.audit import audit_on_event
from devispro.events.bus import start_event_system, stop_event_system, subscribe
from devispro.events.mail import mail_transport
from devispro.quotes.sequence import SequenceUnavailableError
from devispro.quotes.service import LineItemNotFoundError, QuoteConflictError, QuoteStateError
from devispro.quotes.validation import LineItemValidationError
from devispro.schemas.events import EventType

# ── Logging setup ────────────────────────────────────────────────────

logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
    stream=sys.stdout,
)
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
)

logger = logging.getLogger(__name__)

# ── FastAPI lifespan ─────────────────────────────────────────────────


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application startup and shutdown lifecycle."""
    logger.info("Starting %s (env=%s)", settings.company.app_name, settings.environment)

    # 1. Database + Redis
    async with db_lifespan():
        logger.info("Database initialized")

        # 2. Event system
        await start_event_system()

        # 3. Audit logging (global subscriber)
        subscribe(audit_on_event)
        logger.info("Audit logging subscriber registered")

        # 4. Mail transport for sent quotes
        subscribe(mail_transport.on_event, event_types=[EventType.QUOTE_SENT])

        try:
            yield
        finally:
            logger.info("Shutting down %s...", settings.company.app_name)
            await stop_event_system()

    logger.info("Shutdown complete")


# ── FastAPI app ──────────────────────────────────────────────────────

app = FastAPI(
    title="DevisPro BTP API",
    description="Quotes and invoices for building contractors",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(company.router)
app.include_router(clients.router)
app.include_router(quotes.router)
app.include_router(invoices.router)
app.include_router(dashboard.router)


# ── Error mapping ────────────────────────────────────────────────────


@app.exception_handler(QuoteStateError)
async def quote_state_error(request: Request, exc: QuoteStateError) -> JSONResponse:
    logger.info("Rejected %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(LineItemValidationError)
async def line_item_validation_error(request: Request, exc: LineItemValidationError) -> JSONResponse:
    return JSONResponse(status_code=422, content={"detail": exc.errors})


@app.exception_handler(LineItemNotFoundError)
async def line_item_not_found(request: Request, exc: LineItemNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(QuoteConflictError)
async def quote_conflict(request: Request, exc: QuoteConflictError) -> JSONResponse:
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.exception_handler(StaleDataError)
async def stale_quote(request: Request, exc: StaleDataError) -> JSONResponse:
    logger.warning("Concurrent write on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=409, content={"detail": "The quote was modified by someone else. Reload it."})


@app.exception_handler(SequenceUnavailableError)
async def sequence_unavailable(request: Request, exc: SequenceUnavailableError) -> JSONResponse:
    return JSONResponse(status_code=503, content={"detail": str(exc)})


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {
        "status": "ok",
        "environment": settings.environment,
        "app_name": settings.company.app_name,
    }


# ── Entry point ──────────────────────────────────────────────────────

if __name__ == "__main__":
    uvicorn.run(
        "devispro.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.environment == "development",
        log_level=settings.log_level.lower(),
    )
