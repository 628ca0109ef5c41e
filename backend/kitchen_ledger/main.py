"""FastAPI application for the kitchen stock ledger."""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from starlette.middleware.base import BaseHTTPMiddleware

from kitchen_ledger.api.routes import api_router
from kitchen_ledger.core.config import settings
from kitchen_ledger.core.exceptions import (
    ConcurrencyConflictError,
    InsufficientStockError,
    InvalidOrderTransitionError,
    InvalidQuantityError,
    InvalidUnitError,
    LedgerNotEmptyError,
    RecordNotFoundError,
    ReferenceInUseError,
    StockEngineError,
)
from kitchen_ledger.core.logging_config import configure_logging
from kitchen_ledger.db.base import Base
from kitchen_ledger.db.session import SessionLocal, engine

configure_logging(settings)
logger = logging.getLogger(__name__)
request_logger = logging.getLogger("requests")

# Most specific first; the first matching class wins
ERROR_STATUS_CODES = [
    (InsufficientStockError, status.HTTP_400_BAD_REQUEST),
    (InvalidQuantityError, status.HTTP_400_BAD_REQUEST),
    (InvalidUnitError, status.HTTP_400_BAD_REQUEST),
    (InvalidOrderTransitionError, status.HTTP_400_BAD_REQUEST),
    (RecordNotFoundError, status.HTTP_404_NOT_FOUND),
    (ReferenceInUseError, status.HTTP_409_CONFLICT),
    (LedgerNotEmptyError, status.HTTP_409_CONFLICT),
    (ConcurrencyConflictError, status.HTTP_409_CONFLICT),
]


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log method, path, status and duration of every request."""

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        request_logger.info(
            f"{request.method} {request.url.path} -> {response.status_code} ({duration_ms:.1f}ms)"
        )
        return response


def error_status_code(exc: StockEngineError) -> int:
    for error_class, status_code in ERROR_STATUS_CODES:
        if isinstance(exc, error_class):
            return status_code
    return status.HTTP_400_BAD_REQUEST


def error_body(exc: StockEngineError) -> dict:
    body = {"detail": str(exc), "code": exc.code}
    if isinstance(exc, InsufficientStockError):
        body.update(
            item_name=exc.item_name,
            item_id=exc.item_id,
            needed=str(exc.needed),
            available=str(exc.available),
            unit=exc.unit,
        )
    elif isinstance(exc, ConcurrencyConflictError):
        body.update(operation=exc.operation, attempts=exc.attempts)
    return body


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("Starting Kitchen Ledger")

    # Create tables if they don't exist (for SQLite dev)
    # In production with PostgreSQL, use Alembic migrations
    if settings.auto_create_tables and settings.database_url.startswith("sqlite"):
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables created (SQLite mode)")

    yield

    logger.info("Shutting down Kitchen Ledger")


app = FastAPI(
    title="Kitchen Ledger",
    description="Inventory valuation and stock reservation API",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)


@app.exception_handler(StockEngineError)
async def stock_engine_error_handler(request: Request, exc: StockEngineError):
    status_code = error_status_code(exc)
    if status_code == status.HTTP_409_CONFLICT:
        logger.warning(f"{request.method} {request.url.path} conflict: {exc}")
    return JSONResponse(status_code=status_code, content=error_body(exc))


app.add_middleware(RequestLoggingMiddleware)

# CORS middleware - added last so it runs first (Starlette LIFO order)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Accept", "Origin", "X-Requested-With"],
    max_age=600,
)

# Include API routes
app.include_router(api_router, prefix=settings.api_v1_prefix)


@app.get("/health")
def health_check():
    """Basic liveness check endpoint."""
    return {"status": "healthy", "version": "1.0.0"}


@app.get("/health/ready")
def readiness_check():
    """Readiness probe with a database round trip."""
    db = None
    try:
        db = SessionLocal()
        db.execute(text("SELECT 1"))
        database = "healthy"
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        database = "unhealthy"
    finally:
        if db:
            db.close()

    return {
        "status": "ready" if database == "healthy" else "degraded",
        "version": "1.0.0",
        "checks": {"database": database},
    }
