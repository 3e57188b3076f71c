"""
main.py — taxplanner FastAPI application entry point.

Start with: uvicorn taxplanner.main:app --reload --port 8000
or the installed console script: taxplanner-api
"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from taxplanner.api.routes import router as planner_router
from taxplanner.api.schemas import ErrorBody, ErrorDetail, ErrorResponse
from taxplanner.config import settings
from taxplanner.engine.capital_gains import UnsupportedAssetClassError
from taxplanner.engine.schemas import Regime
from taxplanner.engine.tables import UnknownTableError, get_regime_rules

# ---------------------------------------------------------------------------
# Logging — configured before anything else
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s — %(message)s",
)
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Lifespan — startup & shutdown hooks
# ---------------------------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup: fail fast when DEFAULT_FISCAL_YEAR names a year with no table.
    """
    rules = get_regime_rules(Regime.old, settings.default_fiscal_year)
    logger.info(
        "taxplanner v%s starting up (default fiscal year %s)",
        settings.app_version, rules.fiscal_year,
    )
    yield
    logger.info("taxplanner shutting down")


# ---------------------------------------------------------------------------
# FastAPI application instance
# ---------------------------------------------------------------------------
app = FastAPI(
    title="taxplanner API",
    version=settings.app_version,
    description=(
        "Deterministic personal income-tax planning: slab tax, deduction caps, "
        "regime comparison, capital gains, advance tax and projections."
    ),
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Error response helper
# ---------------------------------------------------------------------------
def _make_error_response(
    code: str,
    message: str,
    details: list[dict[str, Any]] | None = None,
    status_code: int = 500,
) -> JSONResponse:
    """Build a standard {error: {code, message, details}} response."""
    body = ErrorResponse(
        error=ErrorBody(
            code=code,
            message=message,
            details=[ErrorDetail(**d) for d in details or []],
        )
    )
    return JSONResponse(status_code=status_code, content=body.model_dump())


# ---------------------------------------------------------------------------
# Global exception handlers
# ---------------------------------------------------------------------------
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Converts Pydantic / FastAPI 422 validation errors to standard format.
    Returns ALL field violations in one response.
    """
    details = []
    for error in exc.errors():
        # Build dot-notation field path, excluding the top-level 'body' loc
        field = ".".join(str(loc) for loc in error["loc"] if loc != "body")
        details.append({"field": field or None, "issue": error["msg"]})
    logger.warning(
        "Rejected request %s %s violations=%d",
        request.method, request.url.path, len(details),
    )
    return _make_error_response(
        code="VALIDATION_ERROR",
        message="Request validation failed",
        details=details,
        status_code=422,
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    code_map = {
        400: "BAD_REQUEST",
        404: "NOT_FOUND",
        405: "METHOD_NOT_ALLOWED",
        422: "VALIDATION_ERROR",
    }
    code = code_map.get(exc.status_code, f"HTTP_{exc.status_code}")
    return _make_error_response(
        code=code,
        message=str(exc.detail),
        status_code=exc.status_code,
    )


@app.exception_handler(UnsupportedAssetClassError)
async def unsupported_asset_class_handler(
    request: Request, exc: UnsupportedAssetClassError
) -> JSONResponse:
    logger.warning("Rejected capital gains request asset_class=%r", exc.asset_class)
    return _make_error_response(
        code="UNSUPPORTED_ASSET_CLASS",
        message=str(exc),
        details=[{"field": "asset_class", "issue": str(exc)}],
        status_code=422,
    )


@app.exception_handler(UnknownTableError)
async def unknown_table_handler(
    request: Request, exc: UnknownTableError
) -> JSONResponse:
    logger.warning("No statutory table fiscal_year=%s regime=%s", exc.fiscal_year, exc.regime.value)
    return _make_error_response(
        code="UNKNOWN_TAX_TABLE",
        message=str(exc),
        details=[{"field": "fiscal_year", "issue": str(exc)}],
        status_code=404,
    )


@app.exception_handler(ValueError)
async def value_error_handler(
    request: Request, exc: ValueError
) -> JSONResponse:
    """
    Catches explicit ValueError raises from the engine (bad fiscal-year label,
    missing projection inputs). Surfaces as 422 VALIDATION_ERROR.
    """
    logger.warning("Rejected request %s %s: %s", request.method, request.url.path, exc)
    return _make_error_response(
        code="VALIDATION_ERROR",
        message=str(exc),
        status_code=422,
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    """
    Catch-all for unexpected errors.
    DEBUG=true  → includes exception type & message in details (dev only).
    DEBUG=false → generic message; full traceback logged server-side only.
    """
    logger.error(
        "Unhandled exception on %s %s",
        request.method,
        request.url.path,
        exc_info=True,
    )
    if settings.debug:
        details = [{"issue": f"{type(exc).__name__}: {exc}"}]
        message = "An unexpected error occurred (debug details included)"
    else:
        details = []
        message = "An unexpected error occurred"
    return _make_error_response(
        code="INTERNAL_ERROR",
        message=message,
        details=details,
        status_code=500,
    )


# ---------------------------------------------------------------------------
# Health endpoint
# ---------------------------------------------------------------------------
@app.get("/api/health", tags=["System"])
async def health_check() -> dict:
    return {
        "status": "ok",
        "version": settings.app_version,
        "default_fiscal_year": settings.default_fiscal_year,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


app.include_router(planner_router)


def run() -> None:
    """Console-script entry point."""
    import uvicorn

    uvicorn.run(
        "taxplanner.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
