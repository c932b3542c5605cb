import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from slotbook.api.routes import availability, bookings, catalog, customers, public_bookings
from slotbook.core.config import _ENV_FILE, settings
from slotbook.core.db import init_db
from slotbook.core.errors import DomainError, ErrorCode

if os.getenv("ENV") != "production":
    logging.basicConfig(level=logging.DEBUG)
else:
    logging.basicConfig(
        level=logging.INFO,
        format='{"time": "%(asctime)s", "level": "%(levelname)s", "message": "%(message)s"}',
    )
logger = logging.getLogger(__name__)

_STATUS_BY_CODE = {
    ErrorCode.INVALID_INPUT: 422,
    ErrorCode.INVALID_STATUS_TRANSITION: 422,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.CONFLICT: 409,
    ErrorCode.UNAUTHORIZED: 401,
    ErrorCode.FORBIDDEN: 403,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Loading .env from: %s (exists: %s)", _ENV_FILE, _ENV_FILE.exists())
    logger.info(
        "Storage backend: %s; business hours %s-%s %s every %d min",
        settings.storage_backend,
        settings.business_open.strftime("%H:%M"),
        settings.business_close.strftime("%H:%M"),
        settings.business_timezone,
        settings.slot_step_minutes,
    )
    if settings.storage_backend == "sql" and settings.auto_create_tables:
        await init_db()
        logger.info("Database tables created (auto_create_tables)")
    yield


app = FastAPI(
    title="Slotbook API",
    description="Appointment booking: services, staff availability and conflict-checked reservations",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)

app.include_router(public_bookings.router, prefix="/api/v1")
app.include_router(bookings.router, prefix="/api/v1")
app.include_router(availability.router, prefix="/api/v1")
app.include_router(catalog.router, prefix="/api/v1")
app.include_router(customers.router, prefix="/api/v1")


def _cors_headers(origin: str | None) -> dict[str, str]:
    """Add CORS headers to error responses so the browser doesn't block them."""
    headers = {
        "Access-Control-Allow-Credentials": "true",
        "Access-Control-Allow-Methods": "GET, POST, PUT, PATCH, DELETE, OPTIONS",
        "Access-Control-Allow-Headers": "Authorization, Content-Type",
    }
    if origin and origin in settings.cors_origins_list:
        headers["Access-Control-Allow-Origin"] = origin
    elif settings.cors_origins_list:
        headers["Access-Control-Allow-Origin"] = settings.cors_origins_list[0]
    return headers


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    """Map domain errors to a structured body; conflicts are an expected outcome."""
    headers = _cors_headers(request.headers.get("origin"))
    if exc.code == ErrorCode.UNAUTHORIZED:
        headers["WWW-Authenticate"] = "Bearer"
    content = {"code": exc.code.value, "detail": exc.message}
    field = getattr(exc, "field", None)
    if field:
        content["field"] = field
    return JSONResponse(status_code=_STATUS_BY_CODE[exc.code], content=content, headers=headers)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(p) for p in first.get("loc", ())[1:]) or None
    content = {
        "code": ErrorCode.INVALID_INPUT.value,
        "detail": first.get("msg", "Invalid request"),
    }
    if field:
        content["field"] = field
    return JSONResponse(
        status_code=422,
        content=content,
        headers=_cors_headers(request.headers.get("origin")),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Unexpected failures become a 500 with CORS headers; the traceback goes to the log."""
    headers = _cors_headers(request.headers.get("origin"))
    if isinstance(exc, HTTPException):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=headers)
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    content = {"code": "INTERNAL_ERROR", "detail": f"{type(exc).__name__}: {exc}"}
    if settings.env == "production":
        content["detail"] = "Internal server error"
    return JSONResponse(status_code=500, content=content, headers=headers)


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}
