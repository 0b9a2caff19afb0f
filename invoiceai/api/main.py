import time

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..core.config import settings
from ..core.errors import ExtractionError, UnparseableExtraction, UpstreamError, ValidationFailed
from ..core.logging import setup_logging
from ..models.invoice import ErrorResponse
from .routers import ai, health, invoices

logger = setup_logging()
app = FastAPI(title="Invoice AI Backend")

_LOCATIONS = ("body", "query", "path", "header")


def _field_path(loc: tuple) -> str:
    """("body", "items", 0, "quantity") -> "items[0].quantity" """
    parts = list(loc[1:] if loc and loc[0] in _LOCATIONS else loc)
    path = ""
    for part in parts:
        if isinstance(part, int):
            path += f"[{part}]"
        else:
            path += f".{part}" if path else str(part)
    return path or str(loc[0] if loc else "")


def _error_response(status_code: int, message: str, errors: list[dict] | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(message=message, errors=errors).model_dump(exclude_none=True),
    )


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    logger.info(
        f"{request.method} {request.url.path}",
        status_code=response.status_code,
        duration_ms=round((time.perf_counter() - start) * 1000, 1),
    )
    return response


# Request bodies and query parameters that fail validation
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": _field_path(err["loc"]), "message": err["msg"].removeprefix("Value error, ")}
        for err in exc.errors()
    ]
    logger.warning("Request validation failed", path=request.url.path, error_fields=[e["field"] for e in errors])
    return _error_response(status.HTTP_400_BAD_REQUEST, "Validation failed", errors)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return _error_response(exc.status_code, str(exc.detail))


@app.exception_handler(UpstreamError)
async def upstream_exception_handler(request: Request, exc: UpstreamError):
    logger.error(f"Completion service error: {exc.message}", path=request.url.path)
    return _error_response(status.HTTP_502_BAD_GATEWAY, "AI service unavailable")


@app.exception_handler(ValidationFailed)
async def extraction_validation_handler(request: Request, exc: ValidationFailed):
    logger.warning("Extracted data failed validation", violations=exc.to_list())
    return _error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "Extracted invoice data is incomplete",
        exc.to_list(),
    )


@app.exception_handler(ExtractionError)
async def extraction_exception_handler(request: Request, exc: ExtractionError):
    # Diagnostic detail stays in the logs
    if isinstance(exc, UnparseableExtraction):
        logger.error(
            "Failed to parse JSON from AI response",
            parse_error=str(exc.error),
            repair_error=str(exc.repair_error),
            snippet=exc.snippet,
        )
    else:
        logger.error(f"Failed to read AI response: {exc.message}")
    return _error_response(status.HTTP_422_UNPROCESSABLE_ENTITY, "Could not understand the provided text")


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Server Error")


# Configure CORS to allow frontend access
# CORS_ORIGINS can be set in .env as comma-separated list
allowed_origins = [origin.strip() for origin in settings.cors_origins.split(",")]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(invoices.router)
app.include_router(ai.router)
