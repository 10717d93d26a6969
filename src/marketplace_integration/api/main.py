"""Integration API - FastAPI over Redis."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
import time
import uuid

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
import structlog

from ..config import get_settings
from ..errors import IntegrationError, InvalidSignature, ValidationFailed
from ..logging_config import clear_context, get_logger, set_correlation_id, setup_logging
from ..storage.client import RedisClient
from . import routers

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Configure logging and hold one Redis connection for the app's lifetime."""
    settings = get_settings()
    setup_logging(
        service_name=settings.service_name,
        log_format=settings.log_format,
        log_level=settings.log_level,
    )
    redis_client = RedisClient(settings.redis_url)
    await redis_client.connect()
    app.state.redis_client = redis_client
    yield
    await redis_client.close()


app = FastAPI(
    title="Entrolytics Vercel Integration",
    description="Marketplace integration backend for Entrolytics analytics",
    version="0.1.0",
    lifespan=lifespan,
)


CORRELATION_HEADER = "X-Correlation-ID"


@app.middleware("http")
async def correlation_middleware(request: Request, call_next):
    """Bind a correlation id for the request and log its outcome."""
    correlation_id = request.headers.get(CORRELATION_HEADER) or f"req_{uuid.uuid4().hex[:12]}"
    set_correlation_id(correlation_id)
    structlog.contextvars.bind_contextvars(method=request.method, path=request.url.path)
    start = time.perf_counter()

    try:
        response = await call_next(request)
    except Exception as e:
        logger.error(
            "http_request_exception",
            error=str(e),
            error_type=type(e).__name__,
            duration_ms=_elapsed_ms(start),
            exc_info=True,
        )
        raise
    else:
        status_code = response.status_code
        if status_code >= 500:  # noqa: PLR2004
            log = logger.error
        elif status_code >= 400:  # noqa: PLR2004
            log = logger.warning
        else:
            log = logger.info
        log("http_request", status_code=status_code, duration_ms=_elapsed_ms(start))
        response.headers[CORRELATION_HEADER] = correlation_id
        return response
    finally:
        clear_context()


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 2)


@app.exception_handler(IntegrationError)
async def integration_error_handler(request: Request, exc: IntegrationError) -> JSONResponse:
    if isinstance(exc, InvalidSignature):
        content = {"error": "invalid_signature", "message": exc.message}
    else:
        content = {"error": exc.message}
    if exc.status_code >= 500:  # noqa: PLR2004
        logger.error("integration_error", error=str(exc))
    return JSONResponse(content, status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("request_validation_failed", errors=exc.errors())
    return JSONResponse({"error": ValidationFailed.message}, status_code=400)


app.include_router(routers.health.router)
app.include_router(routers.installations.router)
app.include_router(routers.resources.router)
app.include_router(routers.configurations.router)
app.include_router(routers.webhook.router)
app.include_router(routers.callback.router)
