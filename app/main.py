"""
PIN Gate API application factory.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from app.api.dependencies.auth import get_threshold_rule
from app.api.dependencies.database import close_redis_pool
from app.api.v1 import auth, health
from app.core.config import settings
from app.core.exceptions import PinGateException
from app.db.session import close_db, init_db
from app.middleware.error_handler import NO_STORE, ErrorHandlerMiddleware, build_error_body
from app.middleware.logging import LoggingMiddleware

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format=settings.LOG_FORMAT
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup: validasi lockout table dan siapkan audit tables.
    Shutdown: tutup database dan Redis pool.
    """
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

    # PolicyMisconfigurationError menghentikan startup
    rule = get_threshold_rule()
    table = ", ".join(f"{t.attempt_count}->{t.penalty_seconds}s" for t in rule.thresholds)
    logger.info(f"Lockout policy: increment={rule.increment}, thresholds=[{table}]")

    await init_db()
    logger.info(f"Ready (state backend: {settings.STATE_BACKEND})")

    yield

    await close_db()
    await close_redis_pool()
    logger.info("Shutdown complete")


async def pin_gate_exception_handler(request: Request, exc: PinGateException) -> JSONResponse:
    """Render PinGateException sebagai {"error": {...}}."""
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__}: {exc.message}", exc_info=exc)

    return JSONResponse(
        status_code=exc.status_code,
        content=build_error_body(request, exc.message, type(exc).__name__, exc.details),
        headers=NO_STORE
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Body yang tidak lolos schema juga memakai error envelope, tanpa echo input."""
    errors = [
        {key: value for key, value in error.items() if key not in ("input", "ctx")}
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=422,
        content=build_error_body(
            request,
            "Invalid request",
            "RequestValidationError",
            {"errors": jsonable_encoder(errors)}
        ),
        headers=NO_STORE
    )


def create_application() -> FastAPI:
    """
    Create and configure FastAPI application.

    Returns:
        Configured FastAPI application
    """
    docs_enabled = settings.DEBUG
    app = FastAPI(
        title=settings.APP_NAME,
        description="PIN and biometric unlock with escalating lockout",
        version=settings.APP_VERSION,
        docs_url="/docs" if docs_enabled else None,
        redoc_url="/redoc" if docs_enabled else None,
        openapi_url="/openapi.json" if docs_enabled else None,
        lifespan=lifespan
    )

    # Middleware dieksekusi dari yang terakhir ditambahkan
    app.add_middleware(ErrorHandlerMiddleware, debug=settings.DEBUG)
    app.add_middleware(
        LoggingMiddleware,
        log_request_body=settings.DEBUG,
        exclude_paths=[f"{settings.API_V1_STR}/health"]
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    app.add_exception_handler(PinGateException, pin_gate_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    for router in (health.router, auth.router):
        app.include_router(router, prefix=settings.API_V1_STR)

    @app.get("/", include_in_schema=False)
    async def root():
        return {
            "name": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "state_backend": settings.STATE_BACKEND
        }

    return app


app = create_application()

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
