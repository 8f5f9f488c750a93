"""Cash Card Service.

This service lets authenticated card owners create, read, page through,
update and delete their own cash cards. Cards are stored in process memory
by default or in PostgreSQL.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from app.api.routes import api_router
from app.api.routes.health import router as health_router
from app.core.config import AppEnvironment, Settings, StorageBackend, get_settings
from app.core.database import get_engine, reset_engine
from app.core.errors import (
    CashCardServiceError,
    NotFoundError,
    UnauthorizedError,
    get_status_code,
)
from app.core.logging import setup_logging
from app.persistence.schema import create_schema

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan context manager."""
    settings = get_settings()

    setup_logging(settings)
    logger.info(
        "Starting Cash Card Service",
        extra={
            "app": settings.app.name,
            "env": settings.app.env,
            "version": settings.app.version,
            "backend": settings.database.backend,
        },
    )

    app.state.settings = settings

    uses_postgres = settings.database.backend == StorageBackend.POSTGRES
    if uses_postgres:
        engine = get_engine()
        if settings.database.auto_create_schema:
            await create_schema(engine)

    yield

    if uses_postgres:
        await reset_engine()

    logger.info("Cash Card Service stopped")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Cash Card API",
        description=(
            "Ownership-scoped cash card records. Every card belongs to the "
            "principal that created it and is invisible to everyone else."
        ),
        version=settings.app.version,
        lifespan=lifespan,
        docs_url="/docs" if settings.app.env != AppEnvironment.PROD else None,
        redoc_url="/redoc" if settings.app.env != AppEnvironment.PROD else None,
        openapi_url="/openapi.json" if settings.app.env != AppEnvironment.PROD else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.security.cors_allowed_origins,
        allow_credentials=settings.security.cors_allow_credentials,
        allow_methods=settings.security.cors_allow_methods,
        allow_headers=settings.security.cors_allow_headers,
        expose_headers=settings.security.cors_expose_headers,
    )

    app.include_router(health_router, prefix=settings.app.api_prefix)
    app.include_router(api_router, prefix=settings.app.api_prefix)

    setup_telemetry(app, settings)

    @app.exception_handler(CashCardServiceError)
    async def domain_error_handler(  # type: ignore[reportUnusedFunction]
        request: Request, exc: CashCardServiceError
    ) -> Response:
        """Handle domain-specific errors and return appropriate HTTP responses."""
        status_code = get_status_code(exc)

        # Absent and foreign cards must be indistinguishable, body included
        if isinstance(exc, NotFoundError):
            return Response(status_code=status_code)

        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, UnauthorizedError) else None
        return JSONResponse(
            status_code=status_code,
            content={"detail": exc.message, **({"errors": exc.details} if exc.details else {})},
            headers=headers,
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(  # type: ignore[reportUnusedFunction]
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Render 422 errors without echoing the rejected input back."""
        errors = [
            {"type": error["type"], "loc": error["loc"], "msg": error["msg"]}
            for error in exc.errors()
        ]
        return JSONResponse(status_code=422, content=jsonable_encoder({"detail": errors}))

    @app.exception_handler(Exception)
    async def global_exception_handler(  # type: ignore[reportUnusedFunction]
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Handle unexpected exceptions and return 500 error responses."""
        logger.exception(
            "Unhandled exception",
            extra={
                "path": request.url.path,
                "method": request.method,
                "error": str(exc),
            },
        )
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )

    return app


def setup_telemetry(app: FastAPI, settings: Settings) -> None:
    """Setup OpenTelemetry instrumentation."""
    if not settings.observability.otlp_endpoint:
        return

    resource = Resource(
        attributes={
            SERVICE_NAME: settings.observability.service_name,
        }
    )

    provider = TracerProvider(resource=resource)
    exporter = OTLPSpanExporter(
        endpoint=settings.observability.otlp_endpoint,
        insecure=settings.observability.otlp_insecure,
    )
    provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)

    FastAPIInstrumentor.instrument_app(app)


def run() -> None:
    """Run the application using uvicorn."""
    import uvicorn

    settings = get_settings()
    log_level = str(getattr(settings.app.log_level, "value", settings.app.log_level))

    uvicorn.run(
        "app.main:create_app",
        factory=True,
        host=settings.server.host,
        port=settings.server.port,
        reload=settings.app.env == AppEnvironment.LOCAL,
        workers=1 if settings.app.env == AppEnvironment.LOCAL else settings.server.workers,
        log_level=log_level.lower(),
    )


if __name__ == "__main__":
    run()
