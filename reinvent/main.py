# reinvent/main.py
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import structlog
from fastapi import FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from reinvent.adapters.api.routers import export, health, inventions, media
from reinvent.core.domain.exceptions import (
    AllProvidersFailedError,
    DomainError,
    ModerationRejected,
    ModerationUnavailableError,
    ValidationError,
)
from reinvent.shared.config import AppEnv
from reinvent.shared.container import Container
from reinvent.shared.logging_config import configure_logging
from reinvent.shared.observability import setup_observability
from reinvent.shared.resilience import RateLimitExceededError

logger = structlog.get_logger()

ROUTER_MODULES = [inventions, media, export, health]

# User-facing message when every provider of an operation failed
FAILURE_MESSAGES = {
    "deconstruct": "Failed to deconstruct invention",
    "simulate": "Failed to generate simulations",
    "generate_image": "Failed to generate image",
    "narrative": "Failed to generate narrative",
    "transcribe": "Failed to transcribe audio",
}

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}


def _error(status_code: int, message: str, details: Optional[str] = None, **extra) -> JSONResponse:
    content = {"error": message}
    if details:
        content["details"] = details
    content.update(extra)
    return JSONResponse(status_code=status_code, content=content)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application Lifecycle Manager.
    The result cache lives exactly as long as the app: it is emptied on
    shutdown along with the shared HTTP client.
    """
    container: Container = app.state.container
    config = container.settings()
    logger.info("app_starting", app=config.APP_NAME, env=config.APP_ENV.value, version=config.APP_VERSION)

    yield

    logger.info("app_stopping")
    container.result_cache().clear()
    await container.http_client().aclose()


def create_app(container: Optional[Container] = None) -> FastAPI:
    """
    Factory function to create the FastAPI application.
    Tests pass their own container with overridden providers.
    """
    container = container or Container()
    config = container.settings()

    configure_logging(config)
    container.wire(modules=ROUTER_MODULES)

    app = FastAPI(
        title="Reverse-Invention Generator",
        version=config.APP_VERSION,
        description="Alternate-history invention pathways generated through a multi-provider AI pipeline",
        docs_url="/docs" if config.APP_ENV != AppEnv.PRODUCTION else None,
        redoc_url="/redoc" if config.APP_ENV != AppEnv.PRODUCTION else None,
        lifespan=lifespan,
    )
    app.state.container = container

    # 1. CORS: permissive for every origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def cors_everywhere(request: Request, call_next):
        # Preflight (or any OPTIONS) short-circuits with the headers and no body
        if request.method == "OPTIONS":
            return Response(status_code=status.HTTP_200_OK, headers=CORS_HEADERS)
        response = await call_next(request)
        response.headers.setdefault("Access-Control-Allow-Origin", "*")
        return response

    # 2. Tracing (only when an OTLP endpoint is configured)
    setup_observability(app, config)

    # 3. Global Exception Handlers
    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        return _error(status.HTTP_400_BAD_REQUEST, exc.message)

    @app.exception_handler(ModerationRejected)
    async def moderation_rejected_handler(request: Request, exc: ModerationRejected):
        return _error(status.HTTP_400_BAD_REQUEST, exc.message)

    @app.exception_handler(ModerationUnavailableError)
    async def moderation_unavailable_handler(request: Request, exc: ModerationUnavailableError):
        return _error(status.HTTP_503_SERVICE_UNAVAILABLE, "Content moderation is unavailable", exc.message)

    @app.exception_handler(AllProvidersFailedError)
    async def providers_failed_handler(request: Request, exc: AllProvidersFailedError):
        message = FAILURE_MESSAGES.get(exc.operation, "Failed to process request")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, message, exc.detail)

    @app.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError):
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, exc.message)

    @app.exception_handler(RateLimitExceededError)
    async def rate_limit_handler(request: Request, exc: RateLimitExceededError):
        response = _error(status.HTTP_429_TOO_MANY_REQUESTS, str(exc), retryAfter=int(exc.retry_after))
        response.headers["Retry-After"] = str(int(exc.retry_after))
        return response

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        first = errors[0] if errors else {}
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        details = f"{location}: {first.get('msg')}" if location else first.get("msg")
        return _error(status.HTTP_400_BAD_REQUEST, "Invalid request body", details)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """
        Catches unhandled exceptions to prevent crashing and leaking stack traces in Prod.
        """
        logger.error("unhandled_exception", error=str(exc), exc_info=True)
        response = _error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Internal Server Error",
            str(exc) if config.DEBUG else None,
        )
        # Served by ServerErrorMiddleware, outside the CORS middleware
        response.headers.update(CORS_HEADERS)
        return response

    # 4. Mount Routes
    for module in ROUTER_MODULES:
        app.include_router(module.router, prefix=config.API_PREFIX)

    return app


def run() -> None:
    """Console entry point: `reinvent-server`."""
    import uvicorn

    from reinvent.shared.config import settings

    uvicorn.run("reinvent.main:create_app", factory=True, host="0.0.0.0", port=8000, log_level=settings.LOG_LEVEL.lower())
