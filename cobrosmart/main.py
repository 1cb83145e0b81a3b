"""
CobroSmart AI Engine - FastAPI Application

Main entry point for the collection assistant service providing:
- Debtor listing, event log and status updates
- Spreadsheet import with priority scoring
- Collection message generation (LLM with local fallback)
- Business settings
- Default business bootstrap and a data store connectivity check
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from cobrosmart.api.errors import CobroBaseError, ConfigurationError, ErrorCode, ErrorResponse
from cobrosmart.api.middleware import RequestIDMiddleware, get_request_id
from cobrosmart.api.routes import bootstrap, business_settings, debtors, health, imports, messages
from cobrosmart.config.settings import Settings, get_settings
from cobrosmart.llm.base import BaseLLMProvider
from cobrosmart.llm.factory import build_llm_provider
from cobrosmart.store.base import CollectionStore
from cobrosmart.store.supabase_store import SupabaseStore

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


def _error_response(status_code: int, error_response: ErrorResponse) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=error_response.model_dump(mode="json"))


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    logger.info("=" * 60)
    logger.info("Starting CobroSmart AI Engine")
    logger.info("=" * 60)

    provider = app.state.llm_provider
    logger.info(
        f"LLM: {provider.provider_name}/{provider.model_name}"
        if provider
        else "LLM: not configured, messages use the local fallback"
    )

    if app.state.store is None and app.state.build_clients:
        try:
            app.state.store = await SupabaseStore.create(settings)
        except ConfigurationError as e:
            # Data endpoints answer CONFIGURATION_ERROR until credentials are set
            logger.warning(f"Data store not configured: missing {', '.join(e.missing)}")
    if not settings.business_id:
        logger.warning("COBROSMART_BUSINESS_ID not set")

    logger.info(f"Port: {settings.api_port}")
    logger.info(f"Debug: {settings.debug}")
    yield


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[CollectionStore] = None,
    llm_provider: Optional[BaseLLMProvider] = None,
    build_clients: bool = True,
) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Settings to use (defaults to the environment)
        store: Data store; built from settings at startup when omitted
        llm_provider: Text-generation provider; built from settings when omitted
        build_clients: Set False to use exactly the given store and provider
    """
    settings = settings or get_settings()

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    app = FastAPI(
        title="CobroSmart AI Engine",
        description="Collection priority scoring and WhatsApp message generation",
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.build_clients = build_clients
    app.state.store = store
    if llm_provider is None and build_clients:
        llm_provider = build_llm_provider(settings)
    app.state.llm_provider = llm_provider
    app.state.limiter = messages.limiter

    # Request ID middleware (must be added first to capture all requests)
    app.add_middleware(RequestIDMiddleware)

    cors_origins = settings.get_cors_origins()
    if cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
        logger.info(f"CORS enabled for origins: {cors_origins}")

    @app.exception_handler(CobroBaseError)
    async def cobro_error_handler(request: Request, exc: CobroBaseError) -> JSONResponse:
        """Handle all CobroSmart exceptions with structured response."""
        return _error_response(
            exc.status_code,
            ErrorResponse(
                error=exc.message,
                error_code=exc.error_code,
                details=exc.details,
                request_id=get_request_id(),
            ),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = exc.errors()
        if any(error.get("type") == "json_invalid" for error in errors):
            return _error_response(
                400,
                ErrorResponse(
                    error="Body is not valid JSON.",
                    error_code=ErrorCode.INVALID_JSON,
                    request_id=get_request_id(),
                ),
            )
        return _error_response(
            422,
            ErrorResponse(
                error="Request validation failed.",
                error_code=ErrorCode.VALIDATION_ERROR,
                details={
                    "errors": [
                        {"loc": list(error.get("loc", ())), "msg": error.get("msg")}
                        for error in errors
                    ]
                },
                request_id=get_request_id(),
            ),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == 405:
            error_code = ErrorCode.METHOD_NOT_ALLOWED
        elif exc.status_code == 404:
            error_code = ErrorCode.NOT_FOUND
        else:
            error_code = ErrorCode.VALIDATION_ERROR
        return _error_response(
            exc.status_code,
            ErrorResponse(error=str(exc.detail), error_code=error_code, request_id=get_request_id()),
        )

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
        return _error_response(
            429,
            ErrorResponse(
                error=f"Rate limit exceeded: {exc.detail}",
                error_code=ErrorCode.RATE_LIMITED,
                request_id=get_request_id(),
            ),
        )

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected exceptions with structured response."""
        logger.exception(f"Unhandled exception: {exc}")
        return _error_response(
            500,
            ErrorResponse(
                error="An unexpected error occurred",
                error_code=ErrorCode.INTERNAL_ERROR,
                details={"exception_type": type(exc).__name__} if settings.debug else None,
                request_id=get_request_id(),
            ),
        )

    app.include_router(health.router, tags=["Health"])
    app.include_router(debtors.router, tags=["Debtors"])
    app.include_router(messages.router, tags=["Messages"])
    app.include_router(imports.router, tags=["Import"])
    app.include_router(business_settings.router, tags=["Settings"])
    app.include_router(bootstrap.router, tags=["Setup"])

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "cobrosmart.main:app", host=settings.api_host, port=settings.api_port, reload=settings.debug
    )
