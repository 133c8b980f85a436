"""
FastAPI application for the polycode backend.

A thin proxy in front of the completion provider: it validates requests,
shapes directives, cleans the provider's output and mirrors provider
failures back to the caller.

Run it with ``polycode serve`` or ``uvicorn polycode.api.app:app``.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from polycode.config import Settings, get_settings
from polycode.core.errors import ProviderError
from polycode.core.models import (
    ConvertRequest,
    ConvertResponse,
    ErrorResponse,
    ExplainRequest,
    ExplainResponse,
    HealthResponse,
)
from polycode.core.utils import utc_now
from polycode.services.ai import CompletionProxy, get_completion_client
from polycode.services.orchestrator import CodeAssistant

logger = logging.getLogger(__name__)


# =============================================================================
# Lifespan
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the provider client, refusing to start without a credential."""
    settings: Settings = app.state.settings
    owned_client = None

    if app.state.proxy is None:
        if not settings.has_api_key:
            logger.error("CEREBRAS_API_KEY is not set")
            raise RuntimeError("CEREBRAS_API_KEY is not set")
        owned_client = get_completion_client(settings)
        app.state.proxy = CompletionProxy(owned_client, settings.completion_model)

    logger.info("Polycode server started")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Model: {settings.completion_model}")
    logger.info(f"API key configured: {'Yes' if settings.has_api_key else 'No'}")

    yield

    logger.info("Shutting down server...")
    if owned_client is not None:
        await owned_client.close()
        app.state.proxy = None


# =============================================================================
# Dependencies
# =============================================================================


def get_proxy(request: Request) -> CodeAssistant:
    return request.app.state.proxy


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


# =============================================================================
# Routes
# =============================================================================


router = APIRouter()


@router.post("/convert", response_model=ConvertResponse)
async def convert(
    request: ConvertRequest,
    proxy: CodeAssistant = Depends(get_proxy),
):
    """Convert code from one language to another."""
    output = await proxy.translate(request.source_code, request.target_language)
    return ConvertResponse(output=output)


@router.post("/explain", response_model=ExplainResponse)
async def explain(
    request: ExplainRequest,
    proxy: CodeAssistant = Depends(get_proxy),
):
    """Return a plain-language explanation of the provided code."""
    explanation = await proxy.explain(request.code, request.language)
    return ExplainResponse(explanation=explanation)


@router.get("/health", response_model=HealthResponse)
async def health_check(settings: Settings = Depends(get_app_settings)):
    """Health check endpoint."""
    return HealthResponse(status="ok", timestamp=utc_now(), model=settings.completion_model)


# =============================================================================
# Error Handlers
# =============================================================================


async def provider_error_handler(request: Request, exc: ProviderError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return _error_response(400, _validation_message(exc.errors()))


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404:
        return _error_response(404, "Endpoint not found")
    return _error_response(exc.status_code, str(exc.detail))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error", exc_info=exc)
    return _error_response(500, "An unexpected error occurred", message=str(exc))


def _error_response(status_code: int, error: str, **extra: str) -> JSONResponse:
    body = ErrorResponse(error=error, **extra)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


def _validation_message(errors: list[dict[str, Any]]) -> str:
    """One human-readable sentence for a request validation failure."""
    missing = [_field_name(e) for e in errors if e.get("type") == "missing"]
    if missing:
        noun = "field" if len(missing) == 1 else "fields"
        return f"Missing required {noun}: {' and '.join(missing)}"

    error = errors[0] if errors else {}
    error_type = error.get("type", "")
    field = _field_name(error)

    if error_type == "json_invalid":
        return "Request body must be valid JSON"
    if field == "body":
        return "Request body must be a JSON object"
    if error_type.endswith("_type"):
        return f"Invalid data type: {field} must be a string"
    if error_type == "value_error" and "error" in error.get("ctx", {}):
        return str(error["ctx"]["error"])
    return error.get("msg", "Invalid request")


def _field_name(error: dict[str, Any]) -> str:
    loc = error.get("loc", ())
    return str(loc[-1]) if len(loc) > 1 else "body"


# =============================================================================
# App Setup
# =============================================================================


def create_app(
    settings: Settings | None = None,
    proxy: CodeAssistant | None = None,
) -> FastAPI:
    """
    Build the API.

    Args:
        settings: Defaults to environment settings.
        proxy: Pre-built assistant; when omitted the lifespan builds a
            ``CompletionProxy`` from the settings.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Polycode API",
        description="Translate and explain source code with a completion provider",
        version="0.1.0",
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.proxy = proxy

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router)

    app.add_exception_handler(ProviderError, provider_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    return app


app = create_app()
