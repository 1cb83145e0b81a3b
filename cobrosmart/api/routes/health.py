"""
Health check API endpoint.

GET /health - Check service health and configuration.
"""
import time
from typing import Optional

from fastapi import APIRouter, Depends, Request

from cobrosmart.api.dependencies import get_app_settings, get_llm_provider
from cobrosmart.api.models.responses import HealthResponse
from cobrosmart.config.settings import Settings
from cobrosmart.engine.generator import FALLBACK_MODEL
from cobrosmart.llm.base import BaseLLMProvider

router = APIRouter()

# Track service start time for uptime calculation
_start_time = time.time()


@router.get("/health", response_model=HealthResponse)
async def health_check(
    request: Request,
    settings: Settings = Depends(get_app_settings),
    provider: Optional[BaseLLMProvider] = Depends(get_llm_provider),
) -> HealthResponse:
    """
    Health check endpoint with configuration info.

    Returns:
        - status: healthy, or degraded when the LLM or the store is not configured
        - version: API version
        - provider: configured LLM provider (azure/openai/gemini)
        - model: model or deployment name, local-fallback without a provider
        - llm_configured: whether messages can be generated by the LLM
        - store_configured: whether Supabase credentials are present
        - uptime_seconds: API uptime
    """
    uptime = time.time() - _start_time
    store_configured = getattr(request.app.state, "store", None) is not None
    llm_configured = provider is not None

    return HealthResponse(
        status="healthy" if llm_configured and store_configured else "degraded",
        version=request.app.version,
        provider=provider.provider_name if provider else settings.llm_provider,
        model=provider.model_name if provider else FALLBACK_MODEL,
        llm_configured=llm_configured,
        store_configured=store_configured,
        uptime_seconds=round(uptime, 2),
    )
