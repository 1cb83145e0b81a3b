"""LLM provider factory.

Builds the single configured provider. A provider whose credentials are
missing is reported as unavailable (None) instead of failing startup: the
message pipeline degrades to its local fallback template in that case.
"""

import logging
from typing import Optional

from cobrosmart.config.settings import Settings

from .azure_provider import AzureOpenAIProvider
from .base import BaseLLMProvider
from .gemini_provider import GeminiProvider
from .openai_provider import OpenAIProvider

logger = logging.getLogger(__name__)


def build_llm_provider(settings: Settings) -> Optional[BaseLLMProvider]:
    """Create the provider named by settings.llm_provider, or None if unconfigured."""
    try:
        if settings.llm_provider == "azure":
            return AzureOpenAIProvider(
                endpoint=settings.azure_openai_endpoint,
                api_key=settings.azure_openai_api_key,
                deployment=settings.azure_openai_deployment_name,
                api_version=settings.azure_openai_api_version,
            )
        if settings.llm_provider == "openai":
            return OpenAIProvider(api_key=settings.openai_api_key, model=settings.openai_model)
        if settings.llm_provider == "gemini":
            return GeminiProvider(api_key=settings.gemini_api_key, model=settings.gemini_model)
    except ValueError as e:
        # API key not configured - generation falls back to the local template
        logger.warning("LLM provider %s unavailable: %s", settings.llm_provider, e)
        return None

    raise ValueError(f"Unknown LLM provider: {settings.llm_provider}")
