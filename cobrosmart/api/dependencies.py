"""
Dependency injection for the FastAPI application.

Long-lived collaborators (settings, store, LLM provider) are built once in
the app lifespan and kept on app.state; these functions hand them, or the
services built from them, to the routes.
"""

from typing import Optional

from fastapi import Depends, Request

from cobrosmart.api.errors import ConfigurationError
from cobrosmart.config.settings import Settings
from cobrosmart.engine.addressee import AddresseeClassifier
from cobrosmart.engine.generator import MessageGenerator
from cobrosmart.engine.message_service import MessageService
from cobrosmart.llm.base import BaseLLMProvider
from cobrosmart.store.base import CollectionStore


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_llm_provider(request: Request) -> Optional[BaseLLMProvider]:
    """Configured provider, or None when generation runs on the local fallback only."""
    return getattr(request.app.state, "llm_provider", None)


def get_store(request: Request, settings: Settings = Depends(get_app_settings)) -> CollectionStore:
    """
    Get the data store.

    Raises:
        ConfigurationError: Supabase credentials are missing
    """
    store = getattr(request.app.state, "store", None)
    if store is None:
        missing = [
            name
            for name, value in (
                ("SUPABASE_URL", settings.supabase_url),
                ("SUPABASE_SERVICE_ROLE_KEY", settings.supabase_service_role_key),
            )
            if not value
        ]
        raise ConfigurationError(missing or ["SUPABASE_URL"])
    return store


def get_business_id(settings: Settings = Depends(get_app_settings)) -> str:
    """
    Get the business that owns every debtor served by this deployment.

    Raises:
        ConfigurationError: COBROSMART_BUSINESS_ID is not set
    """
    if not settings.business_id:
        raise ConfigurationError(["COBROSMART_BUSINESS_ID"])
    return settings.business_id


def get_message_service(
    store: CollectionStore = Depends(get_store),
    provider: Optional[BaseLLMProvider] = Depends(get_llm_provider),
    settings: Settings = Depends(get_app_settings),
) -> MessageService:
    """Get the message service wired to the configured store and provider."""
    return MessageService(
        store=store,
        classifier=AddresseeClassifier(provider, settings.llm_timeout_seconds),
        generator=MessageGenerator(provider, settings),
    )
