from functools import lru_cache
from typing import List, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment.

    Built once per process by get_settings() and handed to every component
    explicitly. Frozen so nothing can mutate it after startup.
    """

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8001
    debug: bool = False

    # CORS - Comma-separated list, empty = allow all in debug mode only
    cors_allowed_origins: str = ""

    def get_cors_origins(self) -> List[str]:
        """
        Get list of allowed CORS origins.

        Returns:
            List of allowed origins. If empty and debug=True, allows all origins.
            If empty and debug=False, returns empty list (no CORS allowed).
        """
        if not self.cors_allowed_origins:
            if self.debug:
                return ["*"]
            return []
        return [origin.strip() for origin in self.cors_allowed_origins.split(",") if origin.strip()]

    # Business that owns every debtor served by this deployment
    business_id: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("COBROSMART_BUSINESS_ID", "BUSINESS_ID")
    )

    # Supabase (data store)
    supabase_url: Optional[str] = None
    supabase_service_role_key: Optional[str] = None

    # LLM Provider Selection: "azure", "openai" or "gemini"
    llm_provider: str = "azure"

    # Azure OpenAI (PRIMARY)
    azure_openai_endpoint: Optional[str] = None
    azure_openai_api_key: Optional[str] = None
    azure_openai_deployment_name: Optional[str] = None
    azure_openai_api_version: str = "2024-10-21"

    # OpenAI
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o-mini"

    # Gemini
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-2.5-flash"

    # Generation call: single attempt, no retries
    llm_timeout_seconds: float = 25.0
    message_temperature: float = 0.7
    message_top_p: float = 0.9
    # Higher values when the caller forces a regeneration, to move away from the last draft
    regenerate_temperature: float = 0.95
    regenerate_top_p: float = 1.0
    message_max_output_tokens: int = 180

    # Event listing
    events_default_limit: int = 20
    events_max_limit: int = 100

    # Logging
    log_level: str = "INFO"

    # Rate Limiting (per-IP, per-minute)
    rate_limit_generate: str = "30/minute"

    @field_validator("llm_provider")
    @classmethod
    def validate_llm_provider(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in {"azure", "openai", "gemini"}:
            raise ValueError(f"Unknown LLM provider: {v}")
        return v

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.strip().upper()

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
        frozen=True,
    )


@lru_cache
def get_settings() -> Settings:
    """Get the process-wide settings, constructed on first use."""
    return Settings()
