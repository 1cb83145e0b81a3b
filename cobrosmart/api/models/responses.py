from typing import List

from pydantic import BaseModel

from cobrosmart.store.models import BusinessSettings, Debtor, DebtorEvent


class DebtorListResponse(BaseModel):
    """Debtors of the configured business."""
    items: List[Debtor]


class DebtorEventListResponse(BaseModel):
    """Latest events of one debtor, newest first."""
    items: List[DebtorEvent]


class DebtorUpdateResponse(BaseModel):
    """Debtor row after a status update."""
    ok: bool = True
    item: Debtor


class BootstrapResponse(BaseModel):
    """Id of the default business."""
    business_id: str


class DbCheckResponse(BaseModel):
    """Data store connectivity check passed."""
    ok: bool = True


class BusinessSettingsResponse(BaseModel):
    """Effective business settings (defaults filled in)."""
    ok: bool = True
    item: BusinessSettings


class HealthResponse(BaseModel):
    """Health check response."""
    status: str  # "healthy" or "degraded"
    version: str
    provider: str  # "azure", "openai", "gemini"
    model: str  # "local-fallback" when no provider is configured
    llm_configured: bool = False
    store_configured: bool = False
    uptime_seconds: float
