"""
Business settings API endpoints.

GET  /settings - Effective settings (defaults when none are stored)
POST /settings - Merge a partial update over the stored settings
"""

from fastapi import APIRouter, Depends

from cobrosmart.api.dependencies import get_business_id, get_store
from cobrosmart.api.errors import ErrorResponse
from cobrosmart.api.models.responses import BusinessSettingsResponse
from cobrosmart.engine.business_settings import (
    BusinessSettingsPatch,
    get_business_settings,
    upsert_business_settings,
)
from cobrosmart.store.base import CollectionStore

router = APIRouter()


@router.get(
    "/settings",
    response_model=BusinessSettingsResponse,
    responses={500: {"model": ErrorResponse, "description": "Configuration or store error"}},
)
async def read_settings(
    store: CollectionStore = Depends(get_store),
    business_id: str = Depends(get_business_id),
) -> BusinessSettingsResponse:
    settings = await get_business_settings(store, business_id)
    return BusinessSettingsResponse(item=settings)


@router.post(
    "/settings",
    response_model=BusinessSettingsResponse,
    responses={500: {"model": ErrorResponse, "description": "Configuration or store error"}},
)
async def update_settings(
    patch: BusinessSettingsPatch,
    store: CollectionStore = Depends(get_store),
    business_id: str = Depends(get_business_id),
) -> BusinessSettingsResponse:
    """Fields left out or blank keep their current value; payment_details may be cleared with ""."""
    saved = await upsert_business_settings(store, business_id, patch)
    return BusinessSettingsResponse(item=saved)
