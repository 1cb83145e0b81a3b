"""
Debtor API endpoints.

GET  /debtors               - List debtors (sort=priority|created_at)
GET  /debtors/{id}/events   - Latest contact events of a debtor
POST /debtors/{id}/status   - Record a contact outcome
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from cobrosmart.api.dependencies import get_app_settings, get_business_id, get_store
from cobrosmart.api.errors import ErrorResponse
from cobrosmart.api.models.requests import StatusUpdateRequest
from cobrosmart.api.models.responses import (
    DebtorEventListResponse,
    DebtorListResponse,
    DebtorUpdateResponse,
)
from cobrosmart.config.settings import Settings
from cobrosmart.engine import debtor_service
from cobrosmart.store.base import CollectionStore

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get(
    "/debtors",
    response_model=DebtorListResponse,
    responses={500: {"model": ErrorResponse, "description": "Configuration or store error"}},
)
async def list_debtors(
    sort: str = Query("created_at", description="priority or created_at"),
    store: CollectionStore = Depends(get_store),
    business_id: str = Depends(get_business_id),
) -> DebtorListResponse:
    """List debtors of the configured business, highest priority first when sort=priority."""
    items = await debtor_service.list_debtors(store, business_id, sort)
    logger.info(f"Debtors loaded: count={len(items)}, sort={sort}")
    return DebtorListResponse(items=items)


@router.get(
    "/debtors/{debtor_id}/events",
    response_model=DebtorEventListResponse,
    responses={404: {"model": ErrorResponse, "description": "Debtor not found"}},
)
async def list_debtor_events(
    debtor_id: str,
    limit: Optional[int] = Query(None, description="Clamped to 1..events_max_limit"),
    store: CollectionStore = Depends(get_store),
    business_id: str = Depends(get_business_id),
    settings: Settings = Depends(get_app_settings),
) -> DebtorEventListResponse:
    items = await debtor_service.list_events(
        store,
        business_id,
        debtor_id,
        limit,
        default_limit=settings.events_default_limit,
        max_limit=settings.events_max_limit,
    )
    return DebtorEventListResponse(items=items)


@router.post(
    "/debtors/{debtor_id}/status",
    response_model=DebtorUpdateResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid status or missing promise date"},
        404: {"model": ErrorResponse, "description": "Debtor not found"},
        500: {"model": ErrorResponse, "description": "Store error"},
    },
)
async def update_debtor_status(
    debtor_id: str,
    update: StatusUpdateRequest,
    store: CollectionStore = Depends(get_store),
    business_id: str = Depends(get_business_id),
) -> DebtorUpdateResponse:
    """Append a contact event and refresh the debtor's status and priority."""
    updated = await debtor_service.update_status(store, business_id, debtor_id, update)
    return DebtorUpdateResponse(item=updated)
