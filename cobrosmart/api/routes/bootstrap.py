"""
Setup and diagnostics API endpoints.

POST /bootstrap       - Find or create the default business
GET  /debug/db-check  - Run a trivial query against the data store
"""

import logging

from fastapi import APIRouter, Depends

from cobrosmart.api.dependencies import get_store
from cobrosmart.api.errors import ErrorResponse
from cobrosmart.api.models.responses import BootstrapResponse, DbCheckResponse
from cobrosmart.engine.bootstrap import bootstrap_default_business
from cobrosmart.store.base import CollectionStore

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post(
    "/bootstrap",
    response_model=BootstrapResponse,
    responses={500: {"model": ErrorResponse, "description": "Configuration or store error"}},
)
async def bootstrap(store: CollectionStore = Depends(get_store)) -> BootstrapResponse:
    """Return the default business id, creating the business on first call."""
    # TODO: require authentication before exposing this outside local setups
    business_id = await bootstrap_default_business(store)
    return BootstrapResponse(business_id=business_id)


@router.get(
    "/debug/db-check",
    response_model=DbCheckResponse,
    responses={500: {"model": ErrorResponse, "description": "Store unreachable"}},
)
async def db_check(store: CollectionStore = Depends(get_store)) -> DbCheckResponse:
    await store.check_connection()
    logger.info("Data store connectivity check passed")
    return DbCheckResponse()
