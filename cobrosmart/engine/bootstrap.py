"""
Default business bootstrap.

A fresh deployment has no business row; the web client calls bootstrap once
and stores the returned id as COBROSMART_BUSINESS_ID.
"""

import logging

from cobrosmart.store.base import CollectionStore

logger = logging.getLogger(__name__)

DEFAULT_BUSINESS_NAME = "Corralón El Puente"
DEFAULT_BUSINESS_LOCATION = "Azul, Buenos Aires"
DEFAULT_BUSINESS_VERTICAL = "corralon"


async def bootstrap_default_business(store: CollectionStore) -> str:
    """Return the id of the default business, creating it on first call."""
    business_id = await store.find_business(DEFAULT_BUSINESS_NAME, DEFAULT_BUSINESS_LOCATION)
    if business_id:
        logger.info(f"Bootstrap found existing business: {business_id}")
        return business_id

    business_id = await store.insert_business(
        {
            "name": DEFAULT_BUSINESS_NAME,
            "location": DEFAULT_BUSINESS_LOCATION,
            "vertical": DEFAULT_BUSINESS_VERTICAL,
        }
    )
    logger.info(f"Bootstrap created default business: {business_id}")
    return business_id
