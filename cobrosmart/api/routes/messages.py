"""
Message generation API endpoint.

POST /debtors/{id}/message - Get (cached) or generate a collection message.

Security:
- Rate limited: configurable via settings (default 30/minute per IP)
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from cobrosmart.api.dependencies import get_business_id, get_message_service
from cobrosmart.api.errors import ErrorResponse
from cobrosmart.api.models.requests import MessageRequest
from cobrosmart.config.settings import get_settings
from cobrosmart.engine.message_service import MessageResult, MessageService

logger = logging.getLogger(__name__)
router = APIRouter()

# Rate limiter (registered as app.state.limiter in main.py)
limiter = Limiter(key_func=get_remote_address)


def _generate_rate_limit() -> str:
    return get_settings().rate_limit_generate


def _flag(raw: Optional[str]) -> bool:
    return raw is not None and (raw.lower() == "true" or raw == "1")


@router.post(
    "/debtors/{debtor_id}/message",
    response_model=MessageResult,
    responses={
        404: {"model": ErrorResponse, "description": "Debtor not found"},
        429: {"description": "Rate limit exceeded"},
        500: {"model": ErrorResponse, "description": "Configuration, cache or store error"},
    },
)
@limiter.limit(_generate_rate_limit)
async def generate_message(
    request: Request,
    debtor_id: str,
    message_request: Optional[MessageRequest] = None,
    regenerate: Optional[str] = Query(None, description="true or 1 forces a new message"),
    business_id: str = Depends(get_business_id),
    service: MessageService = Depends(get_message_service),
) -> MessageResult:
    """
    Return the cached message for (debtor, tone), or generate a new one.

    Generation problems never fail the request: the message falls back to a
    local template and the response reports fallback=true.
    """
    message_request = message_request or MessageRequest()
    force = (
        message_request.regenerate
        if message_request.regenerate is not None
        else _flag(regenerate)
    )

    logger.info(f"Message requested: debtor={debtor_id}, tone={message_request.tone}, regenerate={force}")
    return await service.generate_for_debtor(business_id, debtor_id, message_request.tone, force)
