"""
Debtor operations: lookup, listing, event log and status updates.

Every write path recomputes the denormalized priority snapshot
(priority_score / priority_reason) on the debtor row from the event log.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from cobrosmart.api.errors import DebtorNotFoundError, ErrorCode, InvalidStatusError, ValidationError
from cobrosmart.api.models.requests import StatusUpdateRequest
from cobrosmart.store.base import CollectionStore
from cobrosmart.store.models import EVENT_TYPES, Debtor, DebtorEvent

from .history import history_for_debtor
from .priority import PriorityInput, PriorityResult, score_priority

logger = logging.getLogger(__name__)

DEFAULT_CHANNEL = "whatsapp_manual"


def priority_input(debtor: Debtor) -> PriorityInput:
    return PriorityInput(
        days_overdue=debtor.days_overdue, amount_ars=debtor.amount_ars, note=debtor.note
    )


def clamp_limit(limit: Optional[int], default: int = 20, maximum: int = 100) -> int:
    if limit is None:
        return default
    return max(1, min(int(limit), maximum))


def parse_promise_date(raw: Optional[str]) -> Optional[datetime]:
    """Parse an ISO date or datetime; None when absent or unparseable."""
    if not raw or not raw.strip():
        return None
    try:
        parsed = datetime.fromisoformat(raw.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


async def get_debtor_or_raise(store: CollectionStore, business_id: str, debtor_id: str) -> Debtor:
    debtor = await store.get_debtor(business_id, debtor_id)
    if debtor is None:
        raise DebtorNotFoundError(debtor_id)
    return debtor


async def recompute_priority(store: CollectionStore, debtor: Debtor) -> PriorityResult:
    """Score a debtor from its current event log."""
    history = await history_for_debtor(store, debtor.id)
    return score_priority(priority_input(debtor), history)


async def list_debtors(store: CollectionStore, business_id: str, sort: str = "created_at") -> List[Debtor]:
    """List debtors, by priority (highest first, unscored last) or newest first."""
    debtors = await store.list_debtors(business_id)
    if sort == "priority":
        # Stable sort keeps newest-first order among equal scores
        debtors.sort(key=lambda d: (d.priority_score is None, -(d.priority_score or 0)))
    return debtors


async def list_events(
    store: CollectionStore,
    business_id: str,
    debtor_id: str,
    limit: Optional[int] = None,
    default_limit: int = 20,
    max_limit: int = 100,
) -> List[DebtorEvent]:
    debtor = await get_debtor_or_raise(store, business_id, debtor_id)
    return await store.list_events(debtor.id, clamp_limit(limit, default_limit, max_limit))


async def update_status(
    store: CollectionStore, business_id: str, debtor_id: str, update: StatusUpdateRequest
) -> Debtor:
    """
    Record a contact outcome.

    Appends an event, moves last_status / last_contact_at, sets the promise
    date on 'promise' and clears it on 'paid', then refreshes the priority
    snapshot so the new event is counted.

    Raises:
        InvalidStatusError: status is not a known event type
        ValidationError: status is 'promise' without a valid promise_date
        DebtorNotFoundError: debtor is absent or owned by another business
    """
    if update.status not in EVENT_TYPES:
        raise InvalidStatusError(update.status, list(EVENT_TYPES))

    promise_date = parse_promise_date(update.promise_date)
    if update.status == "promise" and promise_date is None:
        raise ValidationError(
            message="promise_date is required for status=promise.",
            details={"promise_date": update.promise_date},
            error_code=ErrorCode.MISSING_PROMISE_DATE,
        )

    debtor = await get_debtor_or_raise(store, business_id, debtor_id)
    now = datetime.now(timezone.utc)

    payload: Dict[str, Any] = {"status": update.status, "at": now.isoformat()}
    if promise_date is not None:
        payload["promise_date"] = promise_date.isoformat()
    if update.message_text and update.message_text.strip():
        payload["message_text"] = update.message_text.strip()
    if update.tone:
        payload["tone"] = update.tone
    payload["channel"] = (update.channel or "").strip() or DEFAULT_CHANNEL

    await store.insert_event(debtor.id, update.status, payload)

    patch: Dict[str, Any] = {"last_status": update.status, "last_contact_at": now.isoformat()}
    if update.status == "promise":
        patch["promise_date"] = promise_date.isoformat()
    elif update.status == "paid":
        patch["promise_date"] = None

    priority = await recompute_priority(store, debtor)
    patch["priority_score"] = priority.score
    patch["priority_reason"] = priority.reason

    updated = await store.update_debtor(business_id, debtor.id, patch)
    logger.info(f"Debtor status updated: debtor={debtor.id}, status={update.status}, score={priority.score}")
    return updated
