"""
Row models for the four tables the engine reads and writes.

These mirror the database columns; engine code works with them instead of
raw dicts so a missing or mistyped column fails loudly at the boundary.
"""

from datetime import datetime
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field

# Event types are also the statuses a debtor can be moved to
EVENT_TYPES = ("sent", "no_response", "promise", "paid", "replied")

TONES = ("amable", "directo", "ultimo")

Tone = Literal["amable", "directo", "ultimo"]
Pronoun = Literal["vos", "usted"]
PaymentMethod = Literal["alias", "cbu", "mp", "custom"]

DEBTOR_COLUMNS = (
    "id, business_id, name, phone, amount_ars, days_overdue, note, last_status, "
    "last_contact_at, promise_date, priority_score, priority_reason, created_at"
)
EVENT_COLUMNS = "id, debtor_id, type, payload, created_at"
CACHE_COLUMNS = (
    "debtor_id, tone, message_text, message_reason, model, created_at, updated_at, "
    "last_variation_id, last_prompt_hash"
)
SETTINGS_COLUMNS = (
    "business_id, sender_name, sender_role, greeting_style, pronoun, signature, "
    "payment_method, payment_details, payment_callout, entity_greeting_rule, "
    "style_notes, updated_at"
)


class Debtor(BaseModel):
    """An account with an overdue balance, owned by one business."""

    id: str
    business_id: str
    name: str
    phone: str
    amount_ars: int = 0
    days_overdue: int = 0
    note: Optional[str] = None
    last_status: Optional[str] = None
    last_contact_at: Optional[datetime] = None
    promise_date: Optional[datetime] = None
    # Denormalized snapshot for listing/sorting, recomputed on every write
    priority_score: Optional[int] = None
    priority_reason: Optional[str] = None
    created_at: Optional[datetime] = None


class DebtorEvent(BaseModel):
    """Append-only record of one collection interaction."""

    id: Optional[str] = None
    debtor_id: str
    type: str
    payload: Dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[datetime] = None


class BusinessSettings(BaseModel):
    """Sender identity and message preferences of a business."""

    business_id: str
    sender_name: str
    sender_role: str
    greeting_style: str
    pronoun: Pronoun = "vos"
    signature: str
    payment_method: PaymentMethod = "alias"
    payment_details: str = ""
    payment_callout: str = ""
    entity_greeting_rule: str = ""
    style_notes: str = ""
    updated_at: Optional[datetime] = None


class MessageCacheEntry(BaseModel):
    """Last generated message for one (debtor, tone) pair."""

    debtor_id: str
    tone: str
    message_text: str
    message_reason: str = ""
    model: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    last_variation_id: Optional[str] = None
    # Persisted for future invalidation; not consulted before serving a hit
    last_prompt_hash: Optional[str] = None
