"""
Business settings: defaults, merge rules and persistence.

There is one settings row per business. Reads fall back to defaults when
the row is absent; writes merge the patch over the current values so that
fields left unset keep what was stored before.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel

from cobrosmart.store.base import CollectionStore
from cobrosmart.store.models import BusinessSettings

logger = logging.getLogger(__name__)

_PRONOUNS = ("vos", "usted")
_PAYMENT_METHODS = ("alias", "cbu", "mp", "custom")


class BusinessSettingsPatch(BaseModel):
    """Partial update; None means keep the current value."""

    sender_name: Optional[str] = None
    sender_role: Optional[str] = None
    greeting_style: Optional[str] = None
    pronoun: Optional[str] = None
    signature: Optional[str] = None
    payment_method: Optional[str] = None
    payment_details: Optional[str] = None
    payment_callout: Optional[str] = None
    entity_greeting_rule: Optional[str] = None
    style_notes: Optional[str] = None


def default_business_settings(business_id: str) -> BusinessSettings:
    return BusinessSettings(
        business_id=business_id,
        sender_name="Tavo",
        sender_role="Corralon El Puente",
        greeting_style="Buen dia",
        pronoun="vos",
        signature="Tavo - El Puente",
        payment_method="alias",
        payment_details="",
        payment_callout="Te paso alias para que te quede simple.",
        entity_greeting_rule="si es empresa/coop/municipalidad: pedir administracion o cuentas a pagar",
        style_notes="rioplatense, corto, sin amenaza, concreto",
        updated_at=datetime.now(timezone.utc),
    )


def _text(value: Optional[str], current: str) -> str:
    """Non-blank patch values replace the current one."""
    if value is None:
        return current
    return value.strip() or current


def _choice(value: Optional[str], current: str, allowed) -> str:
    if value is None:
        return current
    value = value.strip().lower()
    return value if value in allowed else current


def merge_business_settings(current: BusinessSettings, patch: BusinessSettingsPatch) -> BusinessSettings:
    """Apply a patch over current settings.

    Blank strings keep the current value, except payment_details which may be
    cleared explicitly. Unknown pronoun or payment method values are ignored.
    """
    return current.model_copy(
        update={
            "sender_name": _text(patch.sender_name, current.sender_name),
            "sender_role": _text(patch.sender_role, current.sender_role),
            "greeting_style": _text(patch.greeting_style, current.greeting_style),
            "pronoun": _choice(patch.pronoun, current.pronoun, _PRONOUNS),
            "signature": _text(patch.signature, current.signature),
            "payment_method": _choice(patch.payment_method, current.payment_method, _PAYMENT_METHODS),
            "payment_details": current.payment_details
            if patch.payment_details is None
            else patch.payment_details.strip(),
            "payment_callout": _text(patch.payment_callout, current.payment_callout),
            "entity_greeting_rule": _text(patch.entity_greeting_rule, current.entity_greeting_rule),
            "style_notes": _text(patch.style_notes, current.style_notes),
            "updated_at": datetime.now(timezone.utc),
        }
    )


def _patch_from_row(row: Dict[str, Any]) -> BusinessSettingsPatch:
    known = {key: row.get(key) for key in BusinessSettingsPatch.model_fields}
    return BusinessSettingsPatch(**{k: str(v) for k, v in known.items() if v is not None})


async def get_business_settings(store: CollectionStore, business_id: str) -> BusinessSettings:
    """Read settings, filling any blank or missing column from the defaults."""
    row = await store.get_business_settings(business_id)
    defaults = default_business_settings(business_id)
    if not row:
        return defaults
    merged = merge_business_settings(defaults, _patch_from_row(row))
    if row.get("updated_at"):
        merged = BusinessSettings.model_validate(
            {**merged.model_dump(), "updated_at": row["updated_at"]}
        )
    return merged


async def upsert_business_settings(
    store: CollectionStore, business_id: str, patch: BusinessSettingsPatch
) -> BusinessSettings:
    current = await get_business_settings(store, business_id)
    merged = merge_business_settings(current, patch)
    saved = await store.upsert_business_settings(merged)
    logger.info("Business settings updated for %s", business_id)
    return saved
