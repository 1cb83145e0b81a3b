"""
Prompt assembly for collection messages.

Plain string templating: every input is already validated, so there is no
error path here. Each call gets a fresh variation id so repeated requests
for the same debtor do not read as identical prompts.
"""

import hashlib
import uuid
from typing import Optional

from pydantic import BaseModel

from cobrosmart.prompts import (
    ENTITY_LINE,
    FIRM_LINE,
    GENERATE_MESSAGE_PROMPT,
    NO_CONSEQUENCE_LINE,
    PERSON_LINE,
    SOFT_LINE,
    TONE_DESCRIPTIONS,
    ULTIMO_LINE,
)
from cobrosmart.store.models import BusinessSettings, Debtor

from .addressee import AddresseeResult
from .history import HistorySummary
from .priority import PriorityResult

_PAYMENT_LABELS = {
    "alias": "Alias:",
    "cbu": "CBU:",
    "mp": "Mercado Pago:",
    "custom": "",
}


class BuiltPrompt(BaseModel):
    prompt: str
    variation_id: str


def format_amount(amount_ars: int) -> str:
    """Render pesos the Argentine way: $300.000"""
    return "$" + f"{int(round(amount_ars)):,}".replace(",", ".")


def payment_instruction(settings: BusinessSettings) -> str:
    """One line telling the debtor how to pay, e.g. 'Te paso alias... Alias: corralon.mp'."""
    callout = (settings.payment_callout or "").strip()
    details = (settings.payment_details or "").strip()
    if not details:
        return callout

    label = _PAYMENT_LABELS.get(settings.payment_method, "")
    parts = [part for part in (callout, label, details) if part]
    return " ".join(parts)


def new_variation_id() -> str:
    return uuid.uuid4().hex[:12]


def prompt_hash(prompt: str) -> str:
    """Short content hash stored alongside cached messages."""
    return hashlib.sha256(prompt.encode("utf-8")).hexdigest()[:24]


def build_prompt(
    debtor: Debtor,
    history: HistorySummary,
    priority: PriorityResult,
    settings: BusinessSettings,
    addressee: AddresseeResult,
    tone: str,
    last_message: Optional[str] = None,
    variation_id: Optional[str] = None,
) -> BuiltPrompt:
    variation_id = variation_id or new_variation_id()

    prompt = GENERATE_MESSAGE_PROMPT.format(
        variation_id=variation_id,
        sender_name=settings.sender_name,
        sender_role=settings.sender_role,
        signature=settings.signature,
        debtor_name=debtor.name,
        addressee_type=addressee.addressee_type,
        addressee_line=addressee.addressee_line,
        amount=format_amount(debtor.amount_ars),
        days_overdue=debtor.days_overdue,
        note=debtor.note or "sin nota",
        sent=history.sent,
        no_response=history.no_response,
        promise=history.promise,
        paid=history.paid,
        replied=history.replied,
        tone=tone,
        tone_description=TONE_DESCRIPTIONS.get(tone, ""),
        pronoun=settings.pronoun,
        entity_greeting_rule=settings.entity_greeting_rule or "-",
        style_notes=settings.style_notes or "-",
        soft_line=SOFT_LINE if priority.soft_treatment else FIRM_LINE,
        payment_line=payment_instruction(settings) or "No hay forma de pago configurada.",
        last_message=(last_message or "").strip() or "ninguno",
        entity_line=ENTITY_LINE if addressee.addressee_type == "entity" else PERSON_LINE,
        ultimo_line=ULTIMO_LINE if tone == "ultimo" else NO_CONSEQUENCE_LINE,
    )
    return BuiltPrompt(prompt=prompt, variation_id=variation_id)
