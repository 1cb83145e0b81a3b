"""
Collection message orchestration.

cache lookup (skipped on regenerate) -> history -> priority -> business
settings -> addressee -> prompt -> generation -> cache write.

Generation failures are absorbed by the generator's fallback. Store failures
(including cache read/write) propagate as DataStoreError: there is no
partial-success mode for persistence.
"""

import logging
from typing import List, Optional

from pydantic import BaseModel

from cobrosmart.store.base import CollectionStore
from cobrosmart.store.models import MessageCacheEntry

from .addressee import AddresseeClassifier
from .business_settings import get_business_settings
from .debtor_service import get_debtor_or_raise, priority_input
from .generator import FALLBACK_MODEL, FallbackContext, MessageGenerator
from .history import history_for_debtor
from .priority import score_priority
from .prompt_builder import build_prompt, format_amount, payment_instruction, prompt_hash

logger = logging.getLogger(__name__)


class MessageResult(BaseModel):
    message_text: str
    reason: str
    model: str
    cached: bool
    fallback: bool
    # Unknown on cache hits: the addressee is not persisted with the entry
    addressee_type: Optional[str] = None
    addressee_source: Optional[str] = None
    priority_score: Optional[int] = None


def reason_line(tone: str, days_overdue: int, no_response: int, soft_treatment: bool) -> str:
    """Short explanation shown next to the message, e.g. 'tono amable / 30 dias vencido'."""
    parts: List[str] = [f"tono {tone}", f"{days_overdue} dias vencido"]
    if no_response > 0:
        parts.append(f"ignoro {no_response} veces")
    if soft_treatment:
        parts.append("enfoque suave por relacion comercial")
    return " / ".join(parts)


class MessageService:
    """Produces (and caches) one collection message per debtor and tone."""

    def __init__(
        self,
        store: CollectionStore,
        classifier: AddresseeClassifier,
        generator: MessageGenerator,
    ):
        self.store = store
        self.classifier = classifier
        self.generator = generator

    async def generate_for_debtor(
        self, business_id: str, debtor_id: str, tone: str = "amable", regenerate: bool = False
    ) -> MessageResult:
        debtor = await get_debtor_or_raise(self.store, business_id, debtor_id)

        if not regenerate:
            cached = await self.store.get_cached_message(debtor.id, tone)
            if cached is not None and cached.message_text:
                logger.info(f"Serving cached message: debtor={debtor.id}, tone={tone}")
                model = cached.model or FALLBACK_MODEL
                return MessageResult(
                    message_text=cached.message_text,
                    reason=cached.message_reason or "",
                    model=model,
                    cached=True,
                    fallback=model == FALLBACK_MODEL,
                    priority_score=debtor.priority_score,
                )

        history = await history_for_debtor(self.store, debtor.id)
        priority = score_priority(priority_input(debtor), history)
        settings = await get_business_settings(self.store, business_id)
        addressee = await self.classifier.classify(debtor.name, settings)
        last_message = await self.store.latest_sent_message(debtor.id)

        built = build_prompt(
            debtor=debtor,
            history=history,
            priority=priority,
            settings=settings,
            addressee=addressee,
            tone=tone,
            last_message=last_message,
        )
        fallback_context = FallbackContext(
            addressee_line=addressee.addressee_line,
            addressee_type=addressee.addressee_type,
            amount=format_amount(debtor.amount_ars),
            days_overdue=debtor.days_overdue,
            tone=tone,
            pronoun=settings.pronoun,
            payment_line=payment_instruction(settings),
            signature=settings.signature,
        )
        generated = await self.generator.generate(built.prompt, fallback_context, regenerate)

        reason = reason_line(tone, debtor.days_overdue, history.no_response, priority.soft_treatment)

        await self.store.upsert_cached_message(
            MessageCacheEntry(
                debtor_id=debtor.id,
                tone=tone,
                message_text=generated.text,
                message_reason=reason,
                model=generated.model,
                last_variation_id=built.variation_id,
                last_prompt_hash=prompt_hash(built.prompt),
            )
        )

        logger.info(
            f"Debtor message generated: debtor={debtor.id}, tone={tone}, regenerate={regenerate}, "
            f"model={generated.model}, addressee={addressee.addressee_type}/{addressee.source}"
        )
        return MessageResult(
            message_text=generated.text,
            reason=reason,
            model=generated.model,
            cached=False,
            fallback=generated.fallback,
            addressee_type=addressee.addressee_type,
            addressee_source=addressee.source,
            priority_score=priority.score,
        )
