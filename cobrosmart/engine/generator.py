"""
Message generation engine.

Makes a single attempt at the configured LLM under a hard timeout. Any
failure (no provider, empty prompt, timeout, provider error, empty
completion) degrades to a deterministic local template; generation errors
never reach the caller. There are no retries.

Every returned text goes through clamp_message, so it is at most 280
characters long.
"""

import asyncio
import logging
from typing import Optional

from pydantic import BaseModel

from cobrosmart.config.settings import Settings
from cobrosmart.llm.base import BaseLLMProvider

logger = logging.getLogger(__name__)

FALLBACK_MODEL = "local-fallback"
MAX_MESSAGE_LENGTH = 280
ELLIPSIS = "..."


class FallbackContext(BaseModel):
    """Facts the local template needs when the LLM path fails."""

    addressee_line: str
    addressee_type: str
    amount: str
    days_overdue: int
    tone: str
    pronoun: str = "vos"
    payment_line: str = ""
    signature: str = ""


class GenerationResult(BaseModel):
    text: str
    model: str
    fallback: bool


def clamp_message(text: str) -> str:
    """Collapse whitespace and cap at 280 characters, ending in '...' when cut."""
    clean = " ".join(text.split())
    if len(clean) <= MAX_MESSAGE_LENGTH:
        return clean
    return clean[: MAX_MESSAGE_LENGTH - len(ELLIPSIS)] + ELLIPSIS


def _sentence(text: str) -> str:
    text = text.strip()
    if not text or text[-1] in ".?!":
        return text
    return text + "."


def fallback_message(context: FallbackContext) -> str:
    """Deterministic collection message built only from known facts."""
    if context.addressee_type == "entity":
        intro = "Les escribo"
        cta = "Pagan hoy o coordinamos fecha?"
    elif context.pronoun == "usted":
        intro = "Le escribo"
        cta = "Paga hoy o coordinamos fecha?"
    else:
        intro = "Te escribo"
        cta = "Pagas hoy o coordinamos fecha?"

    parts = [
        _sentence(context.addressee_line),
        f"{intro} por el saldo de {context.amount}, {context.days_overdue} dias vencido.",
        cta,
        _sentence(context.payment_line),
    ]
    if context.addressee_type == "entity":
        parts.append("Si no corresponde, me derivan con administracion o cuentas a pagar?")
    if context.tone == "ultimo":
        parts.append("Lo necesitamos para no cortar la cuenta corriente ni frenar entregas.")
    parts.append(context.signature)

    return " ".join(part for part in parts if part)


class MessageGenerator:
    """Generates collection messages with the LLM, falling back to a local template."""

    def __init__(self, provider: Optional[BaseLLMProvider], settings: Settings):
        self.provider = provider
        self.settings = settings

    async def generate(
        self, prompt: str, fallback_context: FallbackContext, regenerate: bool = False
    ) -> GenerationResult:
        """
        Generate one message.

        Args:
            prompt: Fully built prompt
            fallback_context: Facts for the local template
            regenerate: Use wider sampling to move away from a previous attempt

        Returns:
            Clamped text, the model that produced it and whether the fallback was used
        """
        completion = await self._complete(prompt, regenerate)
        if completion is None:
            return GenerationResult(
                text=clamp_message(fallback_message(fallback_context)),
                model=FALLBACK_MODEL,
                fallback=True,
            )

        text, model = completion
        return GenerationResult(text=clamp_message(text), model=model, fallback=False)

    async def _complete(self, prompt: str, regenerate: bool) -> Optional[tuple]:
        if self.provider is None:
            logger.warning("LLM provider not configured, using local fallback")
            return None

        if regenerate:
            temperature = self.settings.regenerate_temperature
            top_p = self.settings.regenerate_top_p
        else:
            temperature = self.settings.message_temperature
            top_p = self.settings.message_top_p

        try:
            # wait_for cancels the call on timeout, so a late completion is discarded
            response = await asyncio.wait_for(
                self.provider.complete(
                    prompt,
                    temperature=temperature,
                    top_p=top_p,
                    max_tokens=self.settings.message_max_output_tokens,
                ),
                timeout=self.settings.llm_timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"LLM generation timed out after {self.settings.llm_timeout_seconds}s, "
                f"using local fallback"
            )
            return None
        except Exception as e:
            logger.warning(f"LLM generation failed ({type(e).__name__}: {e}), using local fallback")
            return None

        text = (response.content or "").strip()
        if not text:
            logger.warning("LLM returned an empty completion, using local fallback")
            return None

        logger.info(
            f"Generated message with {response.provider}/{response.model}: "
            f"regenerate={regenerate}, tokens={response.usage.get('total_tokens', 0)}"
        )
        return text, response.model or self.provider.model_name
