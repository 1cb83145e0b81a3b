"""
Addressee classification.

Decides whether a debtor name denotes a person or an organization:

1. Heuristic: organization keywords, then ambiguity markers, then the shape
   of a personal name (2-3 alphabetic words).
2. LLM, only when the heuristic is unsure and a provider is configured.

When the LLM is needed but unusable the answer is "entity": greeting an
organization by a made-up first name reads worse than a generic greeting.
The result always records which stage decided.
"""

import asyncio
import logging
import re
import unicodedata
from typing import List, Literal, Optional

from pydantic import BaseModel

from cobrosmart.llm.base import BaseLLMProvider
from cobrosmart.prompts import CLASSIFY_ADDRESSEE_PROMPT
from cobrosmart.store.models import BusinessSettings

logger = logging.getLogger(__name__)

AddresseeType = Literal["person", "entity"]
HeuristicVerdict = Literal["person", "entity", "unknown"]

ENTITY_KEYWORDS = (
    "coop",
    "cooperativa",
    "sa",
    "srl",
    "s.a.",
    "s.r.l.",
    "constructora",
    "municipalidad",
    "taller",
    "ferreteria",
    "inmobiliaria",
    "servicios",
    "obras",
    "transporte",
    "estudio",
)

# Short legal suffixes match whole words only ("sa" must not match "lisandro");
# every other keyword matches anywhere in the name ("autotransportes").
_SUFFIX_MAX_LENGTH = 3
_KEYWORDS = frozenset(keyword.replace(".", "") for keyword in ENTITY_KEYWORDS)
_SUFFIXES = frozenset(keyword for keyword in _KEYWORDS if len(keyword) <= _SUFFIX_MAX_LENGTH)
_SUBSTRING_KEYWORDS = _KEYWORDS - _SUFFIXES

_DOUBT_MARKERS = re.compile(r"[\"'()/]|[A-Z]{2,}|[.&]")
_TOKEN_SPLIT = re.compile(r"[\s,;/()\"']+")


class AddresseeResult(BaseModel):
    """Who the message is addressed to and which stage decided it."""

    addressee_type: AddresseeType
    addressee_line: str
    source: Literal["heuristic", "llm"]


def _fold(text: str) -> str:
    """Lowercase and strip accents."""
    decomposed = unicodedata.normalize("NFKD", text.lower())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def _name_words(name: str) -> List[str]:
    return [token.replace(".", "") for token in _TOKEN_SPLIT.split(_fold(name)) if token]


def has_entity_keyword(name: str) -> bool:
    folded = _fold(name)
    if any(keyword in folded for keyword in _SUBSTRING_KEYWORDS):
        return True
    return any(word in _SUFFIXES for word in _name_words(name))


def is_person_like(name: str) -> bool:
    parts = name.split()
    return 2 <= len(parts) <= 3 and all(part.isalpha() for part in parts)


def heuristic_type(name: str) -> HeuristicVerdict:
    if has_entity_keyword(name):
        return "entity"
    if _DOUBT_MARKERS.search(name):
        return "unknown"
    if is_person_like(name):
        return "person"
    return "unknown"


def first_name(name: str) -> str:
    tokens = name.split()
    if not tokens:
        return "che"
    cleaned = "".join(ch for ch in tokens[0] if ch.isalpha() or ch == "-")
    return cleaned or "che"


def addressee_line(addressee_type: AddresseeType, name: str, settings: BusinessSettings) -> str:
    greeting = settings.greeting_style or "Hola"
    if addressee_type == "person":
        return f"{greeting} {first_name(name)}"

    if re.search(r"admin|cuentas", settings.entity_greeting_rule or "", re.IGNORECASE):
        return f"{greeting}, con administracion o cuentas a pagar?"
    return f"{greeting}, como estan? Les escribo de {settings.sender_role}."


class AddresseeClassifier:
    """Classifies debtor names, falling back to the LLM for ambiguous ones."""

    def __init__(self, provider: Optional[BaseLLMProvider], timeout_seconds: float):
        self.provider = provider
        self.timeout_seconds = timeout_seconds

    async def classify(self, name: str, settings: BusinessSettings) -> AddresseeResult:
        verdict = heuristic_type(name)
        if verdict != "unknown":
            return self._result(verdict, name, settings, "heuristic")

        classified = await self._classify_with_llm(name)
        if classified is None:
            logger.info("Addressee %r ambiguous and LLM unavailable, defaulting to entity", name)
            return self._result("entity", name, settings, "heuristic")
        return self._result(classified, name, settings, "llm")

    async def _classify_with_llm(self, name: str) -> Optional[AddresseeType]:
        if self.provider is None:
            return None

        prompt = CLASSIFY_ADDRESSEE_PROMPT.format(name=name)
        try:
            response = await asyncio.wait_for(
                self.provider.complete(prompt, temperature=0.0, top_p=1.0, max_tokens=5),
                timeout=self.timeout_seconds,
            )
        except Exception as e:
            logger.warning("Addressee LLM classification failed for %r: %r", name, e)
            return None

        answer = response.content.strip().lower()
        return "entity" if "entity" in answer else "person"

    @staticmethod
    def _result(
        addressee_type: AddresseeType, name: str, settings: BusinessSettings, source: str
    ) -> AddresseeResult:
        return AddresseeResult(
            addressee_type=addressee_type,
            addressee_line=addressee_line(addressee_type, name, settings),
            source=source,
        )
