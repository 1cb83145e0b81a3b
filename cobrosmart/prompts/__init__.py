"""Prompt templates for AI operations."""

from .addressee_classification import CLASSIFY_ADDRESSEE_PROMPT
from .message_generation import (
    ENTITY_LINE,
    FIRM_LINE,
    GENERATE_MESSAGE_PROMPT,
    NO_CONSEQUENCE_LINE,
    PERSON_LINE,
    SOFT_LINE,
    TONE_DESCRIPTIONS,
    ULTIMO_LINE,
)

__all__ = [
    "CLASSIFY_ADDRESSEE_PROMPT",
    "GENERATE_MESSAGE_PROMPT",
    "TONE_DESCRIPTIONS",
    "SOFT_LINE",
    "FIRM_LINE",
    "ENTITY_LINE",
    "PERSON_LINE",
    "ULTIMO_LINE",
    "NO_CONSEQUENCE_LINE",
]
