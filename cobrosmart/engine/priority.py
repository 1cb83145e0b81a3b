"""
Collection priority scoring.

Pure function of debtor facts and history counters. Components:

- days: logarithmic, saturates near 58 points at 120 days overdue
- amount: 0 below 10,000, up to 24 points across the next two orders of magnitude
- history: unanswered outreach raises urgency, promises and payments lower it
- reputation: -10 when the debtor is flagged VIP or has paid before
"""

import math
from typing import List, Optional

from pydantic import BaseModel, Field

from .history import HistorySummary

DAYS_CEILING = 58
AMOUNT_CEILING = 24
HISTORY_FLOOR = -20
HISTORY_CEILING = 28
REPUTATION_ADJUSTMENT = -10


class PriorityInput(BaseModel):
    """Debtor facts the scorer reads."""

    days_overdue: int = 0
    amount_ars: int = 0
    note: Optional[str] = None


class PriorityResult(BaseModel):
    """Bounded score with its explanation."""

    score: int = Field(..., ge=0, le=100)
    reason: str
    soft_treatment: bool
    reason_clauses: List[str]
    days_score: float
    amount_score: float
    history_score: float
    reputation_adjustment: int


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def is_vip(note: Optional[str]) -> bool:
    return bool(note) and "vip" in note.lower()


def days_component(days: int) -> float:
    return _clamp(math.log1p(days) / math.log(121) * DAYS_CEILING, 0, DAYS_CEILING)


def amount_component(amount: int) -> float:
    return _clamp((math.log10(max(1, amount)) - 4) / 2 * AMOUNT_CEILING, 0, AMOUNT_CEILING)


def history_component(history: HistorySummary) -> float:
    raw = history.no_response * 6 + history.sent * 1 - history.promise * 4 - history.paid * 8
    return _clamp(raw, HISTORY_FLOOR, HISTORY_CEILING)


def history_label(history: HistorySummary) -> str:
    if history.no_response > 0:
        return f"ignoro {history.no_response} veces"
    if history.promise > 0:
        return f"prometio {history.promise} veces"
    if history.paid > 0:
        return "ya pago antes"
    if history.replied > 0:
        return f"respondio {history.replied} veces"
    return "sin historial"


def _reason_clauses(days: int, amount: int, history: HistorySummary, vip: bool, soft: bool) -> List[str]:
    if days >= 45:
        clauses = ["antiguedad alta"]
    elif days >= 20:
        clauses = ["antiguedad media"]
    else:
        clauses = ["antiguedad baja"]

    if amount >= 250_000:
        clauses.append("monto alto")
    elif amount >= 100_000:
        clauses.append("monto medio")

    clauses.append(history_label(history))

    if soft:
        clauses.append("VIP" if vip else "buen historial")
    return clauses


def score_priority(facts: PriorityInput, history: HistorySummary) -> PriorityResult:
    """Score a debtor. Total over its numeric domain; negative inputs count as zero."""
    days = max(0, facts.days_overdue or 0)
    amount = max(0, facts.amount_ars or 0)
    vip = is_vip(facts.note)
    soft_treatment = vip or history.paid > 0

    days_score = days_component(days)
    amount_score = amount_component(amount)
    history_score = history_component(history)
    reputation = REPUTATION_ADJUSTMENT if soft_treatment else 0

    total = days_score + amount_score + history_score + reputation
    score = int(_clamp(_round_half_up(total), 0, 100))

    clauses = _reason_clauses(days, amount, history, vip, soft_treatment)
    return PriorityResult(
        score=score,
        reason=" | ".join(clauses),
        soft_treatment=soft_treatment,
        reason_clauses=clauses,
        days_score=days_score,
        amount_score=amount_score,
        history_score=history_score,
        reputation_adjustment=reputation,
    )
