"""
History aggregation.

Turns the append-only debtor_event log into per-debtor counters. Counters
are always recomputed from the log, never stored.
"""

from typing import Dict, Iterable, Sequence, Tuple

from pydantic import BaseModel

from cobrosmart.store.base import CollectionStore


class HistorySummary(BaseModel):
    """Event counts for one debtor."""

    sent: int = 0
    no_response: int = 0
    promise: int = 0
    paid: int = 0
    replied: int = 0


_COUNTED_TYPES = frozenset(HistorySummary.model_fields)


def fold_events(
    debtor_ids: Iterable[str], rows: Iterable[Tuple[str, str]]
) -> Dict[str, HistorySummary]:
    """Count (debtor_id, type) rows into a summary per requested debtor.

    Every requested id gets a summary, zero-filled when it has no events.
    Unknown event types and rows for unrequested debtors are skipped.
    """
    summaries = {debtor_id: HistorySummary() for debtor_id in debtor_ids}
    for debtor_id, event_type in rows:
        summary = summaries.get(debtor_id)
        if summary is None or event_type not in _COUNTED_TYPES:
            continue
        setattr(summary, event_type, getattr(summary, event_type) + 1)
    return summaries


async def aggregate_history(
    store: CollectionStore, debtor_ids: Sequence[str]
) -> Dict[str, HistorySummary]:
    """Fetch and fold the event history of several debtors in one query."""
    ids = list(dict.fromkeys(debtor_ids))
    if not ids:
        return {}
    rows = await store.list_event_types(ids)
    return fold_events(ids, rows)


async def history_for_debtor(store: CollectionStore, debtor_id: str) -> HistorySummary:
    summaries = await aggregate_history(store, [debtor_id])
    return summaries[debtor_id]
