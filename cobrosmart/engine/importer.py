"""
Debtor import from spreadsheet rows.

Rows arrive with the Spanish column names of the collection spreadsheet
(cliente_nombre, telefono, monto, dias_vencido, obra). Each row is
normalized on its own; invalid rows are rejected with a short message and
never stop the rest of the import. Debtors are matched by phone: known
phones update the existing debtor, new phones insert one with status "new".
"""

import logging
import math
import re
from typing import Any, Dict, List, Optional, Sequence

from pydantic import BaseModel

from cobrosmart.api.errors import DataStoreError
from cobrosmart.store.base import CollectionStore
from cobrosmart.store.models import Debtor

from .history import HistorySummary, aggregate_history
from .priority import PriorityInput, score_priority

logger = logging.getLogger(__name__)

MAX_REPORTED_ERRORS = 10

_THOUSANDS_DOT = re.compile(r"^-?\d{1,3}(\.\d{3})+$")
_THOUSANDS_COMMA = re.compile(r"^-?\d{1,3}(,\d{3})+$")


class RowRejected(ValueError):
    """A single import row failed validation."""


class NormalizedRow(BaseModel):
    name: str
    phone: str
    amount_ars: int
    days_overdue: int
    note: Optional[str] = None


class ImportRowError(BaseModel):
    row: int
    message: str


class ImportReport(BaseModel):
    inserted: int = 0
    updated: int = 0
    rejected: int = 0
    errors: List[ImportRowError] = []

    def reject(self, row_number: int, message: str) -> None:
        self.rejected += 1
        if len(self.errors) < MAX_REPORTED_ERRORS:
            self.errors.append(ImportRowError(row=row_number, message=message))


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def normalize_phone(raw: Any) -> Optional[str]:
    """Strip spaces, dashes and parentheses; accept 8-15 digits with an optional leading +."""
    if not isinstance(raw, str) or not raw.strip():
        return None

    compact = re.sub(r"[\s\-()]", "", raw.strip())
    plus_count = compact.count("+")
    if plus_count > 1 or (plus_count == 1 and not compact.startswith("+")):
        return None

    digits = re.sub(r"\D", "", compact)
    if not re.fullmatch(r"\d{8,15}", digits):
        return None
    return f"+{digits}" if compact.startswith("+") else digits


def _to_number_text(cleaned: str) -> str:
    """Resolve thousands and decimal separators ("300.000", "1.250,50", "1,250.50")."""
    if "," in cleaned and "." in cleaned:
        if cleaned.rfind(",") > cleaned.rfind("."):
            return cleaned.replace(".", "").replace(",", ".")
        return cleaned.replace(",", "")
    if "." in cleaned and _THOUSANDS_DOT.match(cleaned):
        return cleaned.replace(".", "")
    if "," in cleaned:
        if _THOUSANDS_COMMA.match(cleaned):
            return cleaned.replace(",", "")
        return cleaned.replace(",", ".")
    return cleaned


def parse_amount(raw: Any) -> Optional[int]:
    """Whole pesos, rounded half up; None unless strictly positive."""
    if _is_number(raw):
        value = float(raw)
    elif isinstance(raw, str):
        cleaned = re.sub(r"[^\d,.\-]", "", raw).strip()
        if not cleaned:
            return None
        try:
            value = float(_to_number_text(cleaned))
        except ValueError:
            return None
    else:
        return None

    if not math.isfinite(value):
        return None
    rounded = math.floor(value + 0.5)
    return rounded if rounded > 0 else None


def parse_days(raw: Any) -> Optional[int]:
    """Whole days (floored); None when negative or not numeric."""
    if _is_number(raw):
        value = float(raw)
    elif isinstance(raw, str) and raw.strip():
        try:
            value = float(raw.strip())
        except ValueError:
            return None
    else:
        return None

    if not math.isfinite(value):
        return None
    days = math.floor(value)
    return days if days >= 0 else None


def normalize_import_row(row: Dict[str, Any]) -> NormalizedRow:
    """Validate one spreadsheet row.

    Raises:
        RowRejected: with a user-facing (Spanish) message
    """
    if not isinstance(row, dict):
        raise RowRejected("fila invalida")

    raw_name = row.get("cliente_nombre")
    name = raw_name.strip() if isinstance(raw_name, str) else ""
    if not name:
        raise RowRejected("cliente_nombre es obligatorio")

    phone = normalize_phone(row.get("telefono"))
    if phone is None:
        raise RowRejected("telefono invalido")

    amount = parse_amount(row.get("monto"))
    if amount is None:
        raise RowRejected("monto debe ser mayor a 0")

    days = parse_days(row.get("dias_vencido"))
    if days is None:
        raise RowRejected("dias_vencido debe ser >= 0")

    raw_note = row.get("obra")
    note = raw_note.strip() if isinstance(raw_note, str) and raw_note.strip() else None

    return NormalizedRow(name=name, phone=phone, amount_ars=amount, days_overdue=days, note=note)


async def import_rows(
    store: CollectionStore, business_id: str, rows: Sequence[Dict[str, Any]]
) -> ImportReport:
    """Insert or update debtors from spreadsheet rows and report the outcome."""
    report = ImportReport()
    valid: List[tuple] = []

    for index, row in enumerate(rows, start=1):
        try:
            valid.append((index, normalize_import_row(row)))
        except RowRejected as e:
            report.reject(index, str(e))

    phones = list(dict.fromkeys(normalized.phone for _, normalized in valid))
    existing_by_phone: Dict[str, Debtor] = {}
    for debtor in await store.find_debtors_by_phone(business_id, phones):
        existing_by_phone.setdefault(debtor.phone, debtor)

    histories = await aggregate_history(store, [d.id for d in existing_by_phone.values()])

    for row_number, normalized in valid:
        existing = existing_by_phone.get(normalized.phone)
        history = histories.get(existing.id, HistorySummary()) if existing else HistorySummary()
        priority = score_priority(
            PriorityInput(
                days_overdue=normalized.days_overdue,
                amount_ars=normalized.amount_ars,
                note=normalized.note,
            ),
            history,
        )
        fields = {
            **normalized.model_dump(),
            "priority_score": priority.score,
            "priority_reason": priority.reason,
        }

        if existing is not None:
            try:
                await store.update_debtor(business_id, existing.id, fields)
            except DataStoreError as e:
                logger.warning(f"Import row {row_number} update failed: {e.message}")
                report.reject(row_number, "no se pudo actualizar en base de datos")
                continue
            report.updated += 1
            continue

        try:
            created = await store.insert_debtor(business_id, {**fields, "last_status": "new"})
        except DataStoreError as e:
            logger.warning(f"Import row {row_number} insert failed: {e.message}")
            report.reject(row_number, "no se pudo insertar en base de datos")
            continue
        # A repeated phone later in the same file updates the debtor just created
        existing_by_phone[created.phone] = created
        report.inserted += 1

    logger.info(
        f"Import completed: inserted={report.inserted}, updated={report.updated}, "
        f"rejected={report.rejected}, total={len(rows)}"
    )
    return report
