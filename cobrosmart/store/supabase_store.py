"""Supabase-backed implementation of the collection store."""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple

from supabase import AsyncClient, acreate_client

from cobrosmart.api.errors import ConfigurationError, DataStoreError, ErrorCode
from cobrosmart.config.settings import Settings

from .base import CollectionStore
from .models import (
    CACHE_COLUMNS,
    DEBTOR_COLUMNS,
    EVENT_COLUMNS,
    SETTINGS_COLUMNS,
    BusinessSettings,
    Debtor,
    DebtorEvent,
    MessageCacheEntry,
)

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class SupabaseStore(CollectionStore):
    """Collection store on top of the async Supabase (PostgREST) client."""

    def __init__(self, client: AsyncClient):
        self.client = client

    @classmethod
    async def create(cls, settings: Settings) -> "SupabaseStore":
        """Connect using the service-role credentials from settings."""
        missing = [
            name
            for name, value in (
                ("SUPABASE_URL", settings.supabase_url),
                ("SUPABASE_SERVICE_ROLE_KEY", settings.supabase_service_role_key),
            )
            if not value
        ]
        if missing:
            raise ConfigurationError(missing)

        client = await acreate_client(settings.supabase_url, settings.supabase_service_role_key)
        logger.info("Connected Supabase store at %s", settings.supabase_url)
        return cls(client)

    async def _execute(self, query, error_code: ErrorCode, message: str) -> List[Dict[str, Any]]:
        try:
            response = await query.execute()
        except Exception as e:
            logger.error("%s (%s): %s", message, error_code.value, e)
            raise DataStoreError(message, error_code) from e
        return list(response.data or []) if response is not None else []

    # Business

    async def find_business(self, name: str, location: str) -> Optional[str]:
        rows = await self._execute(
            self.client.table("business")
            .select("id")
            .eq("name", name)
            .eq("location", location)
            .limit(1),
            ErrorCode.BOOTSTRAP_QUERY_FAILED,
            "Failed to query business bootstrap state.",
        )
        return rows[0]["id"] if rows else None

    async def insert_business(self, fields: Dict[str, Any]) -> str:
        rows = await self._execute(
            self.client.table("business").insert(fields),
            ErrorCode.BOOTSTRAP_CREATE_FAILED,
            "Failed to create default business.",
        )
        if not rows or not rows[0].get("id"):
            raise DataStoreError("Failed to create default business.", ErrorCode.BOOTSTRAP_CREATE_FAILED)
        return rows[0]["id"]

    async def check_connection(self) -> None:
        await self._execute(
            self.client.table("business").select("id").limit(1),
            ErrorCode.DB_CHECK_FAILED,
            "Supabase connectivity check failed.",
        )

    # Debtors

    async def get_debtor(self, business_id: str, debtor_id: str) -> Optional[Debtor]:
        rows = await self._execute(
            self.client.table("debtor")
            .select(DEBTOR_COLUMNS)
            .eq("id", debtor_id)
            .eq("business_id", business_id)
            .limit(1),
            ErrorCode.DEBTOR_QUERY_FAILED,
            "Failed to load debtor.",
        )
        return Debtor(**rows[0]) if rows else None

    async def list_debtors(self, business_id: str) -> List[Debtor]:
        rows = await self._execute(
            self.client.table("debtor")
            .select(DEBTOR_COLUMNS)
            .eq("business_id", business_id)
            .order("created_at", desc=True),
            ErrorCode.DEBTOR_QUERY_FAILED,
            "Failed to load debtors.",
        )
        return [Debtor(**row) for row in rows]

    async def find_debtors_by_phone(self, business_id: str, phones: Sequence[str]) -> List[Debtor]:
        if not phones:
            return []
        rows = await self._execute(
            self.client.table("debtor")
            .select(DEBTOR_COLUMNS)
            .eq("business_id", business_id)
            .in_("phone", list(phones)),
            ErrorCode.IMPORT_READ_FAILED,
            "Failed to read existing debtors.",
        )
        return [Debtor(**row) for row in rows]

    async def insert_debtor(self, business_id: str, fields: Dict[str, Any]) -> Debtor:
        rows = await self._execute(
            self.client.table("debtor").insert({**fields, "business_id": business_id}),
            ErrorCode.DEBTOR_UPDATE_FAILED,
            "Failed to insert debtor.",
        )
        if not rows:
            raise DataStoreError("Failed to insert debtor.", ErrorCode.DEBTOR_UPDATE_FAILED)
        return Debtor(**rows[0])

    async def update_debtor(
        self, business_id: str, debtor_id: str, patch: Dict[str, Any]
    ) -> Debtor:
        rows = await self._execute(
            self.client.table("debtor")
            .update({**patch, "updated_at": _now()})
            .eq("id", debtor_id)
            .eq("business_id", business_id),
            ErrorCode.DEBTOR_UPDATE_FAILED,
            "Failed to update debtor.",
        )
        if not rows:
            raise DataStoreError("Failed to update debtor.", ErrorCode.DEBTOR_UPDATE_FAILED)
        return Debtor(**rows[0])

    # Events

    async def insert_event(
        self, debtor_id: str, event_type: str, payload: Dict[str, Any]
    ) -> DebtorEvent:
        rows = await self._execute(
            self.client.table("debtor_event").insert(
                {"debtor_id": debtor_id, "type": event_type, "payload": payload}
            ),
            ErrorCode.EVENT_INSERT_FAILED,
            "Failed to write debtor event.",
        )
        if rows:
            return DebtorEvent(**rows[0])
        return DebtorEvent(debtor_id=debtor_id, type=event_type, payload=payload)

    async def list_events(self, debtor_id: str, limit: int) -> List[DebtorEvent]:
        rows = await self._execute(
            self.client.table("debtor_event")
            .select(EVENT_COLUMNS)
            .eq("debtor_id", debtor_id)
            .order("created_at", desc=True)
            .limit(limit),
            ErrorCode.EVENTS_QUERY_FAILED,
            "Failed to load debtor events.",
        )
        return [DebtorEvent(**row) for row in rows]

    async def list_event_types(self, debtor_ids: Sequence[str]) -> List[Tuple[str, str]]:
        if not debtor_ids:
            return []
        rows = await self._execute(
            self.client.table("debtor_event")
            .select("debtor_id, type")
            .in_("debtor_id", list(debtor_ids)),
            ErrorCode.EVENTS_QUERY_FAILED,
            "Failed to load debtor history.",
        )
        return [(row["debtor_id"], row["type"]) for row in rows]

    async def latest_sent_message(self, debtor_id: str) -> Optional[str]:
        rows = await self._execute(
            self.client.table("debtor_event")
            .select("payload")
            .eq("debtor_id", debtor_id)
            .eq("type", "sent")
            .order("created_at", desc=True)
            .limit(1),
            ErrorCode.EVENTS_QUERY_FAILED,
            "Failed to load last sent message.",
        )
        if not rows:
            return None
        text = (rows[0].get("payload") or {}).get("message_text")
        return text or None

    # Message cache

    async def get_cached_message(self, debtor_id: str, tone: str) -> Optional[MessageCacheEntry]:
        rows = await self._execute(
            self.client.table("message_cache")
            .select(CACHE_COLUMNS)
            .eq("debtor_id", debtor_id)
            .eq("tone", tone)
            .limit(1),
            ErrorCode.CACHE_READ_FAILED,
            "Failed to read message cache.",
        )
        return MessageCacheEntry(**rows[0]) if rows else None

    async def upsert_cached_message(self, entry: MessageCacheEntry) -> None:
        row = entry.model_dump(mode="json", exclude_none=True)
        row["updated_at"] = _now()
        row.setdefault("created_at", row["updated_at"])
        await self._execute(
            self.client.table("message_cache").upsert(row, on_conflict="debtor_id,tone"),
            ErrorCode.CACHE_WRITE_FAILED,
            "Failed to write message cache.",
        )

    # Business settings

    async def get_business_settings(self, business_id: str) -> Optional[Dict[str, Any]]:
        rows = await self._execute(
            self.client.table("business_settings")
            .select(SETTINGS_COLUMNS)
            .eq("business_id", business_id)
            .limit(1),
            ErrorCode.SETTINGS_READ_FAILED,
            "Failed to read business settings.",
        )
        return rows[0] if rows else None

    async def upsert_business_settings(self, settings: BusinessSettings) -> BusinessSettings:
        rows = await self._execute(
            self.client.table("business_settings").upsert(
                settings.model_dump(mode="json"), on_conflict="business_id"
            ),
            ErrorCode.SETTINGS_WRITE_FAILED,
            "Failed to save business settings.",
        )
        if not rows:
            raise DataStoreError("Failed to save business settings.", ErrorCode.SETTINGS_WRITE_FAILED)
        return BusinessSettings(**rows[0])
