"""In-memory collaborators for engine and API tests."""

import asyncio
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple

from cobrosmart.api.errors import DataStoreError, ErrorCode
from cobrosmart.llm.base import BaseLLMProvider, LLMResponse, require_prompt
from cobrosmart.store.base import CollectionStore
from cobrosmart.store.models import BusinessSettings, Debtor, DebtorEvent, MessageCacheEntry

_FAILURE_CODES = {
    "find_business": ErrorCode.BOOTSTRAP_QUERY_FAILED,
    "insert_business": ErrorCode.BOOTSTRAP_CREATE_FAILED,
    "check_connection": ErrorCode.DB_CHECK_FAILED,
    "get_debtor": ErrorCode.DEBTOR_QUERY_FAILED,
    "list_debtors": ErrorCode.DEBTOR_QUERY_FAILED,
    "find_debtors_by_phone": ErrorCode.IMPORT_READ_FAILED,
    "insert_debtor": ErrorCode.DEBTOR_UPDATE_FAILED,
    "update_debtor": ErrorCode.DEBTOR_UPDATE_FAILED,
    "insert_event": ErrorCode.EVENT_INSERT_FAILED,
    "list_events": ErrorCode.EVENTS_QUERY_FAILED,
    "list_event_types": ErrorCode.EVENTS_QUERY_FAILED,
    "latest_sent_message": ErrorCode.EVENTS_QUERY_FAILED,
    "get_cached_message": ErrorCode.CACHE_READ_FAILED,
    "upsert_cached_message": ErrorCode.CACHE_WRITE_FAILED,
    "get_business_settings": ErrorCode.SETTINGS_READ_FAILED,
    "upsert_business_settings": ErrorCode.SETTINGS_WRITE_FAILED,
}

_EPOCH = datetime(2024, 1, 1, tzinfo=timezone.utc)


class InMemoryStore(CollectionStore):
    """Dict-backed store. Methods named in `failing` raise DataStoreError."""

    def __init__(self):
        self.debtors: Dict[str, Debtor] = {}
        self.events: List[DebtorEvent] = []
        self.cache: Dict[Tuple[str, str], MessageCacheEntry] = {}
        self.settings_rows: Dict[str, Dict[str, Any]] = {}
        self.businesses: Dict[str, Dict[str, Any]] = {}
        self.failing: set = set()
        self.calls: List[str] = []
        self._clock = 0

    def _tick(self) -> datetime:
        self._clock += 1
        return _EPOCH + timedelta(seconds=self._clock)

    def _enter(self, name: str) -> None:
        self.calls.append(name)
        if name in self.failing:
            raise DataStoreError(f"{name} failed", _FAILURE_CODES[name])

    # Seeding helpers

    def add_debtor(self, business_id: str = "biz-1", **fields) -> Debtor:
        debtor = Debtor(
            id=fields.pop("id", str(uuid.uuid4())),
            business_id=business_id,
            name=fields.pop("name", "Juan Perez"),
            phone=fields.pop("phone", "1122334455"),
            created_at=self._tick(),
            **fields,
        )
        self.debtors[debtor.id] = debtor
        return debtor

    def add_event(self, debtor_id: str, event_type: str, payload: Optional[Dict[str, Any]] = None):
        event = DebtorEvent(
            id=str(uuid.uuid4()),
            debtor_id=debtor_id,
            type=event_type,
            payload=payload or {},
            created_at=self._tick(),
        )
        self.events.append(event)
        return event

    # Business

    async def find_business(self, name: str, location: str) -> Optional[str]:
        self._enter("find_business")
        for business_id, row in self.businesses.items():
            if row.get("name") == name and row.get("location") == location:
                return business_id
        return None

    async def insert_business(self, fields: Dict[str, Any]) -> str:
        self._enter("insert_business")
        business_id = str(uuid.uuid4())
        self.businesses[business_id] = dict(fields)
        return business_id

    async def check_connection(self) -> None:
        self._enter("check_connection")

    # Debtors

    async def get_debtor(self, business_id: str, debtor_id: str) -> Optional[Debtor]:
        self._enter("get_debtor")
        debtor = self.debtors.get(debtor_id)
        if debtor is None or debtor.business_id != business_id:
            return None
        return debtor

    async def list_debtors(self, business_id: str) -> List[Debtor]:
        self._enter("list_debtors")
        owned = [d for d in self.debtors.values() if d.business_id == business_id]
        return sorted(owned, key=lambda d: d.created_at, reverse=True)

    async def find_debtors_by_phone(self, business_id: str, phones: Sequence[str]) -> List[Debtor]:
        self._enter("find_debtors_by_phone")
        return [
            d for d in self.debtors.values() if d.business_id == business_id and d.phone in phones
        ]

    async def insert_debtor(self, business_id: str, fields: Dict[str, Any]) -> Debtor:
        self._enter("insert_debtor")
        return self.add_debtor(business_id, **fields)

    async def update_debtor(self, business_id: str, debtor_id: str, patch: Dict[str, Any]) -> Debtor:
        self._enter("update_debtor")
        current = self.debtors.get(debtor_id)
        if current is None or current.business_id != business_id:
            raise DataStoreError("Failed to update debtor.", ErrorCode.DEBTOR_UPDATE_FAILED)
        updated = Debtor.model_validate({**current.model_dump(), **patch})
        self.debtors[debtor_id] = updated
        return updated

    # Events

    async def insert_event(self, debtor_id: str, event_type: str, payload: Dict[str, Any]) -> DebtorEvent:
        self._enter("insert_event")
        return self.add_event(debtor_id, event_type, payload)

    async def list_events(self, debtor_id: str, limit: int) -> List[DebtorEvent]:
        self._enter("list_events")
        own = [e for e in self.events if e.debtor_id == debtor_id]
        return sorted(own, key=lambda e: e.created_at, reverse=True)[:limit]

    async def list_event_types(self, debtor_ids: Sequence[str]) -> List[Tuple[str, str]]:
        self._enter("list_event_types")
        return [(e.debtor_id, e.type) for e in self.events if e.debtor_id in debtor_ids]

    async def latest_sent_message(self, debtor_id: str) -> Optional[str]:
        self._enter("latest_sent_message")
        sent = [e for e in self.events if e.debtor_id == debtor_id and e.type == "sent"]
        if not sent:
            return None
        latest = max(sent, key=lambda e: e.created_at)
        return latest.payload.get("message_text") or None

    # Message cache

    async def get_cached_message(self, debtor_id: str, tone: str) -> Optional[MessageCacheEntry]:
        self._enter("get_cached_message")
        return self.cache.get((debtor_id, tone))

    async def upsert_cached_message(self, entry: MessageCacheEntry) -> None:
        self._enter("upsert_cached_message")
        now = self._tick()
        previous = self.cache.get((entry.debtor_id, entry.tone))
        created = entry.created_at or (previous.created_at if previous else now)
        self.cache[(entry.debtor_id, entry.tone)] = entry.model_copy(
            update={"created_at": created, "updated_at": now}
        )

    # Business settings

    async def get_business_settings(self, business_id: str) -> Optional[Dict[str, Any]]:
        self._enter("get_business_settings")
        row = self.settings_rows.get(business_id)
        return dict(row) if row else None

    async def upsert_business_settings(self, settings: BusinessSettings) -> BusinessSettings:
        self._enter("upsert_business_settings")
        self.settings_rows[settings.business_id] = settings.model_dump()
        return settings


class StubProvider(BaseLLMProvider):
    """Scripted LLM: returns `content`, raises `error`, or sleeps `delay` seconds first."""

    def __init__(
        self,
        content: str = "Buen dia Juan, te escribo por el saldo de $300.000. Pagas hoy o coordinamos fecha?",
        error: Optional[Exception] = None,
        delay: float = 0.0,
        model: str = "stub-model",
    ):
        self.content = content
        self.error = error
        self.delay = delay
        self._model = model
        self.calls: List[Dict[str, Any]] = []
        self.completed = 0

    @property
    def provider_name(self) -> str:
        return "stub"

    @property
    def model_name(self) -> str:
        return self._model

    async def complete(
        self,
        prompt: str,
        temperature: float = 0.7,
        top_p: float = 1.0,
        max_tokens: int = 256,
    ) -> LLMResponse:
        self.calls.append(
            {"prompt": prompt, "temperature": temperature, "top_p": top_p, "max_tokens": max_tokens}
        )
        require_prompt(prompt)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        self.completed += 1
        return LLMResponse(
            content=self.content,
            model=self._model,
            provider="stub",
            usage={"prompt_tokens": 10, "completion_tokens": 5, "total_tokens": 15},
        )
