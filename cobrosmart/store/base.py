"""Data store abstraction used by the engine."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .models import BusinessSettings, Debtor, DebtorEvent, MessageCacheEntry


class CollectionStore(ABC):
    """
    Row-level access to the business, debtor, debtor_event, message_cache
    and business_settings tables.

    Debtor-scoped reads always filter by the owning business. Every failure
    is raised as DataStoreError; callers never retry.
    """

    # Business

    @abstractmethod
    async def find_business(self, name: str, location: str) -> Optional[str]:
        """Return the id of the business with this name and location, if any."""
        pass

    @abstractmethod
    async def insert_business(self, fields: Dict[str, Any]) -> str:
        """Create a business row and return its id."""
        pass

    @abstractmethod
    async def check_connection(self) -> None:
        """Run a trivial read. Raises DataStoreError when the store is unreachable."""
        pass

    # Debtors

    @abstractmethod
    async def get_debtor(self, business_id: str, debtor_id: str) -> Optional[Debtor]:
        """Return the debtor if it exists and belongs to the business."""
        pass

    @abstractmethod
    async def list_debtors(self, business_id: str) -> List[Debtor]:
        """Return all debtors of the business, newest first."""
        pass

    @abstractmethod
    async def find_debtors_by_phone(self, business_id: str, phones: Sequence[str]) -> List[Debtor]:
        pass

    @abstractmethod
    async def insert_debtor(self, business_id: str, fields: Dict[str, Any]) -> Debtor:
        pass

    @abstractmethod
    async def update_debtor(
        self, business_id: str, debtor_id: str, patch: Dict[str, Any]
    ) -> Debtor:
        pass

    # Events (append-only)

    @abstractmethod
    async def insert_event(
        self, debtor_id: str, event_type: str, payload: Dict[str, Any]
    ) -> DebtorEvent:
        pass

    @abstractmethod
    async def list_events(self, debtor_id: str, limit: int) -> List[DebtorEvent]:
        """Return the latest events of a debtor, newest first."""
        pass

    @abstractmethod
    async def list_event_types(self, debtor_ids: Sequence[str]) -> List[Tuple[str, str]]:
        """Return (debtor_id, type) for every event of the given debtors."""
        pass

    @abstractmethod
    async def latest_sent_message(self, debtor_id: str) -> Optional[str]:
        """Return the message text of the most recent 'sent' event, if any."""
        pass

    # Message cache

    @abstractmethod
    async def get_cached_message(self, debtor_id: str, tone: str) -> Optional[MessageCacheEntry]:
        pass

    @abstractmethod
    async def upsert_cached_message(self, entry: MessageCacheEntry) -> None:
        """Insert or overwrite the entry for (debtor_id, tone). Last writer wins."""
        pass

    # Business settings

    @abstractmethod
    async def get_business_settings(self, business_id: str) -> Optional[Dict[str, Any]]:
        """Return the stored settings row as a dict, or None when absent."""
        pass

    @abstractmethod
    async def upsert_business_settings(self, settings: BusinessSettings) -> BusinessSettings:
        pass
