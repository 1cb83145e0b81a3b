"""Tests for debtor listing, events and status updates."""

import pytest

from cobrosmart.api.errors import DebtorNotFoundError, ErrorCode, ValidationError
from cobrosmart.api.models.requests import StatusUpdateRequest
from cobrosmart.engine import debtor_service

BUSINESS_ID = "biz-1"


class TestHelpers:
    """Tests for small parsing helpers."""

    @pytest.mark.parametrize(
        "limit,expected", [(None, 20), (0, 1), (-3, 1), (50, 50), (500, 100)]
    )
    def test_clamp_limit(self, limit, expected):
        assert debtor_service.clamp_limit(limit) == expected

    def test_parse_promise_date(self):
        assert debtor_service.parse_promise_date("2024-03-01").isoformat() == "2024-03-01T00:00:00+00:00"
        assert debtor_service.parse_promise_date("2024-03-01T10:00:00Z").hour == 10
        assert debtor_service.parse_promise_date("pronto") is None
        assert debtor_service.parse_promise_date("") is None


class TestListing:
    """Tests for debtor and event listing."""

    @pytest.mark.asyncio
    async def test_priority_sort_puts_unscored_last(self, store):
        low = store.add_debtor(BUSINESS_ID, name="Bajo", priority_score=10)
        unscored = store.add_debtor(BUSINESS_ID, name="Sin puntaje")
        high = store.add_debtor(BUSINESS_ID, name="Alto", priority_score=90)
        store.add_debtor("biz-2", name="Ajeno", priority_score=99)

        items = await debtor_service.list_debtors(store, BUSINESS_ID, "priority")

        assert [d.id for d in items] == [high.id, low.id, unscored.id]

    @pytest.mark.asyncio
    async def test_default_sort_newest_first(self, store):
        first = store.add_debtor(BUSINESS_ID, priority_score=90)
        second = store.add_debtor(BUSINESS_ID, priority_score=10)

        items = await debtor_service.list_debtors(store, BUSINESS_ID)

        assert [d.id for d in items] == [second.id, first.id]

    @pytest.mark.asyncio
    async def test_events_newest_first_and_limited(self, store, debtor):
        events = await debtor_service.list_events(store, BUSINESS_ID, debtor.id, limit=2)

        assert len(events) == 2
        assert all(e.type == "no_response" for e in events)

    @pytest.mark.asyncio
    async def test_events_of_unknown_debtor(self, store):
        with pytest.raises(DebtorNotFoundError):
            await debtor_service.list_events(store, BUSINESS_ID, "missing")


class TestUpdateStatus:
    """Tests for recording contact outcomes."""

    @pytest.mark.asyncio
    async def test_invalid_status(self, store, debtor):
        with pytest.raises(ValidationError) as exc_info:
            await debtor_service.update_status(
                store, BUSINESS_ID, debtor.id, StatusUpdateRequest(status="called")
            )

        assert exc_info.value.error_code == ErrorCode.INVALID_STATUS
        assert store.calls == []

    @pytest.mark.asyncio
    async def test_promise_requires_date(self, store, debtor):
        with pytest.raises(ValidationError) as exc_info:
            await debtor_service.update_status(
                store, BUSINESS_ID, debtor.id, StatusUpdateRequest(status="promise", promise_date="x")
            )

        assert exc_info.value.error_code == ErrorCode.MISSING_PROMISE_DATE

    @pytest.mark.asyncio
    async def test_sent_records_event_and_rescores(self, store, debtor):
        updated = await debtor_service.update_status(
            store,
            BUSINESS_ID,
            debtor.id,
            StatusUpdateRequest(status="sent", message_text="  Hola Juan  ", tone="directo"),
        )

        event = store.events[-1]
        assert event.type == "sent"
        assert event.payload["message_text"] == "Hola Juan"
        assert event.payload["tone"] == "directo"
        assert event.payload["channel"] == "whatsapp_manual"
        assert updated.last_status == "sent"
        assert updated.last_contact_at is not None
        # 2 sent + 2 no_response now: 49.7 + 17.7 + 14
        assert updated.priority_score == 81
        assert updated.priority_reason == "antiguedad alta | monto alto | ignoro 2 veces"

    @pytest.mark.asyncio
    async def test_promise_then_paid(self, store, debtor):
        promised = await debtor_service.update_status(
            store,
            BUSINESS_ID,
            debtor.id,
            StatusUpdateRequest(status="promise", promise_date="2024-03-01", channel="telefono"),
        )
        assert promised.promise_date is not None
        assert store.events[-1].payload["channel"] == "telefono"

        paid = await debtor_service.update_status(
            store, BUSINESS_ID, debtor.id, StatusUpdateRequest(status="paid")
        )

        assert paid.promise_date is None
        assert paid.last_status == "paid"
        assert "buen historial" in paid.priority_reason

    @pytest.mark.asyncio
    async def test_unknown_debtor(self, store):
        with pytest.raises(DebtorNotFoundError):
            await debtor_service.update_status(
                store, BUSINESS_ID, "missing", StatusUpdateRequest(status="sent")
            )
