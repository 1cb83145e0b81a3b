"""Tests for the default business bootstrap."""

import pytest

from cobrosmart.api.errors import DataStoreError, ErrorCode
from cobrosmart.engine.bootstrap import (
    DEFAULT_BUSINESS_LOCATION,
    DEFAULT_BUSINESS_NAME,
    bootstrap_default_business,
)


class TestBootstrap:
    """Tests for find-or-create of the default business."""

    @pytest.mark.asyncio
    async def test_creates_business_once(self, store):
        first = await bootstrap_default_business(store)
        second = await bootstrap_default_business(store)

        assert first == second
        assert store.businesses == {
            first: {
                "name": DEFAULT_BUSINESS_NAME,
                "location": DEFAULT_BUSINESS_LOCATION,
                "vertical": "corralon",
            }
        }
        assert store.calls.count("insert_business") == 1

    @pytest.mark.asyncio
    async def test_returns_existing_business(self, store):
        store.businesses["biz-7"] = {
            "name": DEFAULT_BUSINESS_NAME,
            "location": DEFAULT_BUSINESS_LOCATION,
        }

        assert await bootstrap_default_business(store) == "biz-7"
        assert "insert_business" not in store.calls

    @pytest.mark.asyncio
    async def test_query_failure_propagates(self, store):
        store.failing.add("find_business")

        with pytest.raises(DataStoreError) as exc_info:
            await bootstrap_default_business(store)

        assert exc_info.value.error_code == ErrorCode.BOOTSTRAP_QUERY_FAILED
        assert "insert_business" not in store.calls
