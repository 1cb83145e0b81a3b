"""Shared test fixtures for CobroSmart AI Engine tests."""
import pytest
from fastapi.testclient import TestClient

from cobrosmart.config.settings import Settings
from cobrosmart.engine.business_settings import default_business_settings
from cobrosmart.main import create_app
from cobrosmart.store.models import BusinessSettings, Debtor
from fakes import InMemoryStore, StubProvider

BUSINESS_ID = "biz-1"


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the developer's .env, with a short LLM timeout."""
    return Settings(
        _env_file=None,
        business_id=BUSINESS_ID,
        llm_provider="azure",
        llm_timeout_seconds=0.2,
        debug=True,
    )


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def stub_provider() -> StubProvider:
    return StubProvider()


@pytest.fixture
def business_settings() -> BusinessSettings:
    return default_business_settings(BUSINESS_ID)


@pytest.fixture
def debtor(store) -> Debtor:
    """A person owing $300.000 for 60 days who ignored two messages."""
    debtor = store.add_debtor(
        BUSINESS_ID,
        id="debtor-1",
        name="Juan Perez",
        phone="1122334455",
        amount_ars=300_000,
        days_overdue=60,
        note="obra calle 9",
    )
    store.add_event(debtor.id, "sent", {"message_text": "Hola Juan, te recuerdo el saldo."})
    store.add_event(debtor.id, "no_response")
    store.add_event(debtor.id, "no_response")
    return debtor


@pytest.fixture
def make_client(settings, store):
    """Build a TestClient around the in-memory store and a given provider."""

    def _make(provider=None, with_store=True, app_settings=None, **client_kwargs):
        app = create_app(
            settings=app_settings or settings,
            store=store if with_store else None,
            llm_provider=provider,
            build_clients=False,
        )
        return TestClient(app, **client_kwargs)

    return _make


@pytest.fixture
def client(make_client, stub_provider):
    return make_client(stub_provider)
