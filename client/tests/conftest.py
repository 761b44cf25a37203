import os
import tempfile

# the local store engine is created from settings at import time
os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(tempfile.gettempdir(), "storefront_test.db")
os.environ.setdefault("RESTORE_RETRY_DELAY_MS", "0")

import httpx
import pytest
from fastapi.testclient import TestClient

from fake_remote import create_remote_app
from fakes import FakeCartBackend, FakeCartService, FakeCheckoutService
from storefront.db import init_db
from storefront.main import app
from storefront.runtime import build_runtime
from storefront.services.cart_cache import CartSnapshotCache
from storefront.services.cart_session import CartSession
from storefront.services.checkout_assembler import CheckoutAssembler
from storefront.services.mutation_coordinator import QuantityMutationCoordinator
from storefront.services.session_store import SessionStore


@pytest.fixture(autouse=True)
def reset_db():
    init_db(reset=True)
    yield


@pytest.fixture
def session_store():
    return SessionStore()


@pytest.fixture
def signed_in(session_store):
    session_store.store_token("test-token", {"id": "user-1", "email": "buyer@example.com"})
    return session_store


@pytest.fixture
def backend():
    # Scenario A: productA qty=2 price=10000, productB qty=1 price=5000
    b = FakeCartBackend()
    b.add_product("productA", price=10000, name="Vitamin C Serum")
    b.add_product("productB", price=5000, name="Sunscreen SPF50")
    b.add("productA", 2)
    b.add("productB", 1)
    return b


@pytest.fixture
def cart_service(backend):
    return FakeCartService(backend)


@pytest.fixture
def checkout_service():
    return FakeCheckoutService()


@pytest.fixture
def session():
    return CartSession()


@pytest.fixture
def cache(session, cart_service, session_store):
    return CartSnapshotCache(session, cart_service, session_store)


@pytest.fixture
def coordinator(session, cache, cart_service, session_store):
    return QuantityMutationCoordinator(
        session, cache, cart_service, session_store, restore_attempts=3, restore_delay_ms=0
    )


@pytest.fixture
def assembler(session, checkout_service, session_store):
    return CheckoutAssembler(session, checkout_service, session_store)


@pytest.fixture
def remote(backend):
    return create_remote_app(backend)


@pytest.fixture
def api(remote, session_store):
    app.state.runtime = build_runtime(
        session_store=session_store,
        transport=httpx.ASGITransport(app=remote),
        restore_delay_ms=0,
    )
    with TestClient(app) as client:
        yield client
    app.state.runtime = None
