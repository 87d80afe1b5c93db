import os

# Avant tout import de storefront: pas de Redis réel pendant les tests
os.environ.setdefault("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS", "1")

import threading
from decimal import Decimal
from typing import Any, Dict, Generator, List, Optional

import pytest
from fastapi.testclient import TestClient
from unittest.mock import MagicMock

from storefront.app import app as fastapi_app
from storefront.catalog.models import Product
from storefront.errors import CaptureFailed, PersistenceFailure, StoreUnavailable
from storefront.orders.models import Order
from storefront.payments.providers.base import CaptureResult, ProviderOrder
from storefront.utils.security import require_admin, require_user

# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "/tests/unit/" in nodeid or nodeid.startswith("tests/unit/"):
            item.add_marker(pytest.mark.unit)
        elif "/tests/integration/" in nodeid or nodeid.startswith("tests/integration/"):
            item.add_marker(pytest.mark.integration)
        elif "/tests/functional/" in nodeid or nodeid.startswith("tests/functional/"):
            item.add_marker(pytest.mark.functional)

TEST_USER: Dict[str, Any] = {
    "id": "test-user",
    "email": "test@example.com",
    "role": "user",
    "token": "fake-token",
}

ADMIN_USER: Dict[str, Any] = {
    "id": "admin-user-id",
    "email": "admin@example.com",
    "role": "admin",
    "token": "admin-token",
}

SHIPPING: Dict[str, str] = {
    "email": "buyer@example.com",
    "name": "Jane Doe",
    "address": "12 Sunset Blvd",
    "city": "Austin",
    "country": "United States",
    "zip": "78701",
}

@pytest.fixture(scope="session")
def app():
    return fastapi_app

@pytest.fixture()
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c

@pytest.fixture
def shipping() -> Dict[str, str]:
    return dict(SHIPPING)

@pytest.fixture
def authenticated_admin_client(app, client):
    app.dependency_overrides[require_admin] = lambda: dict(ADMIN_USER)
    yield client
    app.dependency_overrides.pop(require_admin, None)

# Simuler un utilisateur authentifié pour les endpoints protégés
@pytest.fixture(autouse=True)
def _override_require_user(app):
    app.dependency_overrides[require_user] = lambda: dict(TEST_USER)
    try:
        yield
    finally:
        app.dependency_overrides.pop(require_user, None)

# Aucun accès Supabase réel
@pytest.fixture(scope="function", autouse=True)
def mock_db_dependency(monkeypatch):
    monkeypatch.setattr("storefront.infra.supabase_client.get_supabase", lambda: MagicMock())
    monkeypatch.setattr("storefront.infra.supabase_client.get_service_supabase", lambda: MagicMock())


# --- Catalogue en mémoire ---

class FakeCatalog:
    def __init__(self, products: List[Product]):
        self.products = {p.id: p for p in products}
        self.calls: List[List[str]] = []
        self.fail = False

    def get_products_by_ids(self, ids):
        wanted = sorted({str(i) for i in ids if i})
        self.calls.append(wanted)
        if self.fail:
            raise StoreUnavailable("catalog down")
        return [self.products[i] for i in wanted if i in self.products]

    def set_price(self, product_id: str, price: str) -> None:
        self.products[product_id] = self.products[product_id].model_copy(update={"price": Decimal(price)})


@pytest.fixture
def catalog(monkeypatch) -> FakeCatalog:
    fake = FakeCatalog([
        Product(id="hoodie-sol", name="SOL Hoodie", price=Decimal("18.50"), category="hoodies", is_active=True),
        Product(id="tee-dawn", name="Dawn Tee", price=Decimal("25.00"), category="tees", is_active=True),
        Product(id="cap-retired", name="Retired Cap", price=Decimal("12.00"), category="caps", is_active=False),
    ])
    monkeypatch.setattr("storefront.catalog.repository.get_products_by_ids", fake.get_products_by_ids)
    return fake


# --- Table orders en mémoire (index unique sur provider_order_id) ---

class FakeOrderStore:
    def __init__(self):
        self.rows: List[Order] = []
        self.fail_inserts = False
        self._lock = threading.Lock()

    def insert_order(self, order: Order) -> Order:
        with self._lock:
            if self.fail_inserts:
                raise PersistenceFailure("insert failed")
            if any(r.provider_order_id == order.provider_order_id for r in self.rows):
                raise PersistenceFailure("duplicate key value violates unique constraint")
            stored = order.model_copy(update={"id": f"order-{len(self.rows) + 1}"})
            self.rows.append(stored)
            return stored

    def find_order_by_provider_order_id(self, provider_order_id: str) -> Optional[Order]:
        with self._lock:
            return next((r for r in self.rows if r.provider_order_id == provider_order_id), None)


@pytest.fixture
def order_store(monkeypatch) -> FakeOrderStore:
    fake = FakeOrderStore()
    monkeypatch.setattr("storefront.orders.repository.insert_order", fake.insert_order)
    monkeypatch.setattr(
        "storefront.orders.repository.find_order_by_provider_order_id",
        fake.find_order_by_provider_order_id,
    )
    return fake


# --- Prestataire simulé: une seule capture par ordre, comme PayPal/Stripe ---

class FakeProvider:
    name = "fake"

    def __init__(self):
        self.created: List[Dict[str, Any]] = []
        self.captured: List[str] = []
        self.totals: Dict[str, Decimal] = {}
        self.capture_amount: Optional[Decimal] = None
        self.create_error: Optional[Exception] = None
        self.capture_error: Optional[Exception] = None
        self._lock = threading.Lock()

    def create_order(self, order, shipping, currency) -> ProviderOrder:
        if self.create_error:
            raise self.create_error
        order_id = f"FAKE-{len(self.created) + 1}"
        self.created.append({"order_id": order_id, "order": order, "shipping": shipping, "currency": currency})
        self.totals[order_id] = order.total
        return ProviderOrder(order_id=order_id)

    def capture_order(self, provider_order_id: str) -> CaptureResult:
        with self._lock:
            if self.capture_error:
                raise self.capture_error
            if provider_order_id in self.captured:
                raise CaptureFailed("ORDER_ALREADY_CAPTURED")
            self.captured.append(provider_order_id)
        amount = self.capture_amount if self.capture_amount is not None else self.totals.get(provider_order_id, Decimal("0.00"))
        return CaptureResult(
            capture_id=f"CAP-{provider_order_id}",
            provider_order_id=provider_order_id,
            amount=amount,
            currency="USD",
            status="COMPLETED",
        )

    def public_config(self) -> dict:
        return {"provider": self.name, "clientId": "fake-client-id"}


@pytest.fixture
def fake_provider(monkeypatch) -> FakeProvider:
    fake = FakeProvider()
    monkeypatch.setattr("storefront.payments.service.get_provider", lambda name="": fake)
    return fake
