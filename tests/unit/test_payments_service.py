import logging
import threading
from decimal import Decimal

import pytest

from storefront import config
from storefront.errors import (
    CaptureFailed,
    EmptyCart,
    InvalidShipping,
    ProviderRejected,
    ProviderUnavailable,
    Unauthenticated,
    UnknownProduct,
)
from storefront.orders.models import OrderStatus
from storefront.payments import service
from storefront.payments.providers import CaptureResult
from storefront.payments.schemas import CartLineIn, ShippingInfo

USER = {"id": "u1", "email": "user@example.com"}


def _lines(*pairs):
    return [CartLineIn(id=pid, quantity=q) for pid, q in pairs]


@pytest.fixture
def ship(shipping):
    return ShippingInfo(**shipping)


# --- create_payment_order ---

def test_create_requires_identity(catalog, fake_provider, ship):
    with pytest.raises(Unauthenticated):
        service.create_payment_order(user=None, items=_lines(("hoodie-sol", 1)), shipping=ship)
    with pytest.raises(Unauthenticated):
        service.create_payment_order(user={"email": "x@y.z"}, items=_lines(("hoodie-sol", 1)), shipping=ship)
    assert fake_provider.created == []


def test_create_sends_validated_total_to_provider(catalog, fake_provider, ship):
    created = service.create_payment_order(user=USER, items=_lines(("hoodie-sol", 2)), shipping=ship)
    assert created.order_id == "FAKE-1"
    sent = fake_provider.created[0]
    assert sent["order"].total == Decimal("37.00")
    assert sent["currency"] == config.PAYMENT_CURRENCY
    assert sent["shipping"].email == "buyer@example.com"


def test_create_propagates_validation_errors(catalog, fake_provider, ship):
    with pytest.raises(EmptyCart):
        service.create_payment_order(user=USER, items=[], shipping=ship)
    with pytest.raises(UnknownProduct):
        service.create_payment_order(user=USER, items=_lines(("ghost", 1)), shipping=ship)
    assert fake_provider.created == []


def test_create_rejects_bad_shipping_before_provider(catalog, fake_provider, shipping):
    bad = ShippingInfo(**{**shipping, "email": "not-an-email", "zip": "1"})
    with pytest.raises(InvalidShipping) as exc:
        service.create_payment_order(user=USER, items=_lines(("hoodie-sol", 1)), shipping=bad)
    assert set(exc.value.fields) == {"email", "zip"}
    assert fake_provider.created == []


@pytest.mark.parametrize("error", [ProviderUnavailable("timeout"), ProviderRejected("INVALID_REQUEST")])
def test_create_surfaces_provider_errors(catalog, fake_provider, ship, error):
    fake_provider.create_error = error
    with pytest.raises(type(error)) as exc:
        service.create_payment_order(user=USER, items=_lines(("hoodie-sol", 1)), shipping=ship)
    assert exc.value.message == "Could not start payment"


# --- capture_and_record ---

def test_capture_records_order(catalog, order_store, fake_provider, ship):
    created = service.create_payment_order(user=USER, items=_lines(("hoodie-sol", 2)), shipping=ship)
    outcome = service.capture_and_record(
        user=USER, provider_order_id=created.order_id, items=_lines(("hoodie-sol", 2)), shipping=ship,
    )
    assert outcome.capture_id == "CAP-FAKE-1"
    assert outcome.amount_matches is True
    assert outcome.order.ok is True
    assert len(order_store.rows) == 1
    row = order_store.rows[0]
    assert row.total_amount == Decimal("37.00")
    assert row.status == OrderStatus.PAID
    assert row.user_email == "user@example.com"
    assert row.provider_order_id == "FAKE-1"
    assert row.provider_capture_id == "CAP-FAKE-1"
    assert row.items == [{"product_id": "hoodie-sol", "name": "SOL Hoodie", "unit_price": "18.50", "quantity": 2}]
    assert row.shipping_address["city"] == "Austin"


def test_capture_uses_shipping_email_when_caller_has_none(catalog, order_store, fake_provider, ship):
    fake_provider.capture_amount = Decimal("18.50")
    service.capture_and_record(
        user={"id": "u2", "email": None}, provider_order_id="P-1", items=_lines(("hoodie-sol", 1)), shipping=ship,
    )
    assert order_store.rows[0].user_email == "buyer@example.com"


def test_capture_failure_writes_nothing(catalog, order_store, fake_provider, ship):
    fake_provider.capture_error = CaptureFailed("INSTRUMENT_DECLINED")
    with pytest.raises(CaptureFailed) as exc:
        service.capture_and_record(
            user=USER, provider_order_id="P-1", items=_lines(("hoodie-sol", 1)), shipping=ship,
        )
    assert exc.value.to_payload() == {"error": "Payment failed, please try again"}
    assert order_store.rows == []


def test_capture_requires_identity_before_provider(catalog, order_store, fake_provider, ship):
    with pytest.raises(Unauthenticated):
        service.capture_and_record(user=None, provider_order_id="P-1", items=_lines(("hoodie-sol", 1)), shipping=ship)
    assert fake_provider.captured == []


def test_capture_revalidates_items(catalog, order_store, fake_provider, ship):
    with pytest.raises(UnknownProduct):
        service.capture_and_record(user=USER, provider_order_id="P-1", items=_lines(("ghost", 1)), shipping=ship)
    assert fake_provider.captured == []


def test_amount_mismatch_is_logged_not_blocking(catalog, order_store, fake_provider, ship, caplog):
    fake_provider.capture_amount = Decimal("40.00")
    with caplog.at_level(logging.WARNING, logger="storefront.payments.service"):
        outcome = service.capture_and_record(
            user=USER, provider_order_id="P-1", items=_lines(("hoodie-sol", 2)), shipping=ship,
        )
    assert outcome.amount_matches is False
    assert outcome.expected_total == Decimal("37.00")
    assert order_store.rows[0].total_amount == Decimal("40.00")
    assert any("amount mismatch" in r.getMessage() for r in caplog.records)


def test_amount_within_epsilon_matches(catalog, order_store, fake_provider, ship):
    fake_provider.capture_amount = Decimal("37.01")
    outcome = service.capture_and_record(
        user=USER, provider_order_id="P-1", items=_lines(("hoodie-sol", 2)), shipping=ship,
    )
    assert outcome.amount_matches is True


def test_currency_mismatch_is_logged_not_blocking(monkeypatch, catalog, order_store, fake_provider, ship, caplog):
    monkeypatch.setattr(config, "PAYMENT_CURRENCY", "EUR")
    with caplog.at_level(logging.WARNING, logger="storefront.payments.service"):
        outcome = service.capture_and_record(
            user=USER, provider_order_id="P-1", items=_lines(("hoodie-sol", 2)), shipping=ship,
        )
    assert outcome.currency_matches is False
    assert outcome.order.ok is True
    assert any("currency mismatch" in r.getMessage() and "USD" in r.getMessage() for r in caplog.records)


def test_same_currency_is_not_flagged(monkeypatch, catalog, order_store, fake_provider, ship, caplog):
    monkeypatch.setattr(config, "PAYMENT_CURRENCY", "USD")
    fake_provider.capture_amount = Decimal("37.00")
    with caplog.at_level(logging.WARNING, logger="storefront.payments.service"):
        outcome = service.capture_and_record(
            user=USER, provider_order_id="P-1", items=_lines(("hoodie-sol", 2)), shipping=ship,
        )
    assert outcome.currency_matches is True
    assert not any("currency mismatch" in r.getMessage() for r in caplog.records)


class _RenamingProvider:
    """Prestataire qui renvoie son propre identifiant d'ordre à la capture."""
    name = "renaming"

    def capture_order(self, provider_order_id):
        return CaptureResult(
            capture_id="CAP-9",
            provider_order_id="PP-CANONICAL",
            amount=Decimal("18.50"),
            currency=config.PAYMENT_CURRENCY,
            status="COMPLETED",
        )


def test_capture_records_provider_reported_order_id(catalog, order_store, ship):
    outcome = service.capture_and_record(
        user=USER, provider_order_id="pp-canonical", items=_lines(("hoodie-sol", 1)), shipping=ship,
        provider=_RenamingProvider(),
    )
    assert outcome.provider_order_id == "PP-CANONICAL"
    assert order_store.rows[0].provider_order_id == "PP-CANONICAL"
    assert order_store.rows[0].provider_capture_id == "CAP-9"


def test_persistence_failure_still_reports_success(catalog, order_store, fake_provider, ship, caplog):
    order_store.fail_inserts = True
    fake_provider.capture_amount = Decimal("18.50")
    with caplog.at_level(logging.ERROR, logger="storefront.payments.service"):
        outcome = service.capture_and_record(
            user=USER, provider_order_id="P-1", items=_lines(("hoodie-sol", 1)), shipping=ship,
        )
    assert outcome.capture_id == "CAP-P-1"
    assert outcome.order.ok is False
    assert "PersistenceFailure" in outcome.order.error
    assert any("order storage failed" in r.getMessage() for r in caplog.records)


def test_already_recorded_order_is_refused(catalog, order_store, fake_provider, ship):
    fake_provider.capture_amount = Decimal("18.50")
    service.capture_and_record(user=USER, provider_order_id="P-1", items=_lines(("hoodie-sol", 1)), shipping=ship)
    fake_provider.captured.clear()  # même si le prestataire acceptait une seconde capture
    with pytest.raises(CaptureFailed):
        service.capture_and_record(user=USER, provider_order_id="P-1", items=_lines(("hoodie-sol", 1)), shipping=ship)
    assert len(order_store.rows) == 1
    assert fake_provider.captured == []


def test_without_local_guard_provider_refuses_second_capture(monkeypatch, catalog, order_store, fake_provider, ship):
    monkeypatch.setattr(config, "ORDER_UNIQUE_PROVIDER_ORDER", False)
    fake_provider.capture_amount = Decimal("18.50")
    service.capture_and_record(user=USER, provider_order_id="P-1", items=_lines(("hoodie-sol", 1)), shipping=ship)
    with pytest.raises(CaptureFailed):
        service.capture_and_record(user=USER, provider_order_id="P-1", items=_lines(("hoodie-sol", 1)), shipping=ship)
    assert len(order_store.rows) == 1


def test_concurrent_captures_yield_one_success(catalog, order_store, fake_provider, ship):
    fake_provider.capture_amount = Decimal("18.50")
    results = []
    barrier = threading.Barrier(4)

    def _capture():
        barrier.wait()
        try:
            service.capture_and_record(
                user=USER, provider_order_id="P-RACE", items=_lines(("hoodie-sol", 1)), shipping=ship,
            )
            results.append("ok")
        except CaptureFailed:
            results.append("failed")

    threads = [threading.Thread(target=_capture) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results.count("ok") == 1
    assert results.count("failed") == 3
    assert len(order_store.rows) == 1


def test_client_config(fake_provider):
    assert service.client_config() == {"provider": "fake", "clientId": "fake-client-id", "currency": config.PAYMENT_CURRENCY}
