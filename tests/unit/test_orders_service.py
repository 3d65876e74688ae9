import pytest

from conftest import make_completed_event
from storefront.errors import OrderNotFoundError, ReconciliationError
from storefront.orders import service as orders_service
from storefront.orders.models import OrderStatus, order_number


def test_reconcile_creates_paid_order(fake_db, sent_emails):
    # Act
    result = orders_service.reconcile_checkout_completed(make_completed_event())
    # Assert
    assert result.created is True
    assert result.notified is True
    orders = fake_db.tables["orders"]
    assert len(orders) == 1
    order = orders[0]
    assert order["checkout_session_id"] == "cs_test_abcdefgh12345678"
    assert order["status"] == "PAID"
    assert order["total_amount"] == 35998
    assert order["currency"] == "USD"
    assert order["customer_email"] == "jane@example.com"
    assert order["billing_address_city"] == "Austin"
    assert order["cart_items"][0]["quantity"] == 2
    assert order["customer_id"] == fake_db.tables["customers"][0]["id"]

def test_reconcile_replay_is_idempotent(fake_db, sent_emails):
    event = make_completed_event()
    first = orders_service.reconcile_checkout_completed(event)
    second = orders_service.reconcile_checkout_completed(event)

    assert first.created is True
    assert second.created is False
    assert second.order["checkout_session_id"] == first.order["checkout_session_id"]
    assert len(fake_db.tables["orders"]) == 1
    # Un seul email pour la commande
    assert len(sent_emails) == 1

def test_reconcile_upserts_customer_by_email(fake_db, sent_emails):
    orders_service.reconcile_checkout_completed(make_completed_event(session_id="cs_test_one_11111111"))
    orders_service.reconcile_checkout_completed(make_completed_event(session_id="cs_test_two_22222222"))

    assert len(fake_db.tables["orders"]) == 2
    assert len(fake_db.tables["customers"]) == 1
    assert fake_db.tables["customers"][0]["phone_number"] == "+15555550100"

def test_reconcile_provider_total_wins_over_cart(fake_db, sent_emails):
    # Code promo: Stripe encaisse moins que le total du panier
    result = orders_service.reconcile_checkout_completed(make_completed_event(amount_total=30000))
    assert result.created is True
    assert fake_db.tables["orders"][0]["total_amount"] == 30000

def test_reconcile_without_cart_metadata_fails(fake_db):
    event = make_completed_event(cart_items=[])
    with pytest.raises(ReconciliationError) as exc:
        orders_service.reconcile_checkout_completed(event)
    assert exc.value.session_id == "cs_test_abcdefgh12345678"
    assert fake_db.tables.get("orders", []) == []

def test_reconcile_without_email_fails(fake_db):
    event = make_completed_event()
    session = event["data"]["object"]
    session["customer_details"]["email"] = None
    with pytest.raises(ReconciliationError):
        orders_service.reconcile_checkout_completed(event)

def test_reconcile_falls_back_to_customer_email(fake_db):
    event = make_completed_event()
    session = event["data"]["object"]
    session["customer_details"]["email"] = None
    session["customer_email"] = "fallback@example.com"
    result = orders_service.reconcile_checkout_completed(event)
    assert result.order["customer_email"] == "fallback@example.com"

def test_reconcile_notification_failure_keeps_order(fake_db, monkeypatch):
    def _boom(to, subject, html, api_key=None):
        raise RuntimeError("smtp down")
    monkeypatch.setattr("storefront.notifications.email.send_email", _boom)

    result = orders_service.reconcile_checkout_completed(make_completed_event())

    assert result.created is True
    assert result.notified is False
    assert len(fake_db.tables["orders"]) == 1

def test_get_order_returns_public_shape(fake_db):
    orders_service.reconcile_checkout_completed(make_completed_event())
    order = orders_service.get_order("cs_test_abcdefgh12345678")
    assert order["total_amount"] == 35998
    assert order["shipped_at"] is None
    assert "customer_id" not in order

def test_get_order_unknown_returns_none(fake_db):
    assert orders_service.get_order("cs_test_unknown") is None

def test_update_status_shipped_sets_shipped_at(fake_db):
    orders_service.reconcile_checkout_completed(make_completed_event())
    order = orders_service.update_order_status("cs_test_abcdefgh12345678", OrderStatus.SHIPPED, "1Z999")
    assert order["status"] == "SHIPPED"
    assert order["shipped_at"] is not None
    assert order["tracking_number"] == "1Z999"

def test_update_status_other_leaves_shipped_at_unset(fake_db):
    orders_service.reconcile_checkout_completed(make_completed_event())
    order = orders_service.update_order_status("cs_test_abcdefgh12345678", "PROCESSING", "ignored")
    assert order["status"] == "PROCESSING"
    assert order["shipped_at"] is None
    assert order["tracking_number"] is None

def test_update_status_unknown_session(fake_db):
    with pytest.raises(OrderNotFoundError):
        orders_service.update_order_status("cs_test_missing", OrderStatus.DELIVERED)

def test_order_number_is_last_eight_upper():
    assert order_number("cs_test_abcdefgh12345678") == "12345678"
    assert order_number("cs_test_a1b2c3d4e5f6g7h8") == "E5F6G7H8"
