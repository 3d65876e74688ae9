import json
from unittest.mock import MagicMock

import pytest

from storefront.checkout import service as checkout_service
from storefront.errors import CheckoutValidationError

CART = json.dumps([{"productId": "prod_1", "productName": "SafeHeat", "quantity": 1, "price": 179.99}])

@pytest.mark.parametrize("amount", [0.01, 0.49, 100000.01, 200000, -5, "abc", None, True])
def test_validate_amount_rejects_out_of_bounds(amount):
    with pytest.raises(CheckoutValidationError) as exc:
        checkout_service.validate_amount(amount)
    assert exc.value.message == "Invalid amount."
    assert exc.value.status_code == 400

@pytest.mark.parametrize("amount", [0.50, 1, 359.98, 100000])
def test_validate_amount_accepts_inclusive_bounds(amount):
    assert checkout_service.validate_amount(amount) == float(amount)

def test_validate_currency_defaults_and_normalizes():
    assert checkout_service.validate_currency(None) == "USD"
    assert checkout_service.validate_currency("usd") == "USD"
    with pytest.raises(CheckoutValidationError):
        checkout_service.validate_currency("EUR")

def test_build_redirect_urls():
    urls = checkout_service.build_redirect_urls("https://shop.test/", "/product/safeheat")
    assert urls["success_url"] == "https://shop.test/order/{CHECKOUT_SESSION_ID}"
    assert urls["cancel_url"] == "https://shop.test/product/safeheat"

def test_build_redirect_urls_defaults_to_root():
    urls = checkout_service.build_redirect_urls("https://shop.test", None)
    assert urls["cancel_url"] == "https://shop.test/"

def test_create_checkout_session_calls_stripe(monkeypatch):
    # Arrange
    fake_create = MagicMock(return_value={"id": "cs_test_1", "url": "https://checkout.stripe.com/pay/cs_test_1"})
    monkeypatch.setattr("storefront.checkout.service.stripe_client.create_session", fake_create)
    # Act
    result = checkout_service.create_checkout_session(
        amount=179.99,
        currency="USD",
        cancel_path="product/safeheat",
        config_map={"cartItems": CART},
        origin="https://shop.test",
    )
    # Assert
    assert result == {"sessionId": "cs_test_1", "url": "https://checkout.stripe.com/pay/cs_test_1"}
    kwargs = fake_create.call_args.kwargs
    assert kwargs["metadata"] == {"cartItems": CART}
    assert kwargs["line_items"][0]["price_data"]["unit_amount"] == 17999
    assert kwargs["cancel_url"] == "https://shop.test/product/safeheat"

def test_create_checkout_session_invalid_amount_never_reaches_stripe(monkeypatch):
    fake_create = MagicMock()
    monkeypatch.setattr("storefront.checkout.service.stripe_client.create_session", fake_create)
    with pytest.raises(CheckoutValidationError):
        checkout_service.create_checkout_session(
            amount=0.01, currency="USD", cancel_path=None,
            config_map={"cartItems": CART}, origin="https://shop.test",
        )
    fake_create.assert_not_called()

@pytest.mark.parametrize("config_map", [None, "cartItems", {}, {"cartItems": "[]"}])
def test_create_checkout_session_requires_cart(monkeypatch, config_map):
    fake_create = MagicMock()
    monkeypatch.setattr("storefront.checkout.service.stripe_client.create_session", fake_create)
    with pytest.raises(CheckoutValidationError):
        checkout_service.create_checkout_session(
            amount=10, currency="USD", cancel_path=None, config_map=config_map, origin="https://shop.test",
        )
    fake_create.assert_not_called()
