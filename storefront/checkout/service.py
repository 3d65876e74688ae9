"""
Cas d'usage 'checkout': valide la demande du client puis crée la session Stripe.
Aucune écriture locale: la commande n'existe qu'après le webhook.
"""
import logging
from typing import Any, Dict, Optional

from storefront import config
from storefront.errors import CheckoutValidationError
from . import cart as cart_logic
from . import stripe_client

logger = logging.getLogger(__name__)

SUCCESS_PATH = "/order/{CHECKOUT_SESSION_ID}"

def validate_amount(amount: Any) -> float:
    """Montant en unités majeures, borné inclusivement par CHECKOUT_MIN/MAX_AMOUNT."""
    if isinstance(amount, bool):
        raise CheckoutValidationError("Invalid amount.")
    try:
        value = float(amount)
    except (TypeError, ValueError):
        raise CheckoutValidationError("Invalid amount.")
    if not (config.CHECKOUT_MIN_AMOUNT <= value <= config.CHECKOUT_MAX_AMOUNT):
        raise CheckoutValidationError("Invalid amount.")
    return value

def validate_currency(currency: Optional[str]) -> str:
    code = (currency or config.CHECKOUT_CURRENCY).strip().upper()
    if code != config.CHECKOUT_CURRENCY:
        raise CheckoutValidationError(f"Devise non supportée: {code}")
    return code

def build_redirect_urls(origin: str, cancel_path: Optional[str]) -> Dict[str, str]:
    """
    success_url: {origin}/order/{CHECKOUT_SESSION_ID} (placeholder substitué par Stripe)
    cancel_url: {origin}/{cancel_path}, racine par défaut
    """
    base = (origin or config.APP_URL).rstrip("/")
    cancel = (cancel_path or "").strip().lstrip("/")
    return {
        "success_url": f"{base}{SUCCESS_PATH}",
        "cancel_url": f"{base}/{cancel}",
    }

def create_checkout_session(
    *,
    amount: Any,
    currency: Optional[str],
    cancel_path: Optional[str],
    config_map: Optional[Dict[str, Any]],
    origin: str,
) -> Dict[str, Any]:
    """
    Prépare et crée la session Checkout hébergée.
    Étapes:
      1) Valider le montant et la devise
      2) Décoder config.cartItems en CartItem (non vide)
      3) Construire line_items + metadata (config recopiée)
      4) Créer la session Stripe et renvoyer {sessionId, url}
    """
    validate_amount(amount)
    code = validate_currency(currency)
    if not isinstance(config_map, dict):
        raise CheckoutValidationError("config manquante")
    items = cart_logic.parse_cart_items(config_map.get("cartItems"))

    urls = build_redirect_urls(origin, cancel_path)
    session = stripe_client.create_session(
        line_items=cart_logic.to_line_items(items, code),
        success_url=urls["success_url"],
        cancel_url=urls["cancel_url"],
        metadata=cart_logic.make_metadata(config_map),
    )
    logger.info("checkout.session created id=%s items=%s", session["id"], len(items))
    return {"sessionId": session["id"], "url": session["url"]}
