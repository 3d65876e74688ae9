"""
Adaptateur Stripe: centralise les appels et la configuration Stripe.
"""
import json
import logging
from typing import Any, Dict, List

import stripe

from storefront import config
from storefront.errors import PaymentProviderError, WebhookSignatureError

logger = logging.getLogger(__name__)

# module storefront.checkout.stripe_client
def require_stripe():
    """
    Prépare et retourne le module stripe prêt à l’emploi.
    - Configure stripe.api_key via STRIPE_SECRET_KEY si disponible.
    """
    if config.STRIPE_SECRET_KEY:
        stripe.api_key = config.STRIPE_SECRET_KEY
    return stripe

def create_session(
    *,
    line_items: List[Dict[str, Any]],
    success_url: str,
    cancel_url: str,
    metadata: Dict[str, str],
) -> Dict[str, Any]:
    """
    Crée une session Stripe Checkout hébergée.
    - Adresse de facturation et téléphone obligatoires.
    - Moyen de paiement conservé pour un achat ultérieur (setup_future_usage=on_session).
    - metadata: config du panier, relue par le webhook.
    Retour: {"id": "cs_test_...", "url": "https://checkout.stripe.com/..."}
    """
    require_stripe()
    try:
        session = stripe.checkout.Session.create(
            mode="payment",
            submit_type="pay",
            payment_method_types=["card"],
            line_items=line_items,
            billing_address_collection="required",
            phone_number_collection={"enabled": True},
            customer_creation="always",
            payment_intent_data={"setup_future_usage": "on_session"},
            allow_promotion_codes=True,
            custom_text={"submit": {"message": "Complete your order!"}},
            success_url=success_url,
            cancel_url=cancel_url,
            metadata=metadata,
        )
    except Exception as e:
        logger.exception("stripe_client.create_session failed")
        raise PaymentProviderError(str(e) or "Stripe session creation failed") from e

    session_id = getattr(session, "id", None)
    url = getattr(session, "url", None)
    if not session_id or not url:
        raise PaymentProviderError("Session Stripe invalide")
    return {"id": session_id, "url": url}

def construct_event(payload: bytes, sig_header: str | None, secret: str | None = None) -> Dict[str, Any]:
    """
    Vérifie la signature d’un événement webhook puis décode l’enveloppe.
    - payload: body brut, exactement tel que reçu (la signature couvre ces octets)
    - sig_header: en-tête Stripe-Signature
    - secret: STRIPE_WEBHOOK_SECRET par défaut; absent => refus
    Soulève WebhookSignatureError si la vérification échoue.
    """
    secret = config.STRIPE_WEBHOOK_SECRET if secret is None else secret
    if not secret:
        raise WebhookSignatureError("STRIPE_WEBHOOK_SECRET manquant")
    if not sig_header:
        raise WebhookSignatureError("En-tête stripe-signature manquant")
    try:
        text = payload.decode("utf-8") if isinstance(payload, bytes) else payload
        stripe.WebhookSignature.verify_header(text, sig_header, secret, stripe.Webhook.DEFAULT_TOLERANCE)
    except Exception as e:
        raise WebhookSignatureError(str(e) or "Signature invalide") from e
    try:
        event = json.loads(text)
    except ValueError as e:
        raise WebhookSignatureError(f"Payload invalide: {e}") from e
    if not isinstance(event, dict):
        raise WebhookSignatureError("Payload invalide")
    return event
