"""
Dispatch des événements Stripe vérifiés.
- checkout.session.completed -> réconciliation (commande + email)
- payment_intent.* / charge.succeeded -> journalisés seulement
- autre -> ignoré, journalisé comme non géré
Un échec de réconciliation est journalisé et tracé (webhook_failures) mais n'est
jamais renvoyé à Stripe: l'événement est acquitté une fois la signature validée.
"""
from typing import Any, Dict
import json
import logging

from storefront.errors import StorefrontError
from storefront.orders import repository as orders_repository
from storefront.orders import service as orders_service
from storefront.webhooks.events import INFORMATIONAL, EventKind, event_object

logger = logging.getLogger(__name__)

def handle_event(event: Dict[str, Any]) -> Dict[str, Any]:
    """
    Traite un événement déjà vérifié.
    Retour: {"kind": <EventKind>, "outcome": "created"|"duplicate"|"logged"|"ignored"|"failed"}
    """
    kind = EventKind.from_type((event or {}).get("type"))
    obj = event_object(event)

    if kind is EventKind.CHECKOUT_SESSION_COMPLETED:
        return {"kind": kind, "outcome": _reconcile(event)}

    if kind in INFORMATIONAL:
        if kind is EventKind.PAYMENT_INTENT_FAILED:
            last_error = obj.get("last_payment_error")
            error = last_error.get("message") if isinstance(last_error, dict) else last_error
            logger.warning("webhook payment failed id=%s error=%s", obj.get("id"), error)
        else:
            logger.info("webhook %s id=%s status=%s", kind.value, obj.get("id"), obj.get("status"))
        return {"kind": kind, "outcome": "logged"}

    logger.warning("webhook unhandled event type=%s id=%s", (event or {}).get("type"), (event or {}).get("id"))
    return {"kind": kind, "outcome": "ignored"}

def _reconcile(event: Dict[str, Any]) -> str:
    session_id = event_object(event).get("id")
    try:
        result = orders_service.reconcile_checkout_completed(event)
    except Exception as e:
        # Argent encaissé sans commande: détail complet pour rejeu manuel
        message = e.message if isinstance(e, StorefrontError) else str(e)
        logger.exception(
            "webhook reconciliation FAILED session_id=%s event_id=%s error=%s raw_event=%s",
            session_id, (event or {}).get("id"), message, json.dumps(event, default=str),
        )
        orders_repository.record_failed_event(
            event_id=(event or {}).get("id"),
            event_type=(event or {}).get("type"),
            session_id=session_id,
            error=message,
            payload=event,
        )
        return "failed"
    return "created" if result.created else "duplicate"
