"""
Types d'événements Stripe connus du webhook (ensemble fermé + UNKNOWN).
"""
from enum import Enum
from typing import Any, Dict

class EventKind(str, Enum):
    CHECKOUT_SESSION_COMPLETED = "checkout.session.completed"
    PAYMENT_INTENT_SUCCEEDED = "payment_intent.succeeded"
    PAYMENT_INTENT_FAILED = "payment_intent.payment_failed"
    CHARGE_SUCCEEDED = "charge.succeeded"
    UNKNOWN = "unknown"

    @classmethod
    def from_type(cls, event_type: str | None) -> "EventKind":
        try:
            return cls(event_type)
        except ValueError:
            return cls.UNKNOWN

# Événements journalisés uniquement, sans effet sur les commandes
INFORMATIONAL = frozenset({
    EventKind.PAYMENT_INTENT_SUCCEEDED,
    EventKind.PAYMENT_INTENT_FAILED,
    EventKind.CHARGE_SUCCEEDED,
})

def event_object(event: Dict[str, Any]) -> Dict[str, Any]:
    """data.object de l'enveloppe; {} si absent ou d'une autre forme qu'un objet."""
    data = event.get("data") if isinstance(event, dict) else None
    obj = data.get("object") if isinstance(data, dict) else None
    return obj if isinstance(obj, dict) else {}
