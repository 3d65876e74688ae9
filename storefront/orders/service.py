"""Couche service des commandes.
Rôles:
- Réconcilier un événement checkout.session.completed vérifié en commande durable (PAID).
- Servir la lecture d'une commande par identifiant de session (page de confirmation).
- Appliquer les changements de statut explicites (expédition, livraison, remboursement...).
Idempotence:
- La livraison des webhooks Stripe est "au moins une fois": un second passage
  pour la même session ne crée ni doublon ni second email.
"""
from datetime import datetime, timezone
from typing import Any, Dict, NamedTuple, Optional
import logging

from pydantic import ValidationError

from storefront.checkout import cart as cart_logic
from storefront.errors import CheckoutValidationError, OrderNotFoundError, ReconciliationError
from storefront.notifications import service as notifications_service
from storefront.orders import repository
from storefront.orders.models import (
    CustomerDetails,
    OrderStatus,
    build_order_row,
    to_order_json,
)

logger = logging.getLogger(__name__)

class ReconcileResult(NamedTuple):
    order: Dict[str, Any]
    created: bool
    notified: bool = False

def _session_from_event(event: Dict[str, Any]) -> Dict[str, Any]:
    data = event.get("data") if isinstance(event, dict) else None
    session = data.get("object") if isinstance(data, dict) else None
    return session if isinstance(session, dict) else {}

def extract_customer(session: Dict[str, Any]) -> CustomerDetails:
    """
    Bloc client de la session: customer_details.{email,name,phone,address}.
    - email requis (fallback: session.customer_email)
    """
    details = dict(session.get("customer_details") or {})
    details["email"] = details.get("email") or session.get("customer_email")
    if not details["email"]:
        raise ReconciliationError("Email client absent de la session", session_id=session.get("id"))
    details["address"] = details.get("address") or {}
    try:
        return CustomerDetails.model_validate(details)
    except ValidationError as e:
        raise ReconciliationError(f"customer_details invalide: {e}", session_id=session.get("id"))

def reconcile_checkout_completed(event: Dict[str, Any]) -> ReconcileResult:
    """
    Transforme un checkout.session.completed en commande PAID.
    Étapes:
      1) Extraire session id, client, montant (fourni par Stripe), devise, articles (metadata.cartItems)
      2) Upsert du client par email
      3) Insertion de la commande (doublon => commande existante, created=False)
      4) Email de confirmation, uniquement pour une création effective
    Erreurs: ReconciliationError si métadonnées absentes/illisibles (commande non créée).
    """
    session = _session_from_event(event)
    session_id = session.get("id")
    if not session_id:
        raise ReconciliationError("Identifiant de session absent")

    metadata = session.get("metadata") or {}
    if not metadata.get("cartItems"):
        raise ReconciliationError("metadata.cartItems absent", session_id=session_id)
    try:
        items = cart_logic.parse_cart_items(metadata.get("cartItems"))
    except CheckoutValidationError as e:
        raise ReconciliationError(f"metadata.cartItems illisible: {e.message}", session_id=session_id)

    customer = extract_customer(session)
    total_amount = int(session.get("amount_total") or 0)
    if total_amount < 0:
        raise ReconciliationError(f"amount_total négatif: {total_amount}", session_id=session_id)
    currency = (session.get("currency") or "usd").upper()

    # Le total Stripe fait foi (codes promo possibles); l'écart est seulement signalé
    expected = cart_logic.cart_total(items)
    if expected != total_amount:
        logger.warning(
            "orders.reconcile total mismatch session_id=%s amount_total=%s cart_total=%s",
            session_id, total_amount, expected,
        )

    customer_row = repository.upsert_customer(customer.email, customer.name, customer.phone)
    row = build_order_row(
        session_id=session_id,
        customer=customer,
        customer_id=customer_row.get("id"),
        total_amount=total_amount,
        currency=currency,
        cart_items=cart_logic.serialize_cart_items(items),
        status=OrderStatus.PAID,
    )
    inserted = repository.insert_order(row)
    order = inserted.row or row
    if not inserted.created:
        logger.info("orders.reconcile already exists session_id=%s", session_id)
        return ReconcileResult(order, False)

    logger.info("orders.reconcile created session_id=%s email=%s total=%s", session_id, customer.email, total_amount)
    notified = notifications_service.send_order_confirmation(order)
    return ReconcileResult(order, True, notified)

def get_order(session_id: str) -> Optional[Dict[str, Any]]:
    """Commande au format JSON public, ou None si pas (encore) créée."""
    row = repository.get_order_by_session_id(session_id)
    return to_order_json(row) if row else None

def update_order_status(session_id: str, status: OrderStatus | str, tracking_number: Optional[str] = None) -> Dict[str, Any]:
    """
    Change le statut d'une commande existante.
    - SHIPPED: horodate shipped_at et enregistre le numéro de suivi s'il est fourni
    - autres statuts: shipped_at / tracking_number inchangés
    Soulève OrderNotFoundError si la session est inconnue.
    """
    status = OrderStatus(status)
    data: Dict[str, Any] = {"status": status.value}
    if status is OrderStatus.SHIPPED:
        data["shipped_at"] = datetime.now(timezone.utc).isoformat()
        if tracking_number:
            data["tracking_number"] = tracking_number

    row = repository.update_order(session_id, data)
    if not row:
        raise OrderNotFoundError("Order not found")
    logger.info("orders.update_status session_id=%s status=%s", session_id, status.value)
    return to_order_json(row)
