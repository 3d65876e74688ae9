"""
Notification de confirmation de commande.
- Best-effort: la commande est la source de vérité, l'email peut échouer sans rien annuler.
"""
from datetime import datetime
from typing import Any, Dict, Optional
import logging

from storefront import config
from storefront.notifications import email as email_client
from storefront.orders.models import order_number

logger = logging.getLogger(__name__)

def format_order_date(value: Optional[Any] = None) -> str:
    """Date lisible, ex: 'October 19, 2026' (created_at ISO ou maintenant)."""
    if isinstance(value, str) and value:
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            value = None
    if not isinstance(value, datetime):
        value = datetime.now()
    return f"{value:%B} {value.day}, {value.year}"

def send_order_confirmation(order: Dict[str, Any]) -> bool:
    """
    Envoie l'email de confirmation pour une commande fraîchement créée.
    Retourne True si l'API a accepté l'envoi, False sinon (erreur journalisée, jamais levée).
    """
    session_id = order.get("checkout_session_id") or ""
    customer_email = order.get("customer_email") or ""
    number = order_number(session_id)
    total = int(order.get("total_amount") or 0) / 100
    try:
        html = email_client.render_order_confirmation(
            customer_email=customer_email,
            display_name=order.get("customer_name") or customer_email.split("@")[0],
            order_number=number,
            order_date=format_order_date(order.get("created_at")),
            order_items=order.get("cart_items") or [],
            subtotal=total,
            total=total,
            order_url=f"{config.APP_URL}/order/{session_id}",
        )
        email_client.send_email(customer_email, f"Order Confirmation - Order #{number}", html)
    except Exception:
        logger.exception("notifications.order_confirmation failed session_id=%s email=%s", session_id, customer_email)
        return False
    logger.info("notifications.order_confirmation sent session_id=%s email=%s", session_id, customer_email)
    return True
