"""
Emails transactionnels: rendu Jinja2 + envoi via l'API HTTP Resend.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional
import logging

import httpx
from jinja2 import Environment, FileSystemLoader, select_autoescape

from storefront import config

logger = logging.getLogger(__name__)

_env = Environment(
    loader=FileSystemLoader(str(config.TEMPLATES_DIR)),
    autoescape=select_autoescape(["html"]),
)
_env.filters["money"] = lambda value: f"${float(value or 0):,.2f}"

class EmailDeliveryError(Exception):
    pass

def render_order_confirmation(
    *,
    customer_email: str,
    display_name: str,
    order_number: str,
    order_date: str,
    order_items: List[Dict[str, Any]],
    subtotal: float,
    total: float,
    order_url: str,
) -> str:
    return _env.get_template("order_confirmation.html").render(
        store_name=config.STORE_NAME,
        app_url=config.APP_URL,
        product_url=f"{config.APP_URL}/product/{config.FEATURED_PRODUCT_SLUG}",
        customer_email=customer_email,
        display_name=display_name,
        order_number=order_number,
        order_date=order_date,
        order_items=order_items,
        subtotal=subtotal,
        total=total,
        order_url=order_url,
        year=datetime.now().year,
    )

def send_email(to: str, subject: str, html: str, api_key: Optional[str] = None) -> Dict[str, Any]:
    """
    POST sur l'API Resend (httpx, timeout 10s).
    Soulève EmailDeliveryError: clé absente, erreur réseau ou réponse hors 2xx.
    """
    api_key = config.RESEND_API_KEY if api_key is None else api_key
    if not api_key:
        raise EmailDeliveryError("RESEND_API_KEY manquant")
    headers = {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
    }
    payload = {"from": config.EMAIL_FROM, "to": [to], "subject": subject, "html": html}
    try:
        resp = httpx.post(config.RESEND_API_URL, json=payload, headers=headers, timeout=10)
    except httpx.HTTPError as e:
        raise EmailDeliveryError(f"Envoi email échoué: {e}") from e
    if not 200 <= resp.status_code < 300:
        logger.error("notifications.email.send_email failed: status=%s body=%s", resp.status_code, resp.text)
        raise EmailDeliveryError(f"Envoi email refusé: status={resp.status_code}")
    try:
        return resp.json()
    except ValueError:
        return {}
