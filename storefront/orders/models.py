# module storefront.orders.models
"""Types de la commande.
- OrderStatus: énumération persistée telle quelle (PENDING ... REFUNDED).
- CustomerDetails: bloc client/adresse extrait de la session Stripe.
- ORDER_FIELDS: forme JSON publique d'une commande (lecture page de confirmation).
"""
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    PROCESSING = "PROCESSING"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"
    REFUNDED = "REFUNDED"


class BillingAddress(BaseModel):
    line1: Optional[str] = None
    line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None


class CustomerDetails(BaseModel):
    email: str
    name: Optional[str] = None
    phone: Optional[str] = None
    address: BillingAddress = Field(default_factory=BillingAddress)

    @property
    def display_name(self) -> str:
        return self.name or self.email.split("@")[0]


class StatusUpdateRequest(BaseModel):
    status: OrderStatus
    trackingNumber: Optional[str] = None


ORDER_FIELDS = (
    "id",
    "checkout_session_id",
    "created_at",
    "customer_email",
    "customer_name",
    "customer_phone",
    "billing_address_line1",
    "billing_address_line2",
    "billing_address_city",
    "billing_address_state",
    "billing_address_postal_code",
    "billing_address_country",
    "total_amount",
    "currency",
    "status",
    "cart_items",
    "shipped_at",
    "tracking_number",
)


def build_order_row(
    *,
    session_id: str,
    customer: CustomerDetails,
    customer_id: Any,
    total_amount: int,
    currency: str,
    cart_items: List[Dict[str, Any]],
    status: OrderStatus = OrderStatus.PAID,
) -> Dict[str, Any]:
    """Ligne 'orders' prête à insérer (adresse aplatie en colonnes billing_address_*)."""
    address = customer.address
    return {
        "checkout_session_id": session_id,
        "customer_id": customer_id,
        "status": status.value,
        "customer_email": customer.email,
        "customer_name": customer.name,
        "customer_phone": customer.phone,
        "billing_address_line1": address.line1,
        "billing_address_line2": address.line2,
        "billing_address_city": address.city,
        "billing_address_state": address.state,
        "billing_address_postal_code": address.postal_code,
        "billing_address_country": address.country,
        "total_amount": int(total_amount),
        "currency": currency,
        "cart_items": cart_items,
    }


def to_order_json(row: Dict[str, Any]) -> Dict[str, Any]:
    """Normalise une ligne 'orders' vers la forme JSON publique (champs absents => None)."""
    return {field: row.get(field) for field in ORDER_FIELDS}


def order_number(session_id: str) -> str:
    """Référence courte affichée au client: 8 derniers caractères, en majuscules."""
    return (session_id or "")[-8:].upper()
