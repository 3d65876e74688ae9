"""
Logique panier pure (pas de Stripe, pas de DB).
Le panier est tenu par le client; le serveur n'en vérifie que la forme.
"""
import json
from typing import Any, Dict, List

from pydantic import BaseModel, Field, ValidationError

from storefront.errors import CheckoutValidationError

# module storefront.checkout.cart
METADATA_VALUE_MAX = 500

class CartItem(BaseModel):
    productId: str = Field(min_length=1)
    productName: str = Field(min_length=1)
    quantity: int = Field(ge=1)
    price: float = Field(ge=0)

    @property
    def unit_amount(self) -> int:
        """Prix unitaire en centimes."""
        return to_minor_units(self.price)


def to_minor_units(amount: float) -> int:
    return int(round(float(amount) * 100))


def parse_cart_items(raw: Any) -> List[CartItem]:
    """
    Décode la liste sérialisée du panier (config.cartItems / metadata.cartItems).
    - Accepte une chaîne JSON ou une liste déjà décodée.
    - Soulève CheckoutValidationError si illisible, mal formée ou vide.
    """
    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except ValueError:
            raise CheckoutValidationError("cartItems n'est pas un JSON valide")
    if not isinstance(raw, list) or not raw:
        raise CheckoutValidationError("Panier vide ou invalide")
    try:
        return [CartItem.model_validate(it) for it in raw]
    except ValidationError as e:
        raise CheckoutValidationError(f"Article de panier invalide: {e.errors()[0].get('msg')}")


def cart_total(items: List[CartItem]) -> int:
    """Total du panier en centimes (prix unitaire arrondi puis multiplié)."""
    return sum(it.unit_amount * it.quantity for it in items)


def to_line_items(items: List[CartItem], currency: str) -> List[Dict[str, Any]]:
    """
    Construit les line_items Stripe: un couple price_data/quantity par article.
    """
    return [
        {
            "quantity": it.quantity,
            "price_data": {
                "currency": currency.lower(),
                "unit_amount": it.unit_amount,
                "product_data": {
                    "name": it.productName,
                    "description": f"Quantity: {it.quantity}",
                },
            },
        }
        for it in items
    ]


def make_metadata(config: Dict[str, Any]) -> Dict[str, str]:
    """
    Recopie la config du client en métadonnées Stripe (valeurs string uniquement).
    cartItems voyage ainsi jusqu'au webhook.
    - Stripe limite chaque valeur à 500 caractères: au-delà, on refuse plutôt que tronquer.
    """
    metadata: Dict[str, str] = {}
    for key, value in (config or {}).items():
        if isinstance(value, (list, dict)):
            value = json.dumps(value)
        value = str(value)
        if len(value) > METADATA_VALUE_MAX:
            raise CheckoutValidationError(f"Métadonnée '{key}' trop longue pour Stripe")
        metadata[str(key)] = value
    return metadata


def serialize_cart_items(items: List[CartItem]) -> List[Dict[str, Any]]:
    return [it.model_dump() for it in items]
