"""
Module 'checkout' (feature-first): point d'entrée public.
Réunit logique panier, client Stripe et création de session.
"""

from .cart import CartItem, parse_cart_items, cart_total, to_line_items, make_metadata
from .stripe_client import require_stripe, create_session, construct_event
from .service import create_checkout_session

__all__ = [
    # cart
    "CartItem",
    "parse_cart_items",
    "cart_total",
    "to_line_items",
    "make_metadata",
    # stripe
    "require_stripe",
    "create_session",
    "construct_event",
    # services
    "create_checkout_session",
]
