# module storefront.orders.views

"""Endpoints Commandes.
- GET /api/orders/{session_id}: lecture pour la page de confirmation (404 tant que le webhook n'est pas passé).
- PATCH /api/orders/{session_id}/status: changement de statut (back-office, jeton admin).
"""
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
import logging

from storefront.orders import service as orders_service
from storefront.orders.models import StatusUpdateRequest
from storefront.utils.security import require_admin_token

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/orders", tags=["Orders API"])


@router.get("/{session_id}")
def get_order(session_id: str):
    """Commande par identifiant de session Stripe.
    - 200: JSON de la commande
    - 404: {"error": "Order not found"}; le client peut réessayer (webhook pas encore traité)
    """
    order = orders_service.get_order(session_id)
    if not order:
        return JSONResponse(status_code=404, content={"error": "Order not found"})
    return JSONResponse(order)


@router.patch("/{session_id}/status", dependencies=[Depends(require_admin_token)])
def update_order_status(session_id: str, body: StatusUpdateRequest):
    """Met à jour le statut; SHIPPED horodate l'expédition et garde le numéro de suivi."""
    order = orders_service.update_order_status(session_id, body.status, body.trackingNumber)
    return JSONResponse(order)
