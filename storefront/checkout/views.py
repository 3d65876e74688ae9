# module storefront.checkout.views
"""Endpoint de création de session Checkout.
- POST /api/stripe/checkout_sessions: valide le panier et renvoie {sessionId, url}.
- Les erreurs métier (400/500) sont rendues en {statusCode, message} par le handler global.
"""
import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from storefront.errors import CheckoutValidationError
from storefront.utils.rate_limit import optional_rate_limit
from storefront.checkout import service as checkout_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/stripe", tags=["Checkout API"])


@router.post("/checkout_sessions", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
async def create_checkout_session(request: Request):
    """
    Body attendu:
    {
      "amount": 359.98,
      "currency": "USD",
      "onCancelRedirectTo": "product/safeheat-propane-heater",
      "config": {"cartItems": "[{\\"productId\\": ..., \\"quantity\\": 2, \\"price\\": 179.99}]"}
    }
    """
    try:
        body: Dict[str, Any] = await request.json()
    except ValueError:
        raise CheckoutValidationError("Body JSON invalide")
    if not isinstance(body, dict):
        raise CheckoutValidationError("Body JSON invalide")

    origin = request.headers.get("origin") or str(request.base_url)
    result = await run_in_threadpool(
        checkout_service.create_checkout_session,
        amount=body.get("amount"),
        currency=body.get("currency"),
        cancel_path=body.get("onCancelRedirectTo"),
        config_map=body.get("config"),
        origin=origin,
    )
    return JSONResponse(result)
