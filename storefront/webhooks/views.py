# module storefront.webhooks.views
"""Webhook Stripe.
- POST /api/stripe/webhook: lit le body brut (la signature couvre les octets exacts),
  vérifie la signature puis délègue au service de dispatch.
- 400 texte si la signature est invalide, {"received": true} sinon.
"""
import logging

from fastapi import APIRouter, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, PlainTextResponse

from storefront.checkout import stripe_client
from storefront.errors import WebhookSignatureError
from storefront.webhooks import service as webhooks_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/stripe", tags=["Stripe Webhook"])


@router.post("/webhook", include_in_schema=False)
async def stripe_webhook(request: Request):
    payload = await request.body()
    sig_header = request.headers.get("stripe-signature")
    try:
        event = stripe_client.construct_event(payload, sig_header)
    except WebhookSignatureError as e:
        logger.warning("webhook signature rejected: %s", e.message)
        return PlainTextResponse(f"Webhook Error: {e.message}", status_code=400)

    logger.info("webhook received id=%s type=%s", event.get("id"), event.get("type"))
    try:
        await run_in_threadpool(webhooks_service.handle_event, event)
    except Exception:
        # Événement authentifié: toujours acquitté
        logger.exception("webhook dispatch failed id=%s type=%s", event.get("id"), event.get("type"))
    return JSONResponse({"received": True})
