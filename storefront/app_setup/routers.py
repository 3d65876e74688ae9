"""
Registre central des routers.
- API: checkout, webhook Stripe, commandes, produits
- Health
"""
from fastapi import FastAPI
from storefront.checkout import views as checkout_views
from storefront.webhooks import views as webhooks_views
from storefront.orders import views as orders_views
from storefront.products import views as products_views
from storefront.health.router import router as health_router

def register_routers(app: FastAPI) -> None:
    app.include_router(checkout_views.router)
    app.include_router(webhooks_views.router)
    app.include_router(orders_views.router)
    app.include_router(products_views.router)
    app.include_router(health_router)
