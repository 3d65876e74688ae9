"""
ASGI entrypoint: expose `app` pour les process managers / déploiements.

- En production, un process manager (ex: gunicorn -k uvicorn.workers.UvicornWorker)
  importe `storefront.asgi:app`.
"""

from storefront.app_setup.factory import create_app

app = create_app()
