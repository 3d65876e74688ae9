import secrets
from fastapi import Request, HTTPException
from storefront import config

ADMIN_TOKEN_HEADER = "X-Admin-Token"

def require_admin_token(request: Request) -> None:
    """
    Garde des opérations back-office (changement de statut).
    - 403 si ADMIN_API_TOKEN n'est pas configuré (opérations désactivées)
    - 401 si l'en-tête est absent ou ne correspond pas (comparaison à temps constant)
    """
    expected = config.ADMIN_API_TOKEN
    if not expected:
        raise HTTPException(status_code=403, detail="Accès interdit")
    provided = request.headers.get(ADMIN_TOKEN_HEADER, "")
    if not provided or not secrets.compare_digest(provided, expected):
        raise HTTPException(status_code=401, detail="Non authentifié")
