"""
Accès aux données 'orders' / 'customers' / 'webhook_failures' (Supabase).
- Écritures via le client service-role (webhook sans utilisateur connecté).
- Idempotence: la contrainte unique orders.checkout_session_id fait foi;
  un doublon (23505) est renvoyé comme "déjà existante", pas comme une erreur.
"""
from typing import Any, Dict, NamedTuple, Optional
import logging

from postgrest.exceptions import APIError

import storefront.infra.supabase_client as supabase_client
from storefront.errors import StorageError

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"

class InsertResult(NamedTuple):
    row: Optional[Dict[str, Any]]
    created: bool

def _error_code(e: APIError) -> Optional[str]:
    code = getattr(e, "code", None)
    if not code and e.args and isinstance(e.args[0], dict):
        code = e.args[0].get("code")
    return code

def _first(res) -> Optional[Dict[str, Any]]:
    data = getattr(res, "data", None) or []
    if isinstance(data, list):
        return data[0] if data else None
    if isinstance(data, dict):
        return data
    return None

# module storefront.orders.repository
def upsert_customer(email: str, name: Optional[str], phone: Optional[str]) -> Dict[str, Any]:
    """
    Crée ou met à jour le client (clé: email) en une seule requête upsert.
    - name: nom fourni ou partie locale de l'email
    """
    payload = {
        "email": email,
        "name": name or email.split("@")[0],
        "phone_number": phone,
    }
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("customers")
            .upsert(payload, on_conflict="email")
            .execute()
        )
    except Exception as e:
        logger.exception("orders.repository.upsert_customer failed email=%s", email)
        raise StorageError(f"Upsert client impossible: {e}") from e
    return _first(res) or payload

def insert_order(row: Dict[str, Any]) -> InsertResult:
    """
    Insère la commande; un doublon sur checkout_session_id relit la ligne existante.
    Retour: InsertResult(row, created)
    """
    session_id = row.get("checkout_session_id")
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("orders")
            .insert(row)
            .execute()
        )
        return InsertResult(_first(res) or row, True)
    except APIError as e:
        if _error_code(e) == UNIQUE_VIOLATION:
            logger.info("orders.repository.insert_order duplicate session_id=%s", session_id)
            return InsertResult(get_order_by_session_id(session_id), False)
        logger.exception("orders.repository.insert_order failed session_id=%s", session_id)
        raise StorageError(f"Insertion commande impossible: {e}") from e
    except Exception as e:
        logger.exception("orders.repository.insert_order failed session_id=%s", session_id)
        raise StorageError(f"Insertion commande impossible: {e}") from e

def get_order_by_session_id(session_id: str) -> Optional[Dict[str, Any]]:
    """
    Lecture d'une commande par identifiant de session Stripe.
    - client service-role: la table orders (données personnelles) reste fermée au rôle anon (RLS)
    - None si aucune ligne (cas normal juste après la redirection)
    - StorageError si Supabase échoue
    """
    if not session_id:
        return None
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("orders")
            .select("*")
            .eq("checkout_session_id", session_id)
            .limit(1)
            .execute()
        )
    except Exception as e:
        logger.exception("orders.repository.get_order_by_session_id failed session_id=%s", session_id)
        raise StorageError(f"Lecture commande impossible: {e}") from e
    return _first(res)

def update_order(session_id: str, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Met à jour la commande; None si aucune ligne ne correspond."""
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("orders")
            .update(data)
            .eq("checkout_session_id", session_id)
            .execute()
        )
    except Exception as e:
        logger.exception("orders.repository.update_order failed session_id=%s", session_id)
        raise StorageError(f"Mise à jour commande impossible: {e}") from e
    return _first(res)

def record_failed_event(
    *,
    event_id: Optional[str],
    event_type: Optional[str],
    session_id: Optional[str],
    error: str,
    payload: Dict[str, Any],
) -> bool:
    """
    Trace un événement payé mais non réconcilié (rejeu manuel).
    Best-effort: un échec ici est journalisé, jamais propagé.
    """
    try:
        (
            supabase_client.get_service_supabase()
            .table("webhook_failures")
            .insert({
                "event_id": event_id,
                "event_type": event_type,
                "checkout_session_id": session_id,
                "error": error,
                "payload": payload,
            })
            .execute()
        )
        return True
    except Exception:
        logger.exception("orders.repository.record_failed_event failed event_id=%s session_id=%s", event_id, session_id)
        return False
