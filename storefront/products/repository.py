"""
Accès aux données 'products' (lecture seule) + cache par slug.
- Colonnes snake_case en base, forme camelCase côté API.
"""
from typing import Any, Dict, List, Optional
import logging

import storefront.infra.supabase_client as supabase_client
from storefront.config import PRODUCT_CACHE_TTL_SECONDS
from storefront.errors import StorageError
from storefront.products.cache import TTLCache

logger = logging.getLogger(__name__)

product_cache = TTLCache(PRODUCT_CACHE_TTL_SECONDS)

def to_product(row: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": row.get("id"),
        "name": row.get("name"),
        "slug": row.get("slug"),
        "tagline": row.get("tagline"),
        "description": row.get("description"),
        "price": float(row.get("price") or 0),
        "originalPrice": row.get("original_price"),
        "currency": row.get("currency") or "USD",
        "images": row.get("images") or [],
        "features": row.get("features") or [],
        "specifications": row.get("specifications") or [],
        "inStock": bool(row.get("in_stock")),
        "badge": row.get("badge"),
        "safetyFeatures": row.get("safety_features") or [],
        "certifications": row.get("certifications") or [],
    }

def fetch_product_by_slug(slug: str) -> Optional[Dict[str, Any]]:
    logger.info("products.repository fetching from DB slug=%s", slug)
    try:
        res = (
            supabase_client.get_supabase()
            .table("products")
            .select("*")
            .eq("slug", slug)
            .limit(1)
            .execute()
        )
    except Exception as e:
        logger.exception("products.repository.fetch_product_by_slug failed slug=%s", slug)
        raise StorageError(f"Lecture produit impossible: {e}") from e
    rows = res.data or []
    return to_product(rows[0]) if rows else None

def get_product(slug: str) -> Optional[Dict[str, Any]]:
    """Produit par slug, servi depuis le cache tant qu'il est frais."""
    if not slug:
        return None
    return product_cache.get_or_load(slug, fetch_product_by_slug)

def list_products() -> List[Dict[str, Any]]:
    """Produits en stock (non mis en cache)."""
    try:
        res = (
            supabase_client.get_supabase()
            .table("products")
            .select("*")
            .eq("in_stock", True)
            .execute()
        )
    except Exception as e:
        logger.exception("products.repository.list_products failed")
        raise StorageError(f"Lecture produits impossible: {e}") from e
    return [to_product(r) for r in (res.data or [])]

def clear_product_cache(slug: Optional[str] = None) -> None:
    product_cache.invalidate(slug)
