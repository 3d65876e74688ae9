"""Endpoints Produits (vitrine).
- GET /api/products: produits en stock
- GET /api/products/{slug}: fiche produit (cache TTL), 404 si introuvable
"""
from fastapi import APIRouter, HTTPException
from fastapi.responses import JSONResponse

from storefront.products import repository as products_repository

router = APIRouter(prefix="/api/products", tags=["Products API"])

@router.get("")
def list_products():
    return JSONResponse({"products": products_repository.list_products()})

@router.get("/{slug}")
def get_product(slug: str):
    product = products_repository.get_product(slug)
    if not product:
        raise HTTPException(status_code=404, detail="Produit introuvable")
    return JSONResponse(product)
