from typing import Optional
from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select
from app.database import get_session
from app.models.product import Product
from app.utils.cache_helpers import catalog_cache

router = APIRouter()

CATALOG_KEY = "products"


def product_to_dict(p: Product) -> dict:
    return {
        "id": p.id,
        "name": p.name,
        "price": p.price,
        "description": p.description,
        "category": p.category,
        "image_url": p.image_url,
        "is_active": p.is_active,
        "created_at": p.created_at,
    }


def load_catalog(session: Session):
    products = session.exec(
        select(Product)
        .where(Product.is_active == True)  # noqa: E712
        .order_by(Product.created_at.desc())
    ).all()
    return [product_to_dict(p) for p in products]


@router.get("")
def list_products(
    category: Optional[str] = None,
    refresh: bool = False,
    session: Session = Depends(get_session),
):
    products = catalog_cache.get(
        CATALOG_KEY,
        lambda: load_catalog(session),
        refresh=refresh,
    )

    if category:
        products = [p for p in products if (p["category"] or "").lower() == category.lower()]

    return {"total_items": len(products), "results": products}


@router.get("/{product_id}")
def get_product(product_id: str, session: Session = Depends(get_session)):
    product = session.get(Product, product_id)
    if not product or not product.is_active:
        raise HTTPException(404, "Product not found")
    return product_to_dict(product)
