# -------- ADMIN PRODUCTS --------
import logging
from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select
from app.database import get_session
from app.dependencies.admin import require_admin
from app.dependencies.session_context import SessionContext
from app.models.product import Product
from app.routes.products import CATALOG_KEY, product_to_dict
from app.schemas.product_schemas import ProductCreate, ProductUpdate
from app.utils.cache_helpers import catalog_cache
from app.utils.pagination import paginate

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("")
def list_all_products(
    page: int = 1,
    limit: int = 20,
    search: str | None = None,
    session: Session = Depends(get_session),
    _: SessionContext = Depends(require_admin),
):
    query = select(Product)
    if search:
        query = query.where(Product.name.ilike(f"%{search}%"))
    query = query.order_by(Product.created_at.desc())

    return paginate(
        session=session, query=query, page=page, limit=limit, serializer=product_to_dict
    )


@router.post("", status_code=201)
def create_product(
    data: ProductCreate,
    session: Session = Depends(get_session),
    _: SessionContext = Depends(require_admin),
):
    product = Product(**data.model_dump())
    session.add(product)
    session.commit()
    session.refresh(product)

    catalog_cache.clear(CATALOG_KEY)
    logger.info(f"Product {product.id} created")
    return product_to_dict(product)


@router.put("/{product_id}")
def update_product(
    product_id: str,
    data: ProductUpdate,
    session: Session = Depends(get_session),
    _: SessionContext = Depends(require_admin),
):
    product = session.get(Product, product_id)
    if not product:
        raise HTTPException(404, "Product not found")

    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(product, field, value)
    product.updated_at = datetime.utcnow()

    session.add(product)
    session.commit()
    session.refresh(product)

    catalog_cache.clear(CATALOG_KEY)
    return product_to_dict(product)


@router.delete("/{product_id}")
def delete_product(
    product_id: str,
    session: Session = Depends(get_session),
    _: SessionContext = Depends(require_admin),
):
    product = session.get(Product, product_id)
    if not product:
        raise HTTPException(404, "Product not found")

    session.delete(product)
    session.commit()

    catalog_cache.clear(CATALOG_KEY)
    logger.info(f"Product {product_id} deleted")
    return {"message": "Product deleted", "product_id": product_id}
