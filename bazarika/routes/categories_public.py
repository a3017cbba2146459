from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from bazarika.database import get_session
from bazarika.models.category import Category
from bazarika.models.product import Product
from bazarika.services.catalog_service import apply_price_range, apply_sort, serialize_product

router = APIRouter()


# ---------- LIST ALL CATEGORIES ----------
@router.get("/", summary="List all categories")
def list_categories_public(session: Session = Depends(get_session)):
    categories = session.exec(select(Category).order_by(Category.name)).all()
    return {
        "total": len(categories),
        "categories": categories
    }


# ---------- CATEGORY PAGE ----------
@router.get("/{slug}", summary="Category with its products")
def get_category_by_slug(
    slug: str,
    sort: Optional[str] = None,
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
    session: Session = Depends(get_session),
):
    category = session.exec(
        select(Category).where(Category.slug == slug)
    ).first()

    if not category:
        raise HTTPException(404, f"Category '{slug}' not found")

    query = select(Product).where(
        Product.category_id == category.id,
        Product.is_active == True,  # noqa: E712
    )
    query = apply_price_range(query, min_price, max_price)
    products = session.exec(apply_sort(query, sort)).all()

    return {
        "category": category,
        "total_products": len(products),
        "products": [serialize_product(p) for p in products],
    }
