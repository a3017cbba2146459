from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func, or_
from sqlmodel import Session, select

from bazarika.database import get_session
from bazarika.models.category import Category
from bazarika.models.product import Product
from bazarika.models.review import Review
from bazarika.services.catalog_service import apply_price_range, apply_sort, serialize_product
from bazarika.utils.pagination import paginate
from bazarika.utils.search import LIKE_ESCAPE, like_pattern

router = APIRouter()

FEATURED_LIMIT = 8
RELATED_LIMIT = 4


# ---------- SEARCH / BROWSE ----------
@router.get("/", summary="Search and filter active products")
def search_products(
    q: Optional[str] = None,
    category: Optional[str] = Query(None, description="Category slug"),
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
    sort: Optional[str] = Query(None, description="price-asc | price-desc | name | newest"),
    page: int = 1,
    limit: int = 20,
    session: Session = Depends(get_session),
):
    query = select(Product).where(Product.is_active == True)  # noqa: E712

    if q:
        like = like_pattern(q)
        query = query.where(
            or_(
                Product.name.ilike(like, escape=LIKE_ESCAPE),
                Product.description.ilike(like, escape=LIKE_ESCAPE),
            )
        )

    # unknown category slugs are ignored, same as an empty filter
    if category:
        category_obj = session.exec(
            select(Category).where(Category.slug == category)
        ).first()
        if category_obj:
            query = query.where(Product.category_id == category_obj.id)

    query = apply_price_range(query, min_price, max_price)
    query = apply_sort(query, sort)

    result = paginate(
        session=session,
        query=query,
        page=page,
        limit=limit,
        serialize=serialize_product,
    )
    result["query"] = q
    return result


@router.get("/featured")
def featured_products(session: Session = Depends(get_session)):
    products = session.exec(
        select(Product)
        .where(Product.is_active == True, Product.is_featured == True)  # noqa: E712
        .order_by(Product.created_at.desc())
        .limit(FEATURED_LIMIT)
    ).all()

    return {
        "total": len(products),
        "products": [serialize_product(p) for p in products]
    }


# ---------- PRODUCT PAGE ----------
@router.get("/{slug}", summary="Get an active product by slug")
def get_product(slug: str, session: Session = Depends(get_session)):
    product = session.exec(
        select(Product).where(Product.slug == slug, Product.is_active == True)  # noqa: E712
    ).first()

    if not product:
        raise HTTPException(404, "Product not found")

    count, average = session.exec(
        select(func.count(Review.id), func.avg(Review.rating))
        .where(Review.product_id == product.id)
    ).one()

    related = []
    if product.category_id is not None:
        related = session.exec(
            select(Product)
            .where(
                Product.category_id == product.category_id,
                Product.id != product.id,
                Product.is_active == True,  # noqa: E712
            )
            .order_by(Product.created_at.desc())
            .limit(RELATED_LIMIT)
        ).all()

    return {
        "product": serialize_product(product, with_category=True),
        "reviews": {
            "total_reviews": count,
            "average_rating": round(float(average), 2) if average is not None else 0,
        },
        "related_products": [serialize_product(p) for p in related],
    }
