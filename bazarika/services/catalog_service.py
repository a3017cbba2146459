from typing import Optional

from slugify import slugify
from sqlmodel import Session, select

from bazarika.models.product import Product

SORT_OPTIONS = {
    "price-asc": Product.price.asc(),
    "price-desc": Product.price.desc(),
    "name": Product.name.asc(),
    "newest": Product.created_at.desc(),
}


def apply_sort(query, sort: Optional[str]):
    # unknown values fall back to newest first
    return query.order_by(SORT_OPTIONS.get(sort or "newest", SORT_OPTIONS["newest"]), Product.id.desc())


def apply_price_range(query, min_price: Optional[float], max_price: Optional[float]):
    if min_price is not None:
        query = query.where(Product.price >= min_price)

    if max_price is not None:
        query = query.where(Product.price <= max_price)

    return query


def unique_slug(session: Session, model, value: str, exclude_id: Optional[int] = None) -> str:
    """Slugify value and append -2, -3, ... until no other row of model uses it."""
    base = slugify(value) or "item"
    candidate = base
    suffix = 2

    while True:
        query = select(model).where(model.slug == candidate)
        if exclude_id is not None:
            query = query.where(model.id != exclude_id)

        if session.exec(query).first() is None:
            return candidate

        candidate = f"{base}-{suffix}"
        suffix += 1


def serialize_product(product: Product, with_category: bool = False) -> dict:
    data = {
        "id": product.id,
        "name": product.name,
        "slug": product.slug,
        "description": product.description,
        "price": product.price,
        "compare_at_price": product.compare_at_price,
        "stock_quantity": product.stock_quantity,
        "in_stock": product.in_stock,
        "sku": product.sku,
        "is_active": product.is_active,
        "is_featured": product.is_featured,
        "category_id": product.category_id,
        "images": [
            {"id": img.id, "url": img.url, "alt_text": img.alt_text, "position": img.position}
            for img in product.images
        ],
        "created_at": product.created_at,
        "updated_at": product.updated_at,
    }

    if with_category:
        category = product.category
        data["category"] = (
            {"id": category.id, "name": category.name, "slug": category.slug}
            if category else None
        )

    return data
