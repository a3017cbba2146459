import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func, or_
from sqlmodel import Session, select

from bazarika.database import get_session
from bazarika.dependencies.admin import require_admin
from bazarika.models.cart import CartItem
from bazarika.models.category import Category
from bazarika.models.inventory_log import InventoryLog
from bazarika.models.order_item import OrderItem
from bazarika.models.product import Product
from bazarika.models.product_image import ProductImage
from bazarika.models.profile import Profile
from bazarika.models.review import Review
from bazarika.models.wishlist import WishlistItem
from bazarika.schemas.product_schemas import (
    ProductCreate,
    ProductImageCreate,
    ProductUpdate,
    StockAdjustRequest,
)
from bazarika.services.catalog_service import serialize_product, unique_slug
from bazarika.services.inventory_service import StockError, adjust_stock
from bazarika.utils.pagination import paginate
from bazarika.utils.search import LIKE_ESCAPE, like_pattern

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_product(session: Session, product_id: int) -> Product:
    product = session.get(Product, product_id)
    if not product:
        raise HTTPException(404, "Product not found")
    return product


def _check_category(session: Session, category_id: Optional[int]):
    if category_id is not None and not session.get(Category, category_id):
        raise HTTPException(400, "Invalid category_id")


@router.get("/")
def list_products_admin(
    search: Optional[str] = None,
    category_id: Optional[int] = None,
    is_active: Optional[bool] = None,
    page: int = 1,
    limit: int = 20,
    session: Session = Depends(get_session),
    _: Profile = Depends(require_admin)
):
    query = select(Product)

    if search:
        like = like_pattern(search)
        query = query.where(
            or_(
                Product.name.ilike(like, escape=LIKE_ESCAPE),
                Product.sku.ilike(like, escape=LIKE_ESCAPE),
            )
        )

    if category_id is not None:
        query = query.where(Product.category_id == category_id)

    if is_active is not None:
        query = query.where(Product.is_active == is_active)

    query = query.order_by(Product.created_at.desc(), Product.id.desc())

    return paginate(
        session=session,
        query=query,
        page=page,
        limit=limit,
        serialize=lambda p: serialize_product(p, with_category=True),
    )


@router.post("/", status_code=201)
def create_product(
    data: ProductCreate,
    session: Session = Depends(get_session),
    current_admin: Profile = Depends(require_admin)
):
    _check_category(session, data.category_id)

    values = data.model_dump(exclude={"slug", "stock_quantity"})
    product = Product(
        **values,
        slug=unique_slug(session, Product, data.slug or data.name),
        stock_quantity=0,
    )
    session.add(product)
    session.flush()

    if data.stock_quantity:
        adjust_stock(
            session,
            product,
            data.stock_quantity,
            reason="restock",
            reference_type="product",
            reference_id=str(product.id),
            created_by=current_admin.id,
        )

    session.commit()
    session.refresh(product)

    logger.info(f"Product {product.id} ({product.slug}) created by {current_admin.id}")
    return serialize_product(product, with_category=True)


@router.get("/{product_id}")
def get_product_admin(
    product_id: int,
    session: Session = Depends(get_session),
    _: Profile = Depends(require_admin)
):
    return serialize_product(_get_product(session, product_id), with_category=True)


@router.put("/{product_id}")
def update_product(
    product_id: int,
    data: ProductUpdate,
    session: Session = Depends(get_session),
    _: Profile = Depends(require_admin)
):
    product = _get_product(session, product_id)
    changes = data.model_dump(exclude_unset=True)

    if "category_id" in changes:
        _check_category(session, changes["category_id"])

    if "slug" in changes:
        slug = changes.pop("slug")
        product.slug = unique_slug(
            session, Product, slug or changes.get("name") or product.name, exclude_id=product.id
        )

    for key in ("name", "price"):
        if key in changes and changes[key] is None:
            changes.pop(key)

    for key, value in changes.items():
        setattr(product, key, value)

    product.updated_at = datetime.utcnow()
    session.add(product)
    session.commit()
    session.refresh(product)

    return serialize_product(product, with_category=True)


@router.delete("/{product_id}")
def delete_product(
    product_id: int,
    session: Session = Depends(get_session),
    _: Profile = Depends(require_admin)
):
    product = _get_product(session, product_id)

    # order items keep their snapshot, everything else pointing at the product goes
    for model in (CartItem, WishlistItem, Review, InventoryLog):
        rows = session.exec(select(model).where(model.product_id == product.id)).all()
        for row in rows:
            session.delete(row)

    order_items = session.exec(select(OrderItem).where(OrderItem.product_id == product.id)).all()
    for item in order_items:
        item.product_id = None
        session.add(item)

    session.flush()
    session.delete(product)
    session.commit()

    logger.info(f"Product {product_id} deleted")
    return {"message": "Product deleted"}


# -------- IMAGES --------

@router.post("/{product_id}/images", status_code=201)
def add_product_image(
    product_id: int,
    data: ProductImageCreate,
    session: Session = Depends(get_session),
    _: Profile = Depends(require_admin)
):
    product = _get_product(session, product_id)

    position = data.position
    if position is None:
        last = session.exec(
            select(func.max(ProductImage.position)).where(ProductImage.product_id == product.id)
        ).one()
        position = 0 if last is None else last + 1

    image = ProductImage(
        product_id=product.id,
        url=data.url,
        alt_text=data.alt_text,
        position=position,
    )
    session.add(image)
    session.commit()
    session.refresh(image)

    return image


@router.delete("/{product_id}/images/{image_id}")
def delete_product_image(
    product_id: int,
    image_id: int,
    session: Session = Depends(get_session),
    _: Profile = Depends(require_admin)
):
    image = session.get(ProductImage, image_id)
    if not image or image.product_id != product_id:
        raise HTTPException(404, "Image not found")

    session.delete(image)
    session.commit()

    return {"message": "Image deleted"}


# -------- INVENTORY --------

@router.post("/{product_id}/stock")
def adjust_product_stock(
    product_id: int,
    data: StockAdjustRequest,
    session: Session = Depends(get_session),
    current_admin: Profile = Depends(require_admin)
):
    product = _get_product(session, product_id)

    if data.quantity_change == 0:
        raise HTTPException(400, "quantity_change must not be zero")

    try:
        entry = adjust_stock(
            session,
            product,
            data.quantity_change,
            reason=data.reason,
            reference_type="manual",
            created_by=current_admin.id,
        )
    except StockError as e:
        raise HTTPException(400, str(e))

    session.commit()
    session.refresh(entry)

    return {
        "message": "Stock updated",
        "product_id": product.id,
        "stock_quantity": entry.new_quantity,
        "log": entry,
    }


@router.get("/{product_id}/inventory-log")
def product_inventory_log(
    product_id: int,
    session: Session = Depends(get_session),
    _: Profile = Depends(require_admin)
):
    _get_product(session, product_id)

    return session.exec(
        select(InventoryLog)
        .where(InventoryLog.product_id == product_id)
        .order_by(InventoryLog.created_at.desc(), InventoryLog.id.desc())
    ).all()
