import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException
from sqlmodel import Session, select

from bazarika.database import get_session
from bazarika.models.cart import Cart, CartItem
from bazarika.models.product import Product
from bazarika.models.profile import Profile
from bazarika.schemas.cart_schemas import CartAddRequest, CartUpdateRequest, CouponApplyRequest
from bazarika.services.cart_service import (
    cart_lines,
    cart_subtotal,
    clear_cart,
    find_coupon,
    get_cart,
    serialize_cart,
)
from bazarika.services.pricing import CouponError, validate_coupon
from bazarika.utils.token import get_optional_user

logger = logging.getLogger(__name__)

router = APIRouter()

SESSION_HEADER = "X-Cart-Session"


def _require_owner(user: Optional[Profile], session_id: Optional[str]):
    if user is None and not session_id:
        raise HTTPException(400, f"Sign in or send an {SESSION_HEADER} header")


def _owned_item(session: Session, item_id: int, cart: Optional[Cart]) -> CartItem:
    item = session.get(CartItem, item_id)

    if not item or cart is None or item.cart_id != cart.id:
        raise HTTPException(404, "Cart item not found")

    return item


def _touch(session: Session, cart: Cart):
    cart.updated_at = datetime.utcnow()
    session.add(cart)


# View Cart

@router.get("/")
def view_cart(
    session: Session = Depends(get_session),
    current_user: Optional[Profile] = Depends(get_optional_user),
    cart_session: Optional[str] = Header(None, alias=SESSION_HEADER),
):
    cart = get_cart(session, current_user, cart_session)
    return serialize_cart(cart, cart_lines(session, cart))


# Add to Cart

@router.post("/items")
def add_to_cart(
    data: CartAddRequest,
    session: Session = Depends(get_session),
    current_user: Optional[Profile] = Depends(get_optional_user),
    cart_session: Optional[str] = Header(None, alias=SESSION_HEADER),
):
    _require_owner(current_user, cart_session)

    product = session.get(Product, data.product_id)
    if not product or not product.is_active:
        raise HTTPException(status_code=404, detail="Product not found")

    cart = get_cart(session, current_user, cart_session, create=True)

    existing_item = session.exec(
        select(CartItem).where(
            CartItem.cart_id == cart.id,
            CartItem.product_id == product.id
        )
    ).first()

    if existing_item:
        existing_item.quantity += data.quantity
        existing_item.updated_at = datetime.utcnow()
        session.add(existing_item)
        message = "Cart updated"
    else:
        session.add(CartItem(cart_id=cart.id, product_id=product.id, quantity=data.quantity))
        message = "Added to cart"

    _touch(session, cart)
    session.commit()

    return {"message": message, "cart": serialize_cart(cart, cart_lines(session, cart))}


# Update Cart

@router.put("/items/{item_id}")
def update_cart_item(
    item_id: int,
    data: CartUpdateRequest,
    session: Session = Depends(get_session),
    current_user: Optional[Profile] = Depends(get_optional_user),
    cart_session: Optional[str] = Header(None, alias=SESSION_HEADER),
):
    cart = get_cart(session, current_user, cart_session)
    item = _owned_item(session, item_id, cart)

    if data.quantity < 1:
        session.delete(item)
        message = "Item removed"
    else:
        item.quantity = data.quantity
        item.updated_at = datetime.utcnow()
        session.add(item)
        message = "Quantity updated"

    _touch(session, cart)
    session.commit()

    return {"message": message, "cart": serialize_cart(cart, cart_lines(session, cart))}


# Remove Cart

@router.delete("/items/{item_id}")
def remove_item(
    item_id: int,
    session: Session = Depends(get_session),
    current_user: Optional[Profile] = Depends(get_optional_user),
    cart_session: Optional[str] = Header(None, alias=SESSION_HEADER),
):
    cart = get_cart(session, current_user, cart_session)
    item = _owned_item(session, item_id, cart)

    session.delete(item)
    _touch(session, cart)
    session.commit()

    return {"message": "Item removed from cart", "cart": serialize_cart(cart, cart_lines(session, cart))}


# Clear Cart

@router.delete("/")
def clear_cart_endpoint(
    session: Session = Depends(get_session),
    current_user: Optional[Profile] = Depends(get_optional_user),
    cart_session: Optional[str] = Header(None, alias=SESSION_HEADER),
):
    cart = get_cart(session, current_user, cart_session)

    if cart:
        clear_cart(session, cart.id)
        session.commit()

    return {"message": "Cart cleared"}


# Coupon preview, nothing is stored

@router.post("/apply-coupon")
def apply_coupon(
    data: CouponApplyRequest,
    session: Session = Depends(get_session),
    current_user: Optional[Profile] = Depends(get_optional_user),
    cart_session: Optional[str] = Header(None, alias=SESSION_HEADER),
):
    cart = get_cart(session, current_user, cart_session)
    lines = cart_lines(session, cart)

    if not lines:
        raise HTTPException(400, "Your cart is empty")

    try:
        coupon = validate_coupon(find_coupon(session, data.code), cart_subtotal(lines))
    except CouponError as e:
        raise HTTPException(400, str(e))

    logger.info(f"Coupon {coupon.code} previewed on cart {cart.id}")

    return {
        "message": "Coupon applied",
        "coupon": {
            "code": coupon.code,
            "discount_type": coupon.discount_type,
            "discount_value": coupon.discount_value,
        },
        "cart": serialize_cart(cart, lines, coupon),
    }
