from typing import List, Optional, Tuple
from datetime import datetime

from sqlmodel import Session, select

from bazarika.models.cart import Cart, CartItem
from bazarika.models.coupon import Coupon
from bazarika.models.product import Product
from bazarika.models.profile import Profile
from bazarika.services.pricing import calculate_subtotal, normalize_code, price_summary


def get_cart(
    session: Session,
    user: Optional[Profile],
    session_id: Optional[str],
    create: bool = False,
) -> Optional[Cart]:
    """Signed-in carts are keyed by profile, anonymous ones by the client's session id."""
    if user is not None:
        query = select(Cart).where(Cart.user_id == user.id)
    elif session_id:
        query = select(Cart).where(Cart.session_id == session_id, Cart.user_id == None)  # noqa: E711
    else:
        return None

    cart = session.exec(query).first()

    if cart is None and create:
        cart = Cart(
            user_id=user.id if user else None,
            session_id=None if user else session_id,
        )
        session.add(cart)
        session.commit()
        session.refresh(cart)

    return cart


def cart_lines(session: Session, cart: Optional[Cart]) -> List[Tuple[CartItem, Product]]:
    if cart is None:
        return []

    return session.exec(
        select(CartItem, Product)
        .join(Product, CartItem.product_id == Product.id)
        .where(CartItem.cart_id == cart.id)
        .order_by(CartItem.created_at, CartItem.id)
    ).all()


def cart_subtotal(lines: List[Tuple[CartItem, Product]]) -> float:
    return calculate_subtotal((product.price, item.quantity) for item, product in lines)


def serialize_cart(
    cart: Optional[Cart],
    lines: List[Tuple[CartItem, Product]],
    coupon: Optional[Coupon] = None,
) -> dict:
    items_response = []

    for item, product in lines:
        items_response.append({
            "item_id": item.id,
            "product_id": product.id,
            "name": product.name,
            "slug": product.slug,
            "price": product.price,
            "compare_at_price": product.compare_at_price,
            "image": product.images[0].url if product.images else None,
            "quantity": item.quantity,
            "stock_quantity": product.stock_quantity,
            "in_stock": product.in_stock,
            "total": round(product.price * item.quantity, 2),
        })

    return {
        "cart_id": cart.id if cart else None,
        "items": items_response,
        "item_count": sum(item.quantity for item, _ in lines),
        "summary": price_summary(cart_subtotal(lines), coupon),
    }


def clear_cart(session: Session, cart_id: int):
    """Delete every line of a cart. Caller commits."""
    items = session.exec(
        select(CartItem).where(CartItem.cart_id == cart_id)
    ).all()

    for item in items:
        session.delete(item)

    cart = session.get(Cart, cart_id)
    if cart:
        cart.updated_at = datetime.utcnow()
        session.add(cart)


def find_coupon(session: Session, code: str) -> Optional[Coupon]:
    return session.exec(
        select(Coupon).where(Coupon.code == normalize_code(code))
    ).first()
