from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from bazarika.database import get_session
from bazarika.models.address import Address
from bazarika.models.order_item import OrderItem
from bazarika.models.profile import Profile
from bazarika.schemas.checkout_schemas import PlaceOrderRequest
from bazarika.services.cart_service import cart_lines, cart_subtotal, find_coupon, get_cart, serialize_cart
from bazarika.services.order_service import CheckoutError, place_order, serialize_order
from bazarika.services.pricing import CouponError, validate_coupon
from bazarika.utils.token import get_current_user

router = APIRouter()


@router.get("/summary")
def checkout_summary(
    coupon_code: Optional[str] = None,
    session: Session = Depends(get_session),
    current_user: Profile = Depends(get_current_user)
):
    """Addresses plus the priced cart, what the checkout page renders."""
    addresses = session.exec(
        select(Address)
        .where(Address.user_id == current_user.id)
        .order_by(Address.is_default.desc(), Address.created_at)
    ).all()

    cart = get_cart(session, current_user, None)
    lines = cart_lines(session, cart)

    if not lines:
        raise HTTPException(400, "Your cart is empty.")

    coupon = None
    if coupon_code:
        try:
            coupon = validate_coupon(find_coupon(session, coupon_code), cart_subtotal(lines))
        except CouponError as e:
            raise HTTPException(400, str(e))

    return {
        "has_address": len(addresses) > 0,
        "addresses": addresses,
        "phone": current_user.phone,
        "cart": serialize_cart(cart, lines, coupon),
    }


# Place Order

@router.post("/place-order", status_code=201)
def place_order_endpoint(
    data: PlaceOrderRequest,
    session: Session = Depends(get_session),
    current_user: Profile = Depends(get_current_user)
):
    address = session.get(Address, data.address_id)
    if not address or address.user_id != current_user.id:
        raise HTTPException(404, "Address not found")

    try:
        order = place_order(
            session,
            current_user,
            address,
            phone=data.phone,
            payment_method=data.payment_method.value,
            coupon_code=data.coupon_code,
            notes=data.notes,
        )
    except (CheckoutError, CouponError) as e:
        raise HTTPException(400, str(e))

    items = session.exec(
        select(OrderItem).where(OrderItem.order_id == order.id)
    ).all()

    return {
        "message": "Order placed",
        "order": serialize_order(order, items),
    }
