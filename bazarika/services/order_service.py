import logging
import random
from datetime import datetime
from typing import Optional

from sqlmodel import Session, select

from bazarika.config import settings
from bazarika.constants.order_status import ALLOWED_TRANSITIONS, OrderStatus
from bazarika.models.address import Address
from bazarika.models.order import Order
from bazarika.models.order_item import OrderItem
from bazarika.models.profile import Profile
from bazarika.services.cart_service import cart_lines, cart_subtotal, clear_cart, find_coupon, get_cart
from bazarika.services.inventory_service import adjust_stock, restock_order_items
from bazarika.services.pricing import calculate_discount, calculate_shipping, validate_coupon

logger = logging.getLogger(__name__)


class CheckoutError(ValueError):
    """The cart cannot be turned into an order."""


class OrderTransitionError(ValueError):
    """Requested status change is not allowed from the current status."""


def generate_order_number(now: Optional[datetime] = None) -> str:
    now = now or datetime.utcnow()
    return f"{settings.ORDER_NUMBER_PREFIX}-{now.strftime('%Y%m%d')}-{random.randint(0, 9999):04d}"


def _unique_order_number(session: Session) -> str:
    while True:
        number = generate_order_number()
        taken = session.exec(
            select(Order.id).where(Order.order_number == number)
        ).first()
        if taken is None:
            return number


def address_snapshot(address: Address, phone: Optional[str] = None) -> dict:
    return {
        "id": address.id,
        "label": address.label,
        "full_name": address.full_name,
        "phone": phone or address.phone,
        "address_line1": address.address_line1,
        "address_line2": address.address_line2,
        "city": address.city,
        "district": address.district,
        "postal_code": address.postal_code,
    }


def place_order(
    session: Session,
    user: Profile,
    address: Address,
    phone: Optional[str] = None,
    payment_method: str = "cod",
    coupon_code: Optional[str] = None,
    notes: Optional[str] = None,
) -> Order:
    """
    Turn the caller's cart into an order.

    Order row, order items, stock decrements, coupon usage and emptying the
    cart all happen in one transaction; nothing is committed on failure.
    """
    phone = (phone or "").strip() or address.phone
    if not phone:
        raise CheckoutError("Phone number is required to place an order")

    cart = get_cart(session, user, None)
    lines = cart_lines(session, cart)
    if not lines:
        raise CheckoutError("Your cart is empty")

    for item, product in lines:
        if not product.is_active:
            raise CheckoutError(f"{product.name} is no longer available")
        if product.stock_quantity < item.quantity:
            raise CheckoutError(
                f"Insufficient stock for {product.name}. Available: {product.stock_quantity}"
            )

    subtotal = cart_subtotal(lines)

    coupon = None
    if coupon_code:
        coupon = validate_coupon(find_coupon(session, coupon_code), subtotal)

    shipping = calculate_shipping(subtotal)
    discount = calculate_discount(coupon, subtotal)

    try:
        order = Order(
            order_number=_unique_order_number(session),
            user_id=user.id,
            status=OrderStatus.pending.value,
            subtotal=subtotal,
            shipping_cost=shipping,
            discount_amount=discount,
            total=round(subtotal + shipping - discount, 2),
            shipping_address=address_snapshot(address, phone),
            payment_method=payment_method,
            payment_status="pending",
            notes=notes,
            coupon_id=coupon.id if coupon else None,
        )
        session.add(order)
        session.flush()

        for item, product in lines:
            session.add(OrderItem(
                order_id=order.id,
                product_id=product.id,
                product_name=product.name,
                product_price=product.price,
                quantity=item.quantity,
                total=round(product.price * item.quantity, 2),
            ))
            adjust_stock(
                session,
                product,
                -item.quantity,
                reason="order",
                reference_id=order.order_number,
                reference_type="order",
                created_by=user.id,
            )

        if coupon:
            coupon.used_count += 1
            session.add(coupon)

        if not user.phone:
            user.phone = phone
            user.updated_at = datetime.utcnow()
            session.add(user)

        clear_cart(session, cart.id)
        session.commit()
    except Exception:
        session.rollback()
        raise

    session.refresh(order)
    logger.info(
        f"Order {order.order_number} placed by {user.id}: "
        f"subtotal={subtotal} shipping={shipping} discount={discount} total={order.total}"
    )
    return order


def change_status(session: Session, order: Order, new_status: str, changed_by: Optional[str] = None) -> Order:
    allowed = ALLOWED_TRANSITIONS.get(order.status, [])
    if new_status not in allowed:
        raise OrderTransitionError(
            f"Invalid status change from {order.status} → {new_status}"
        )

    previous = order.status
    order.status = new_status
    order.updated_at = datetime.utcnow()
    session.add(order)

    if new_status == OrderStatus.cancelled.value:
        restock_order_items(session, order.id, order.order_number, created_by=changed_by)

    session.commit()
    session.refresh(order)

    logger.info(f"Order {order.order_number} status {previous} -> {new_status} by {changed_by or 'system'}")
    return order


def serialize_order(order: Order, items=None) -> dict:
    data = {
        "id": order.id,
        "order_number": order.order_number,
        "status": order.status,
        "payment_status": order.payment_status,
        "payment_method": order.payment_method,
        "subtotal": order.subtotal,
        "shipping_cost": order.shipping_cost,
        "discount_amount": order.discount_amount,
        "total": order.total,
        "shipping_address": order.shipping_address,
        "notes": order.notes,
        "coupon_id": order.coupon_id,
        "created_at": order.created_at,
        "updated_at": order.updated_at,
    }

    if items is not None:
        data["items"] = [
            {
                "id": i.id,
                "product_id": i.product_id,
                "product_name": i.product_name,
                "product_price": i.product_price,
                "quantity": i.quantity,
                "total": i.total,
            }
            for i in items
        ]

    return data
