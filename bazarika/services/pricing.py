"""
Cart and order totals.

    shipping = 0 when subtotal reaches the free-shipping threshold, else the flat fee
    discount = percentage of subtotal capped by max_discount_amount, or a fixed amount
    total    = subtotal + shipping - discount
"""
from datetime import datetime
from typing import Iterable, Optional, Tuple

from bazarika.config import settings
from bazarika.constants.order_status import DiscountType
from bazarika.models.coupon import Coupon


class CouponError(ValueError):
    """A coupon cannot be applied to the current cart."""


def normalize_code(code: str) -> str:
    return (code or "").strip().upper()


def calculate_subtotal(lines: Iterable[Tuple[float, int]]) -> float:
    """lines are (unit_price, quantity) pairs"""
    return round(sum(price * quantity for price, quantity in lines), 2)


def calculate_shipping(subtotal: float) -> float:
    if subtotal >= settings.FREE_SHIPPING_THRESHOLD:
        return 0
    return settings.SHIPPING_FEE


def calculate_discount(coupon: Optional[Coupon], subtotal: float) -> float:
    if coupon is None:
        return 0

    if coupon.discount_type == DiscountType.percentage.value:
        discount = subtotal * coupon.discount_value / 100
        if coupon.max_discount_amount is not None:
            discount = min(discount, coupon.max_discount_amount)
    else:
        discount = coupon.discount_value

    return round(discount, 2)


def validate_coupon(coupon: Optional[Coupon], subtotal: float, now: Optional[datetime] = None) -> Coupon:
    now = now or datetime.utcnow()

    if coupon is None or not coupon.is_active:
        raise CouponError("This coupon code is not valid")

    if coupon.starts_at and coupon.starts_at > now:
        raise CouponError("This coupon is not active yet")

    if coupon.expires_at and coupon.expires_at < now:
        raise CouponError("This coupon has expired")

    if coupon.usage_limit is not None and coupon.used_count >= coupon.usage_limit:
        raise CouponError("This coupon has reached its usage limit")

    if coupon.min_order_amount and subtotal < coupon.min_order_amount:
        raise CouponError(f"Minimum order of {coupon.min_order_amount:.2f} required")

    return coupon


def price_summary(subtotal: float, coupon: Optional[Coupon] = None) -> dict:
    shipping = calculate_shipping(subtotal)
    discount = calculate_discount(coupon, subtotal)

    return {
        "subtotal": round(subtotal, 2),
        "shipping": shipping,
        "discount": discount,
        "total": round(subtotal + shipping - discount, 2),
        "coupon_code": coupon.code if coupon else None,
    }
