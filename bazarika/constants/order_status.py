from enum import Enum


class OrderStatus(str, Enum):
    pending = "pending"
    confirmed = "confirmed"
    processing = "processing"
    shipped = "shipped"
    delivered = "delivered"
    cancelled = "cancelled"


class PaymentStatus(str, Enum):
    pending = "pending"
    paid = "paid"
    failed = "failed"
    refunded = "refunded"


# online gateways are not wired up yet
class PaymentMethod(str, Enum):
    cod = "cod"


class DiscountType(str, Enum):
    percentage = "percentage"
    fixed = "fixed"


ALLOWED_TRANSITIONS = {
    "pending": ["confirmed", "cancelled"],
    "confirmed": ["processing", "cancelled"],
    "processing": ["shipped", "cancelled"],
    "shipped": ["delivered"],
    "delivered": [],
    "cancelled": []
}

# customers may cancel on their own only before the order is being prepared
CUSTOMER_CANCELLABLE = ["pending", "confirmed"]
