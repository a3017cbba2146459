# bazarika/schemas/checkout_schemas.py
from pydantic import BaseModel, Field
from typing import Optional

from bazarika.constants.order_status import PaymentMethod


class PlaceOrderRequest(BaseModel):
    address_id: int
    phone: Optional[str] = None          # falls back to the address phone
    payment_method: PaymentMethod = PaymentMethod.cod
    coupon_code: Optional[str] = None
    notes: Optional[str] = Field(None, max_length=500)
