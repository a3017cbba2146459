from pydantic import BaseModel

from bazarika.constants.order_status import OrderStatus, PaymentStatus


class OrderStatusUpdate(BaseModel):
    status: OrderStatus

class PaymentStatusUpdate(BaseModel):
    payment_status: PaymentStatus
