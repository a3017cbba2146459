from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import Column, JSON
from typing import List, Optional
from datetime import datetime

from bazarika.models.order_item import OrderItem

class Order(SQLModel, table=True):
    __tablename__ = "orders"

    id: Optional[int] = Field(default=None, primary_key=True)
    order_number: str = Field(index=True, unique=True)
    user_id: str = Field(foreign_key="profiles.id", index=True)

    status: str = Field(default="pending", index=True)

    subtotal: float
    shipping_cost: float
    discount_amount: float = 0
    total: float

    # snapshot of the address at checkout time
    shipping_address: dict = Field(sa_column=Column(JSON, nullable=False))

    payment_method: Optional[str] = None
    payment_status: str = Field(default="pending")
    notes: Optional[str] = None
    coupon_id: Optional[int] = Field(default=None, foreign_key="coupons.id")

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    items: List["OrderItem"] = Relationship(back_populates="order")
