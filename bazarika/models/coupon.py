from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime


class Coupon(SQLModel, table=True):
    __tablename__ = "coupons"

    id: Optional[int] = Field(default=None, primary_key=True)
    code: str = Field(index=True, unique=True)  # always upper-case
    description: Optional[str] = None

    discount_type: str = Field(default="percentage")  # percentage | fixed
    discount_value: float
    min_order_amount: float = 0
    max_discount_amount: Optional[float] = None

    usage_limit: Optional[int] = None
    used_count: int = 0
    is_active: bool = True

    starts_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
