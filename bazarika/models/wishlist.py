from sqlmodel import SQLModel, Field
from sqlalchemy import UniqueConstraint
from typing import Optional
from datetime import datetime


class WishlistItem(SQLModel, table=True):
    __tablename__ = "wishlist"
    __table_args__ = (
        UniqueConstraint("user_id", "product_id", name="uq_wishlist_user_product"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(foreign_key="profiles.id", index=True)
    product_id: int = Field(foreign_key="products.id")
    created_at: datetime = Field(default_factory=datetime.utcnow)
