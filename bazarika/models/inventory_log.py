from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime


class InventoryLog(SQLModel, table=True):
    __tablename__ = "inventory_logs"

    id: Optional[int] = Field(default=None, primary_key=True)
    product_id: int = Field(foreign_key="products.id", index=True)

    quantity_change: int
    previous_quantity: int
    new_quantity: int
    reason: str  # order | cancellation | restock | adjustment

    reference_id: Optional[str] = None
    reference_type: Optional[str] = None
    created_by: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
