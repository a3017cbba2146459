from sqlmodel import SQLModel, Field, Relationship
from typing import Optional, TYPE_CHECKING, List
from datetime import datetime

if TYPE_CHECKING:
    from .category import Category
    from .product_image import ProductImage

class Product(SQLModel, table=True):
    __tablename__ = "products"

    #main info
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    slug: str = Field(index=True, unique=True)
    description: Optional[str] = None

    #Shop Details
    price: float
    compare_at_price: Optional[float] = None
    stock_quantity: int = 0
    sku: Optional[str] = None
    is_active: bool = True
    is_featured: bool = False

    #timestamps
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    #category
    category_id: Optional[int] = Field(default=None, foreign_key="categories.id")
    category: Optional["Category"] = Relationship(back_populates="products")

    images: List["ProductImage"] = Relationship(
        back_populates="product",
        sa_relationship_kwargs={"cascade": "all, delete-orphan", "order_by": "ProductImage.position"},
    )

    @property
    def in_stock(self) -> bool:
        return self.stock_quantity > 0
