from pydantic import BaseModel, Field
from typing import Optional


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    slug: Optional[str] = None
    description: Optional[str] = None

    price: float = Field(..., gt=0)
    compare_at_price: Optional[float] = Field(None, gt=0)
    stock_quantity: int = Field(default=0, ge=0)
    sku: Optional[str] = None

    category_id: Optional[int] = None

    is_active: bool = True
    is_featured: bool = False



class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    slug: Optional[str] = None
    description: Optional[str] = None

    price: Optional[float] = Field(None, gt=0)
    compare_at_price: Optional[float] = None
    sku: Optional[str] = None

    category_id: Optional[int] = None

    is_active: Optional[bool] = None
    is_featured: Optional[bool] = None


class ProductImageCreate(BaseModel):
    url: str = Field(..., min_length=1)
    alt_text: Optional[str] = None
    position: Optional[int] = Field(None, ge=0)


class StockAdjustRequest(BaseModel):
    quantity_change: int
    reason: str = "adjustment"
