from typing import Optional
from sqlmodel import SQLModel, Field


class ReviewCreate(SQLModel):
    rating: int = Field(ge=1, le=5)
    title: Optional[str] = None
    comment: Optional[str] = None

class ReviewUpdate(SQLModel):
    rating: int | None = Field(default=None, ge=1, le=5)
    title: str | None = None
    comment: str | None = None
