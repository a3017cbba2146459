from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime

from bazarika.constants import roles


class Profile(SQLModel, table=True):
    __tablename__ = "profiles"

    # same id as the auth provider's user
    id: str = Field(primary_key=True)
    email: Optional[str] = Field(default=None, index=True)
    full_name: Optional[str] = None
    phone: Optional[str] = None
    avatar_url: Optional[str] = None
    role: str = Field(default=roles.CUSTOMER)  # customer | staff | admin
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
