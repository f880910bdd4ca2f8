from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    email: str = Field(index=True, unique=True)
    role: str = Field(default="customer")  # admin | customer | seller
    can_login: bool = Field(default=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
