from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime
from decimal import Decimal


class Product(SQLModel, table=True):
    __tablename__ = "products"

    id: Optional[int] = Field(default=None, primary_key=True)
    seller_id: int = Field(foreign_key="sellers.id", index=True)

    name: str
    price: Decimal = Field(max_digits=12, decimal_places=2)
    stock_quantity: int = 0
    image: Optional[str] = None
    status: str = Field(default="active")  # active | inactive

    created_at: datetime = Field(default_factory=datetime.utcnow)
