from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime


class SellerRating(SQLModel, table=True):
    __tablename__ = "seller_ratings"

    id: Optional[int] = Field(default=None, primary_key=True)
    seller_id: int = Field(foreign_key="sellers.id", index=True)
    seller_order_id: int = Field(foreign_key="seller_orders.id", unique=True)
    customer_email: str

    rating: int
    comment: Optional[str] = None

    created_at: datetime = Field(default_factory=datetime.utcnow)
