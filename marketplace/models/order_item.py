from sqlmodel import SQLModel, Field, Relationship
from typing import Optional, TYPE_CHECKING
from datetime import datetime
from decimal import Decimal

if TYPE_CHECKING:
    from marketplace.models.seller_order import SellerOrder


class OrderItem(SQLModel, table=True):
    __tablename__ = "order_items"

    id: Optional[int] = Field(default=None, primary_key=True)
    seller_order_id: int = Field(foreign_key="seller_orders.id", index=True)
    product_id: int = Field(index=True)

    # snapshot taken at checkout
    product_name: str
    product_image: Optional[str] = None
    price: Decimal = Field(max_digits=12, decimal_places=2)
    quantity: int

    created_at: datetime = Field(default_factory=datetime.utcnow)

    seller_order: Optional["SellerOrder"] = Relationship(back_populates="items")

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity
