from sqlmodel import SQLModel, Field, Relationship
from typing import List, Optional, TYPE_CHECKING
from datetime import datetime
from decimal import Decimal

if TYPE_CHECKING:
    from marketplace.models.order import Order
    from marketplace.models.order_item import OrderItem
    from marketplace.models.seller import Seller


class SellerOrder(SQLModel, table=True):
    __tablename__ = "seller_orders"

    id: Optional[int] = Field(default=None, primary_key=True)
    order_id: int = Field(foreign_key="orders.id", index=True)
    seller_id: int = Field(foreign_key="sellers.id", index=True)

    # fixed at creation, never recomputed
    subtotal: Decimal = Field(max_digits=12, decimal_places=2)

    status: str = Field(default="pending", index=True)
    tracking_number: Optional[str] = None

    shipped_at: Optional[datetime] = None
    # set exactly once, by the call that moves the order into "delivered"
    delivered_at: Optional[datetime] = None

    created_at: datetime = Field(default_factory=datetime.utcnow)

    order: Optional["Order"] = Relationship(back_populates="seller_orders")
    seller: Optional["Seller"] = Relationship()
    items: List["OrderItem"] = Relationship(
        back_populates="seller_order",
        sa_relationship_kwargs={"order_by": "OrderItem.id"},
    )
