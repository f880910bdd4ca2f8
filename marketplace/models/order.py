from sqlmodel import SQLModel, Field, Relationship
from typing import List, Optional, TYPE_CHECKING
from datetime import datetime
from decimal import Decimal

if TYPE_CHECKING:
    from marketplace.models.seller_order import SellerOrder


class Order(SQLModel, table=True):
    __tablename__ = "orders"

    id: Optional[int] = Field(default=None, primary_key=True)
    # client-generated key, makes checkout re-submission safe
    request_id: Optional[str] = Field(default=None, index=True, unique=True)

    customer_name: str
    customer_email: str = Field(index=True)

    total_amount: Decimal = Field(max_digits=12, decimal_places=2)
    payment_status: str = Field(default="pending")  # pending | paid | failed
    payment_method: str = Field(default="receipt_upload")

    shipping_address: str  # serialized address object
    receipt_image: Optional[str] = None

    created_at: datetime = Field(default_factory=datetime.utcnow)

    seller_orders: List["SellerOrder"] = Relationship(
        back_populates="order",
        sa_relationship_kwargs={"order_by": "SellerOrder.id"},
    )
