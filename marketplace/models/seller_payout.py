from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime
from decimal import Decimal


class SellerPayout(SQLModel, table=True):
    __tablename__ = "seller_payouts"

    id: Optional[int] = Field(default=None, primary_key=True)
    seller_id: int = Field(foreign_key="sellers.id", index=True)
    # unique: at most one payout per seller order, the cross-session guard
    seller_order_id: int = Field(foreign_key="seller_orders.id", unique=True, index=True)

    amount: Decimal = Field(max_digits=12, decimal_places=2)
    commission_rate: Decimal = Field(max_digits=5, decimal_places=2)
    commission_amount: Decimal = Field(max_digits=14, decimal_places=4)
    net_amount: Decimal = Field(max_digits=14, decimal_places=4)

    status: str = Field(default="completed")
    payment_method: str = Field(default="bank_transfer")
    transaction_reference: str = Field(index=True)

    paid_at: datetime = Field(default_factory=datetime.utcnow)
    created_at: datetime = Field(default_factory=datetime.utcnow)
