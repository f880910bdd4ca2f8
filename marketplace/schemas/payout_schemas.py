from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel


class PayoutBatchOrder(BaseModel):
    seller_order_id: int
    order_id: int
    subtotal: Decimal
    customer_name: Optional[str] = None
    ordered_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None


class PayoutBatch(BaseModel):
    """A seller's delivered-but-unpaid seller orders, settled in one action."""

    seller_id: int
    seller_name: str
    bank_name: Optional[str] = None
    account_number: Optional[str] = None
    account_holder_name: Optional[str] = None
    orders: List[PayoutBatchOrder]
    total_amount: Decimal
    commission_rate: Decimal
    commission_amount: Decimal
    net_amount: Decimal


class MarkPaidRequest(BaseModel):
    transaction_reference: str
    # the seller order ids the operator was looking at; omit to pay the
    # seller's current pending batch
    seller_order_ids: Optional[List[int]] = None
    payment_method: str = "bank_transfer"


class SellerEarnings(BaseModel):
    seller_id: int
    pending: Decimal
    delivered_total: Decimal
    paid_amount_gross: Decimal
    available_for_payout: Decimal
    paid_net: Decimal
    commission_total: Decimal
    order_count: int
    payout_count: int
