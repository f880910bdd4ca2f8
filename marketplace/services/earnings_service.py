import logging
from decimal import Decimal

from sqlmodel import Session, select

from marketplace.constants.order_status import SellerOrderStatus
from marketplace.errors import NotFoundError
from marketplace.models import Seller, SellerOrder, SellerPayout
from marketplace.schemas.payout_schemas import SellerEarnings

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def compute_seller_earnings(session: Session, seller_id: int) -> SellerEarnings:
    """
    Seller-facing money view, recomputed from seller orders and payouts on
    every call:

    - pending: subtotals of orders not delivered yet
    - delivered_total: subtotals of delivered orders
    - paid_amount_gross / paid_net / commission_total: sums over payouts
    - available_for_payout: delivered orders not yet turned into a payout
    """
    seller = session.get(Seller, seller_id)
    if not seller:
        raise NotFoundError("Seller")

    seller_orders = session.exec(
        select(SellerOrder).where(SellerOrder.seller_id == seller_id)
    ).all()
    payouts = session.exec(
        select(SellerPayout).where(SellerPayout.seller_id == seller_id)
    ).all()

    delivered = SellerOrderStatus.delivered.value
    pending = sum((so.subtotal for so in seller_orders if so.status != delivered), ZERO)
    delivered_total = sum((so.subtotal for so in seller_orders if so.status == delivered), ZERO)

    paid_gross = sum((p.amount for p in payouts), ZERO)
    paid_net = sum((p.net_amount for p in payouts), ZERO)
    commission_total = sum((p.commission_amount for p in payouts), ZERO)

    available = delivered_total - paid_gross
    if available < 0:
        # a payout points at an order outside the delivered set
        logger.error(
            f"Seller {seller_id} has negative available balance {available} "
            f"(delivered {delivered_total}, paid {paid_gross})"
        )

    return SellerEarnings(
        seller_id=seller_id,
        pending=pending,
        delivered_total=delivered_total,
        paid_amount_gross=paid_gross,
        available_for_payout=available,
        paid_net=paid_net,
        commission_total=commission_total,
        order_count=len(seller_orders),
        payout_count=len(payouts),
    )
