"""
Seller payout settlement.

Pending payouts are derived, never stored: every delivered seller order that
has no SellerPayout row yet belongs to its seller's pending batch. Recording
a batch inserts one SellerPayout per seller order in a single transaction;
the unique index on seller_payouts.seller_order_id rejects a second payout
for the same seller order, which is how two operators paying the same
(possibly stale) batch are kept from paying twice.
"""
import logging
from datetime import datetime
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from marketplace.config import settings
from marketplace.constants.order_status import PayoutStatus, SellerOrderStatus
from marketplace.errors import (
    DatabaseError,
    NotFoundError,
    PayoutConflictError,
    ValidationError,
)
from marketplace.models import Order, Seller, SellerOrder, SellerPayout
from marketplace.schemas.payout_schemas import PayoutBatch, PayoutBatchOrder
from marketplace.services.order_event_service import log_order_event

logger = logging.getLogger(__name__)

HUNDRED = Decimal("100")


def commission_split(amount: Decimal, rate: Decimal) -> Tuple[Decimal, Decimal]:
    """Return (commission, net) at full precision; commission + net == amount."""
    commission = amount * rate / HUNDRED
    return commission, amount - commission


def build_batch(
    seller: Seller,
    rows: Iterable[Tuple[SellerOrder, Order]],
    rate: Optional[Decimal] = None,
) -> PayoutBatch:
    rate = settings.commission_rate if rate is None else rate

    orders = [
        PayoutBatchOrder(
            seller_order_id=seller_order.id,
            order_id=seller_order.order_id,
            subtotal=seller_order.subtotal,
            customer_name=order.customer_name if order else None,
            ordered_at=order.created_at if order else None,
            delivered_at=seller_order.delivered_at,
        )
        for seller_order, order in rows
    ]

    # sum first, round only for display
    total = sum((o.subtotal for o in orders), Decimal("0"))
    commission, net = commission_split(total, rate)

    return PayoutBatch(
        seller_id=seller.id,
        seller_name=seller.shop_name,
        bank_name=seller.bank_name,
        account_number=seller.account_number,
        account_holder_name=seller.account_holder_name,
        orders=orders,
        total_amount=total,
        commission_rate=rate,
        commission_amount=commission,
        net_amount=net,
    )


def compute_pending_payouts(session: Session) -> Dict[int, PayoutBatch]:
    """
    One batch per seller holding at least one delivered seller order without
    a payout. Always read fresh from the store.
    """
    delivered = session.exec(
        select(SellerOrder, Seller, Order)
        .join(Seller, Seller.id == SellerOrder.seller_id)
        .join(Order, Order.id == SellerOrder.order_id)
        .where(SellerOrder.status == SellerOrderStatus.delivered.value)
        .order_by(SellerOrder.seller_id, SellerOrder.id)
    ).all()

    paid_ids = set(session.exec(select(SellerPayout.seller_order_id)).all())

    grouped: Dict[int, Tuple[Seller, List[Tuple[SellerOrder, Order]]]] = {}
    for seller_order, seller, order in delivered:
        if seller_order.id in paid_ids:
            continue
        grouped.setdefault(seller.id, (seller, []))[1].append((seller_order, order))

    batches = {
        seller_id: build_batch(seller, rows)
        for seller_id, (seller, rows) in grouped.items()
    }

    logger.info(
        f"Computed {len(batches)} pending payout batches from {len(delivered)} delivered seller orders"
    )
    return batches


def mark_batch_paid(
    session: Session,
    batch: PayoutBatch,
    transaction_reference: str,
    *,
    payment_method: str = "bank_transfer",
    actor: str = "admin",
) -> List[SellerPayout]:
    """
    Record one completed payout per seller order of the batch, sharing one
    transaction reference. All rows or none.

    Raises PayoutConflictError when any of the seller orders was paid in the
    meantime; nothing is written in that case.
    """
    reference = (transaction_reference or "").strip()
    if not reference:
        raise ValidationError("Transaction reference is required", field="transaction_reference")

    if not batch.orders:
        raise ValidationError("Payout batch has no orders", field="orders")

    seller = session.get(Seller, batch.seller_id)
    if not seller:
        raise NotFoundError("Seller")

    if not seller.has_bank_details:
        raise ValidationError(
            f"{seller.shop_name} has no bank details on file", field="bank_details"
        )

    ids = [o.seller_order_id for o in batch.orders]
    if len(set(ids)) != len(ids):
        raise ValidationError("Payout batch lists a seller order twice", field="orders")

    seller_orders = {
        so.id: so
        for so in session.exec(select(SellerOrder).where(SellerOrder.id.in_(ids))).all()
    }

    for seller_order_id in ids:
        seller_order = seller_orders.get(seller_order_id)
        if seller_order is None:
            raise ValidationError(f"Seller order {seller_order_id} does not exist", field="orders")
        if seller_order.seller_id != seller.id:
            raise ValidationError(
                f"Seller order {seller_order_id} belongs to another seller", field="orders"
            )
        if seller_order.status != SellerOrderStatus.delivered.value:
            raise ValidationError(
                f"Seller order {seller_order_id} is {seller_order.status}, not delivered",
                field="orders",
            )

    rate = settings.commission_rate
    paid_at = datetime.utcnow()
    seller_id = seller.id
    payouts = []

    for seller_order_id in ids:
        seller_order = seller_orders[seller_order_id]

        # stored subtotal, not an even share of the batch total
        amount = seller_order.subtotal
        commission, net = commission_split(amount, rate)

        payouts.append(
            SellerPayout(
                seller_id=seller_id,
                seller_order_id=seller_order.id,
                amount=amount,
                commission_rate=rate,
                commission_amount=commission,
                net_amount=net,
                status=PayoutStatus.completed.value,
                payment_method=payment_method,
                transaction_reference=reference,
                paid_at=paid_at,
            )
        )

        log_order_event(
            session,
            order_id=seller_order.order_id,
            seller_order_id=seller_order.id,
            event_type="payout_recorded",
            label=f"Payout recorded ({reference})",
            created_by=actor,
            meta={"amount": str(amount), "net_amount": str(net)},
        )

    session.add_all(payouts)

    try:
        session.commit()
    except IntegrityError as e:
        session.rollback()
        logger.warning(
            f"Payout conflict for seller {seller_id} orders {ids} (ref {reference}): {e}"
        )
        raise PayoutConflictError(
            "Some of these orders were already paid. Refresh pending payouts and try again.", e
        )
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Failed to record payouts for seller {batch.seller_id}: {e}")
        raise DatabaseError("Failed to mark payout as paid", e)

    for payout in payouts:
        session.refresh(payout)

    logger.info(
        f"Payout marked as paid for {batch.seller_name}: {len(payouts)} orders, ref {reference}"
    )
    return payouts


def batch_for_orders(session: Session, seller_id: int, seller_order_ids: List[int]) -> PayoutBatch:
    """Rebuild the batch an operator saw, without dropping already-paid orders."""
    seller = session.get(Seller, seller_id)
    if not seller:
        raise NotFoundError("Seller")

    ids = list(dict.fromkeys(seller_order_ids))
    rows = session.exec(
        select(SellerOrder, Order)
        .join(Order, Order.id == SellerOrder.order_id)
        .where(SellerOrder.id.in_(ids))
        .order_by(SellerOrder.id)
    ).all()

    found = {so.id for so, _ in rows}
    missing = [i for i in ids if i not in found]
    if missing:
        raise ValidationError(f"Seller orders not found: {missing}", field="seller_order_ids")

    return build_batch(seller, rows)


def pay_seller(
    session: Session,
    seller_id: int,
    transaction_reference: str,
    *,
    seller_order_ids: Optional[List[int]] = None,
    payment_method: str = "bank_transfer",
    actor: str = "admin",
) -> List[SellerPayout]:
    if seller_order_ids:
        batch = batch_for_orders(session, seller_id, seller_order_ids)
    else:
        batch = compute_pending_payouts(session).get(seller_id)
        if batch is None:
            raise NotFoundError("Pending payout")

    return mark_batch_paid(
        session,
        batch,
        transaction_reference,
        payment_method=payment_method,
        actor=actor,
    )


def list_payout_history(session: Session, seller_id: Optional[int] = None):
    query = (
        select(SellerPayout, Seller)
        .join(Seller, Seller.id == SellerPayout.seller_id)
    )
    if seller_id is not None:
        query = query.where(SellerPayout.seller_id == seller_id)

    return session.exec(
        query.order_by(SellerPayout.paid_at.desc(), SellerPayout.id.desc())
    ).all()
