import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import delete, func, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload
from sqlmodel import Session, select

from marketplace.constants.order_status import ActorRole, SellerOrderStatus, can_transition
from marketplace.errors import (
    AppError,
    DatabaseError,
    ForbiddenError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from marketplace.models import (
    Order,
    OrderEvent,
    OrderItem,
    SellerOrder,
    SellerPayout,
    SellerRating,
)
from marketplace.services.inventory_service import reduce_product_stock
from marketplace.services.order_event_service import log_order_event
from marketplace.services.rating_service import refresh_seller_total_sales

logger = logging.getLogger(__name__)


def _parse_status(value) -> SellerOrderStatus:
    try:
        return SellerOrderStatus(value)
    except ValueError:
        raise ValidationError(f"Unknown status '{value}'", field="status")


def advance_seller_order(
    session: Session,
    seller_order_id: int,
    new_status,
    *,
    role: ActorRole,
    seller_id: Optional[int] = None,
    tracking_number: Optional[str] = None,
    actor: str = "system",
) -> SellerOrder:
    """
    Move a seller order along its fulfillment path.

    The status write is a compare-and-set on the status the caller saw, so
    two sessions racing on the same order cannot both apply a transition.
    Entering "delivered" also requires delivered_at to still be empty; only
    the call that sets it decrements stock.
    """
    role = ActorRole(role)
    new = _parse_status(new_status)

    seller_order = session.get(SellerOrder, seller_order_id)
    if not seller_order:
        raise NotFoundError("Seller order")

    if role == ActorRole.seller and seller_order.seller_id != seller_id:
        raise ForbiddenError("This order belongs to another seller")

    current = SellerOrderStatus(seller_order.status)

    if current == new:
        # duplicate submission re-asserting the state we are already in
        logger.info(f"Seller order {seller_order_id} already {new.value}, nothing to do")
        return seller_order

    if not can_transition(role, current, new):
        raise InvalidTransitionError(current.value, new.value)

    now = datetime.utcnow()
    values = {"status": new.value}
    stmt = update(SellerOrder).where(
        SellerOrder.id == seller_order_id,
        SellerOrder.status == current.value,
    )

    if new == SellerOrderStatus.shipped:
        values["shipped_at"] = now
        if tracking_number:
            values["tracking_number"] = tracking_number.strip()

    if new == SellerOrderStatus.delivered:
        stmt = stmt.where(SellerOrder.delivered_at.is_(None))
        values["delivered_at"] = now

    try:
        result = session.execute(stmt.values(**values).execution_options(synchronize_session=False))

        if result.rowcount == 0:
            session.rollback()
            session.refresh(seller_order)
            if seller_order.status == new.value:
                logger.info(f"Seller order {seller_order_id} moved to {new.value} by another session")
                return seller_order
            raise InvalidTransitionError(seller_order.status, new.value)

        log_order_event(
            session,
            order_id=seller_order.order_id,
            seller_order_id=seller_order_id,
            event_type="status_changed",
            label=f"{current.value} -> {new.value}",
            created_by=actor,
            meta={"from": current.value, "to": new.value, "role": role.value},
        )
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Failed to update seller order {seller_order_id} to {new.value}: {e}")
        raise DatabaseError("Failed to update order status", e)

    session.refresh(seller_order)
    logger.info(f"Seller order {seller_order_id} status updated {current.value} -> {new.value}")

    if new == SellerOrderStatus.delivered:
        _on_delivered(session, seller_order)

    return seller_order


def _on_delivered(session: Session, seller_order: SellerOrder) -> None:
    """Best effort: a failing item is logged and the rest still go through."""
    items = session.exec(
        select(OrderItem).where(OrderItem.seller_order_id == seller_order.id)
    ).all()

    for item in items:
        try:
            reduce_product_stock(session, item.product_id, item.quantity)
            session.commit()
        except (AppError, SQLAlchemyError) as e:
            session.rollback()
            logger.warning(
                f"Failed to reduce stock for product {item.product_id} "
                f"(seller order {seller_order.id}): {e}"
            )

    try:
        refresh_seller_total_sales(session, seller_order.seller_id)
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.warning(f"Failed to refresh total sales for seller {seller_order.seller_id}: {e}")


def list_seller_orders(session: Session, seller_id: int) -> List[SellerOrder]:
    return session.exec(
        select(SellerOrder)
        .where(SellerOrder.seller_id == seller_id)
        .options(selectinload(SellerOrder.order), selectinload(SellerOrder.items))
        .order_by(SellerOrder.created_at.desc(), SellerOrder.id.desc())
    ).all()


def delete_order(session: Session, order_id: int) -> None:
    """Admin removal of an order and everything hanging off it."""
    order = session.get(Order, order_id)
    if not order:
        raise NotFoundError("Order")

    seller_order_ids = session.exec(
        select(SellerOrder.id).where(SellerOrder.order_id == order_id)
    ).all()

    if seller_order_ids:
        paid = session.exec(
            select(func.count(SellerPayout.id))
            .where(SellerPayout.seller_order_id.in_(seller_order_ids))
        ).one()
        if paid:
            raise ValidationError("Order has recorded payouts and cannot be deleted")

    try:
        if seller_order_ids:
            session.execute(delete(OrderItem).where(OrderItem.seller_order_id.in_(seller_order_ids)))
            session.execute(delete(SellerRating).where(SellerRating.seller_order_id.in_(seller_order_ids)))
        session.execute(delete(OrderEvent).where(OrderEvent.order_id == order_id))
        session.execute(delete(SellerOrder).where(SellerOrder.order_id == order_id))
        session.execute(delete(Order).where(Order.id == order_id))
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Failed to delete order {order_id}: {e}")
        raise DatabaseError("Failed to delete order", e)

    logger.info(f"Order {order_id} deleted with {len(seller_order_ids)} seller orders")
