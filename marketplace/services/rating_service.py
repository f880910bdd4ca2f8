import logging
from decimal import Decimal
from typing import Optional

from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from marketplace.constants.order_status import SellerOrderStatus
from marketplace.errors import ConflictError, DatabaseError, NotFoundError, ValidationError
from marketplace.models import Order, Seller, SellerOrder, SellerRating

logger = logging.getLogger(__name__)


def update_seller_rating(session: Session, seller_id: int) -> None:
    """Recompute a seller's average rating in a single statement."""
    average = (
        select(func.coalesce(func.avg(SellerRating.rating), 0.0))
        .where(SellerRating.seller_id == seller_id)
        .scalar_subquery()
    )
    session.execute(
        update(Seller)
        .where(Seller.id == seller_id)
        .values(rating=average)
        .execution_options(synchronize_session=False)
    )


def refresh_seller_total_sales(session: Session, seller_id: int) -> None:
    """total_sales = sum of the seller's delivered subtotals."""
    delivered = (
        select(func.coalesce(func.sum(SellerOrder.subtotal), Decimal("0")))
        .where(SellerOrder.seller_id == seller_id)
        .where(SellerOrder.status == SellerOrderStatus.delivered.value)
        .scalar_subquery()
    )
    session.execute(
        update(Seller)
        .where(Seller.id == seller_id)
        .values(total_sales=delivered)
        .execution_options(synchronize_session=False)
    )


def rate_seller_order(
    session: Session,
    *,
    seller_order_id: int,
    customer_email: str,
    rating: int,
    comment: Optional[str] = None,
) -> SellerRating:
    if rating < 1 or rating > 5:
        raise ValidationError("Rating must be between 1 and 5", field="rating")

    result = session.exec(
        select(SellerOrder, Order)
        .join(Order, Order.id == SellerOrder.order_id)
        .where(SellerOrder.id == seller_order_id)
    ).first()

    if not result:
        raise NotFoundError("Seller order")

    seller_order, order = result

    if order.customer_email.lower() != customer_email.lower():
        raise NotFoundError("Seller order")

    if seller_order.status != SellerOrderStatus.delivered.value:
        raise ValidationError("Only delivered orders can be rated", field="seller_order_id")

    entry = SellerRating(
        seller_id=seller_order.seller_id,
        seller_order_id=seller_order.id,
        customer_email=customer_email,
        rating=rating,
        comment=comment,
    )
    session.add(entry)

    try:
        session.flush()
    except IntegrityError:
        session.rollback()
        raise ConflictError("You have already rated this order")

    try:
        update_seller_rating(session, seller_order.seller_id)
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Failed to store rating for seller order {seller_order_id}: {e}")
        raise DatabaseError("Failed to submit rating", e)

    session.refresh(entry)
    logger.info(f"Seller order {seller_order_id} rated {rating}")
    return entry
