import logging
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import selectinload
from sqlmodel import Session, select

from marketplace.config import settings
from marketplace.constants.order_status import PaymentStatus, SellerOrderStatus, SellerStatus
from marketplace.errors import DatabaseError, NotFoundError, ValidationError
from marketplace.models import Order, OrderItem, Seller, SellerOrder
from marketplace.schemas.checkout_schemas import CartLine, CartSummary, PlaceOrderRequest
from marketplace.services.order_event_service import log_order_event

logger = logging.getLogger(__name__)

TWO_PLACES = Decimal("0.01")


def compute_cart_totals(items: Iterable[CartLine]) -> CartSummary:
    items = list(items)
    subtotal = sum((line.unit_price * line.quantity for line in items), Decimal("0"))
    shipping = settings.shipping_fee if items else Decimal("0")
    tax = subtotal * settings.tax_rate

    return CartSummary(
        subtotal=subtotal.quantize(TWO_PLACES),
        shipping=shipping.quantize(TWO_PLACES),
        tax=tax.quantize(TWO_PLACES),
        total=(subtotal + shipping + tax).quantize(TWO_PLACES),
    )


def partition_by_seller(items: Iterable[CartLine]) -> Dict[int, List[CartLine]]:
    """Group cart lines per seller, keeping first-seen seller order and line order."""
    groups: Dict[int, List[CartLine]] = {}
    for line in items:
        groups.setdefault(line.seller_id, []).append(line)
    return groups


def _validate_order_request(session: Session, data: PlaceOrderRequest) -> None:
    if not data.customer_name.strip():
        raise ValidationError("Customer name is required", field="customer_name")
    if not data.customer_email.strip():
        raise ValidationError("Customer email is required", field="customer_email")
    if not data.items:
        raise ValidationError("Your cart is empty", field="items")

    for line in data.items:
        if line.quantity < 1:
            raise ValidationError(f"Invalid quantity for {line.product_name}", field="items")
        if line.unit_price < 0:
            raise ValidationError(f"Invalid price for {line.product_name}", field="items")
        if line.seller_id is None:
            raise ValidationError(f"Missing seller for {line.product_name}", field="items")

    seller_ids = {line.seller_id for line in data.items}
    sellers = session.exec(select(Seller).where(Seller.id.in_(list(seller_ids)))).all()
    known = {s.id: s for s in sellers}

    for seller_id in seller_ids:
        seller = known.get(seller_id)
        if seller is None:
            raise ValidationError(f"Unknown seller {seller_id}", field="items")
        if seller.status != SellerStatus.active.value:
            raise ValidationError(f"Seller {seller.shop_name} is not accepting orders", field="items")

    is_seller_email = session.exec(
        select(func.count(Seller.id))
        .where(func.lower(Seller.email) == data.customer_email.strip().lower())
        .where(Seller.status == SellerStatus.active.value)
    ).one()
    if is_seller_email:
        raise ValidationError(
            "This email is registered as a seller. Sellers cannot place orders.",
            field="customer_email",
        )

    items_subtotal = sum((line.unit_price * line.quantity for line in data.items), Decimal("0"))
    if data.total_amount < items_subtotal:
        raise ValidationError("Order total is lower than the items subtotal", field="total_amount")


def find_order_by_request_id(session: Session, request_id: Optional[str]) -> Optional[Order]:
    if not request_id:
        return None
    return session.exec(select(Order).where(Order.request_id == request_id)).first()


def place_order(session: Session, data: PlaceOrderRequest) -> Order:
    """
    Split a multi-seller cart into one Order, one SellerOrder per seller and
    one OrderItem per cart line. The whole group is written in one
    transaction.
    """
    logger.info(
        f"Creating order for {data.customer_email}: total={data.total_amount}, items={len(data.items)}"
    )

    existing = find_order_by_request_id(session, data.request_id)
    if existing:
        logger.info(f"Order request {data.request_id} already placed as order {existing.id}")
        return existing

    _validate_order_request(session, data)

    groups = partition_by_seller(data.items)
    logger.debug(f"Items grouped into {len(groups)} seller orders")

    order = Order(
        request_id=data.request_id,
        customer_name=data.customer_name.strip(),
        customer_email=data.customer_email.strip(),
        total_amount=data.total_amount,
        payment_status=PaymentStatus.paid.value,
        payment_method=data.payment_method,
        shipping_address=data.shipping_address.model_dump_json(),
    )

    try:
        session.add(order)
        session.flush()

        for seller_id, lines in groups.items():
            seller_order = SellerOrder(
                order_id=order.id,
                seller_id=seller_id,
                subtotal=sum((line.unit_price * line.quantity for line in lines), Decimal("0")),
                status=SellerOrderStatus.pending.value,
            )
            session.add(seller_order)
            session.flush()

            session.add_all([
                OrderItem(
                    seller_order_id=seller_order.id,
                    product_id=line.product_id,
                    product_name=line.product_name,
                    product_image=line.product_image,
                    price=line.unit_price,
                    quantity=line.quantity,
                )
                for line in lines
            ])

            log_order_event(
                session,
                order_id=order.id,
                seller_order_id=seller_order.id,
                event_type="seller_order_created",
                label=f"Seller order created for seller {seller_id}",
                meta={"subtotal": str(seller_order.subtotal), "items": len(lines)},
            )

        session.commit()
    except IntegrityError as e:
        session.rollback()
        existing = find_order_by_request_id(session, data.request_id)
        if existing:
            # a concurrent submission with the same request id won the race
            return existing
        logger.error(f"Failed to create order for {data.customer_email}: {e}")
        raise DatabaseError("Failed to create order", e)
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Failed to create order for {data.customer_email}: {e}")
        raise DatabaseError("Failed to create order", e)

    session.refresh(order)
    logger.info(f"Order {order.id} created with {len(groups)} seller orders")
    return order


def get_order(session: Session, order_id: int) -> Order:
    order = session.exec(
        select(Order)
        .where(Order.id == order_id)
        .options(
            selectinload(Order.seller_orders).selectinload(SellerOrder.items),
            selectinload(Order.seller_orders).selectinload(SellerOrder.seller),
        )
    ).first()

    if not order:
        raise NotFoundError("Order")
    return order


def list_customer_orders(session: Session, customer_email: str) -> List[Order]:
    return session.exec(
        select(Order)
        .where(func.lower(Order.customer_email) == customer_email.strip().lower())
        .options(
            selectinload(Order.seller_orders).selectinload(SellerOrder.items),
            selectinload(Order.seller_orders).selectinload(SellerOrder.seller),
        )
        .order_by(Order.created_at.desc(), Order.id.desc())
    ).all()


def attach_receipt(session: Session, order_id: int, receipt_image: str) -> Order:
    if not receipt_image or not receipt_image.strip():
        raise ValidationError("Please upload payment receipt", field="receipt_image")

    order = session.get(Order, order_id)
    if not order:
        raise NotFoundError("Order")

    order.receipt_image = receipt_image
    session.add(order)

    log_order_event(
        session,
        order_id=order.id,
        event_type="receipt_uploaded",
        label="Payment receipt uploaded",
        created_by=order.customer_email,
    )

    try:
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.warning(f"Failed to save receipt for order {order_id}: {e}")
        raise DatabaseError("Failed to save receipt", e)

    session.refresh(order)
    return order
