# -------- ADMIN ORDERS --------
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import String
from sqlmodel import Session, or_, select

from marketplace.constants.order_status import ActorRole, SellerOrderStatus
from marketplace.database import get_session
from marketplace.models import Order, SellerOrder, User
from marketplace.schemas.seller_schemas import SellerOrderStatusUpdate
from marketplace.services.fulfillment_service import advance_seller_order, delete_order
from marketplace.services.order_event_service import list_order_events
from marketplace.utils.pagination import paginate
from marketplace.utils.serializers import order_to_dict
from marketplace.utils.token import get_current_admin

router = APIRouter()


@router.get("/orders")
def list_orders(
    page: int = 1,
    limit: int = 10,
    search: Optional[str] = None,
    status: Optional[SellerOrderStatus] = None,
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    session: Session = Depends(get_session),
    _: User = Depends(get_current_admin),
):
    query = select(Order)

    if search:
        query = query.where(
            or_(
                Order.customer_name.ilike(f"%{search}%"),
                Order.customer_email.ilike(f"%{search}%"),
                Order.id.cast(String).ilike(f"%{search}%"),
            )
        )

    if status:
        # orders with at least one seller order in that status
        query = query.where(
            Order.id.in_(
                select(SellerOrder.order_id).where(SellerOrder.status == status.value)
            )
        )

    if start_date:
        query = query.where(Order.created_at >= start_date)

    if end_date:
        query = query.where(Order.created_at <= end_date)

    return paginate(
        session=session,
        query=query.order_by(Order.created_at.desc(), Order.id.desc()),
        page=page,
        limit=limit,
        serialize=order_to_dict,
    )


@router.get("/orders/{order_id}/events")
def order_timeline(
    order_id: int,
    session: Session = Depends(get_session),
    _: User = Depends(get_current_admin),
):
    return [
        {
            "id": e.id,
            "seller_order_id": e.seller_order_id,
            "event_type": e.event_type,
            "label": e.label,
            "meta": e.meta,
            "created_by": e.created_by,
            "created_at": e.created_at,
        }
        for e in list_order_events(session, order_id)
    ]


@router.patch("/seller-orders/{seller_order_id}/status")
def update_seller_order_status(
    seller_order_id: int,
    data: SellerOrderStatusUpdate,
    session: Session = Depends(get_session),
    admin: User = Depends(get_current_admin),
):
    seller_order = advance_seller_order(
        session,
        seller_order_id,
        data.status,
        role=ActorRole.admin,
        tracking_number=data.tracking_number,
        actor=admin.email,
    )
    return {
        "message": "Order status updated",
        "seller_order_id": seller_order.id,
        "status": seller_order.status,
    }


@router.delete("/orders/{order_id}")
def remove_order(
    order_id: int,
    session: Session = Depends(get_session),
    _: User = Depends(get_current_admin),
):
    delete_order(session, order_id)
    return {"message": "Order deleted", "order_id": order_id}
