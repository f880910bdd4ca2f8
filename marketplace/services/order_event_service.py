# marketplace/services/order_event_service.py

from datetime import datetime
from typing import List, Optional
from uuid import uuid4
from sqlmodel import Session, select
from marketplace.models import OrderEvent


def log_order_event(
    session: Session,
    order_id: int,
    event_type: str,
    label: str,
    created_by: str = "system",
    seller_order_id: Optional[int] = None,
    meta: Optional[dict] = None,
):
    """
    Append-only event log for the order timeline.
    Added to the caller's session; committed with the caller's change.
    """

    event = OrderEvent(
        id=str(uuid4()),
        order_id=order_id,
        seller_order_id=seller_order_id,
        event_type=event_type,
        label=label,
        meta=meta,
        created_by=created_by,
        created_at=datetime.utcnow(),
    )

    session.add(event)
    return event


def list_order_events(session: Session, order_id: int) -> List[OrderEvent]:
    return session.exec(
        select(OrderEvent)
        .where(OrderEvent.order_id == order_id)
        .order_by(OrderEvent.created_at)
    ).all()
