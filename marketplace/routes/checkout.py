
from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from marketplace.database import get_session
from marketplace.dependencies.rate_limit import get_rate_limiter
from marketplace.models import User
from marketplace.schemas.checkout_schemas import (
    CartSummaryRequest,
    PlaceOrderRequest,
    ReceiptUpload,
)
from marketplace.services.order_service import (
    attach_receipt,
    compute_cart_totals,
    find_order_by_request_id,
    get_order,
    list_customer_orders,
    place_order,
)
from marketplace.services.rate_limiter import RateLimiter
from marketplace.utils.serializers import order_to_dict
from marketplace.utils.token import get_current_user


router = APIRouter()


@router.post("/summary")
def cart_summary(data: CartSummaryRequest):
    return compute_cart_totals(data.items)


@router.post("/orders", status_code=201)
def create_order(
    data: PlaceOrderRequest,
    session: Session = Depends(get_session),
    limiter: RateLimiter = Depends(get_rate_limiter),
):
    # a retry of an order we already stored is answered without counting
    order = find_order_by_request_id(session, data.request_id)
    if order is None:
        limiter.check("place_order", data.customer_email)
        order = place_order(session, data)

    order = get_order(session, order.id)

    return {
        "message": "Order placed successfully",
        "order_id": order.id,
        "total_amount": order.total_amount,
        "payment_status": order.payment_status,
        "seller_orders": [
            {
                "seller_order_id": so.id,
                "seller_id": so.seller_id,
                "shop_name": so.seller.shop_name if so.seller else None,
                "subtotal": so.subtotal,
                "status": so.status,
                "items": len(so.items),
            }
            for so in order.seller_orders
        ],
    }


@router.post("/orders/{order_id}/receipt")
def upload_receipt(
    order_id: int,
    data: ReceiptUpload,
    session: Session = Depends(get_session),
):
    order = attach_receipt(session, order_id, data.receipt_image)
    return {"message": "Receipt uploaded", "order_id": order.id}


@router.get("/my-orders")
def my_orders(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    orders = list_customer_orders(session, current_user.email)
    return {
        "total": len(orders),
        "results": [order_to_dict(o) for o in orders],
    }


@router.get("/orders/{order_id}")
def order_details(
    order_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    order = get_order(session, order_id)

    is_owner = order.customer_email.lower() == (current_user.email or "").lower()
    if not is_owner and current_user.role != "admin":
        raise HTTPException(404, "Order not found")

    return order_to_dict(order, include_receipt=current_user.role == "admin")
