from fastapi import APIRouter, Depends
from sqlmodel import Session

from marketplace.constants.order_status import ActorRole
from marketplace.database import get_session
from marketplace.models import Seller, User
from marketplace.schemas.seller_schemas import (
    SellerOrderStatusUpdate,
    SellerProfileUpdate,
    SellerRegister,
)
from marketplace.services.earnings_service import compute_seller_earnings
from marketplace.services.fulfillment_service import advance_seller_order, list_seller_orders
from marketplace.services.payout_service import list_payout_history
from marketplace.services.seller_service import register_seller, update_seller_profile
from marketplace.utils.serializers import (
    payout_to_dict,
    seller_order_to_dict,
    seller_to_dict,
    shipping_address,
)
from marketplace.utils.token import get_current_seller, get_current_user

router = APIRouter()


@router.post("/register", status_code=201)
def register(
    data: SellerRegister,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    seller = register_seller(session, current_user, data)
    return {
        "message": "Seller application submitted, awaiting approval",
        "seller": seller_to_dict(seller),
    }


@router.get("/me")
def my_profile(seller: Seller = Depends(get_current_seller)):
    return seller_to_dict(seller)


@router.patch("/me")
def update_profile(
    data: SellerProfileUpdate,
    session: Session = Depends(get_session),
    seller: Seller = Depends(get_current_seller),
):
    seller = update_seller_profile(session, seller, data)
    return {"message": "Profile updated", "seller": seller_to_dict(seller)}


@router.get("/orders")
def my_orders(
    session: Session = Depends(get_session),
    seller: Seller = Depends(get_current_seller),
):
    results = []
    for seller_order in list_seller_orders(session, seller.id):
        data = seller_order_to_dict(seller_order)
        order = seller_order.order
        data["customer_name"] = order.customer_name
        data["customer_email"] = order.customer_email
        data["shipping_address"] = shipping_address(order)
        results.append(data)

    return {"total": len(results), "results": results}


@router.patch("/orders/{seller_order_id}/status")
def update_order_status(
    seller_order_id: int,
    data: SellerOrderStatusUpdate,
    session: Session = Depends(get_session),
    seller: Seller = Depends(get_current_seller),
):
    seller_order = advance_seller_order(
        session,
        seller_order_id,
        data.status,
        role=ActorRole.seller,
        seller_id=seller.id,
        tracking_number=data.tracking_number,
        actor=seller.email or f"seller:{seller.id}",
    )
    return {
        "message": "Order status updated",
        "seller_order_id": seller_order.id,
        "status": seller_order.status,
        "tracking_number": seller_order.tracking_number,
        "delivered_at": seller_order.delivered_at,
    }


@router.get("/earnings")
def my_earnings(
    session: Session = Depends(get_session),
    seller: Seller = Depends(get_current_seller),
):
    return compute_seller_earnings(session, seller.id)


@router.get("/payouts")
def my_payouts(
    session: Session = Depends(get_session),
    seller: Seller = Depends(get_current_seller),
):
    rows = list_payout_history(session, seller_id=seller.id)
    return {
        "total": len(rows),
        "results": [payout_to_dict(payout) for payout, _ in rows],
    }
