from typing import Optional

from fastapi import APIRouter, Depends
from sqlmodel import Session

from marketplace.database import get_session
from marketplace.dependencies.admin import get_seller_or_404
from marketplace.models import Seller, User
from marketplace.schemas.seller_schemas import SellerStatusUpdate
from marketplace.services.earnings_service import compute_seller_earnings
from marketplace.services.seller_service import list_sellers, set_seller_status
from marketplace.utils.serializers import seller_to_dict
from marketplace.utils.token import get_current_admin

router = APIRouter()


@router.get("/sellers")
def all_sellers(
    status: Optional[str] = None,
    session: Session = Depends(get_session),
    _: User = Depends(get_current_admin),
):
    sellers = list_sellers(session, status)
    return {"total": len(sellers), "results": [seller_to_dict(s) for s in sellers]}


@router.get("/sellers/{seller_id}/earnings")
def seller_earnings(
    seller: Seller = Depends(get_seller_or_404),
    session: Session = Depends(get_session),
):
    return compute_seller_earnings(session, seller.id)


@router.patch("/sellers/{seller_id}/status")
def update_seller_status(
    seller_id: int,
    data: SellerStatusUpdate,
    session: Session = Depends(get_session),
    _: User = Depends(get_current_admin),
):
    seller = set_seller_status(session, seller_id, data.status)
    return {"message": f"Seller is now {seller.status}", "seller": seller_to_dict(seller)}
