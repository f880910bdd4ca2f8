from fastapi import APIRouter, Depends
from sqlmodel import Session

from marketplace.database import get_session
from marketplace.models import User
from marketplace.schemas.checkout_schemas import RatingCreate
from marketplace.services.rating_service import rate_seller_order
from marketplace.utils.token import get_current_user

router = APIRouter()


@router.post("", status_code=201)
def rate_order(
    data: RatingCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    rating = rate_seller_order(
        session,
        seller_order_id=data.seller_order_id,
        customer_email=current_user.email,
        rating=data.rating,
        comment=data.comment,
    )
    return {
        "message": "Thanks for rating your order",
        "rating_id": rating.id,
        "seller_id": rating.seller_id,
        "rating": rating.rating,
    }
