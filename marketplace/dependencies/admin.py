from fastapi import Depends
from sqlmodel import Session

from marketplace.database import get_session
from marketplace.errors import NotFoundError
from marketplace.models import Seller, User
from marketplace.utils.token import get_current_admin


def get_seller_or_404(
    seller_id: int,
    session: Session = Depends(get_session),
    _: User = Depends(get_current_admin),
) -> Seller:
    seller = session.get(Seller, seller_id)
    if not seller:
        raise NotFoundError("Seller")
    return seller
