import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from marketplace.constants.order_status import SellerStatus
from marketplace.errors import ConflictError, DatabaseError, NotFoundError, ValidationError
from marketplace.models import Seller, User
from marketplace.schemas.seller_schemas import SellerProfileUpdate, SellerRegister

logger = logging.getLogger(__name__)


def get_seller_for_user(session: Session, user_id: int) -> Optional[Seller]:
    return session.exec(select(Seller).where(Seller.user_id == user_id)).first()


def register_seller(session: Session, user: User, data: SellerRegister) -> Seller:
    if not data.shop_name or not data.shop_name.strip():
        raise ValidationError("Shop name is required", field="shop_name")

    if get_seller_for_user(session, user.id):
        raise ConflictError("You already have a seller account")

    seller = Seller(
        user_id=user.id,
        shop_name=data.shop_name.strip(),
        shop_description=data.shop_description,
        email=user.email,
        status=SellerStatus.pending.value,
    )
    session.add(seller)

    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise ConflictError("You already have a seller account")
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Failed to create seller {data.shop_name}: {e}")
        raise DatabaseError("Failed to create seller", e)

    session.refresh(seller)
    logger.info(f"Seller created: {seller.shop_name} (ID: {seller.id})")
    return seller


def update_seller_profile(session: Session, seller: Seller, data: SellerProfileUpdate) -> Seller:
    changes = data.model_dump(exclude_unset=True)

    if "shop_name" in changes and not (changes["shop_name"] or "").strip():
        raise ValidationError("Shop name is required", field="shop_name")

    for key, value in changes.items():
        setattr(seller, key, value.strip() if isinstance(value, str) else value)

    session.add(seller)
    try:
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Failed to update seller {seller.id}: {e}")
        raise DatabaseError("Failed to update profile", e)

    session.refresh(seller)
    return seller


def set_seller_status(session: Session, seller_id: int, status: str) -> Seller:
    try:
        new_status = SellerStatus(status)
    except ValueError:
        raise ValidationError(f"Unknown seller status '{status}'", field="status")

    seller = session.get(Seller, seller_id)
    if not seller:
        raise NotFoundError("Seller")

    old_status = seller.status
    seller.status = new_status.value
    session.add(seller)

    # sellers act through their user account
    user = session.get(User, seller.user_id)
    if user and new_status == SellerStatus.active and user.role == "customer":
        user.role = "seller"
        session.add(user)

    try:
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Failed to update seller {seller_id} status: {e}")
        raise DatabaseError("Failed to update seller status", e)

    session.refresh(seller)
    logger.info(f"Seller {seller_id} status {old_status} -> {seller.status}")
    return seller


def list_sellers(session: Session, status: Optional[str] = None) -> List[Seller]:
    query = select(Seller)
    if status:
        query = query.where(Seller.status == status)
    return session.exec(query.order_by(Seller.created_at.desc(), Seller.id.desc())).all()
