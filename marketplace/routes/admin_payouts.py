from typing import Optional

from fastapi import APIRouter, Depends
from sqlmodel import Session

from marketplace.database import get_session
from marketplace.models import User
from marketplace.schemas.payout_schemas import MarkPaidRequest
from marketplace.services.payout_service import (
    compute_pending_payouts,
    list_payout_history,
    pay_seller,
)
from marketplace.utils.serializers import payout_to_dict
from marketplace.utils.token import get_current_admin

router = APIRouter()


@router.get("/pending")
def pending_payouts(
    session: Session = Depends(get_session),
    _: User = Depends(get_current_admin),
):
    batches = list(compute_pending_payouts(session).values())
    return {"total": len(batches), "results": batches}


@router.post("/{seller_id}/mark-paid")
def mark_paid(
    seller_id: int,
    data: MarkPaidRequest,
    session: Session = Depends(get_session),
    admin: User = Depends(get_current_admin),
):
    payouts = pay_seller(
        session,
        seller_id,
        data.transaction_reference,
        seller_order_ids=data.seller_order_ids,
        payment_method=data.payment_method,
        actor=admin.email,
    )

    return {
        "message": "Payout marked as paid",
        "seller_id": seller_id,
        "transaction_reference": data.transaction_reference.strip(),
        "seller_order_ids": [p.seller_order_id for p in payouts],
        "payouts": [payout_to_dict(p) for p in payouts],
    }


@router.get("/history")
def payout_history(
    seller_id: Optional[int] = None,
    session: Session = Depends(get_session),
    _: User = Depends(get_current_admin),
):
    rows = list_payout_history(session, seller_id=seller_id)
    return {
        "total": len(rows),
        "results": [payout_to_dict(payout, seller) for payout, seller in rows],
    }
