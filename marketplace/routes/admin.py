from fastapi import APIRouter, Depends
from sqlmodel import Session

from marketplace.database import get_session
from marketplace.models import User
from marketplace.services.dashboard_service import compute_dashboard_stats, list_customers
from marketplace.utils.token import get_current_admin

router = APIRouter()


@router.get("/stats")
def dashboard_stats(
    session: Session = Depends(get_session),
    _: User = Depends(get_current_admin),
):
    return compute_dashboard_stats(session)


@router.get("/customers")
def customers(
    session: Session = Depends(get_session),
    _: User = Depends(get_current_admin),
):
    rows = list_customers(session)
    return {"total": len(rows), "results": rows}
