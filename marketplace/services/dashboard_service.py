from decimal import Decimal

from sqlalchemy import func
from sqlmodel import Session, select

from marketplace.models import Order, Seller
from marketplace.services.payout_service import compute_pending_payouts


def compute_dashboard_stats(session: Session) -> dict:
    total_orders, total_revenue = session.exec(
        select(func.count(Order.id), func.coalesce(func.sum(Order.total_amount), 0))
    ).one()

    total_customers = session.exec(
        select(func.count(func.distinct(func.lower(Order.customer_email))))
    ).one()

    total_sellers = session.exec(select(func.count(Seller.id))).one()

    pending = compute_pending_payouts(session)

    return {
        "total_orders": total_orders,
        "total_revenue": Decimal(total_revenue),
        "total_customers": total_customers,
        "total_sellers": total_sellers,
        "pending_payout_sellers": len(pending),
        "pending_payout_total": sum((b.total_amount for b in pending.values()), Decimal("0")),
    }


def list_customers(session: Session) -> list:
    """Customers are derived from orders, keyed by email."""
    email = func.lower(Order.customer_email)
    rows = session.exec(
        select(
            email,
            func.max(Order.customer_name),
            func.count(Order.id),
            func.coalesce(func.sum(Order.total_amount), 0),
            func.max(Order.created_at),
        )
        .group_by(email)
        .order_by(func.max(Order.created_at).desc())
    ).all()

    return [
        {
            "email": row[0],
            "name": row[1],
            "total_orders": row[2],
            "total_spent": Decimal(row[3]),
            "last_order": row[4],
        }
        for row in rows
    ]
