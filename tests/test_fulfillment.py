"""
Tests for the seller order state machine and the delivery side effects.
"""
from decimal import Decimal

import pytest
from sqlmodel import Session, select

from marketplace.constants.order_status import (
    ActorRole,
    SellerOrderStatus,
    can_transition,
)
from marketplace.errors import (
    ForbiddenError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from marketplace.models import Order, OrderEvent, Product, Seller, SellerOrder
from marketplace.schemas.checkout_schemas import CartLine
from marketplace.services.fulfillment_service import advance_seller_order, delete_order
from marketplace.services.order_service import place_order
from marketplace.services.payout_service import pay_seller


@pytest.fixture
def placed(session, seller_a, make_product, order_request):
    """A pending seller order for seller_a: 3 mugs (stock 10) and 2 plates (stock 5)."""
    mug = make_product(seller_a, "Mug", "10.00", stock=10)
    plate = make_product(seller_a, "Plate", "5.00", stock=5)
    order = place_order(session, order_request([(mug, 3), (plate, 2)]))
    return order.seller_orders[0], mug, plate


def _stock(engine, product_id):
    with Session(engine) as fresh:
        return fresh.get(Product, product_id).stock_quantity


@pytest.mark.unit
class TestTransitionTable:
    def test_seller_walks_linear_path(self):
        S = SellerOrderStatus
        assert can_transition(ActorRole.seller, S.pending, S.processing)
        assert can_transition(ActorRole.seller, S.shipped, S.delivered)
        assert not can_transition(ActorRole.seller, S.pending, S.shipped)
        assert not can_transition(ActorRole.seller, S.processing, S.pending)

    def test_only_admin_cancels(self):
        S = SellerOrderStatus
        assert can_transition(ActorRole.admin, S.shipped, S.cancelled)
        assert not can_transition(ActorRole.seller, S.pending, S.cancelled)

    def test_terminal_states_have_no_exit(self):
        for role in ActorRole:
            for status in SellerOrderStatus:
                assert not can_transition(role, SellerOrderStatus.delivered, status)
                assert not can_transition(role, SellerOrderStatus.cancelled, status)


@pytest.mark.integration
class TestAdvanceSellerOrder:
    def test_full_path_stamps_timestamps_and_reduces_stock_once(self, session, database, placed, advance_to):
        seller_order, mug, plate = placed

        advance_to(seller_order.id, "shipped")
        shipped = session.get(SellerOrder, seller_order.id)
        assert shipped.shipped_at is not None
        assert shipped.delivered_at is None
        assert _stock(database, mug.id) == 10

        delivered = advance_to(seller_order.id, "delivered")

        assert delivered.status == "delivered"
        assert delivered.delivered_at is not None
        assert _stock(database, mug.id) == 7
        assert _stock(database, plate.id) == 3

    def test_tracking_number_stored_on_ship(self, session, placed, advance_to):
        seller_order, _, _ = placed
        advance_to(seller_order.id, "packed")

        shipped = advance_seller_order(
            session,
            seller_order.id,
            "shipped",
            role=ActorRole.seller,
            seller_id=seller_order.seller_id,
            tracking_number=" TRK-991 ",
        )

        assert shipped.tracking_number == "TRK-991"

    def test_skipping_a_step_is_rejected(self, session, placed):
        seller_order, _, _ = placed

        with pytest.raises(InvalidTransitionError):
            advance_seller_order(
                session, seller_order.id, "shipped",
                role=ActorRole.seller, seller_id=seller_order.seller_id,
            )

    def test_unknown_status_is_rejected(self, session, placed):
        seller_order, _, _ = placed

        with pytest.raises(ValidationError):
            advance_seller_order(session, seller_order.id, "lost", role=ActorRole.admin)

    def test_seller_cannot_touch_another_sellers_order(self, session, placed, seller_b):
        seller_order, _, _ = placed

        with pytest.raises(ForbiddenError):
            advance_seller_order(
                session, seller_order.id, "processing",
                role=ActorRole.seller, seller_id=seller_b.id,
            )

    def test_unknown_seller_order(self, session):
        with pytest.raises(NotFoundError):
            advance_seller_order(session, 404, "processing", role=ActorRole.admin)

    def test_admin_can_cancel_but_seller_cannot(self, session, placed):
        seller_order, _, _ = placed

        with pytest.raises(InvalidTransitionError):
            advance_seller_order(
                session, seller_order.id, "cancelled",
                role=ActorRole.seller, seller_id=seller_order.seller_id,
            )

        cancelled = advance_seller_order(session, seller_order.id, "cancelled", role=ActorRole.admin)
        assert cancelled.status == "cancelled"

        with pytest.raises(InvalidTransitionError):
            advance_seller_order(session, seller_order.id, "processing", role=ActorRole.admin)

    def test_resubmitting_current_status_is_a_noop(self, session, placed, advance_to):
        seller_order, _, _ = placed
        advance_to(seller_order.id, "processing")
        before = len(session.exec(select(OrderEvent)).all())

        again = advance_seller_order(
            session, seller_order.id, "processing",
            role=ActorRole.seller, seller_id=seller_order.seller_id,
        )

        assert again.status == "processing"
        assert len(session.exec(select(OrderEvent)).all()) == before

    def test_each_transition_is_logged(self, session, placed, advance_to):
        seller_order, _, _ = placed
        advance_to(seller_order.id, "delivered")

        events = session.exec(
            select(OrderEvent)
            .where(OrderEvent.seller_order_id == seller_order.id)
            .where(OrderEvent.event_type == "status_changed")
        ).all()

        assert sorted(e.meta["to"] for e in events) == sorted(
            ["processing", "packed", "shipped", "delivered"]
        )


@pytest.mark.integration
class TestDelivery:
    def test_delivering_twice_from_two_sessions_decrements_once(self, database, placed, advance_to):
        seller_order, mug, plate = placed
        advance_to(seller_order.id, "shipped")

        first = Session(database)
        second = Session(database)
        try:
            # both operators loaded the order while it was still shipped
            assert first.get(SellerOrder, seller_order.id).status == "shipped"
            assert second.get(SellerOrder, seller_order.id).status == "shipped"

            advance_seller_order(first, seller_order.id, "delivered", role=ActorRole.admin)
            late = advance_seller_order(second, seller_order.id, "delivered", role=ActorRole.admin)

            assert late.status == "delivered"
        finally:
            first.close()
            second.close()

        assert _stock(database, mug.id) == 7
        assert _stock(database, plate.id) == 3

    def test_stock_clamps_at_zero(self, database, session, seller_a, make_product, order_request, advance_to):
        scarce = make_product(seller_a, "Rare", "99.00", stock=1)
        order = place_order(session, order_request([(scarce, 3)]))

        advance_to(order.seller_orders[0].id, "delivered")

        assert _stock(database, scarce.id) == 0

    def test_missing_product_does_not_block_delivery_or_other_items(
        self, database, session, seller_a, make_product, order_request, advance_to, caplog
    ):
        real = make_product(seller_a, "Real", "4.00", stock=6)
        data = order_request([(real, 2)])
        data.items.insert(
            0,
            CartLine(
                product_id=987654,
                seller_id=seller_a.id,
                quantity=1,
                unit_price=Decimal("1.00"),
                product_name="Deleted product",
            ),
        )
        data.total_amount = Decimal("9.00")
        order = place_order(session, data)

        with caplog.at_level("WARNING"):
            delivered = advance_to(order.seller_orders[0].id, "delivered")

        assert delivered.status == "delivered"
        assert _stock(database, real.id) == 4
        assert "987654" in caplog.text

    def test_delivery_refreshes_total_sales(self, session, seller_a, delivered_order):
        delivered_order(seller_a, "100.00")
        delivered_order(seller_a, "20.00", status="shipped")

        session.expire_all()
        assert session.get(Seller, seller_a.id).total_sales == Decimal("100.00")


@pytest.mark.integration
class TestDeleteOrder:
    def test_delete_removes_the_whole_group(self, session, placed):
        seller_order, _, _ = placed
        order_id = seller_order.order_id

        delete_order(session, order_id)

        session.expire_all()
        assert session.get(Order, order_id) is None
        assert session.get(SellerOrder, seller_order.id) is None
        assert session.exec(select(OrderEvent).where(OrderEvent.order_id == order_id)).all() == []

    def test_delete_refused_once_paid_out(self, session, seller_a, delivered_order):
        seller_order = delivered_order(seller_a, "30.00")
        pay_seller(session, seller_a.id, "TXN-1")

        with pytest.raises(ValidationError):
            delete_order(session, seller_order.order_id)

    def test_delete_unknown_order(self, session):
        with pytest.raises(NotFoundError):
            delete_order(session, 12345)
