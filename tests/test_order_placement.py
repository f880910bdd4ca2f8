"""
Tests for splitting a cart into seller orders.
"""
from decimal import Decimal

import pytest
from sqlalchemy import func
from sqlmodel import select

from marketplace.errors import ValidationError
from marketplace.models import Order, OrderEvent, OrderItem, SellerOrder
from marketplace.schemas.checkout_schemas import CartLine
from marketplace.services.order_service import (
    attach_receipt,
    compute_cart_totals,
    get_order,
    list_customer_orders,
    partition_by_seller,
    place_order,
)


def _count(session, model):
    return session.exec(select(func.count(model.id))).one()


def _line(product_id, seller_id, quantity=1, price="10.00"):
    return CartLine(
        product_id=product_id,
        seller_id=seller_id,
        quantity=quantity,
        unit_price=Decimal(price),
        product_name=f"Product {product_id}",
    )


@pytest.mark.unit
class TestCartHelpers:
    def test_partition_keeps_first_seen_seller_and_line_order(self):
        lines = [_line(1, 7), _line(2, 3), _line(3, 7), _line(4, 3), _line(5, 9)]

        groups = partition_by_seller(lines)

        assert list(groups) == [7, 3, 9]
        assert [l.product_id for l in groups[7]] == [1, 3]
        assert [l.product_id for l in groups[3]] == [2, 4]

    def test_cart_totals(self):
        totals = compute_cart_totals([_line(1, 1, 2, "10.00"), _line(2, 1, 1, "5.00")])

        assert totals.subtotal == Decimal("25.00")
        assert totals.shipping == Decimal("9.99")
        assert totals.tax == Decimal("3.75")
        assert totals.total == Decimal("38.74")

    def test_empty_cart_has_no_shipping(self):
        totals = compute_cart_totals([])

        assert totals.subtotal == Decimal("0")
        assert totals.shipping == Decimal("0")
        assert totals.total == Decimal("0")


@pytest.mark.integration
class TestPlaceOrder:
    def test_multi_seller_cart_is_split_per_seller(self, session, seller_a, seller_b, make_product, order_request):
        mug = make_product(seller_a, "Mug", "12.50")
        lamp = make_product(seller_b, "Lamp", "40.00")
        bowl = make_product(seller_a, "Bowl", "7.25")

        order = place_order(session, order_request([(mug, 2), (lamp, 1), (bowl, 4)]))

        assert order.payment_status == "paid"
        assert order.payment_method == "receipt_upload"
        assert order.total_amount == Decimal("94.00")

        seller_orders = sorted(order.seller_orders, key=lambda so: so.id)
        assert [so.seller_id for so in seller_orders] == [seller_a.id, seller_b.id]
        assert seller_orders[0].subtotal == Decimal("54.00")
        assert seller_orders[1].subtotal == Decimal("40.00")
        assert all(so.status == "pending" for so in seller_orders)

        a_items = sorted(seller_orders[0].items, key=lambda i: i.id)
        assert [(i.product_name, i.quantity, i.price) for i in a_items] == [
            ("Mug", 2, Decimal("12.50")),
            ("Bowl", 4, Decimal("7.25")),
        ]

        events = session.exec(select(OrderEvent).where(OrderEvent.order_id == order.id)).all()
        assert {e.event_type for e in events} == {"seller_order_created"}
        assert len(events) == 2

    def test_subtotals_add_up_to_items_total(self, session, seller_a, seller_b, make_product, order_request):
        p1 = make_product(seller_a, price="19.99")
        p2 = make_product(seller_b, price="0.01")

        order = place_order(session, order_request([(p1, 3), (p2, 7)]))

        assert sum(so.subtotal for so in order.seller_orders) == Decimal("60.04")

    def test_empty_items_rejected(self, session, order_request):
        with pytest.raises(ValidationError):
            place_order(session, order_request([]))
        assert _count(session, Order) == 0

    def test_bad_quantity_rejected(self, session, seller_a, make_product, order_request):
        product = make_product(seller_a)
        with pytest.raises(ValidationError):
            place_order(session, order_request([(product, 0)]))
        assert _count(session, Order) == 0

    def test_unknown_seller_rejected_without_writes(self, session, seller_a, make_product, order_request):
        product = make_product(seller_a)
        data = order_request([(product, 1)])
        data.items[0].seller_id = 9999

        with pytest.raises(ValidationError):
            place_order(session, data)

        assert _count(session, Order) == 0
        assert _count(session, SellerOrder) == 0
        assert _count(session, OrderItem) == 0

    def test_missing_seller_rejected(self, session, seller_a, make_product, order_request):
        product = make_product(seller_a)
        data = order_request([(product, 1)])
        data.items[0].seller_id = None

        with pytest.raises(ValidationError):
            place_order(session, data)

    def test_inactive_seller_rejected(self, session, make_seller, make_product, order_request):
        suspended = make_seller(status="suspended")
        product = make_product(suspended)

        with pytest.raises(ValidationError):
            place_order(session, order_request([(product, 1)]))

    def test_seller_email_cannot_place_orders(self, session, seller_a, make_product, order_request):
        product = make_product(seller_a)

        with pytest.raises(ValidationError) as exc:
            place_order(session, order_request([(product, 1)], email=seller_a.email.upper()))
        assert exc.value.field == "customer_email"

    def test_total_below_subtotal_rejected(self, session, seller_a, make_product, order_request):
        product = make_product(seller_a, price="50.00")

        with pytest.raises(ValidationError):
            place_order(session, order_request([(product, 2)], total="99.99"))

    def test_resubmission_with_same_request_id_is_idempotent(self, session, seller_a, make_product, order_request):
        product = make_product(seller_a)
        data = order_request([(product, 1)], request_id="req-123")

        first = place_order(session, data)
        second = place_order(session, data)

        assert first.id == second.id
        assert _count(session, Order) == 1
        assert _count(session, SellerOrder) == 1


@pytest.mark.integration
class TestOrderQueries:
    def test_get_order_not_found(self, session):
        from marketplace.errors import NotFoundError

        with pytest.raises(NotFoundError):
            get_order(session, 42)

    def test_customer_orders_match_email_case_insensitively(self, session, seller_a, make_product, order_request):
        product = make_product(seller_a)
        place_order(session, order_request([(product, 1)], email="Jane@Example.com"))
        place_order(session, order_request([(product, 1)], email="other@example.com"))

        orders = list_customer_orders(session, "jane@example.com")

        assert len(orders) == 1

    def test_attach_receipt(self, session, seller_a, make_product, order_request):
        product = make_product(seller_a)
        order = place_order(session, order_request([(product, 1)]))

        updated = attach_receipt(session, order.id, "data:image/png;base64,AAAA")

        assert updated.receipt_image.startswith("data:image/png")

    def test_attach_empty_receipt_rejected(self, session, seller_a, make_product, order_request):
        product = make_product(seller_a)
        order = place_order(session, order_request([(product, 1)]))

        with pytest.raises(ValidationError):
            attach_receipt(session, order.id, "  ")
