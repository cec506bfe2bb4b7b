"""Tests for the ShowOrder and ListOrders queries."""

import pytest

from storefront.application.list_orders import ListOrdersHandler
from storefront.application.show_order import ShowOrderHandler
from storefront.domain.exceptions import EntityNotFoundError, ValidationError
from tests.builders import item, order_request, panjabi, place_order
from tests.fakes import FakeOrderRepository, FakeProductRepository


def _setup():
    order_repo = FakeOrderRepository()
    product_repo = FakeProductRepository([panjabi()])
    first = place_order(order_repo, product_repo, request=order_request(promo_code="WELCOME10"))
    second = place_order(order_repo, product_repo, request=order_request([item(1)]))
    return order_repo, first, second


class TestShowOrder:

    def test_operator_view(self):
        order_repo, first, _ = _setup()
        dto = ShowOrderHandler(order_repo).handle(first.id)
        assert dto.order_number == first.order_number
        assert dto.status == "pending"
        assert dto.customer_status == "pending"
        assert dto.subtotal == "৳1000.00"
        assert dto.discount_amount == "৳100.00"
        assert dto.promo_code == "WELCOME10"
        assert dto.total_amount == "৳970.00"
        assert dto.delivery_zone == "Inside Dhaka"
        assert dto.items[0].unit_price == "৳500.00"
        assert not dto.items[0].has_customization
        assert dto.status_history[0].endswith("pending")

    def test_review_flag_is_visible_to_operators(self):
        order_repo, first, _ = _setup()
        first.flag_for_review("Stock deduction failed")
        order_repo.save(first)
        dto = ShowOrderHandler(order_repo).handle(first.id)
        assert dto.needs_review
        assert dto.customer_status == "pending"
        assert dto.internal_notes == "Stock deduction failed"

    def test_unknown_order(self):
        order_repo, _, _ = _setup()
        with pytest.raises(EntityNotFoundError):
            ShowOrderHandler(order_repo).handle(404)


class TestListOrders:

    def test_lists_all(self):
        order_repo, _, _ = _setup()
        assert len(ListOrdersHandler(order_repo).handle()) == 2

    def test_status_filter(self):
        order_repo, first, second = _setup()
        first.confirm()
        order_repo.save(first)
        confirmed = ListOrdersHandler(order_repo).handle("confirmed")
        assert [dto.id for dto in confirmed] == [first.id]

    def test_unknown_status(self):
        order_repo, _, _ = _setup()
        with pytest.raises(ValidationError):
            ListOrdersHandler(order_repo).handle("lost")
