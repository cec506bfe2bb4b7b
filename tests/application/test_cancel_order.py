"""Tests for the CancelOrder use case."""

import pytest

from storefront.application.cancel_order import CancelOrderHandler
from storefront.domain.exceptions import EntityNotFoundError, InvalidStatusTransition
from storefront.domain.model.order import OrderStatus
from storefront.domain.service.inventory_ledger import ProductInventoryLedger
from tests.builders import panjabi, place_order
from tests.fakes import FakeOrderRepository, FakeProductRepository


def _setup():
    order_repo = FakeOrderRepository()
    product_repo = FakeProductRepository([panjabi()])
    order = place_order(order_repo, product_repo)
    handler = CancelOrderHandler(order_repo, ProductInventoryLedger(product_repo))
    return handler, order, order_repo, product_repo


class TestCancelOrder:

    @pytest.mark.parametrize(
        "status",
        [OrderStatus.PENDING, OrderStatus.CONFIRMED, OrderStatus.READY_TO_SHIP],
    )
    def test_cancel_restores_stock(self, status):
        handler, order, order_repo, product_repo = _setup()
        assert product_repo.variant("p1", "Red", "M").stock == 8
        order.status = status
        order_repo.save(order)

        handler.handle(order.id, "buyer request")

        saved = order_repo.get_by_id(order.id)
        assert saved.status == OrderStatus.CANCELLED
        assert saved.status_history[-1].note == "buyer request"
        assert product_repo.variant("p1", "Red", "M").stock == 10

    def test_cancel_reverts_sales_counter(self):
        handler, order, _, product_repo = _setup()
        assert product_repo.get_by_id("p1").number_of_sales == 2
        handler.handle(order.id)
        assert product_repo.get_by_id("p1").number_of_sales == 0

    def test_pending_review_is_cancelled_without_restoring(self):
        handler, order, order_repo, product_repo = _setup()
        order.flag_for_review("Stock deduction failed")
        order_repo.save(order)

        handler.handle(order.id)

        saved = order_repo.get_by_id(order.id)
        assert saved.status == OrderStatus.CANCELLED
        assert "stock was not restored automatically" in saved.internal_notes
        assert product_repo.variant("p1", "Red", "M").stock == 8

    @pytest.mark.parametrize(
        "status", [OrderStatus.SHIPPED, OrderStatus.DELIVERED, OrderStatus.CANCELLED]
    )
    def test_cannot_cancel_late_orders(self, status):
        handler, order, order_repo, product_repo = _setup()
        order.status = status
        order_repo.save(order)
        with pytest.raises(InvalidStatusTransition, match="cannot be cancelled"):
            handler.handle(order.id)
        assert product_repo.variant("p1", "Red", "M").stock == 8

    def test_restore_failure_is_noted(self):
        handler, order, order_repo, product_repo = _setup()
        order.items[0].color = "Pink"
        order_repo.save(order)

        handler.handle(order.id)

        saved = order_repo.get_by_id(order.id)
        assert saved.status == OrderStatus.CANCELLED
        assert "Stock restore failed on cancellation" in saved.internal_notes
        assert "variant not found" in saved.internal_notes

    def test_unknown_order(self):
        handler, _, _, _ = _setup()
        with pytest.raises(EntityNotFoundError):
            handler.handle(42)
