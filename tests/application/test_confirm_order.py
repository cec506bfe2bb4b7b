"""Tests for the ConfirmOrder use case."""

from decimal import Decimal

import pytest

from storefront.application.confirm_order import ConfirmOrderHandler
from storefront.domain.exceptions import EntityNotFoundError, InvalidStatusTransition
from storefront.domain.model.order import OrderStatus
from storefront.domain.model.promo import DiscountType, PromoOffer
from storefront.domain.model.value_objects import Money
from storefront.domain.service.promo_resolver import default_resolver
from tests.builders import order_request, panjabi, place_order
from tests.fakes import FakeOfferRepository, FakeOrderRepository, FakeProductRepository


def _setup(promo_code=None, usage_limit=None):
    order_repo = FakeOrderRepository()
    product_repo = FakeProductRepository([panjabi()])
    offer_repo = FakeOfferRepository(
        [
            PromoOffer(
                code="EID25",
                discount_type=DiscountType.PERCENTAGE,
                discount_value=Decimal("25"),
                minimum_order_value=Money.zero(),
                usage_limit=usage_limit,
            )
        ]
    )
    order = place_order(
        order_repo, product_repo, offer_repo, order_request(promo_code=promo_code)
    )
    handler = ConfirmOrderHandler(order_repo, default_resolver(offer_repo))
    return handler, order, order_repo, offer_repo


class TestConfirmOrder:

    def test_pending_becomes_confirmed(self):
        handler, order, order_repo, _ = _setup()
        handler.handle(order.id)
        assert order_repo.get_by_id(order.id).status == OrderStatus.CONFIRMED

    def test_records_catalog_promo_usage(self):
        handler, order, _, offer_repo = _setup(promo_code="EID25")
        assert offer_repo.get_by_code("EID25").used_count == 0
        handler.handle(order.id)
        assert offer_repo.get_by_code("EID25").used_count == 1

    def test_built_in_promo_is_fine(self):
        handler, order, order_repo, _ = _setup(promo_code="WELCOME10")
        handler.handle(order.id)
        assert order_repo.get_by_id(order.id).status == OrderStatus.CONFIRMED

    def test_exhausted_promo_still_confirms(self, caplog):
        handler, order, order_repo, offer_repo = _setup(promo_code="EID25", usage_limit=1)
        offer = offer_repo.get_by_code("EID25")
        offer.record_use()
        offer_repo.save(offer)

        handler.handle(order.id)

        assert order_repo.get_by_id(order.id).status == OrderStatus.CONFIRMED
        assert "could not record promo EID25" in caplog.text

    def test_confirm_twice_rejected(self):
        handler, order, _, _ = _setup()
        handler.handle(order.id)
        with pytest.raises(InvalidStatusTransition):
            handler.handle(order.id)

    def test_pending_review_cannot_be_confirmed(self):
        handler, order, order_repo, _ = _setup()
        order.flag_for_review("conflict")
        order_repo.save(order)
        with pytest.raises(InvalidStatusTransition):
            handler.handle(order.id)

    def test_unknown_order(self):
        handler, _, _, _ = _setup()
        with pytest.raises(EntityNotFoundError, match="#99"):
            handler.handle(99)
