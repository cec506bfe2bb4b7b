"""Unit tests for the pricing calculator."""

from decimal import Decimal

import pytest

from storefront.domain.model.promo import DiscountType, PromoOffer
from storefront.domain.model.value_objects import Money
from storefront.domain.service.pricing import PricingLine, price_order
from storefront.domain.service.promo_resolver import (
    PromoRejection,
    PromoResolver,
    StaticPromoTable,
)


def _line(price="500", qty=2, product_id="p1") -> PricingLine:
    return PricingLine(product_id=product_id, unit_price=price, quantity=qty)


# ── Checkout scenarios ───────────────────────────────────────────────────────


class TestCheckoutScenarios:

    def test_dhaka_without_promo(self):
        result = price_order([_line()], "Dhanmondi, Dhaka")
        assert result.subtotal == Money.of("1000")
        assert result.delivery_charge == Money.of("70")
        assert result.discount_amount == Money.zero()
        assert result.total_amount == Money.of("1070")
        assert not result.promo.is_valid
        assert result.promo.reason == PromoRejection.NO_CODE

    def test_outside_dhaka(self):
        result = price_order([_line()], "Chittagong")
        assert result.delivery_charge == Money.of("130")
        assert result.total_amount == Money.of("1130")

    def test_welcome10(self):
        result = price_order([_line()], "Dhanmondi, Dhaka", promo_code="WELCOME10")
        assert result.discount_amount == Money.of("100")
        assert result.total_amount == Money.of("970")
        assert result.promo.is_valid

    def test_welcome10_below_minimum(self):
        result = price_order([_line(price="300", qty=1)], "Dhaka", promo_code="WELCOME10")
        assert not result.promo.is_valid
        assert result.promo.reason == PromoRejection.MINIMUM_NOT_MET
        assert result.discount_amount == Money.zero()
        assert result.total_amount == Money.of("370")


# ── Arithmetic ───────────────────────────────────────────────────────────────


class TestArithmetic:

    def test_subtotal_is_exact_sum(self):
        lines = [_line("0.10", 3, "a"), _line("19.99", 7, "b"), _line("1234.56", 1, "c")]
        result = price_order(lines, "Dhaka")
        assert result.subtotal == Money.of("1374.79")
        assert result.total_quantity == 11

    def test_total_never_negative(self):
        # A discount larger than subtotal plus delivery.
        greedy = PromoOffer(
            code="ALL",
            discount_type=DiscountType.FIXED,
            discount_value=Decimal("100000"),
            minimum_order_value=Money.zero(),
        )
        resolver = PromoResolver([StaticPromoTable([greedy])])
        result = price_order([_line("10", 1)], "Chittagong", "ALL", resolver=resolver)
        assert result.discount_amount == Money.of("10")
        assert result.total_amount == Money.of("130")
        assert result.total_amount >= Money.zero()

    def test_delivery_is_not_discounted(self):
        result = price_order([_line("100", 1)], "Dhaka", promo_code="SAVE50")
        assert result.promo.reason == PromoRejection.MINIMUM_NOT_MET
        result = price_order([_line("300", 1)], "Dhaka", promo_code="SAVE50")
        assert result.total_amount == Money.of("320")


# ── Malformed items ──────────────────────────────────────────────────────────


class TestInvalidItems:

    @pytest.mark.parametrize(
        "price, qty",
        [("abc", 1), ("-5", 1), ("0", 1), (None, 1), ("10", 0), ("10", 1.5), ("10", True)],
    )
    def test_bad_item_is_reported_and_skipped(self, price, qty):
        result = price_order([_line("500", 1, "good"), _line(price, qty, "bad")], "Dhaka")
        assert not result.is_complete
        assert [bad.product_id for bad in result.invalid_items] == ["bad"]
        assert result.invalid_items[0].index == 1
        assert result.subtotal == Money.of("500")

    def test_empty_cart(self):
        result = price_order([], "")
        assert result.subtotal == Money.zero()
        assert result.total_amount == Money.of("130")
        assert result.is_complete
