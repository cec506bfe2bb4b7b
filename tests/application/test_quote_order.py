"""Tests for the cart preview (QuoteOrder) and promo check queries."""

from storefront.application.check_promo import CheckPromoHandler
from storefront.application.dto import CartItemSpec
from storefront.application.quote_order import QuoteOrderHandler
from storefront.domain.service.promo_resolver import default_resolver
from tests.fakes import FakeOfferRepository


def _handler() -> QuoteOrderHandler:
    return QuoteOrderHandler(default_resolver(FakeOfferRepository()))


def _cart(price="500", qty=2) -> list[CartItemSpec]:
    return [CartItemSpec("p1", "Red", "M", qty, price)]


class TestQuoteOrder:

    def test_uses_cart_prices(self):
        quote = _handler().handle(_cart(), "Dhanmondi, Dhaka")
        assert quote.subtotal == "৳1000.00"
        assert quote.delivery_zone == "Inside Dhaka"
        assert quote.delivery_charge == "৳70.00"
        assert quote.total_amount == "৳1070.00"
        assert quote.items[0].total_price == "৳1000.00"
        assert quote.promo_message == ""

    def test_promo_message(self):
        quote = _handler().handle(_cart(), "Dhaka", "WELCOME10")
        assert quote.promo_valid
        assert quote.promo_message == "Welcome 10% off applied successfully"
        assert quote.total_amount == "৳970.00"

    def test_rejected_promo_message(self):
        quote = _handler().handle(_cart("300", 1), "Dhaka", "WELCOME10")
        assert not quote.promo_valid
        assert quote.promo_message == "Minimum order of ৳500.00 required for this promo code"

    def test_bad_lines_are_listed(self):
        cart = _cart() + [CartItemSpec("p9", "Red", "M", 1, "free")]
        quote = _handler().handle(cart, "Chittagong")
        assert quote.subtotal == "৳1000.00"
        assert quote.invalid_items == ["Item 2 (p9): invalid unit price 'free'"]

    def test_force_dhaka(self):
        quote = _handler().handle(_cart(), "Somewhere", force_dhaka=True)
        assert quote.delivery_charge == "৳70.00"


class TestCheckPromo:

    def test_valid(self):
        result = CheckPromoHandler(default_resolver(FakeOfferRepository())).handle("save50", "300")
        assert result.is_valid
        assert result.discount_amount.to_plain() == "50.00"

    def test_unknown(self):
        result = CheckPromoHandler(default_resolver(FakeOfferRepository())).handle("nope", "300")
        assert result.message == "Promo code rejected: invalid code"
