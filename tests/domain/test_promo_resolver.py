"""Unit tests for promo codes and the two-tier resolver."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from storefront.domain.exceptions import EntityNotFoundError, ValidationError
from storefront.domain.model.promo import DiscountType, PromoOffer
from storefront.domain.model.value_objects import Money
from storefront.domain.service.promo_resolver import (
    PromoRejection,
    PromoResolver,
    StaticPromoTable,
    default_resolver,
)
from tests.fakes import FakeOfferRepository

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


def _offer(**overrides) -> PromoOffer:
    fields = dict(
        code="EID25",
        discount_type=DiscountType.PERCENTAGE,
        discount_value=Decimal("25"),
        minimum_order_value=Money.of("1000"),
        valid_from=NOW - timedelta(days=1),
        valid_to=NOW + timedelta(days=1),
        description="Eid 25% off",
        offer_id="offer-1",
    )
    fields.update(overrides)
    return PromoOffer(**fields)


def _resolver(*offers: PromoOffer) -> tuple[PromoResolver, FakeOfferRepository]:
    repo = FakeOfferRepository(list(offers))
    return default_resolver(repo), repo


# ── Offers ───────────────────────────────────────────────────────────────────


class TestPromoOffer:

    def test_code_is_normalized(self):
        assert _offer(code="  eid25 ").code == "EID25"

    def test_percentage_over_100_rejected(self):
        with pytest.raises(ValidationError, match="cannot exceed 100%"):
            _offer(discount_value=Decimal("120"))

    def test_end_before_start_rejected(self):
        with pytest.raises(ValidationError, match="End date must be after start date"):
            _offer(valid_from=NOW, valid_to=NOW - timedelta(hours=1))

    def test_fixed_discount_clamped_to_subtotal(self):
        offer = _offer(discount_type=DiscountType.FIXED, discount_value=Decimal("500"))
        assert offer.discount_for(Money.of("300")) == Money.of("300")

    def test_naive_bounds_are_read_as_utc(self):
        naive = NOW.replace(tzinfo=None)
        offer = _offer(valid_from=naive - timedelta(days=1), valid_to=naive + timedelta(days=1))
        assert offer.valid_from == NOW - timedelta(days=1)
        assert offer.valid_to.tzinfo == timezone.utc
        assert offer.is_currently_valid(NOW)
        assert offer.is_currently_valid(naive)

    def test_aware_bounds_are_converted_to_utc(self):
        dhaka = timezone(timedelta(hours=6))
        offer = _offer(valid_from=datetime(2025, 6, 1, 18, 0, tzinfo=dhaka))
        assert offer.valid_from == datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)
        assert offer.valid_from.tzinfo == timezone.utc

    @pytest.mark.parametrize(
        "overrides, valid",
        [
            (dict(), True),
            (dict(is_active=False), False),
            (dict(valid_from=NOW + timedelta(hours=1), valid_to=NOW + timedelta(days=2)), False),
            (dict(valid_from=NOW - timedelta(days=2), valid_to=NOW - timedelta(hours=1)), False),
            (dict(usage_limit=2, used_count=2), False),
            (dict(valid_from=None, valid_to=None), True),
        ],
    )
    def test_is_currently_valid(self, overrides, valid):
        assert _offer(**overrides).is_currently_valid(NOW) is valid

    @pytest.mark.parametrize("value", ["NaN", "Infinity"])
    def test_non_finite_discount_rejected(self, value):
        with pytest.raises(ValidationError, match="finite"):
            _offer(discount_value=Decimal(value))

    def test_record_use_respects_limit(self):
        offer = _offer(usage_limit=1)
        offer.record_use()
        with pytest.raises(ValidationError, match="usage limit"):
            offer.record_use()


# ── Static table ─────────────────────────────────────────────────────────────


class TestStaticCodes:

    @pytest.mark.parametrize(
        "code, subtotal, discount",
        [
            ("WELCOME10", "1000", "100"),
            ("SAVE50", "300", "50"),
            ("NEWCUSTOMER", "800", "120"),
            ("FIRST100", "1000", "100"),
        ],
    )
    def test_built_in_codes(self, code, subtotal, discount):
        result = PromoResolver([StaticPromoTable()]).resolve(Money.of(subtotal), code)
        assert result.is_valid
        assert result.discount_amount == Money.of(discount)
        assert result.source == "static"

    def test_lookup_is_case_insensitive(self):
        result = PromoResolver([StaticPromoTable()]).resolve(Money.of("1000"), " welcome10 ")
        assert result.is_valid
        assert result.code == "WELCOME10"

    def test_minimum_not_met(self):
        result = PromoResolver([StaticPromoTable()]).resolve(Money.of("300"), "WELCOME10")
        assert not result.is_valid
        assert result.reason == PromoRejection.MINIMUM_NOT_MET
        assert result.discount_amount == Money.zero()
        assert "৳500.00" in result.message


# ── Resolver gates ───────────────────────────────────────────────────────────


class TestResolverGates:

    def test_no_code(self):
        resolver, _ = _resolver()
        assert resolver.resolve(Money.of("1000"), None).reason == PromoRejection.NO_CODE
        assert resolver.resolve(Money.of("1000"), "  ").reason == PromoRejection.NO_CODE

    def test_unknown_code(self):
        resolver, _ = _resolver()
        assert resolver.resolve(Money.of("1000"), "BOGUS").reason == PromoRejection.INVALID_CODE

    def test_dynamic_offer_applies(self):
        resolver, _ = _resolver(_offer())
        result = resolver.resolve(Money.of("2000"), "eid25", now=NOW)
        assert result.is_valid
        assert result.discount_amount == Money.of("500")
        assert result.source == "dynamic"
        assert result.offer_id == "offer-1"

    @pytest.mark.parametrize(
        "overrides, reason",
        [
            (dict(is_active=False), PromoRejection.NOT_ACTIVE),
            (dict(valid_from=NOW + timedelta(hours=1), valid_to=NOW + timedelta(days=2)),
             PromoRejection.NOT_YET_VALID),
            (dict(valid_from=NOW - timedelta(days=2), valid_to=NOW - timedelta(days=1)),
             PromoRejection.EXPIRED),
            (dict(usage_limit=3, used_count=3), PromoRejection.USAGE_LIMIT_REACHED),
        ],
    )
    def test_each_cause_has_its_own_reason(self, overrides, reason):
        resolver, _ = _resolver(_offer(**overrides))
        result = resolver.resolve(Money.of("2000"), "EID25", now=NOW)
        assert not result.is_valid
        assert result.reason == reason
        assert result.discount_amount == Money.zero()

    def test_naive_window_resolves(self):
        naive = NOW.replace(tzinfo=None)
        resolver, _ = _resolver(
            _offer(valid_from=naive - timedelta(days=1), valid_to=naive + timedelta(days=1))
        )
        # Against the wall clock the 2025 window is long over.
        assert resolver.resolve(Money.of("2000"), "EID25").reason == PromoRejection.EXPIRED
        assert resolver.resolve(Money.of("2000"), "EID25", now=NOW).is_valid

    def test_minimum_checked_before_activity(self):
        resolver, _ = _resolver(_offer(is_active=False))
        result = resolver.resolve(Money.of("10"), "EID25", now=NOW)
        assert result.reason == PromoRejection.MINIMUM_NOT_MET

    def test_expired_catalog_code_does_not_fall_back_to_built_in(self):
        shadow = _offer(
            code="WELCOME10",
            minimum_order_value=Money.zero(),
            valid_from=NOW - timedelta(days=2),
            valid_to=NOW - timedelta(days=1),
        )
        resolver, _ = _resolver(shadow)
        result = resolver.resolve(Money.of("1000"), "WELCOME10", now=NOW)
        assert result.reason == PromoRejection.EXPIRED
        assert result.source == "dynamic"

    def test_discount_never_exceeds_subtotal(self):
        resolver, _ = _resolver(
            _offer(discount_type=DiscountType.FIXED, discount_value=Decimal("5000"),
                   minimum_order_value=Money.zero())
        )
        result = resolver.resolve(Money.of("200"), "EID25", now=NOW)
        assert result.discount_amount <= Money.of("200")


# ── Usage counting ───────────────────────────────────────────────────────────


class TestUsage:

    def test_resolving_does_not_count_a_use(self):
        resolver, repo = _resolver(_offer(usage_limit=5))
        resolver.resolve(Money.of("2000"), "EID25", now=NOW)
        resolver.resolve(Money.of("2000"), "EID25", now=NOW)
        assert repo.get_by_code("EID25").used_count == 0

    def test_record_usage_increments_catalog_offer(self):
        resolver, repo = _resolver(_offer(usage_limit=5))
        resolver.record_usage("eid25")
        assert repo.get_by_code("EID25").used_count == 1

    def test_record_usage_of_built_in_code_is_a_no_op(self):
        resolver, _ = _resolver()
        offer = resolver.record_usage("SAVE50")
        assert offer.used_count == 0

    def test_record_usage_of_unknown_code(self):
        resolver, _ = _resolver()
        with pytest.raises(EntityNotFoundError, match="BOGUS"):
            resolver.record_usage("bogus")
