"""Unit tests for the delivery zone classifier."""

import pytest

from storefront.domain.model.value_objects import Money
from storefront.domain.service.delivery_zone import Zone, classify, is_dhaka_address


class TestClassify:

    @pytest.mark.parametrize(
        "address",
        ["Dhanmondi, Dhaka", "House 12, Road 5, GULSHAN-2", "near TSC, university area"],
    )
    def test_dhaka_addresses(self, address):
        zone = classify(address)
        assert zone.zone == Zone.DHAKA
        assert zone.charge == Money.of("70")
        assert zone.is_dhaka

    @pytest.mark.parametrize("address", ["Chittagong", "Agrabad, Chattogram", "", None])
    def test_outside_dhaka(self, address):
        zone = classify(address)
        assert zone.zone == Zone.OUTSIDE
        assert zone.charge == Money.of("130")

    def test_is_pure(self):
        assert classify("Mirpur 10") == classify("Mirpur 10")

    def test_override(self):
        assert classify("Chittagong", force_dhaka=True).is_dhaka
        assert not classify("Dhaka", force_dhaka=False).is_dhaka

    def test_non_string_address(self):
        assert not is_dhaka_address(12345)  # type: ignore[arg-type]
