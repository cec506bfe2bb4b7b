"""Domain service: Delivery Zone Classifier.

Maps a free-text delivery address to one of two flat delivery-charge
tiers.  An address is inside Dhaka if it mentions any known Dhaka area
name; everything else, including an empty address, is charged the
outside-Dhaka rate.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from storefront.domain.model.value_objects import Money


class Zone(Enum):
    DHAKA = "Inside Dhaka"
    OUTSIDE = "Outside Dhaka"


DELIVERY_CHARGES: dict[Zone, Money] = {
    Zone.DHAKA: Money(Decimal("70.00")),
    Zone.OUTSIDE: Money(Decimal("130.00")),
}

DHAKA_KEYWORDS: tuple[str, ...] = (
    "dhaka", "dhanmondi", "gulshan", "banani", "uttara", "mirpur", "motijheel",
    "wari", "old dhaka", "ramna", "tejgaon", "mohammadpur", "shantinagar",
    "malibagh", "eskaton", "paltan", "farmgate", "karwan bazar", "panthapath",
    "lalmatia", "kathalbagan", "hatirpool", "newmarket", "azimpur", "lalbagh",
    "kamrangirchar", "sadarghat", "chawkbazar", "sutrapur", "kotwali",
    "shahbagh", "curzon hall", "university area", "tsc", "nilkhet",
)


@dataclass(frozen=True)
class DeliveryZone:
    zone: Zone
    charge: Money

    @property
    def is_dhaka(self) -> bool:
        return self.zone == Zone.DHAKA


def is_dhaka_address(address: str | None) -> bool:
    if not address or not isinstance(address, str):
        return False
    lowered = address.lower()
    return any(keyword in lowered for keyword in DHAKA_KEYWORDS)


def classify(address: str | None, force_dhaka: bool | None = None) -> DeliveryZone:
    """Classify an address into a delivery zone.

    ``force_dhaka`` overrides the keyword match when an operator already
    knows the answer.
    """
    inside = force_dhaka if force_dhaka is not None else is_dhaka_address(address)
    zone = Zone.DHAKA if inside else Zone.OUTSIDE
    return DeliveryZone(zone=zone, charge=DELIVERY_CHARGES[zone])
