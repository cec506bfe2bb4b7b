"""Domain service: Promo/Discount Resolver.

A promo code is looked up in an ordered list of sources, first match wins:
the persisted offer catalog, then the built-in code table.  A code found in
the catalog is judged by the catalog's rules alone; it never falls through
to the built-in table, even when the catalog entry is expired.

Resolving a code is a read-only operation.  Counting a use is a separate
step (``record_usage``) performed only once an order is confirmed.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum

from storefront.domain.exceptions import EntityNotFoundError
from storefront.domain.model.promo import DiscountType, PromoOffer, normalize_code
from storefront.domain.model.value_objects import Money
from storefront.domain.repository.offer_repository import OfferRepository

logger = logging.getLogger(__name__)


class PromoRejection(Enum):
    NO_CODE = "no promo code applied"
    INVALID_CODE = "invalid code"
    MINIMUM_NOT_MET = "minimum order not met"
    NOT_ACTIVE = "not active"
    NOT_YET_VALID = "not yet valid"
    EXPIRED = "expired"
    USAGE_LIMIT_REACHED = "usage limit reached"


@dataclass(frozen=True)
class PromoResolution:
    is_valid: bool
    discount_amount: Money
    reason: PromoRejection | None = None
    code: str | None = None
    description: str = ""
    source: str | None = None
    offer_id: str | None = None
    minimum_order_value: Money | None = None

    @property
    def message(self) -> str:
        if self.is_valid:
            return f"{self.description or self.code} applied successfully"
        if self.reason == PromoRejection.MINIMUM_NOT_MET and self.minimum_order_value:
            return f"Minimum order of {self.minimum_order_value} required for this promo code"
        return f"Promo code rejected: {self.reason.value}" if self.reason else ""

    @staticmethod
    def rejected(
        reason: PromoRejection,
        code: str | None = None,
        source: str | None = None,
        minimum_order_value: Money | None = None,
    ) -> PromoResolution:
        return PromoResolution(
            is_valid=False,
            discount_amount=Money.zero(),
            reason=reason,
            code=code,
            source=source,
            minimum_order_value=minimum_order_value,
        )


# --- Sources ------------------------------------------------------------------


class PromoSource(ABC):
    """One lookup tier of the resolver."""

    name: str = "unknown"

    @abstractmethod
    def find(self, code: str) -> PromoOffer | None:
        """Return the offer for a normalized code, or None."""

    def record_use(self, offer: PromoOffer) -> None:
        """Count one use of ``offer``.  Sources without usage limits ignore it."""


class DynamicOfferSource(PromoSource):
    """Offers persisted in the offer catalog."""

    name = "dynamic"

    def __init__(self, offer_repo: OfferRepository) -> None:
        self._offer_repo = offer_repo

    def find(self, code: str) -> PromoOffer | None:
        return self._offer_repo.get_by_code(code)

    def record_use(self, offer: PromoOffer) -> None:
        offer.record_use()
        self._offer_repo.save(offer)


def _static(code: str, kind: DiscountType, value: str, minimum: str, description: str) -> PromoOffer:
    return PromoOffer(
        code=code,
        discount_type=kind,
        discount_value=Decimal(value),
        minimum_order_value=Money.of(minimum),
        description=description,
    )


BUILT_IN_PROMOS: tuple[PromoOffer, ...] = (
    _static("WELCOME10", DiscountType.PERCENTAGE, "10", "500", "Welcome 10% off"),
    _static("SAVE50", DiscountType.FIXED, "50", "300", "Save 50 Taka"),
    _static("NEWCUSTOMER", DiscountType.PERCENTAGE, "15", "800", "New Customer 15% off"),
    _static("FIRST100", DiscountType.FIXED, "100", "1000", "First Order 100 Taka off"),
)


class StaticPromoTable(PromoSource):
    """Fixed built-in codes with no validity window and no usage limit."""

    name = "static"

    def __init__(self, offers: tuple[PromoOffer, ...] | list[PromoOffer] = BUILT_IN_PROMOS) -> None:
        self._offers = {offer.code: offer for offer in offers}

    def find(self, code: str) -> PromoOffer | None:
        return self._offers.get(code)


# --- Resolver -----------------------------------------------------------------


class PromoResolver:

    def __init__(self, sources: list[PromoSource]) -> None:
        self._sources = list(sources)

    def lookup(self, code: str) -> tuple[PromoOffer, PromoSource] | None:
        normalized = normalize_code(code)
        for source in self._sources:
            offer = source.find(normalized)
            if offer is not None:
                return offer, source
        return None

    def resolve(
        self,
        subtotal: Money,
        code: str | None,
        now: datetime | None = None,
    ) -> PromoResolution:
        """Validate ``code`` against ``subtotal`` and compute its discount.

        Gates run in order and the first failure wins: unknown code,
        minimum order value, then the offer's own activity, validity
        window and usage limit.
        """
        if not code or not code.strip():
            return PromoResolution.rejected(PromoRejection.NO_CODE)

        normalized = normalize_code(code)
        found = self.lookup(normalized)
        if found is None:
            return PromoResolution.rejected(PromoRejection.INVALID_CODE, normalized)
        offer, source = found

        if subtotal < offer.minimum_order_value:
            return PromoResolution.rejected(
                PromoRejection.MINIMUM_NOT_MET,
                normalized,
                source.name,
                offer.minimum_order_value,
            )

        now = now or datetime.now(timezone.utc)
        if not offer.is_currently_valid(now):
            return PromoResolution.rejected(_why_invalid(offer, now), normalized, source.name)

        return PromoResolution(
            is_valid=True,
            discount_amount=offer.discount_for(subtotal),
            code=normalized,
            description=offer.description,
            source=source.name,
            offer_id=offer.offer_id,
            minimum_order_value=offer.minimum_order_value,
        )

    def record_usage(self, code: str) -> PromoOffer:
        """Count one use of ``code``; called when an order is confirmed."""
        found = self.lookup(code)
        if found is None:
            raise EntityNotFoundError(f"Promo code '{normalize_code(code)}' not found")
        offer, source = found
        source.record_use(offer)
        logger.info("Recorded use of promo %s (%s source)", offer.code, source.name)
        return offer


def _why_invalid(offer: PromoOffer, now: datetime) -> PromoRejection:
    if not offer.is_active:
        return PromoRejection.NOT_ACTIVE
    if not offer.has_started(now):
        return PromoRejection.NOT_YET_VALID
    if offer.has_expired(now):
        return PromoRejection.EXPIRED
    return PromoRejection.USAGE_LIMIT_REACHED


def default_resolver(offer_repo: OfferRepository) -> PromoResolver:
    """Catalog first, built-in table second."""
    return PromoResolver([DynamicOfferSource(offer_repo), StaticPromoTable()])
