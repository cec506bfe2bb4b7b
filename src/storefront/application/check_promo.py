"""Application service: Check Promo use case (query).

Looks a code up against a subtotal without counting a use.
"""

from __future__ import annotations

from storefront.domain.model.value_objects import Money
from storefront.domain.service.promo_resolver import PromoResolution, PromoResolver


class CheckPromoHandler:

    def __init__(self, promo_resolver: PromoResolver) -> None:
        self._promo_resolver = promo_resolver

    def handle(self, code: str, subtotal: str) -> PromoResolution:
        return self._promo_resolver.resolve(Money.of(subtotal).rounded(), code)
