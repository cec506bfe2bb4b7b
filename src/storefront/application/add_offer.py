"""Application service: Add Offer use case.

Creates a promo code in the offer catalog.  Catalog codes shadow the
built-in codes of the same name.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal, InvalidOperation

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.promo import DiscountType, PromoOffer, normalize_code
from storefront.domain.model.value_objects import Money
from storefront.domain.repository.offer_repository import OfferRepository


class AddOfferHandler:

    def __init__(self, offer_repo: OfferRepository) -> None:
        self._offer_repo = offer_repo

    def handle(
        self,
        code: str,
        discount_type: str,
        discount_value: str,
        minimum_order_value: str = "0",
        usage_limit: int | None = None,
        valid_from: datetime | None = None,
        valid_to: datetime | None = None,
        description: str = "",
    ) -> PromoOffer:
        if self._offer_repo.get_by_code(normalize_code(code)) is not None:
            raise ValidationError(f"Promo code '{normalize_code(code)}' already exists")
        try:
            kind = DiscountType(discount_type)
        except ValueError:
            raise ValidationError(f"Unknown discount type '{discount_type}'") from None
        try:
            value = Decimal(discount_value)
        except InvalidOperation:
            raise ValidationError(f"Invalid discount value: {discount_value!r}") from None
        if not value.is_finite():
            raise ValidationError(f"Invalid discount value: {discount_value!r}")

        offer = PromoOffer(
            code=code,
            discount_type=kind,
            discount_value=value,
            minimum_order_value=Money.of(minimum_order_value),
            usage_limit=usage_limit,
            valid_from=valid_from,
            valid_to=valid_to,
            description=description,
            offer_id=f"offer-{len(self._offer_repo.list_all()) + 1}",
        )
        self._offer_repo.save(offer)
        return offer
