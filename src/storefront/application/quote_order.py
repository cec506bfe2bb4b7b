"""Application service: Quote Order use case (query).

The cart preview: prices come from the cart as the buyer saw them, so the
result is for display only.  The order saga re-prices from the product
records before anything is charged.
"""

from __future__ import annotations

from storefront.application.dto import CartItemSpec, QuoteDTO, QuoteLineDTO
from storefront.domain.service.pricing import PricingLine, price_order
from storefront.domain.service.promo_resolver import PromoResolver


class QuoteOrderHandler:

    def __init__(self, promo_resolver: PromoResolver) -> None:
        self._promo_resolver = promo_resolver

    def handle(
        self,
        items: list[CartItemSpec],
        address: str,
        promo_code: str | None = None,
        force_dhaka: bool | None = None,
    ) -> QuoteDTO:
        breakdown = price_order(
            [
                PricingLine(
                    product_id=item.product_id,
                    unit_price=item.unit_price,
                    quantity=item.quantity,
                    color=item.color,
                    size=item.size,
                )
                for item in items
            ],
            address=address,
            promo_code=promo_code,
            resolver=self._promo_resolver,
            force_dhaka=force_dhaka,
        )
        return QuoteDTO(
            items=[
                QuoteLineDTO(
                    product_id=line.product_id,
                    color=line.color,
                    size=line.size,
                    quantity=line.quantity,
                    unit_price=str(line.unit_price),
                    total_price=str(line.total_price),
                )
                for line in breakdown.items
            ],
            subtotal=str(breakdown.subtotal),
            delivery_zone=breakdown.delivery.zone.value,
            delivery_charge=str(breakdown.delivery_charge),
            discount_amount=str(breakdown.discount_amount),
            total_amount=str(breakdown.total_amount),
            promo_valid=breakdown.promo.is_valid,
            promo_message=breakdown.promo.message if promo_code else "",
            invalid_items=[
                f"Item {bad.index + 1} ({bad.product_id}): {bad.reason}"
                for bad in breakdown.invalid_items
            ],
        )
