"""Domain service: Pricing Calculator.

Turns line items, a delivery address and an optional promo code into an
itemized price breakdown.  No I/O happens here beyond what the injected
promo resolver does to look a code up.

The same calculator serves two callers: the cart preview (prices taken
from the cart) and the order saga (prices freshly read from the product
records).  Only the saga's result is ever persisted.

Malformed items do not abort the calculation: they are reported in
``invalid_items`` and left out of the subtotal, and the breakdown is marked
incomplete so a caller that needs every item priced can refuse it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, InvalidOperation

from storefront.domain.model.value_objects import Money
from storefront.domain.service.delivery_zone import DeliveryZone, classify
from storefront.domain.service.promo_resolver import (
    PromoResolution,
    PromoResolver,
    StaticPromoTable,
)


@dataclass(frozen=True)
class PricingLine:
    """Input: one item as the caller sees it.  Values are not yet trusted."""

    product_id: str
    unit_price: Decimal | str | int | float | None
    quantity: int | None
    color: str = ""
    size: str = ""


@dataclass(frozen=True)
class ItemPrice:
    product_id: str
    color: str
    size: str
    unit_price: Money
    quantity: int
    total_price: Money


@dataclass(frozen=True)
class InvalidItem:
    index: int
    product_id: str
    reason: str


@dataclass(frozen=True)
class PriceBreakdown:
    subtotal: Money
    delivery_charge: Money
    discount_amount: Money
    total_amount: Money
    delivery: DeliveryZone
    promo: PromoResolution
    items: list[ItemPrice] = field(default_factory=list)
    invalid_items: list[InvalidItem] = field(default_factory=list)

    @property
    def total_quantity(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def is_complete(self) -> bool:
        return not self.invalid_items


def price_item(line: PricingLine) -> ItemPrice:
    """Price a single line.  Raises ValueError when price or quantity is malformed."""
    try:
        unit_price = Decimal(str(line.unit_price))
    except (InvalidOperation, ValueError) as exc:
        raise ValueError(f"invalid unit price {line.unit_price!r}") from exc
    if not unit_price.is_finite() or unit_price <= 0:
        raise ValueError(f"unit price must be positive, got {line.unit_price!r}")

    quantity = line.quantity
    if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity <= 0:
        raise ValueError(f"quantity must be a positive integer, got {quantity!r}")

    price = Money(unit_price).rounded()
    return ItemPrice(
        product_id=line.product_id,
        color=line.color,
        size=line.size,
        unit_price=price,
        quantity=quantity,
        total_price=(price * quantity).rounded(),
    )


def price_order(
    items: list[PricingLine],
    address: str | None,
    promo_code: str | None = None,
    resolver: PromoResolver | None = None,
    force_dhaka: bool | None = None,
    now: datetime | None = None,
) -> PriceBreakdown:
    """Compute subtotal, delivery, discount and total for an order.

    ``total = subtotal + delivery - discount``, floored at zero and rounded
    to the cent.  Delivery is charged once per order and is never
    discounted.
    """
    priced: list[ItemPrice] = []
    invalid: list[InvalidItem] = []
    subtotal = Money.zero()

    for index, line in enumerate(items):
        try:
            item = price_item(line)
        except ValueError as exc:
            invalid.append(InvalidItem(index=index, product_id=line.product_id, reason=str(exc)))
            continue
        priced.append(item)
        subtotal = subtotal + item.total_price

    delivery = classify(address, force_dhaka)

    resolver = resolver or PromoResolver([StaticPromoTable()])
    promo = resolver.resolve(subtotal, promo_code, now=now)

    total = (subtotal + delivery.charge).minus_floored(promo.discount_amount).rounded()

    return PriceBreakdown(
        subtotal=subtotal.rounded(),
        delivery_charge=delivery.charge,
        discount_amount=promo.discount_amount,
        total_amount=total,
        delivery=delivery,
        promo=promo,
        items=priced,
        invalid_items=invalid,
    )
