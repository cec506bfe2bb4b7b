"""Promo offers — discount codes buyers can apply at checkout.

An offer comes either from the persisted offer catalog (sellers create and
retire them) or from the fixed built-in table.  Both are represented by
``PromoOffer``; built-in entries simply have no validity window and no
usage limit.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.value_objects import Money


class DiscountType(Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


def normalize_code(code: str) -> str:
    return code.strip().upper()


def as_utc(moment: datetime) -> datetime:
    """Read a naive datetime as UTC; convert an aware one to UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


@dataclass
class PromoOffer:
    """A discount code and the rules that gate it.

    Invariant: the offer is currently valid iff it is active, ``now`` lies
    inside ``[valid_from, valid_to]`` and the usage limit (if any) is not
    exhausted.  Missing bounds are unbounded.
    """

    code: str
    discount_type: DiscountType
    discount_value: Decimal
    minimum_order_value: Money
    usage_limit: int | None = None
    used_count: int = 0
    valid_from: datetime | None = None
    valid_to: datetime | None = None
    is_active: bool = True
    description: str = ""
    offer_id: str | None = None

    def __post_init__(self) -> None:
        self.code = normalize_code(self.code)
        if not self.code:
            raise ValidationError("Promo code cannot be empty")
        if not self.discount_value.is_finite():
            raise ValidationError(f"Discount value must be a finite number, got {self.discount_value}")
        if self.discount_value < 0:
            raise ValidationError("Discount value cannot be negative")
        if self.discount_type == DiscountType.PERCENTAGE and self.discount_value > 100:
            raise ValidationError("Percentage discount cannot exceed 100%")
        if self.usage_limit is not None and self.usage_limit < 1:
            raise ValidationError("Usage limit must be at least 1")
        if self.valid_from is not None:
            self.valid_from = as_utc(self.valid_from)
        if self.valid_to is not None:
            self.valid_to = as_utc(self.valid_to)
        if (
            self.valid_from is not None
            and self.valid_to is not None
            and self.valid_to <= self.valid_from
        ):
            raise ValidationError("End date must be after start date")

    @property
    def is_exhausted(self) -> bool:
        return self.usage_limit is not None and self.used_count >= self.usage_limit

    def has_started(self, now: datetime) -> bool:
        return self.valid_from is None or self.valid_from <= as_utc(now)

    def has_expired(self, now: datetime) -> bool:
        return self.valid_to is not None and as_utc(now) > self.valid_to

    def is_currently_valid(self, now: datetime | None = None) -> bool:
        now = now or datetime.now(timezone.utc)
        return (
            self.is_active
            and self.has_started(now)
            and not self.has_expired(now)
            and not self.is_exhausted
        )

    def discount_for(self, subtotal: Money) -> Money:
        """Discount on ``subtotal``, never more than the subtotal itself."""
        if self.discount_type == DiscountType.PERCENTAGE:
            discount = subtotal.percentage(self.discount_value)
        else:
            discount = Money(self.discount_value, subtotal.currency).rounded()
        return min(discount, subtotal)

    def record_use(self) -> None:
        if self.is_exhausted:
            raise ValidationError(f"Promo code {self.code} has reached its usage limit")
        self.used_count += 1
