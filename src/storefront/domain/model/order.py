"""Storefront orders and their lifecycle.

An Order owns its line items and the pricing,
delivery and payment snapshots taken at creation time.  Status changes go
through ``transition_to`` so the lifecycle table below is the single source
of truth for what may follow what.
"""

from __future__ import annotations

import secrets
import string
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from storefront.domain.exceptions import InvalidStatusTransition, ValidationError
from storefront.domain.model.value_objects import Money, Quantity


class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    READY_TO_SHIP = "ready_to_ship"
    SHIPPED = "shipped"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    RETURNED = "returned"
    PENDING_REVIEW = "pending_review"


class PaymentMethod(Enum):
    CASH_ON_DELIVERY = "cash_on_delivery"
    BKASH = "bkash"
    NAGAD = "nagad"
    BANK_TRANSFER = "bank_transfer"
    CARD = "card"


class PaymentStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


# Happy path, in order.
FULFILLMENT_SEQUENCE: tuple[OrderStatus, ...] = (
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.PROCESSING,
    OrderStatus.READY_TO_SHIP,
    OrderStatus.SHIPPED,
    OrderStatus.OUT_FOR_DELIVERY,
    OrderStatus.DELIVERED,
)

ALLOWED_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset(
        {OrderStatus.CONFIRMED, OrderStatus.CANCELLED, OrderStatus.PENDING_REVIEW}
    ),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.PROCESSING, OrderStatus.CANCELLED}),
    OrderStatus.PROCESSING: frozenset({OrderStatus.READY_TO_SHIP, OrderStatus.CANCELLED}),
    OrderStatus.READY_TO_SHIP: frozenset({OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.OUT_FOR_DELIVERY, OrderStatus.RETURNED}),
    OrderStatus.OUT_FOR_DELIVERY: frozenset({OrderStatus.DELIVERED, OrderStatus.RETURNED}),
    OrderStatus.DELIVERED: frozenset({OrderStatus.RETURNED}),
    # Operator triage: accept the order as-is or cancel it.
    OrderStatus.PENDING_REVIEW: frozenset({OrderStatus.PENDING, OrderStatus.CANCELLED}),
    OrderStatus.CANCELLED: frozenset(),
    OrderStatus.RETURNED: frozenset(),
}


@dataclass(frozen=True)
class Customization:
    """Free-form buyer customization; opaque to pricing and inventory."""

    has_custom_design: bool = False
    custom_design_url: str = ""
    custom_text: str = ""
    custom_number: str = ""
    custom_slogan: str = ""
    special_instructions: str = ""

    @property
    def is_empty(self) -> bool:
        return not (
            self.has_custom_design
            or self.custom_design_url
            or self.custom_text
            or self.custom_number
            or self.custom_slogan
            or self.special_instructions
        )


@dataclass(frozen=True)
class CustomerInfo:
    name: str
    email: str
    phone: str
    address: str


@dataclass
class OrderLineItem:
    """Captures the price snapshot of a product at order-creation time.

    ``unit_price`` always comes from the product record, never from the
    client, and never changes after the order is created.
    """

    product_id: str
    product_name: str
    color: str
    size: str
    quantity: Quantity
    unit_price: Money  # locked at order-creation time
    product_image: str = ""
    customization: Customization = field(default_factory=Customization)

    @property
    def total_price(self) -> Money:
        return self.unit_price * self.quantity.value


@dataclass(frozen=True)
class OrderPricing:
    subtotal: Money
    delivery_charge: Money
    discount_amount: Money
    total_amount: Money
    promo_code: str | None = None


@dataclass(frozen=True)
class DeliveryInfo:
    address: str
    is_dhaka: bool
    delivery_charge: Money
    notes: str = ""


@dataclass
class PaymentInfo:
    method: PaymentMethod = PaymentMethod.CASH_ON_DELIVERY
    status: PaymentStatus = PaymentStatus.PENDING


@dataclass(frozen=True)
class StatusChange:
    status: OrderStatus
    timestamp: datetime
    note: str = ""


# ---------------------------------------------------------------------------
# Constants for business rules
# ---------------------------------------------------------------------------
MAX_LINE_ITEMS = 50


def generate_order_number(now: datetime | None = None) -> str:
    """Human-readable order number: ``ORD`` + epoch millis + 5 random chars."""
    now = now or datetime.now(timezone.utc)
    millis = int(now.timestamp() * 1000)
    alphabet = string.ascii_uppercase + string.digits
    suffix = "".join(secrets.choice(alphabet) for _ in range(5))
    return f"ORD{millis}{suffix}"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Order:
    """Aggregate root for storefront orders.

    Use the ``Order.create()`` factory for new orders; it checks the
    creation invariants.  The ``__init__`` is intentionally simple so the
    repository can reconstitute persisted orders without re-validating.
    """

    id: int | None
    order_number: str
    user_id: str
    customer: CustomerInfo
    items: list[OrderLineItem]
    pricing: OrderPricing
    delivery: DeliveryInfo
    payment: PaymentInfo = field(default_factory=PaymentInfo)
    status: OrderStatus = OrderStatus.PENDING
    internal_notes: str = ""
    idempotency_key: str | None = None
    status_history: list[StatusChange] = field(default_factory=list)
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(
        user_id: str,
        customer: CustomerInfo,
        items: list[OrderLineItem],
        pricing: OrderPricing,
        delivery: DeliveryInfo,
        payment: PaymentInfo | None = None,
        idempotency_key: str | None = None,
    ) -> Order:
        """Create a new ``pending`` order, enforcing creation invariants."""
        if not user_id:
            raise ValidationError("Orders require an authenticated user")
        if not items:
            raise ValidationError("Order must contain at least one item")
        if len(items) > MAX_LINE_ITEMS:
            raise ValidationError(f"Maximum {MAX_LINE_ITEMS} items per order")

        now = _utcnow()
        return Order(
            id=None,
            order_number=generate_order_number(now),
            user_id=user_id,
            customer=customer,
            items=list(items),
            pricing=pricing,
            delivery=delivery,
            payment=payment or PaymentInfo(),
            idempotency_key=idempotency_key,
            status_history=[StatusChange(OrderStatus.PENDING, now)],
            created_at=now,
            updated_at=now,
        )

    # --- State transitions ----------------------------------------------------

    def can_transition_to(self, target: OrderStatus) -> bool:
        return target in ALLOWED_TRANSITIONS[self.status]

    def transition_to(self, target: OrderStatus, note: str = "") -> None:
        if not self.can_transition_to(target):
            raise InvalidStatusTransition(
                f"Cannot move order {self.order_number} from "
                f"{self.status.value} to {target.value}"
            )
        now = _utcnow()
        self.status = target
        self.updated_at = now
        self.status_history.append(StatusChange(target, now, note))

    def confirm(self) -> None:
        self.transition_to(OrderStatus.CONFIRMED)

    def advance(self) -> OrderStatus:
        """Move one step along the fulfillment sequence."""
        if self.status not in FULFILLMENT_SEQUENCE[:-1]:
            raise InvalidStatusTransition(
                f"Order {self.order_number} in {self.status.value} status "
                f"has no next fulfillment step"
            )
        target = FULFILLMENT_SEQUENCE[FULFILLMENT_SEQUENCE.index(self.status) + 1]
        self.transition_to(target)
        return target

    def cancel(self, note: str = "") -> None:
        if self.status == OrderStatus.CANCELLED:
            raise InvalidStatusTransition("Order is already cancelled")
        self.transition_to(OrderStatus.CANCELLED, note)

    def flag_for_review(self, note: str) -> None:
        """Park a persisted order for an operator after an inventory conflict."""
        self.transition_to(OrderStatus.PENDING_REVIEW, "inventory deduction failed")
        self.add_internal_note(note)

    def add_internal_note(self, note: str) -> None:
        self.internal_notes = (
            f"{self.internal_notes}\n---\n{note}" if self.internal_notes else note
        )
        self.updated_at = _utcnow()

    # --- Computed properties --------------------------------------------------

    @property
    def customer_status(self) -> OrderStatus:
        """Status as shown to the buyer; operator triage states stay internal."""
        if self.status == OrderStatus.PENDING_REVIEW:
            return OrderStatus.PENDING
        return self.status

    @property
    def total_items(self) -> int:
        return sum(item.quantity.value for item in self.items)

    @property
    def items_total(self) -> Money:
        result = Money.zero()
        for item in self.items:
            result = result + item.total_price
        return result
