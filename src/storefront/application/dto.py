"""Request and response shapes for the application handlers.

The CLI builds the request DTOs and renders the response DTOs; neither side
sees domain objects.  Request DTOs are loose (plain strings and ints, optional fields) because they
hold untrusted client data; the handlers validate them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


# --- Input ----------------------------------------------------------------------


@dataclass(frozen=True)
class CustomerSpec:
    name: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""


@dataclass(frozen=True)
class OrderItemSpec:
    """Input: one cart entry the customer wants to buy.

    ``unit_price`` and ``total_price`` are whatever the client displayed;
    they are validated for shape but never used for pricing.
    """

    product_id: str
    color: str
    size: str
    quantity: Any
    customization: dict[str, Any] | None = None
    unit_price: Any = None
    total_price: Any = None


@dataclass(frozen=True)
class CreateOrderRequest:
    customer: CustomerSpec
    items: list[OrderItemSpec]
    payment_method: str = "cash_on_delivery"
    delivery_notes: str = ""
    promo_code: str | None = None
    idempotency_key: str | None = None


@dataclass(frozen=True)
class CartItemSpec:
    """Input: a cart entry with the price the cart cached for display."""

    product_id: str
    color: str
    size: str
    quantity: Any
    unit_price: Any


# --- Output ---------------------------------------------------------------------


@dataclass(frozen=True)
class OrderReceiptDTO:
    """Output: what the buyer gets back after placing an order."""

    order_id: int
    order_number: str
    status: str
    total_amount: str  # plain decimal, e.g. "1070.00"
    created_at: str
    low_stock_warnings: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class OrderLineItemDTO:
    """Output: a single line item as displayed to the user."""

    product_id: str
    product_name: str
    color: str
    size: str
    quantity: int
    unit_price: str  # formatted, e.g. "৳500.00"
    total_price: str
    has_customization: bool


@dataclass(frozen=True)
class OrderDTO:
    """Output: a complete order as displayed to an operator."""

    id: int
    order_number: str
    user_id: str
    customer_name: str
    customer_email: str
    status: str
    customer_status: str
    items: list[OrderLineItemDTO]
    subtotal: str
    delivery_charge: str
    discount_amount: str
    promo_code: str | None
    total_amount: str
    delivery_address: str
    delivery_zone: str
    payment_method: str
    payment_status: str
    internal_notes: str
    created_at: str
    status_history: list[str] = field(default_factory=list)

    @property
    def needs_review(self) -> bool:
        return self.status == "pending_review"


@dataclass(frozen=True)
class QuoteLineDTO:
    product_id: str
    color: str
    size: str
    quantity: int
    unit_price: str
    total_price: str


@dataclass(frozen=True)
class QuoteDTO:
    """Output: display-only price breakdown for a cart."""

    items: list[QuoteLineDTO]
    subtotal: str
    delivery_zone: str
    delivery_charge: str
    discount_amount: str
    total_amount: str
    promo_valid: bool
    promo_message: str
    invalid_items: list[str] = field(default_factory=list)
