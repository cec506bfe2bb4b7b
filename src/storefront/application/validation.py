"""Structural validation of a draft order.

Collects every problem instead of stopping at the first one, so the buyer
can fix the whole form in one go.  Nothing here touches storage.
"""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation
from typing import Any

from storefront.application.dto import CreateOrderRequest, CustomerSpec, OrderItemSpec
from storefront.domain.model.order import MAX_LINE_ITEMS, PaymentMethod

_EMAIL = re.compile(r"\S+@\S+\.\S+")

MIN_NAME_LENGTH = 2
MIN_PHONE_LENGTH = 10
MIN_ADDRESS_LENGTH = 10


def _blank(value: Any) -> bool:
    return not isinstance(value, str) or not value.strip()


def _is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def _is_positive_number(value: Any) -> bool:
    try:
        number = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return False
    return number.is_finite() and number > 0


def validate_customer(customer: CustomerSpec | None) -> list[str]:
    if customer is None:
        return ["Customer information is required"]

    errors: list[str] = []
    if _blank(customer.name) or len(customer.name.strip()) < MIN_NAME_LENGTH:
        errors.append("Valid customer name is required")
    if _blank(customer.email) or not _EMAIL.search(customer.email):
        errors.append("Valid email address is required")
    if _blank(customer.phone) or len(customer.phone.strip()) < MIN_PHONE_LENGTH:
        errors.append("Valid phone number is required")
    if _blank(customer.address) or len(customer.address.strip()) < MIN_ADDRESS_LENGTH:
        errors.append("Valid delivery address is required")
    return errors


def validate_item(position: int, item: OrderItemSpec) -> list[str]:
    errors: list[str] = []
    prefix = f"Item {position}"
    if _blank(item.product_id):
        errors.append(f"{prefix}: Product ID is required")
    if _blank(item.color):
        errors.append(f"{prefix}: Color selection is required")
    if _blank(item.size):
        errors.append(f"{prefix}: Size selection is required")
    if not _is_positive_int(item.quantity):
        errors.append(f"{prefix}: Valid quantity is required")
    # Client prices are ignored for pricing, but a malformed one still
    # marks a broken or tampered cart.
    if item.unit_price is not None and not _is_positive_number(item.unit_price):
        errors.append(f"{prefix}: Valid price is required")
    return errors


def validate_order_request(request: CreateOrderRequest) -> list[str]:
    """Return every structural problem with ``request`` (empty when valid)."""
    errors = validate_customer(request.customer)

    if not request.items:
        errors.append("Order must contain at least one item")
    else:
        if len(request.items) > MAX_LINE_ITEMS:
            errors.append(f"Maximum {MAX_LINE_ITEMS} items per order")
        for position, item in enumerate(request.items, start=1):
            errors.extend(validate_item(position, item))

    valid_methods = {method.value for method in PaymentMethod}
    if request.payment_method not in valid_methods:
        errors.append(f"Unsupported payment method '{request.payment_method}'")

    return errors
