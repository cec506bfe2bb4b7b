"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI layer can catch them uniformly and display user-friendly messages.

Order rejections carry the full list of problems found, not just the first,
so a caller can fix everything in one round trip.
"""

from __future__ import annotations


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class InvalidStatusTransition(ValidationError):
    """An order was asked to move to a status it cannot reach."""


class InsufficientStockError(ValidationError):
    """A variant does not hold enough units for the requested operation."""


class OrderRejectedError(DomainException):
    """An order request was rejected before anything was persisted."""

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.errors = list(errors or [])


class OrderValidationError(OrderRejectedError):
    """The draft order is structurally malformed."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__(f"{len(errors)} validation error(s) found", errors)


class ProductReferenceError(OrderRejectedError):
    """A line item references a product, color or size that does not exist."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__("Order references unknown products or variants", errors)


class OutOfStockError(OrderRejectedError):
    """One or more line items cannot be served from current stock."""

    def __init__(self, out_of_stock: list, low_stock_warnings: list | None = None) -> None:
        super().__init__(
            "Some items are out of stock",
            [str(item) for item in out_of_stock],
        )
        self.out_of_stock = list(out_of_stock)
        self.low_stock_warnings = list(low_stock_warnings or [])
