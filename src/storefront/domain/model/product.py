"""Product aggregate.

Products live independently of orders. They have their own lifecycle:
prices change, products are added and removed from the catalog.  The only
part of a product the order engine mutates is the per-variant stock
counters, and only through the inventory ledger.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from storefront.domain.exceptions import InsufficientStockError, ValidationError
from storefront.domain.model.value_objects import Money


@dataclass
class Variant:
    """A (color, size) stock-keeping unit.

    Invariants:
    - ``stock`` and ``reserved`` are never negative
    - ``reserved`` counts units already taken out of ``stock`` for an
      in-flight order but not yet permanently deducted
    """

    color: str
    size: str
    stock: int = 0
    reserved: int = 0

    def __post_init__(self) -> None:
        if self.stock < 0:
            raise ValidationError(f"Stock for {self.label} cannot be negative")
        if self.reserved < 0:
            raise ValidationError(f"Reserved count for {self.label} cannot be negative")

    @property
    def label(self) -> str:
        return f"{self.color}-{self.size}"

    def matches(self, color: str, size: str) -> bool:
        return self.color == color and self.size == size

    def reserve(self, quantity: int) -> None:
        """Earmark units for an order: moves them from stock to reserved."""
        _require_positive(quantity, "Reservation")
        if self.stock < quantity:
            raise InsufficientStockError("insufficient stock for reservation")
        self.stock -= quantity
        self.reserved += quantity

    def deduct(self, quantity: int) -> None:
        """Permanently take units out of inventory.

        Consumes a matching reservation when there is one, otherwise takes
        the units straight from ``stock``.
        """
        _require_positive(quantity, "Deduction")
        if self.reserved >= quantity:
            self.reserved -= quantity
        elif self.stock >= quantity:
            self.stock -= quantity
        else:
            raise InsufficientStockError("insufficient stock for deduction")

    def restore(self, quantity: int) -> None:
        """Put units back on the shelf (cancellation, refund, compensation)."""
        _require_positive(quantity, "Restore")
        self.stock += quantity

    def apply_stock_update(self, operation: str, quantity: int) -> int:
        """Seller-side adjustment. Returns the previous stock level."""
        if quantity < 0:
            raise ValidationError("Stock update quantity cannot be negative")
        previous = self.stock
        if operation == "add":
            self.stock = previous + quantity
        elif operation == "subtract":
            self.stock = max(0, previous - quantity)
        elif operation == "set":
            self.stock = quantity
        else:
            raise ValidationError(f"Unknown stock operation '{operation}'")
        return previous


def _require_positive(quantity: int, what: str) -> None:
    if quantity <= 0:
        raise ValidationError(f"{what} quantity must be positive")


@dataclass
class Product:
    """A product in the catalog.

    Stock lives on the variants, so every stock change loads and saves
    the whole product document.
    """

    id: str
    name: str
    price: Money
    offer_price: Money | None = None
    colors: list[str] = field(default_factory=list)
    sizes: list[str] = field(default_factory=list)
    variants: list[Variant] = field(default_factory=list)
    images: list[str] = field(default_factory=list)
    color_images: dict[str, str] = field(default_factory=dict)
    seller_id: str | None = None
    number_of_sales: int = 0

    def __post_init__(self) -> None:
        seen: set[tuple[str, str]] = set()
        for variant in self.variants:
            key = (variant.color, variant.size)
            if key in seen:
                raise ValidationError(
                    f"Duplicate variant {variant.label} on product '{self.name}'"
                )
            seen.add(key)

    @property
    def effective_price(self) -> Money:
        """Offer price when the product is on offer, otherwise the base price."""
        if self.offer_price is not None and self.offer_price.amount > 0:
            return self.offer_price
        return self.price

    def offers(self, color: str, size: str) -> bool:
        """True if the color and size are among the declared options."""
        return color in self.colors and size in self.sizes

    def get_variant(self, color: str, size: str) -> Variant | None:
        for variant in self.variants:
            if variant.matches(color, size):
                return variant
        return None

    def image_for(self, color: str) -> str:
        """Variant-specific image: the color image if any, else the first image."""
        if color in self.color_images:
            return self.color_images[color]
        return self.images[0] if self.images else ""

    def update_price(self, new_price: Money) -> None:
        """Change the product price.

        This does NOT affect any existing orders because orders
        capture a price snapshot at creation time.
        """
        if new_price.amount <= 0:
            raise ValidationError("Product price must be greater than zero")
        self.price = new_price

    def record_sales(self, quantity: int) -> None:
        self.number_of_sales += quantity

    def revert_sales(self, quantity: int) -> None:
        self.number_of_sales = max(0, self.number_of_sales - quantity)
