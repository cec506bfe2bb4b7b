"""Application service: Add Product use case.

Seeds the catalog with a product and one variant per color/size pair.
"""

from __future__ import annotations

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.product import Product, Variant
from storefront.domain.model.value_objects import Money
from storefront.domain.repository.product_repository import ProductRepository


class AddProductHandler:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def handle(
        self,
        name: str,
        price: str,
        colors: list[str],
        sizes: list[str],
        stock: int = 0,
        offer_price: str | None = None,
        seller_id: str | None = None,
        images: list[str] | None = None,
    ) -> Product:
        """Add a new product to the catalog."""
        if not name or not name.strip():
            raise ValidationError("Product name is required")
        if not colors or not sizes:
            raise ValidationError("At least one color and one size are required")
        if stock < 0:
            raise ValidationError("Initial stock cannot be negative")

        existing = self._product_repo.get_by_name(name)
        if existing is not None:
            raise ValidationError(f"Product '{name}' already exists")

        base_price = Money.of(price)
        if base_price.amount <= 0:
            raise ValidationError("Product price must be greater than zero")

        # Auto-assign ID based on existing products
        all_products = self._product_repo.list_all()
        numeric_ids = [int(p.id) for p in all_products if p.id.isdigit()]
        next_id = str(max(numeric_ids) + 1) if numeric_ids else "1"

        product = Product(
            id=next_id,
            name=name.strip(),
            price=base_price,
            offer_price=Money.of(offer_price) if offer_price else None,
            colors=list(colors),
            sizes=list(sizes),
            variants=[Variant(color, size, stock) for color in colors for size in sizes],
            images=list(images or []),
            seller_id=seller_id,
        )
        self._product_repo.save(product)
        return product
