"""Abstract repository for Product aggregate.

Defined in the domain layer so the domain never depends on
infrastructure. Concrete implementations (JSON, SQL, in-memory)
live in the infrastructure layer.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, TypeVar

from storefront.domain.model.product import Product, Variant

T = TypeVar("T")

# Messages carried by EntityNotFoundError from ``update_variant``.
PRODUCT_NOT_FOUND = "product not found"
VARIANT_NOT_FOUND = "variant not found"


class ProductRepository(ABC):

    @abstractmethod
    def get_by_id(self, product_id: str) -> Product | None:
        """Return a product by its ID, or None if not found."""

    @abstractmethod
    def get_by_name(self, name: str) -> Product | None:
        """Return a product by its exact name, or None if not found."""

    @abstractmethod
    def list_all(self) -> list[Product]:
        """Return every product in the catalog."""

    @abstractmethod
    def save(self, product: Product) -> None:
        """Persist a new or updated product."""

    @abstractmethod
    def update_variant(
        self,
        product_id: str,
        color: str,
        size: str,
        mutate: Callable[[Product, Variant], T],
    ) -> T:
        """Read a product, apply ``mutate`` to one variant and write it back.

        The read and the write happen under the storage's per-document
        write ordering, so two callers never both act on the same stale
        counter.  If ``mutate`` raises, nothing is written and the
        exception propagates.  Raises EntityNotFoundError when the product
        or the variant does not exist.
        """

    def list_by_seller(self, seller_id: str) -> list[Product]:
        return [p for p in self.list_all() if p.seller_id == seller_id]
