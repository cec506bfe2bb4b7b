"""JSON-file-backed implementation of ProductRepository."""

from __future__ import annotations

import json
from decimal import Decimal
from pathlib import Path
from typing import Callable, TypeVar

from storefront.domain.exceptions import EntityNotFoundError
from storefront.domain.model.product import Product, Variant
from storefront.domain.model.value_objects import CURRENCY, Money
from storefront.domain.repository.product_repository import (
    PRODUCT_NOT_FOUND,
    VARIANT_NOT_FOUND,
    ProductRepository,
)
from storefront.infrastructure.persistence.file_lock import lock_for

T = TypeVar("T")


class JsonProductRepository(ProductRepository):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._lock = lock_for(file_path)
        self._ensure_file()

    # --- ProductRepository interface ------------------------------------------

    def get_by_id(self, product_id: str) -> Product | None:
        return self._load().get(product_id)

    def get_by_name(self, name: str) -> Product | None:
        for product in self._load().values():
            if product.name.lower() == name.strip().lower():
                return product
        return None

    def list_all(self) -> list[Product]:
        return list(self._load().values())

    def save(self, product: Product) -> None:
        with self._lock:
            products = self._load()
            products[product.id] = product
            self._persist(products)

    def update_variant(
        self,
        product_id: str,
        color: str,
        size: str,
        mutate: Callable[[Product, Variant], T],
    ) -> T:
        with self._lock:
            products = self._load()
            product = products.get(product_id)
            if product is None:
                raise EntityNotFoundError(PRODUCT_NOT_FOUND)
            variant = product.get_variant(color, size)
            if variant is None:
                raise EntityNotFoundError(VARIANT_NOT_FOUND)
            # Raises before anything is written when the change is refused.
            result = mutate(product, variant)
            self._persist(products)
            return result

    # --- Serialization helpers ------------------------------------------------

    def _load(self) -> dict[str, Product]:
        with self._lock:
            raw = json.loads(self._file_path.read_text(encoding="utf-8"))
        return {item["id"]: self._to_domain(item) for item in raw}

    def _persist(self, products: dict[str, Product]) -> None:
        raw = [self._to_raw(p) for p in products.values()]
        self._file_path.write_text(
            json.dumps(raw, indent=2, ensure_ascii=False) + "\n", encoding="utf-8"
        )

    @staticmethod
    def _to_raw(product: Product) -> dict:
        return {
            "id": product.id,
            "name": product.name,
            "price": str(product.price.amount),
            "offer_price": str(product.offer_price.amount) if product.offer_price else None,
            "currency": product.price.currency,
            "colors": product.colors,
            "sizes": product.sizes,
            "variants": [
                {"color": v.color, "size": v.size, "stock": v.stock, "reserved": v.reserved}
                for v in product.variants
            ],
            "images": product.images,
            "color_images": product.color_images,
            "seller_id": product.seller_id,
            "number_of_sales": product.number_of_sales,
        }

    @staticmethod
    def _to_domain(item: dict) -> Product:
        currency = item.get("currency", CURRENCY)
        offer_price = item.get("offer_price")
        return Product(
            id=item["id"],
            name=item["name"],
            price=Money(Decimal(item["price"]), currency),
            offer_price=Money(Decimal(offer_price), currency) if offer_price else None,
            colors=list(item.get("colors", [])),
            sizes=list(item.get("sizes", [])),
            variants=[
                Variant(v["color"], v["size"], v.get("stock", 0), v.get("reserved", 0))
                for v in item.get("variants", [])
            ],
            images=list(item.get("images", [])),
            color_images=dict(item.get("color_images", {})),
            seller_id=item.get("seller_id"),
            number_of_sales=item.get("number_of_sales", 0),
        )

    def _ensure_file(self) -> None:
        with self._lock:
            if not self._file_path.exists():
                self._file_path.parent.mkdir(parents=True, exist_ok=True)
                self._file_path.write_text("[]", encoding="utf-8")
