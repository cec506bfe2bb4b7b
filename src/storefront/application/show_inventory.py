"""Application service: Show Inventory and Low-Stock Alerts use cases (queries)."""

from __future__ import annotations

from dataclasses import dataclass

from storefront.domain.repository.product_repository import ProductRepository
from storefront.domain.service.inventory_ledger import (
    LOW_STOCK_THRESHOLD,
    InventoryLedger,
    LowStockAlert,
)


@dataclass(frozen=True)
class InventoryLineDTO:
    product_id: str
    product_name: str
    color: str
    size: str
    stock: int
    reserved: int


class ShowInventoryHandler:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def handle(self, seller_id: str | None = None) -> list[InventoryLineDTO]:
        if seller_id is None:
            products = self._product_repo.list_all()
        else:
            products = self._product_repo.list_by_seller(seller_id)
        return [
            InventoryLineDTO(
                product_id=product.id,
                product_name=product.name,
                color=variant.color,
                size=variant.size,
                stock=variant.stock,
                reserved=variant.reserved,
            )
            for product in products
            for variant in product.variants
        ]


class LowStockAlertsHandler:

    def __init__(self, ledger: InventoryLedger) -> None:
        self._ledger = ledger

    def handle(
        self,
        seller_id: str | None = None,
        threshold: int = LOW_STOCK_THRESHOLD,
    ) -> list[LowStockAlert]:
        # Out-of-stock variants first, then the lowest counts.
        alerts = self._ledger.low_stock_alerts(seller_id, threshold)
        return sorted(alerts, key=lambda a: (a.stock, a.product_name, a.color, a.size))
