"""Application service: Set Inventory use case.

Sellers adjust variant stock in bulk.  Each update is applied on its own;
the result lists which ones failed and why.
"""

from __future__ import annotations

import logging

from storefront.domain.exceptions import ValidationError
from storefront.domain.service.inventory_ledger import (
    InventoryLedger,
    StockOperationResult,
    StockUpdate,
)

logger = logging.getLogger(__name__)

STOCK_OPERATIONS = ("set", "add", "subtract")


class SetInventoryHandler:

    def __init__(self, ledger: InventoryLedger) -> None:
        self._ledger = ledger

    def handle(
        self,
        updates: list[StockUpdate],
        seller_id: str | None = None,
    ) -> StockOperationResult:
        if not updates:
            raise ValidationError("No stock updates given")
        for update in updates:
            if update.operation not in STOCK_OPERATIONS:
                raise ValidationError(f"Unknown stock operation '{update.operation}'")

        result = self._ledger.bulk_update_stock(updates, seller_id)
        logger.info(
            "Bulk stock update: %d applied, %d failed",
            len(result.succeeded), len(result.failed),
        )
        return result
