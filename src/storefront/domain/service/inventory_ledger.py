"""Domain service: Inventory Ledger.

Owns the per-variant stock counters stored on Product documents.  Every
operation works item by item: one item failing never undoes or blocks the
others, and each result lists what succeeded and what failed so the caller
decides what to do with a partial outcome.

The ledger is an abstract capability.  ``ProductInventoryLedger`` reads and
writes each variant through ``ProductRepository.update_variant``, i.e. with
whatever per-document write ordering the storage provides and no lock
spanning several products.  Two orders can both pass
``check_availability`` for the last unit; the loser then fails at deduction
time instead of driving stock negative.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable

from storefront.domain.exceptions import DomainException, EntityNotFoundError
from storefront.domain.model.product import Product, Variant
from storefront.domain.repository.product_repository import (
    PRODUCT_NOT_FOUND,
    VARIANT_NOT_FOUND,
    ProductRepository,
)

logger = logging.getLogger(__name__)

LOW_STOCK_THRESHOLD = 5

INSUFFICIENT_QUANTITY = "insufficient quantity"
UNAUTHORIZED = "product not found or unauthorized"


@dataclass(frozen=True)
class StockRequest:
    """A quantity of one variant of one product."""

    product_id: str
    color: str
    size: str
    quantity: int

    @property
    def variant_key(self) -> tuple[str, str, str]:
        return (self.product_id, self.color, self.size)

    @property
    def label(self) -> str:
        return f"{self.product_id} ({self.color}-{self.size}) x{self.quantity}"


@dataclass(frozen=True)
class StockIssue:
    request: StockRequest
    reason: str
    product_name: str = ""
    available_stock: int | None = None
    requested: int | None = None

    def __str__(self) -> str:
        name = self.product_name or self.request.product_id
        text = f"{name} ({self.request.color}-{self.request.size}): {self.reason}"
        if self.available_stock is not None:
            requested = self.requested if self.requested is not None else self.request.quantity
            text += f" (only {self.available_stock} available, requested {requested})"
        return text


@dataclass(frozen=True)
class LowStockWarning:
    request: StockRequest
    product_name: str
    available_stock: int

    def __str__(self) -> str:
        return (
            f"Low stock: only {self.available_stock} left of "
            f"{self.product_name} ({self.request.color}-{self.request.size})"
        )


@dataclass(frozen=True)
class ItemAvailability:
    request: StockRequest
    product_name: str
    available_stock: int
    available: bool


@dataclass(frozen=True)
class AvailabilityReport:
    all_available: bool
    items: list[ItemAvailability] = field(default_factory=list)
    out_of_stock: list[StockIssue] = field(default_factory=list)
    low_stock_warnings: list[LowStockWarning] = field(default_factory=list)


@dataclass(frozen=True)
class StockMovement:
    """One item an operation applied, with the counters it left behind."""

    request: StockRequest
    product_name: str
    stock_after: int
    reserved_after: int


@dataclass(frozen=True)
class StockOperationResult:
    success: bool
    succeeded: list[StockMovement] = field(default_factory=list)
    failed: list[StockIssue] = field(default_factory=list)


@dataclass(frozen=True)
class StockUpdate:
    """A seller-side stock adjustment: ``set``, ``add`` or ``subtract``."""

    product_id: str
    color: str
    size: str
    quantity: int
    operation: str = "set"


@dataclass(frozen=True)
class LowStockAlert:
    product_id: str
    product_name: str
    color: str
    size: str
    stock: int
    threshold: int

    @property
    def alert_type(self) -> str:
        return "out_of_stock" if self.stock == 0 else "low_stock"

    @property
    def message(self) -> str:
        label = f"{self.product_name} ({self.color}-{self.size})"
        if self.stock == 0:
            return f"{label} is out of stock"
        return f"{label} is low on stock ({self.stock} left)"


class InventoryLedger(ABC):

    @abstractmethod
    def check_availability(self, requests: list[StockRequest]) -> AvailabilityReport:
        """Report whether every request can be served from current stock."""

    @abstractmethod
    def reserve(self, requests: list[StockRequest], order_ref: str) -> StockOperationResult:
        """Move units from stock to reserved, item by item."""

    @abstractmethod
    def deduct(self, requests: list[StockRequest], order_ref: str) -> StockOperationResult:
        """Permanently remove units, consuming reservations first."""

    @abstractmethod
    def restore(
        self,
        requests: list[StockRequest],
        order_ref: str,
        revert_sales: bool = True,
    ) -> StockOperationResult:
        """Put units back into stock (cancellations, refunds, compensation)."""

    @abstractmethod
    def record_sales(self, requests: list[StockRequest], order_ref: str) -> StockOperationResult:
        """Bump the running sales counter of each product."""

    @abstractmethod
    def bulk_update_stock(
        self,
        updates: list[StockUpdate],
        seller_id: str | None = None,
    ) -> StockOperationResult:
        """Apply seller stock adjustments, item by item."""

    @abstractmethod
    def low_stock_alerts(
        self,
        seller_id: str | None = None,
        threshold: int = LOW_STOCK_THRESHOLD,
    ) -> list[LowStockAlert]:
        """Variants at or below ``threshold`` units."""


class ProductInventoryLedger(InventoryLedger):

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    # --- Queries --------------------------------------------------------------

    def check_availability(self, requests: list[StockRequest]) -> AvailabilityReport:
        """Check each line against stock.

        Lines naming the same variant draw on the same counter, so each is
        judged by the total requested for its variant.
        """
        items: list[ItemAvailability] = []
        out_of_stock: list[StockIssue] = []
        warnings: list[LowStockWarning] = []
        warned: set[tuple[str, str, str]] = set()

        totals: dict[tuple[str, str, str], int] = {}
        for request in requests:
            totals[request.variant_key] = totals.get(request.variant_key, 0) + request.quantity

        for request in requests:
            product = self._product_repo.get_by_id(request.product_id)
            if product is None:
                out_of_stock.append(StockIssue(request, PRODUCT_NOT_FOUND))
                continue

            variant = product.get_variant(request.color, request.size)
            if variant is None:
                out_of_stock.append(StockIssue(request, VARIANT_NOT_FOUND, product.name))
                continue

            requested = totals[request.variant_key]
            available = variant.stock >= requested
            items.append(ItemAvailability(request, product.name, variant.stock, available))
            if not available:
                out_of_stock.append(
                    StockIssue(
                        request, INSUFFICIENT_QUANTITY, product.name, variant.stock, requested
                    )
                )
            elif variant.stock <= LOW_STOCK_THRESHOLD and request.variant_key not in warned:
                warned.add(request.variant_key)
                warnings.append(LowStockWarning(request, product.name, variant.stock))

        return AvailabilityReport(
            all_available=not out_of_stock,
            items=items,
            out_of_stock=out_of_stock,
            low_stock_warnings=warnings,
        )

    def low_stock_alerts(
        self,
        seller_id: str | None = None,
        threshold: int = LOW_STOCK_THRESHOLD,
    ) -> list[LowStockAlert]:
        if seller_id is None:
            products = self._product_repo.list_all()
        else:
            products = self._product_repo.list_by_seller(seller_id)
        return [
            LowStockAlert(
                product_id=product.id,
                product_name=product.name,
                color=variant.color,
                size=variant.size,
                stock=variant.stock,
                threshold=threshold,
            )
            for product in products
            for variant in product.variants
            if variant.stock <= threshold
        ]

    # --- Mutations ------------------------------------------------------------

    def reserve(self, requests: list[StockRequest], order_ref: str) -> StockOperationResult:
        return self._apply_each(
            requests, order_ref, "reserve",
            lambda product, variant, request: variant.reserve(request.quantity),
        )

    def deduct(self, requests: list[StockRequest], order_ref: str) -> StockOperationResult:
        return self._apply_each(
            requests, order_ref, "deduct",
            lambda product, variant, request: variant.deduct(request.quantity),
        )

    def restore(
        self,
        requests: list[StockRequest],
        order_ref: str,
        revert_sales: bool = True,
    ) -> StockOperationResult:
        def _restore(product: Product, variant: Variant, request: StockRequest) -> None:
            variant.restore(request.quantity)
            if revert_sales:
                product.revert_sales(request.quantity)

        return self._apply_each(requests, order_ref, "restore", _restore)

    def record_sales(self, requests: list[StockRequest], order_ref: str) -> StockOperationResult:
        return self._apply_each(
            requests, order_ref, "record sales",
            lambda product, variant, request: product.record_sales(request.quantity),
        )

    def bulk_update_stock(
        self,
        updates: list[StockUpdate],
        seller_id: str | None = None,
    ) -> StockOperationResult:
        ref = f"seller={seller_id}"
        succeeded: list[StockMovement] = []
        failed: list[StockIssue] = []

        for update in updates:
            def _update(product: Product, variant: Variant, request: StockRequest,
                        update: StockUpdate = update) -> None:
                if seller_id is not None and product.seller_id != seller_id:
                    raise EntityNotFoundError(UNAUTHORIZED)
                variant.apply_stock_update(update.operation, update.quantity)

            request = StockRequest(update.product_id, update.color, update.size, update.quantity)
            outcome = self._apply_one(request, ref, f"{update.operation} stock", _update)
            if isinstance(outcome, StockIssue):
                failed.append(outcome)
            else:
                succeeded.append(outcome)

        return StockOperationResult(success=not failed, succeeded=succeeded, failed=failed)

    # --- Internal helpers -----------------------------------------------------

    def _apply_each(
        self,
        requests: list[StockRequest],
        order_ref: str,
        operation: str,
        change: Callable[[Product, Variant, StockRequest], None],
    ) -> StockOperationResult:
        succeeded: list[StockMovement] = []
        failed: list[StockIssue] = []

        for request in requests:
            outcome = self._apply_one(request, order_ref, operation, change)
            if isinstance(outcome, StockIssue):
                failed.append(outcome)
            else:
                succeeded.append(outcome)

        return StockOperationResult(
            success=len(succeeded) == len(requests),
            succeeded=succeeded,
            failed=failed,
        )

    def _apply_one(
        self,
        request: StockRequest,
        order_ref: str,
        operation: str,
        change: Callable[[Product, Variant, StockRequest], None],
    ) -> StockMovement | StockIssue:
        def _mutate(product: Product, variant: Variant) -> StockMovement:
            change(product, variant, request)
            return StockMovement(request, product.name, variant.stock, variant.reserved)

        try:
            movement = self._product_repo.update_variant(
                request.product_id, request.color, request.size, _mutate
            )
        except DomainException as exc:
            logger.warning(
                "[order=%s] %s failed for %s: %s", order_ref, operation, request.label, exc
            )
            return StockIssue(request, str(exc))
        except Exception:
            # One item's storage error must not stop the remaining items.
            logger.exception("[order=%s] %s error for %s", order_ref, operation, request.label)
            return StockIssue(request, f"{operation} error")

        logger.info(
            "[order=%s] %s %s -> stock=%d reserved=%d",
            order_ref, operation, request.label,
            movement.stock_after, movement.reserved_after,
        )
        return movement
