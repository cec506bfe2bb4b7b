"""Application service: Cancel Order use case.

Orders whose stock was deducted at creation (``pending`` through
``ready_to_ship``) get their units put back through the ledger before the
cancellation is saved.  A ``pending_review`` order may have been only
partly deducted, so nothing is restored automatically; the operator note
records that the stock needs a manual check.  Restore failures are
recorded on the order and do not block the cancellation.
"""

from __future__ import annotations

import logging

from storefront.domain.exceptions import EntityNotFoundError, InvalidStatusTransition
from storefront.domain.model.order import OrderStatus
from storefront.domain.repository.order_repository import OrderRepository
from storefront.domain.service.inventory_ledger import InventoryLedger, StockRequest

logger = logging.getLogger(__name__)

_RESTORABLE = frozenset(
    {
        OrderStatus.PENDING,
        OrderStatus.CONFIRMED,
        OrderStatus.PROCESSING,
        OrderStatus.READY_TO_SHIP,
    }
)


class CancelOrderHandler:

    def __init__(self, order_repo: OrderRepository, ledger: InventoryLedger) -> None:
        self._order_repo = order_repo
        self._ledger = ledger

    def handle(self, order_id: int, reason: str = "") -> None:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")
        if not order.can_transition_to(OrderStatus.CANCELLED):
            raise InvalidStatusTransition(
                f"Order {order.order_number} cannot be cancelled in "
                f"{order.status.value} status"
            )

        if order.status in _RESTORABLE:
            requests = [
                StockRequest(item.product_id, item.color, item.size, item.quantity.value)
                for item in order.items
            ]
            result = self._ledger.restore(requests, order.order_number)
            if not result.success:
                order.add_internal_note(
                    "Stock restore failed on cancellation:\n"
                    + "\n".join(f"- {issue}" for issue in result.failed)
                )
        elif order.status == OrderStatus.PENDING_REVIEW:
            order.add_internal_note(
                "Cancelled from review; stock was not restored automatically"
            )

        order.cancel(reason)
        self._order_repo.save(order)
        logger.info("[order=%s] cancelled", order.order_number)
