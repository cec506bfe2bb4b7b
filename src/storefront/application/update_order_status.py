"""Application service: Update Order Status use case.

Operators move an order along the fulfillment sequence one step at a
time, or jump to an explicit status the transition table allows (e.g.
``returned``, or resolving a ``pending_review`` order back to
``pending``).  Cancellation has its own handler because it touches stock.
"""

from __future__ import annotations

import logging

from storefront.domain.exceptions import EntityNotFoundError, ValidationError
from storefront.domain.model.order import OrderStatus
from storefront.domain.repository.order_repository import OrderRepository

logger = logging.getLogger(__name__)


class UpdateOrderStatusHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self, order_id: int, target: str | None = None, note: str = "") -> str:
        """Apply the change and return the new status value."""
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")

        previous = order.status
        if target is None:
            new_status = order.advance()
        else:
            try:
                new_status = OrderStatus(target)
            except ValueError:
                raise ValidationError(f"Unknown order status '{target}'") from None
            if new_status == OrderStatus.CANCELLED:
                raise ValidationError("Use the cancel operation to cancel an order")
            order.transition_to(new_status, note)

        self._order_repo.save(order)
        logger.info(
            "[order=%s] %s -> %s", order.order_number, previous.value, new_status.value
        )
        return new_status.value
