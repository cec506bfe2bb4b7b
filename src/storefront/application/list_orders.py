"""Application service: List Orders use case (query)."""

from __future__ import annotations

from storefront.application.dto import OrderDTO
from storefront.application.show_order import order_to_dto
from storefront.domain.exceptions import ValidationError
from storefront.domain.model.order import OrderStatus
from storefront.domain.repository.order_repository import OrderRepository


class ListOrdersHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self, status: str | None = None) -> list[OrderDTO]:
        """All orders, newest first, optionally only those in ``status``."""
        orders = self._order_repo.list_all()
        if status is not None:
            try:
                wanted = OrderStatus(status)
            except ValueError:
                raise ValidationError(f"Unknown order status '{status}'") from None
            orders = [o for o in orders if o.status == wanted]
        orders.sort(key=lambda o: o.created_at, reverse=True)
        return [order_to_dto(o) for o in orders]
