"""Application service: Show Order use case (query, operator view)."""

from __future__ import annotations

from storefront.application.dto import OrderDTO, OrderLineItemDTO
from storefront.domain.exceptions import EntityNotFoundError
from storefront.domain.model.order import Order
from storefront.domain.repository.order_repository import OrderRepository


class ShowOrderHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self, order_id: int) -> OrderDTO:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")
        return order_to_dto(order)


def order_to_dto(order: Order) -> OrderDTO:
    return OrderDTO(
        id=order.id,  # type: ignore[arg-type]
        order_number=order.order_number,
        user_id=order.user_id,
        customer_name=order.customer.name,
        customer_email=order.customer.email,
        status=order.status.value,
        customer_status=order.customer_status.value,
        items=[
            OrderLineItemDTO(
                product_id=item.product_id,
                product_name=item.product_name,
                color=item.color,
                size=item.size,
                quantity=item.quantity.value,
                unit_price=str(item.unit_price),
                total_price=str(item.total_price),
                has_customization=not item.customization.is_empty,
            )
            for item in order.items
        ],
        subtotal=str(order.pricing.subtotal),
        delivery_charge=str(order.pricing.delivery_charge),
        discount_amount=str(order.pricing.discount_amount),
        promo_code=order.pricing.promo_code,
        total_amount=str(order.pricing.total_amount),
        delivery_address=order.delivery.address,
        delivery_zone="Inside Dhaka" if order.delivery.is_dhaka else "Outside Dhaka",
        payment_method=order.payment.method.value,
        payment_status=order.payment.status.value,
        internal_notes=order.internal_notes,
        created_at=order.created_at.strftime("%Y-%m-%d %H:%M UTC"),
        status_history=[
            f"{change.timestamp:%Y-%m-%d %H:%M} {change.status.value}"
            + (f" ({change.note})" if change.note else "")
            for change in order.status_history
        ],
    )
