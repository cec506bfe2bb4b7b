"""Order notifications: fire-and-forget e-mail side effects.

E-mails are handed to an executor and the caller moves on immediately.  A
slow or failing mail backend can delay or lose a notification, but it can
never delay or fail the order that triggered it: failures surface only in
the log, via the future's done-callback.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Any, Callable

from storefront.domain.model.order import Order

logger = logging.getLogger(__name__)

ORDER_CONFIRMATION = "order_confirmation"
OPS_ORDER_NOTIFICATION = "ops_order_notification"


class Notifier(ABC):

    @abstractmethod
    def send_email(self, template: str, recipient: str, data: dict[str, Any]) -> None:
        """Deliver one e-mail.  May block and may raise."""


class NotificationDispatcher:
    """Runs side effects on an executor without waiting for them."""

    def __init__(self, executor: Executor | None = None, max_workers: int = 2) -> None:
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="notify"
        )

    def dispatch(self, description: str, fn: Callable[..., Any], *args: Any) -> Future | None:
        try:
            future = self._executor.submit(fn, *args)
        except RuntimeError:
            # Executor already shut down.
            logger.exception("Could not dispatch %s", description)
            return None
        future.add_done_callback(lambda f: self._report(description, f))
        return future

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    @staticmethod
    def _report(description: str, future: Future) -> None:
        exc = future.exception()
        if exc is not None:
            logger.error("%s failed: %s", description, exc, exc_info=exc)
        else:
            logger.info("%s sent", description)


def order_email_data(order: Order) -> dict[str, Any]:
    return {
        "order_number": order.order_number,
        "customer_name": order.customer.name,
        "items": [
            {
                "product_name": item.product_name,
                "color": item.color,
                "size": item.size,
                "quantity": item.quantity.value,
                "unit_price": item.unit_price.to_plain(),
                "total_price": item.total_price.to_plain(),
            }
            for item in order.items
        ],
        "subtotal": order.pricing.subtotal.to_plain(),
        "delivery_charge": order.pricing.delivery_charge.to_plain(),
        "discount_amount": order.pricing.discount_amount.to_plain(),
        "total_amount": order.pricing.total_amount.to_plain(),
        "delivery_address": order.delivery.address,
        "payment_method": order.payment.method.value,
        # Buyers never see operator triage states.
        "status": order.customer_status.value,
    }


class OrderNotifications:

    def __init__(
        self,
        notifier: Notifier,
        dispatcher: NotificationDispatcher,
        ops_email: str | None = None,
    ) -> None:
        self._notifier = notifier
        self._dispatcher = dispatcher
        self._ops_email = ops_email

    def order_placed(self, order: Order) -> None:
        """Queue the buyer confirmation and the operations notice."""
        data = order_email_data(order)
        self._dispatcher.dispatch(
            f"[order={order.order_number}] confirmation e-mail",
            self._notifier.send_email, ORDER_CONFIRMATION, order.customer.email, data,
        )
        if self._ops_email:
            ops_data = dict(data, status=order.status.value, user_id=order.user_id)
            self._dispatcher.dispatch(
                f"[order={order.order_number}] operations e-mail",
                self._notifier.send_email, OPS_ORDER_NOTIFICATION, self._ops_email, ops_data,
            )
