"""Application service: Confirm Order use case.

Moves a ``pending`` order to ``confirmed``.  This is the point at which a
promo code counts as used: quoting and order creation only look codes up.
"""

from __future__ import annotations

import logging

from storefront.domain.exceptions import DomainException, EntityNotFoundError
from storefront.domain.repository.order_repository import OrderRepository
from storefront.domain.service.promo_resolver import PromoResolver

logger = logging.getLogger(__name__)


class ConfirmOrderHandler:

    def __init__(self, order_repo: OrderRepository, promo_resolver: PromoResolver) -> None:
        self._order_repo = order_repo
        self._promo_resolver = promo_resolver

    def handle(self, order_id: int) -> None:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")

        order.confirm()
        self._order_repo.save(order)
        logger.info("[order=%s] confirmed", order.order_number)

        if order.pricing.promo_code:
            try:
                self._promo_resolver.record_usage(order.pricing.promo_code)
            except DomainException as exc:
                # The order stays confirmed; the discount was already granted.
                logger.warning(
                    "[order=%s] could not record promo %s: %s",
                    order.order_number, order.pricing.promo_code, exc,
                )
