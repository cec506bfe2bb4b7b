"""Builds handlers and their collaborators from the environment settings.

The CLI asks this module for wired objects instead of constructing JSON
repositories itself.
"""

from __future__ import annotations

from storefront.application.create_order import CreateOrderHandler
from storefront.application.notifications import NotificationDispatcher, OrderNotifications
from storefront.domain.service.inventory_ledger import ProductInventoryLedger
from storefront.domain.service.promo_resolver import PromoResolver, default_resolver
from storefront.infrastructure.config import Settings
from storefront.infrastructure.logging_notifier import LoggingNotifier
from storefront.infrastructure.persistence.json_cart_repository import JsonCartRepository
from storefront.infrastructure.persistence.json_offer_repository import JsonOfferRepository
from storefront.infrastructure.persistence.json_order_repository import JsonOrderRepository
from storefront.infrastructure.persistence.json_product_repository import (
    JsonProductRepository,
)


def settings() -> Settings:
    return Settings.from_env()


def product_repository() -> JsonProductRepository:
    return JsonProductRepository(settings().data_dir / "products.json")


def order_repository() -> JsonOrderRepository:
    return JsonOrderRepository(settings().data_dir / "orders.json")


def offer_repository() -> JsonOfferRepository:
    return JsonOfferRepository(settings().data_dir / "offers.json")


def cart_repository() -> JsonCartRepository:
    return JsonCartRepository(settings().data_dir / "carts.json")


def inventory_ledger() -> ProductInventoryLedger:
    return ProductInventoryLedger(product_repository())


def promo_resolver() -> PromoResolver:
    return default_resolver(offer_repository())


def create_order_handler(dispatcher: NotificationDispatcher) -> CreateOrderHandler:
    config = settings()
    return CreateOrderHandler(
        order_repo=order_repository(),
        product_repo=product_repository(),
        ledger=inventory_ledger(),
        promo_resolver=promo_resolver(),
        cart_repo=cart_repository(),
        notifications=OrderNotifications(LoggingNotifier(), dispatcher, config.ops_email),
        deduction_policy=config.deduction_policy,
    )


def notification_dispatcher() -> NotificationDispatcher:
    return NotificationDispatcher(max_workers=settings().notify_workers)
