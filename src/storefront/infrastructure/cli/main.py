from __future__ import annotations

import logging

import click

from storefront.infrastructure.bootstrap import settings
from storefront.infrastructure.cli.inventory_commands import (
    inventory_alerts,
    inventory_set,
    inventory_show,
)
from storefront.infrastructure.cli.order_commands import (
    order_advance,
    order_cancel,
    order_confirm,
    order_create,
    order_list,
    order_quote,
    order_show,
)
from storefront.infrastructure.cli.product_commands import product_add, product_list
from storefront.infrastructure.cli.promo_commands import promo_add, promo_check
from storefront.infrastructure.config import LOG_LEVELS, ConfigError

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@click.group()
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    help="Log verbosity (default: STOREFRONT_LOG_LEVEL or WARNING).",
)
def cli(log_level: str | None) -> None:
    """Storefront — order fulfillment and inventory engine"""
    try:
        config = settings()
    except ConfigError as exc:
        raise click.ClickException(str(exc))
    logging.basicConfig(level=(log_level or config.log_level).upper(), format=LOG_FORMAT)


@cli.group()
def order() -> None:
    """Place and manage orders."""


@cli.group()
def product() -> None:
    """Manage products."""


@cli.group()
def inventory() -> None:
    """Manage variant stock."""


@cli.group()
def promo() -> None:
    """Manage promo codes."""


# Register subcommands
order.add_command(order_advance)
order.add_command(order_cancel)
order.add_command(order_confirm)
order.add_command(order_create)
order.add_command(order_list)
order.add_command(order_quote)
order.add_command(order_show)
product.add_command(product_add)
product.add_command(product_list)
inventory.add_command(inventory_alerts)
inventory.add_command(inventory_set)
inventory.add_command(inventory_show)
promo.add_command(promo_add)
promo.add_command(promo_check)
