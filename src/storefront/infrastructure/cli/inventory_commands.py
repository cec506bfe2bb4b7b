"""CLI commands for variant stock."""

from __future__ import annotations

import click

from storefront.application.set_inventory import STOCK_OPERATIONS, SetInventoryHandler
from storefront.application.show_inventory import LowStockAlertsHandler, ShowInventoryHandler
from storefront.domain.exceptions import DomainException
from storefront.domain.service.inventory_ledger import LOW_STOCK_THRESHOLD, StockUpdate
from storefront.infrastructure.bootstrap import inventory_ledger, product_repository


@click.command("set")
@click.option("--product", "product_id", required=True, help="Product ID.")
@click.option("--color", required=True, help="Variant color.")
@click.option("--size", required=True, help="Variant size.")
@click.option("--quantity", required=True, type=int, help="Quantity to set, add or subtract.")
@click.option(
    "--operation",
    default="set",
    show_default=True,
    type=click.Choice(STOCK_OPERATIONS),
    help="How to apply the quantity.",
)
@click.option("--seller", "seller_id", default=None, help="Only touch this seller's products.")
def inventory_set(
    product_id: str,
    color: str,
    size: str,
    quantity: int,
    operation: str,
    seller_id: str | None,
) -> None:
    """Adjust stock for one product variant."""
    handler = SetInventoryHandler(ledger=inventory_ledger())
    update = StockUpdate(product_id, color, size, quantity, operation)

    try:
        result = handler.handle([update], seller_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not result.success:
        raise click.ClickException("; ".join(str(issue) for issue in result.failed))
    movement = result.succeeded[0]
    click.echo(f"Stock for {movement.product_name} ({color}-{size}) is now {movement.stock_after}")


@click.command("show")
@click.option("--seller", "seller_id", default=None, help="Only this seller's products.")
def inventory_show(seller_id: str | None) -> None:
    """Show current stock levels per variant."""
    handler = ShowInventoryHandler(product_repo=product_repository())
    lines = handler.handle(seller_id)

    if not lines:
        click.echo("No inventory records found.")
        return

    click.echo(f"{'Product':<20} {'Variant':<14} {'Stock':>8} {'Reserved':>10}")
    click.echo("-" * 55)
    for line in lines:
        click.echo(
            f"{line.product_name:<20} {line.color + '-' + line.size:<14} "
            f"{line.stock:>8} {line.reserved:>10}"
        )


@click.command("alerts")
@click.option("--seller", "seller_id", default=None, help="Only this seller's products.")
@click.option("--threshold", default=LOW_STOCK_THRESHOLD, show_default=True, type=int)
def inventory_alerts(seller_id: str | None, threshold: int) -> None:
    """List variants that are low on or out of stock."""
    handler = LowStockAlertsHandler(ledger=inventory_ledger())
    alerts = handler.handle(seller_id, threshold)

    if not alerts:
        click.echo("No low-stock variants.")
        return

    for alert in alerts:
        click.echo(f"[{alert.alert_type}] {alert.message}")
