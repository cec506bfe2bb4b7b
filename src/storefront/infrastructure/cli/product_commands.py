"""CLI commands for the Product aggregate."""

from __future__ import annotations

import click

from storefront.application.add_product import AddProductHandler
from storefront.domain.exceptions import DomainException
from storefront.infrastructure.bootstrap import product_repository


def _csv(raw: str) -> list[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]


@click.command("add")
@click.option("--name", required=True, help="Product name.")
@click.option("--price", required=True, help="Price (e.g. 500.00).")
@click.option("--colors", required=True, help="Comma-separated colors.")
@click.option("--sizes", required=True, help="Comma-separated sizes.")
@click.option("--stock", default=0, show_default=True, type=int, help="Initial stock per variant.")
@click.option("--offer-price", default=None, help="Discounted price, if on offer.")
@click.option("--seller", "seller_id", default=None, help="Owning seller id.")
@click.option("--image", "images", multiple=True, help="Image URL (repeatable).")
def product_add(
    name: str,
    price: str,
    colors: str,
    sizes: str,
    stock: int,
    offer_price: str | None,
    seller_id: str | None,
    images: tuple[str, ...],
) -> None:
    """Add a new product to the catalog."""
    handler = AddProductHandler(product_repo=product_repository())

    try:
        product = handler.handle(
            name=name,
            price=price,
            colors=_csv(colors),
            sizes=_csv(sizes),
            stock=stock,
            offer_price=offer_price,
            seller_id=seller_id,
            images=list(images),
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(
        f"Product #{product.id} '{product.name}' added at {product.effective_price} "
        f"with {len(product.variants)} variant(s)"
    )


@click.command("list")
def product_list() -> None:
    """List all products in the catalog."""
    repo = product_repository()
    products = repo.list_all()

    if not products:
        click.echo("No products found.")
        return

    click.echo(f"{'ID':<6} {'Name':<20} {'Price':>12} {'Offer':>12} {'Sold':>6}")
    click.echo("-" * 60)
    for p in products:
        offer = str(p.offer_price) if p.offer_price else "-"
        click.echo(
            f"{p.id:<6} {p.name:<20} {str(p.price):>12} {offer:>12} {p.number_of_sales:>6}"
        )
