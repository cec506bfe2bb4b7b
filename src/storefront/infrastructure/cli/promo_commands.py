"""CLI commands for promo codes."""

from __future__ import annotations

from datetime import datetime, timezone

import click

from storefront.application.add_offer import AddOfferHandler
from storefront.application.check_promo import CheckPromoHandler
from storefront.domain.exceptions import DomainException
from storefront.domain.model.promo import DiscountType
from storefront.infrastructure.bootstrap import offer_repository, promo_resolver


def _utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


@click.command("add")
@click.option("--code", required=True, help="Promo code.")
@click.option(
    "--type",
    "discount_type",
    required=True,
    type=click.Choice([t.value for t in DiscountType]),
    help="Discount kind.",
)
@click.option("--value", required=True, help="Percent or fixed amount.")
@click.option("--minimum", default="0", show_default=True, help="Minimum order subtotal.")
@click.option("--usage-limit", default=None, type=int, help="Maximum number of uses.")
@click.option("--valid-from", default=None, type=click.DateTime(), help="Start (UTC).")
@click.option("--valid-to", default=None, type=click.DateTime(), help="End (UTC).")
@click.option("--description", default="", help="Shown to the buyer when applied.")
def promo_add(
    code: str,
    discount_type: str,
    value: str,
    minimum: str,
    usage_limit: int | None,
    valid_from: datetime | None,
    valid_to: datetime | None,
    description: str,
) -> None:
    """Add a promo code to the offer catalog."""
    handler = AddOfferHandler(offer_repo=offer_repository())

    try:
        offer = handler.handle(
            code=code,
            discount_type=discount_type,
            discount_value=value,
            minimum_order_value=minimum,
            usage_limit=usage_limit,
            valid_from=_utc(valid_from),
            valid_to=_utc(valid_to),
            description=description,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Promo {offer.code} added ({offer.discount_type.value} {offer.discount_value})")


@click.command("check")
@click.option("--code", required=True, help="Promo code.")
@click.option("--subtotal", required=True, help="Order subtotal to check against.")
def promo_check(code: str, subtotal: str) -> None:
    """Check a promo code without using it."""
    handler = CheckPromoHandler(promo_resolver=promo_resolver())

    try:
        resolution = handler.handle(code, subtotal)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if resolution.is_valid:
        click.echo(f"{resolution.message}: -{resolution.discount_amount} ({resolution.source})")
    else:
        click.echo(resolution.message)
