"""CLI commands for the Order aggregate."""

from __future__ import annotations

import click

from storefront.application.cancel_order import CancelOrderHandler
from storefront.application.confirm_order import ConfirmOrderHandler
from storefront.application.dto import (
    CartItemSpec,
    CreateOrderRequest,
    CustomerSpec,
    OrderDTO,
    OrderItemSpec,
)
from storefront.application.list_orders import ListOrdersHandler
from storefront.application.quote_order import QuoteOrderHandler
from storefront.application.show_order import ShowOrderHandler
from storefront.application.update_order_status import UpdateOrderStatusHandler
from storefront.domain.exceptions import DomainException, OrderRejectedError
from storefront.domain.model.order import PaymentMethod
from storefront.infrastructure.bootstrap import (
    create_order_handler,
    inventory_ledger,
    notification_dispatcher,
    order_repository,
    promo_resolver,
)


def _split_item(pair: str, expected: str) -> list[str]:
    parts = [p.strip() for p in pair.split(":")]
    if len(parts) != 4 or not all(parts):
        raise click.BadParameter(f"Invalid item format '{pair}'. Expected '{expected}'.")
    return parts


def _parse_quantity(raw: str, product_id: str) -> int:
    try:
        return int(raw)
    except ValueError:
        raise click.BadParameter(f"Invalid quantity '{raw}' for product '{product_id}'.")


def _parse_items(raw: str) -> list[OrderItemSpec]:
    """Parse 'P1:Red:M:2,P2:Blue:L:1' into OrderItemSpec list."""
    specs: list[OrderItemSpec] = []
    for pair in raw.split(","):
        product_id, color, size, qty_str = _split_item(pair.strip(), "ProductId:Color:Size:Qty")
        specs.append(
            OrderItemSpec(
                product_id=product_id,
                color=color,
                size=size,
                quantity=_parse_quantity(qty_str, product_id),
            )
        )
    return specs


def _parse_cart_items(raw: str) -> list[CartItemSpec]:
    """Parse 'P1:Red:M:2@500,P2:Blue:L:1@250' into CartItemSpec list."""
    specs: list[CartItemSpec] = []
    for pair in raw.split(","):
        item, sep, price = pair.strip().rpartition("@")
        if not sep:
            raise click.BadParameter(
                f"Invalid item format '{pair}'. Expected 'ProductId:Color:Size:Qty@Price'."
            )
        product_id, color, size, qty_str = _split_item(item, "ProductId:Color:Size:Qty@Price")
        specs.append(
            CartItemSpec(
                product_id=product_id,
                color=color,
                size=size,
                quantity=_parse_quantity(qty_str, product_id),
                unit_price=price.strip(),
            )
        )
    return specs


def _fail(exc: DomainException) -> click.ClickException:
    if isinstance(exc, OrderRejectedError) and exc.errors:
        lines = "\n".join(f"  - {error}" for error in exc.errors)
        return click.ClickException(f"{exc}\n{lines}")
    return click.ClickException(str(exc))


@click.command("create")
@click.option("--user", "user_id", required=True, help="Id of the buyer placing the order.")
@click.option("--name", required=True, help="Customer name.")
@click.option("--email", required=True, help="Customer e-mail.")
@click.option("--phone", required=True, help="Customer phone number.")
@click.option("--address", required=True, help="Delivery address.")
@click.option("--items", required=True, help="Items as 'ProductId:Color:Size:Qty,...'.")
@click.option(
    "--payment",
    default=PaymentMethod.CASH_ON_DELIVERY.value,
    show_default=True,
    type=click.Choice([m.value for m in PaymentMethod]),
    help="Payment method.",
)
@click.option("--promo", "promo_code", default=None, help="Promo code to apply.")
@click.option("--notes", default="", help="Delivery notes.")
@click.option("--idempotency-key", default=None, help="Retry-safe request key.")
def order_create(
    user_id: str,
    name: str,
    email: str,
    phone: str,
    address: str,
    items: str,
    payment: str,
    promo_code: str | None,
    notes: str,
    idempotency_key: str | None,
) -> None:
    """Place a new order."""
    request = CreateOrderRequest(
        customer=CustomerSpec(name=name, email=email, phone=phone, address=address),
        items=_parse_items(items),
        payment_method=payment,
        delivery_notes=notes,
        promo_code=promo_code,
        idempotency_key=idempotency_key,
    )

    dispatcher = notification_dispatcher()
    handler = create_order_handler(dispatcher)
    try:
        receipt = handler.handle(user_id, request)
    except DomainException as exc:
        raise _fail(exc)
    finally:
        dispatcher.shutdown(wait=True)

    click.echo(f"Order {receipt.order_number} placed  (id={receipt.order_id}, status={receipt.status})")
    click.echo(f"Total: ৳{receipt.total_amount}")
    for warning in receipt.low_stock_warnings:
        click.echo(f"  ! {warning}")


@click.command("quote")
@click.option("--items", required=True, help="Cart items as 'ProductId:Color:Size:Qty@Price,...'.")
@click.option("--address", default="", help="Delivery address.")
@click.option("--promo", "promo_code", default=None, help="Promo code to try.")
def order_quote(items: str, address: str, promo_code: str | None) -> None:
    """Preview the price breakdown of a cart."""
    handler = QuoteOrderHandler(promo_resolver=promo_resolver())
    quote = handler.handle(_parse_cart_items(items), address, promo_code)

    click.echo(f"  {'Product':<12} {'Variant':<14} {'Qty':>5} {'Price':>12} {'Total':>12}")
    click.echo(f"  {'-'*59}")
    for line in quote.items:
        click.echo(
            f"  {line.product_id:<12} {line.color + '-' + line.size:<14} {line.quantity:>5} "
            f"{line.unit_price:>12} {line.total_price:>12}"
        )
    click.echo(f"  {'-'*59}")
    click.echo(f"  {'Subtotal':<33} {quote.subtotal:>25}")
    click.echo(f"  {'Delivery (' + quote.delivery_zone + ')':<33} {quote.delivery_charge:>25}")
    click.echo(f"  {'Discount':<33} {quote.discount_amount:>25}")
    click.echo(f"  {'Total':<33} {quote.total_amount:>25}")
    if quote.promo_message:
        click.echo(quote.promo_message)
    for problem in quote.invalid_items:
        click.echo(f"  ! {problem}")


def _display_order(dto: OrderDTO) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order {dto.order_number}  (id={dto.id}, status={dto.status})")
    click.echo(f"Customer: {dto.customer_name} <{dto.customer_email}>")
    click.echo(f"Deliver:  {dto.delivery_address} ({dto.delivery_zone})")
    click.echo(f"Payment:  {dto.payment_method} ({dto.payment_status})")
    click.echo(f"Created:  {dto.created_at}")
    click.echo()
    click.echo(f"  {'Product':<20} {'Variant':<14} {'Qty':>5} {'Price':>12} {'Total':>12}")
    click.echo(f"  {'-'*67}")
    for item in dto.items:
        click.echo(
            f"  {item.product_name:<20} {item.color + '-' + item.size:<14} {item.quantity:>5} "
            f"{item.unit_price:>12} {item.total_price:>12}"
        )
    click.echo(f"  {'-'*67}")
    click.echo(f"  {'Subtotal':<41} {dto.subtotal:>25}")
    click.echo(f"  {'Delivery':<41} {dto.delivery_charge:>25}")
    discount_label = f"Discount ({dto.promo_code})" if dto.promo_code else "Discount"
    click.echo(f"  {discount_label:<41} {dto.discount_amount:>25}")
    click.echo(f"  {'Order Total':<41} {dto.total_amount:>25}")

    if dto.status_history:
        click.echo()
        click.echo("History:")
        for entry in dto.status_history:
            click.echo(f"  {entry}")
    if dto.internal_notes:
        click.echo()
        click.echo("Internal notes:")
        click.echo(dto.internal_notes)


@click.command("show")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to display.")
def order_show(order_id: int) -> None:
    """Show details of an existing order."""
    handler = ShowOrderHandler(order_repo=order_repository())

    try:
        dto = handler.handle(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_order(dto)


@click.command("list")
@click.option("--status", default=None, help="Only orders in this status.")
def order_list(status: str | None) -> None:
    """List orders, newest first."""
    handler = ListOrdersHandler(order_repo=order_repository())

    try:
        orders = handler.handle(status)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not orders:
        click.echo("No orders found.")
        return

    click.echo(f"{'ID':<5} {'Order number':<24} {'Status':<17} {'Total':>12}")
    click.echo("-" * 61)
    for dto in orders:
        click.echo(f"{dto.id:<5} {dto.order_number:<24} {dto.status:<17} {dto.total_amount:>12}")


@click.command("confirm")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to confirm.")
def order_confirm(order_id: int) -> None:
    """Confirm a pending order (counts its promo code as used)."""
    handler = ConfirmOrderHandler(
        order_repo=order_repository(),
        promo_resolver=promo_resolver(),
    )

    try:
        handler.handle(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id} confirmed.")


@click.command("advance")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to move.")
@click.option("--to", "target", default=None, help="Explicit target status (default: next step).")
@click.option("--note", default="", help="Note recorded in the status history.")
def order_advance(order_id: int, target: str | None, note: str) -> None:
    """Move an order to its next fulfillment status."""
    handler = UpdateOrderStatusHandler(order_repo=order_repository())

    try:
        status = handler.handle(order_id, target, note)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id} is now {status}.")


@click.command("cancel")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to cancel.")
@click.option("--reason", default="", help="Cancellation reason.")
def order_cancel(order_id: int, reason: str) -> None:
    """Cancel an order (puts deducted stock back)."""
    handler = CancelOrderHandler(
        order_repo=order_repository(),
        ledger=inventory_ledger(),
    )

    try:
        handler.handle(order_id, reason)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id} cancelled.")
