"""Application service: Create Order use case (the order-creation saga).

Turns a cart-derived draft into a persisted, authoritatively priced order:

1. Validate the draft structurally (all errors at once).
2. Re-read every product, snapshot its *current* price and re-price the
   whole order.  Client-supplied prices are never used.
3. Check stock for every item; any shortfall rejects the whole order.
4. Persist the order as ``pending``.  This is the commit point: from here
   on the order exists no matter what happens next.
5. Deduct stock item by item.  A failure here (typically a lost race with
   a concurrent order) does not fail the request: by default the order is
   parked in ``pending_review`` with a per-item note for an operator.
6. Fire best-effort side effects (cart, sales counters, e-mails).  Their
   failures are logged and never reach the caller.

Rejections before step 4 raise an ``OrderRejectedError`` subclass and
leave no trace in storage.
"""

from __future__ import annotations

import logging
from dataclasses import fields
from enum import Enum
from typing import Any

from storefront.application.dto import (
    CreateOrderRequest,
    OrderItemSpec,
    OrderReceiptDTO,
)
from storefront.application.notifications import OrderNotifications
from storefront.application.validation import validate_order_request
from storefront.domain.exceptions import (
    OrderRejectedError,
    OrderValidationError,
    OutOfStockError,
    ProductReferenceError,
)
from storefront.domain.model.order import (
    CustomerInfo,
    Customization,
    DeliveryInfo,
    Order,
    OrderLineItem,
    OrderPricing,
    PaymentInfo,
    PaymentMethod,
)
from storefront.domain.model.value_objects import Quantity
from storefront.domain.repository.cart_repository import CartRepository
from storefront.domain.repository.order_repository import OrderRepository
from storefront.domain.repository.product_repository import ProductRepository
from storefront.domain.service.inventory_ledger import (
    InventoryLedger,
    StockOperationResult,
    StockRequest,
)
from storefront.domain.service.pricing import PriceBreakdown, PricingLine, price_order
from storefront.domain.service.promo_resolver import PromoResolver

logger = logging.getLogger(__name__)


class DeductionFailurePolicy(Enum):
    """What to do when stock deduction fails after the order is persisted."""

    FLAG_FOR_REVIEW = "flag_for_review"
    COMPENSATE = "compensate"


_CUSTOMIZATION_FIELDS = {f.name for f in fields(Customization)}


def _customization(raw: dict[str, Any] | None) -> Customization:
    if not raw:
        return Customization()
    return Customization(**{k: v for k, v in raw.items() if k in _CUSTOMIZATION_FIELDS})


class CreateOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        product_repo: ProductRepository,
        ledger: InventoryLedger,
        promo_resolver: PromoResolver,
        cart_repo: CartRepository | None = None,
        notifications: OrderNotifications | None = None,
        deduction_policy: DeductionFailurePolicy = DeductionFailurePolicy.FLAG_FOR_REVIEW,
    ) -> None:
        self._order_repo = order_repo
        self._product_repo = product_repo
        self._ledger = ledger
        self._promo_resolver = promo_resolver
        self._cart_repo = cart_repo
        self._notifications = notifications
        self._deduction_policy = deduction_policy

    def handle(self, user_id: str, request: CreateOrderRequest) -> OrderReceiptDTO:
        """Run the saga for one draft order placed by ``user_id``."""
        if request.idempotency_key:
            existing = self._order_repo.get_by_idempotency_key(user_id, request.idempotency_key)
            if existing is not None:
                logger.info(
                    "[order=%s] replaying receipt for idempotency key %s",
                    existing.order_number, request.idempotency_key,
                )
                return self._to_receipt(existing)

        # 1. Structural validation
        errors = validate_order_request(request)
        if errors:
            logger.info("Order rejected for user %s: %d validation error(s)", user_id, len(errors))
            raise OrderValidationError(errors)

        # 2. Authoritative re-pricing
        line_items = self._reprice_items(request.items)
        breakdown = self._price(line_items, request)

        # 3. Stock verification
        stock_requests = [
            StockRequest(item.product_id, item.color, item.size, item.quantity.value)
            for item in line_items
        ]
        availability = self._ledger.check_availability(stock_requests)
        if not availability.all_available:
            logger.info(
                "Order rejected for user %s: %d item(s) out of stock",
                user_id, len(availability.out_of_stock),
            )
            raise OutOfStockError(availability.out_of_stock, availability.low_stock_warnings)

        # 4. Persistence (commit point)
        order = self._build_order(user_id, request, line_items, breakdown)
        self._order_repo.save(order)
        logger.info(
            "[order=%s] persisted as pending for user %s, total %s",
            order.order_number, user_id, order.pricing.total_amount,
        )

        # 5. Best-effort stock deduction
        deduction = self._ledger.deduct(stock_requests, order.order_number)
        if not deduction.success:
            self._handle_deduction_failure(order, deduction)

        # 6. Side effects
        self._run_side_effects(order, stock_requests)

        return self._to_receipt(
            order, [str(w) for w in availability.low_stock_warnings]
        )

    # --- Steps ----------------------------------------------------------------

    def _reprice_items(self, specs: list[OrderItemSpec]) -> list[OrderLineItem]:
        errors: list[str] = []
        line_items: list[OrderLineItem] = []

        for position, spec in enumerate(specs, start=1):
            product = self._product_repo.get_by_id(spec.product_id)
            if product is None:
                errors.append(f"Item {position}: Product not found: {spec.product_id}")
                continue
            if spec.color not in product.colors:
                errors.append(
                    f"Item {position}: Color '{spec.color}' not available for product: {product.name}"
                )
            if spec.size not in product.sizes:
                errors.append(
                    f"Item {position}: Size '{spec.size}' not available for product: {product.name}"
                )
            if not product.offers(spec.color, spec.size):
                continue

            line_items.append(
                OrderLineItem(
                    product_id=product.id,
                    product_name=product.name,
                    color=spec.color,
                    size=spec.size,
                    quantity=Quantity(spec.quantity),
                    unit_price=product.effective_price,  # <-- price snapshot
                    product_image=product.image_for(spec.color),
                    customization=_customization(spec.customization),
                )
            )

        if errors:
            raise ProductReferenceError(errors)
        return line_items

    def _price(self, line_items: list[OrderLineItem], request: CreateOrderRequest) -> PriceBreakdown:
        breakdown = price_order(
            [
                PricingLine(
                    product_id=item.product_id,
                    unit_price=item.unit_price.amount,
                    quantity=item.quantity.value,
                    color=item.color,
                    size=item.size,
                )
                for item in line_items
            ],
            address=request.customer.address,
            promo_code=request.promo_code,
            resolver=self._promo_resolver,
        )
        if not breakdown.is_complete:
            raise OrderRejectedError(
                "Order calculation failed",
                [f"Item {bad.index + 1}: {bad.reason}" for bad in breakdown.invalid_items],
            )
        if request.promo_code and not breakdown.promo.is_valid:
            logger.info(
                "Promo %r not applied: %s", request.promo_code, breakdown.promo.reason.value
            )
        return breakdown

    @staticmethod
    def _build_order(
        user_id: str,
        request: CreateOrderRequest,
        line_items: list[OrderLineItem],
        breakdown: PriceBreakdown,
    ) -> Order:
        customer = CustomerInfo(
            name=request.customer.name.strip(),
            email=request.customer.email.strip(),
            phone=request.customer.phone.strip(),
            address=request.customer.address.strip(),
        )
        return Order.create(
            user_id=user_id,
            customer=customer,
            items=line_items,
            pricing=OrderPricing(
                subtotal=breakdown.subtotal,
                delivery_charge=breakdown.delivery_charge,
                discount_amount=breakdown.discount_amount,
                total_amount=breakdown.total_amount,
                promo_code=breakdown.promo.code if breakdown.promo.is_valid else None,
            ),
            delivery=DeliveryInfo(
                address=customer.address,
                is_dhaka=breakdown.delivery.is_dhaka,
                delivery_charge=breakdown.delivery_charge,
                notes=request.delivery_notes or "",
            ),
            payment=PaymentInfo(method=PaymentMethod(request.payment_method)),
            idempotency_key=request.idempotency_key,
        )

    def _handle_deduction_failure(self, order: Order, deduction: StockOperationResult) -> None:
        note = self._deduction_note(order, deduction)

        if self._deduction_policy == DeductionFailurePolicy.COMPENSATE:
            restored = self._ledger.restore(
                [movement.request for movement in deduction.succeeded],
                order.order_number,
                revert_sales=False,
            )
            if not restored.success:
                note += "\nRestore failed for: " + "; ".join(str(i) for i in restored.failed)
            order.add_internal_note(note)
            order.cancel("inventory deduction failed; deducted items restored")
            self._order_repo.save(order)
            logger.warning("[order=%s] cancelled after failed deduction", order.order_number)
            raise OutOfStockError(deduction.failed)

        order.flag_for_review(note)
        self._order_repo.save(order)
        logger.warning(
            "[order=%s] flagged for review: %d of %d item(s) not deducted",
            order.order_number, len(deduction.failed), len(order.items),
        )

    @staticmethod
    def _deduction_note(order: Order, deduction: StockOperationResult) -> str:
        lines = [
            f"Stock deduction failed for {len(deduction.failed)} of "
            f"{len(order.items)} item(s):"
        ]
        lines += [f"- {issue}" for issue in deduction.failed]
        if deduction.succeeded:
            lines.append("Already deducted (not rolled back):")
            lines += [
                f"- {m.product_name} ({m.request.color}-{m.request.size}) x{m.request.quantity}"
                for m in deduction.succeeded
            ]
        return "\n".join(lines)

    def _run_side_effects(self, order: Order, stock_requests: list[StockRequest]) -> None:
        if self._cart_repo is not None:
            try:
                self._cart_repo.clear(order.user_id)
            except Exception:
                logger.exception("[order=%s] failed to clear cart", order.order_number)

        sales = self._ledger.record_sales(stock_requests, order.order_number)
        if not sales.success:
            logger.warning(
                "[order=%s] sales counters not updated for %d item(s)",
                order.order_number, len(sales.failed),
            )

        if self._notifications is not None:
            try:
                self._notifications.order_placed(order)
            except Exception:
                logger.exception("[order=%s] failed to queue notifications", order.order_number)

    # --- Mapping --------------------------------------------------------------

    @staticmethod
    def _to_receipt(order: Order, warnings: list[str] | None = None) -> OrderReceiptDTO:
        return OrderReceiptDTO(
            order_id=order.id,  # type: ignore[arg-type]
            order_number=order.order_number,
            status=order.customer_status.value,
            total_amount=order.pricing.total_amount.to_plain(),
            created_at=order.created_at.strftime("%Y-%m-%d %H:%M UTC"),
            low_stock_warnings=list(warnings or []),
        )
