"""JSON-file-backed implementation of OrderRepository."""

from __future__ import annotations

import json
from datetime import datetime
from decimal import Decimal
from pathlib import Path

from storefront.domain.model.order import (
    CustomerInfo,
    Customization,
    DeliveryInfo,
    Order,
    OrderLineItem,
    OrderPricing,
    OrderStatus,
    PaymentInfo,
    PaymentMethod,
    PaymentStatus,
    StatusChange,
)
from storefront.domain.model.value_objects import CURRENCY, Money, Quantity
from storefront.domain.repository.order_repository import OrderRepository
from storefront.infrastructure.persistence.file_lock import lock_for


def _money(value: Money) -> str:
    return str(value.amount)


class JsonOrderRepository(OrderRepository):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._lock = lock_for(file_path)
        self._ensure_file()

    # --- OrderRepository interface --------------------------------------------

    def next_id(self) -> int:
        orders = self._load_raw()
        if not orders:
            return 1
        return max(o["id"] for o in orders) + 1

    def get_by_id(self, order_id: int) -> Order | None:
        for raw in self._load_raw():
            if raw["id"] == order_id:
                return self._to_domain(raw)
        return None

    def get_by_idempotency_key(self, user_id: str, key: str) -> Order | None:
        for raw in self._load_raw():
            if raw["user_id"] == user_id and raw.get("idempotency_key") == key:
                return self._to_domain(raw)
        return None

    def list_all(self) -> list[Order]:
        return [self._to_domain(raw) for raw in self._load_raw()]

    def save(self, order: Order) -> None:
        with self._lock:
            orders = self._load_raw()

            if order.id is None:
                order.id = self.next_id()

            # Upsert: replace if exists, otherwise append
            for i, raw in enumerate(orders):
                if raw["id"] == order.id:
                    orders[i] = self._to_raw(order)
                    break
            else:
                orders.append(self._to_raw(order))

            self._persist_raw(orders)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(order: Order) -> dict:
        return {
            "id": order.id,
            "order_number": order.order_number,
            "user_id": order.user_id,
            "customer": {
                "name": order.customer.name,
                "email": order.customer.email,
                "phone": order.customer.phone,
                "address": order.customer.address,
            },
            "items": [
                {
                    "product_id": item.product_id,
                    "product_name": item.product_name,
                    "color": item.color,
                    "size": item.size,
                    "quantity": item.quantity.value,
                    "unit_price": _money(item.unit_price),
                    "currency": item.unit_price.currency,
                    "product_image": item.product_image,
                    "customization": {
                        "has_custom_design": item.customization.has_custom_design,
                        "custom_design_url": item.customization.custom_design_url,
                        "custom_text": item.customization.custom_text,
                        "custom_number": item.customization.custom_number,
                        "custom_slogan": item.customization.custom_slogan,
                        "special_instructions": item.customization.special_instructions,
                    },
                }
                for item in order.items
            ],
            "pricing": {
                "subtotal": _money(order.pricing.subtotal),
                "delivery_charge": _money(order.pricing.delivery_charge),
                "discount_amount": _money(order.pricing.discount_amount),
                "total_amount": _money(order.pricing.total_amount),
                "promo_code": order.pricing.promo_code,
            },
            "delivery": {
                "address": order.delivery.address,
                "is_dhaka": order.delivery.is_dhaka,
                "delivery_charge": _money(order.delivery.delivery_charge),
                "notes": order.delivery.notes,
            },
            "payment": {
                "method": order.payment.method.value,
                "status": order.payment.status.value,
            },
            "status": order.status.value,
            "internal_notes": order.internal_notes,
            "idempotency_key": order.idempotency_key,
            "status_history": [
                {
                    "status": change.status.value,
                    "timestamp": change.timestamp.isoformat(),
                    "note": change.note,
                }
                for change in order.status_history
            ],
            "created_at": order.created_at.isoformat(),
            "updated_at": order.updated_at.isoformat(),
        }

    @staticmethod
    def _to_domain(raw: dict) -> Order:
        def money(value: str) -> Money:
            return Money(Decimal(value), CURRENCY)

        items = [
            OrderLineItem(
                product_id=i["product_id"],
                product_name=i["product_name"],
                color=i["color"],
                size=i["size"],
                quantity=Quantity(i["quantity"]),
                unit_price=Money(Decimal(i["unit_price"]), i.get("currency", CURRENCY)),
                product_image=i.get("product_image", ""),
                customization=Customization(**i.get("customization", {})),
            )
            for i in raw["items"]
        ]
        pricing = raw["pricing"]
        delivery = raw["delivery"]
        return Order(
            id=raw["id"],
            order_number=raw["order_number"],
            user_id=raw["user_id"],
            customer=CustomerInfo(**raw["customer"]),
            items=items,
            pricing=OrderPricing(
                subtotal=money(pricing["subtotal"]),
                delivery_charge=money(pricing["delivery_charge"]),
                discount_amount=money(pricing["discount_amount"]),
                total_amount=money(pricing["total_amount"]),
                promo_code=pricing.get("promo_code"),
            ),
            delivery=DeliveryInfo(
                address=delivery["address"],
                is_dhaka=delivery["is_dhaka"],
                delivery_charge=money(delivery["delivery_charge"]),
                notes=delivery.get("notes", ""),
            ),
            payment=PaymentInfo(
                method=PaymentMethod(raw["payment"]["method"]),
                status=PaymentStatus(raw["payment"]["status"]),
            ),
            status=OrderStatus(raw["status"]),
            internal_notes=raw.get("internal_notes", ""),
            idempotency_key=raw.get("idempotency_key"),
            status_history=[
                StatusChange(
                    OrderStatus(change["status"]),
                    datetime.fromisoformat(change["timestamp"]),
                    change.get("note", ""),
                )
                for change in raw.get("status_history", [])
            ],
            created_at=datetime.fromisoformat(raw["created_at"]),
            updated_at=datetime.fromisoformat(raw["updated_at"]),
        )

    # --- File helpers ---------------------------------------------------------

    def _load_raw(self) -> list[dict]:
        with self._lock:
            return json.loads(self._file_path.read_text(encoding="utf-8"))

    def _persist_raw(self, orders: list[dict]) -> None:
        self._file_path.write_text(
            json.dumps(orders, indent=2, ensure_ascii=False) + "\n", encoding="utf-8"
        )

    def _ensure_file(self) -> None:
        with self._lock:
            if not self._file_path.exists():
                self._file_path.parent.mkdir(parents=True, exist_ok=True)
                self._file_path.write_text("[]", encoding="utf-8")
