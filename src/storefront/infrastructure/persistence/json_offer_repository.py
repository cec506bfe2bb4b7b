"""JSON-file-backed implementation of OfferRepository."""

from __future__ import annotations

import json
from datetime import datetime
from decimal import Decimal
from pathlib import Path

from storefront.domain.model.promo import DiscountType, PromoOffer, normalize_code
from storefront.domain.model.value_objects import Money
from storefront.domain.repository.offer_repository import OfferRepository
from storefront.infrastructure.persistence.file_lock import lock_for


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _parse(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


class JsonOfferRepository(OfferRepository):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._lock = lock_for(file_path)
        self._ensure_file()

    def get_by_code(self, code: str) -> PromoOffer | None:
        wanted = normalize_code(code)
        for raw in self._load_raw():
            if raw["code"] == wanted:
                return self._to_domain(raw)
        return None

    def list_all(self) -> list[PromoOffer]:
        return [self._to_domain(raw) for raw in self._load_raw()]

    def save(self, offer: PromoOffer) -> None:
        with self._lock:
            offers = self._load_raw()
            for i, raw in enumerate(offers):
                if raw["code"] == offer.code:
                    offers[i] = self._to_raw(offer)
                    break
            else:
                offers.append(self._to_raw(offer))
            self._persist_raw(offers)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(offer: PromoOffer) -> dict:
        return {
            "offer_id": offer.offer_id,
            "code": offer.code,
            "description": offer.description,
            "discount_type": offer.discount_type.value,
            "discount_value": str(offer.discount_value),
            "minimum_order_value": str(offer.minimum_order_value.amount),
            "usage_limit": offer.usage_limit,
            "used_count": offer.used_count,
            "valid_from": _iso(offer.valid_from),
            "valid_to": _iso(offer.valid_to),
            "is_active": offer.is_active,
        }

    @staticmethod
    def _to_domain(raw: dict) -> PromoOffer:
        return PromoOffer(
            code=raw["code"],
            discount_type=DiscountType(raw["discount_type"]),
            discount_value=Decimal(raw["discount_value"]),
            minimum_order_value=Money(Decimal(raw["minimum_order_value"])),
            usage_limit=raw.get("usage_limit"),
            used_count=raw.get("used_count", 0),
            valid_from=_parse(raw.get("valid_from")),
            valid_to=_parse(raw.get("valid_to")),
            is_active=raw.get("is_active", True),
            description=raw.get("description", ""),
            offer_id=raw.get("offer_id"),
        )

    # --- File helpers ---------------------------------------------------------

    def _load_raw(self) -> list[dict]:
        with self._lock:
            return json.loads(self._file_path.read_text(encoding="utf-8"))

    def _persist_raw(self, offers: list[dict]) -> None:
        self._file_path.write_text(json.dumps(offers, indent=2) + "\n", encoding="utf-8")

    def _ensure_file(self) -> None:
        with self._lock:
            if not self._file_path.exists():
                self._file_path.parent.mkdir(parents=True, exist_ok=True)
                self._file_path.write_text("[]", encoding="utf-8")
