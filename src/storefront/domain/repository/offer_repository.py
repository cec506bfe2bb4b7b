"""Abstract repository for the persisted promo offer catalog."""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.model.promo import PromoOffer


class OfferRepository(ABC):

    @abstractmethod
    def get_by_code(self, code: str) -> PromoOffer | None:
        """Return the offer with this (normalized) code, or None."""

    @abstractmethod
    def list_all(self) -> list[PromoOffer]:
        """Return every persisted offer."""

    @abstractmethod
    def save(self, offer: PromoOffer) -> None:
        """Persist a new or updated offer."""
