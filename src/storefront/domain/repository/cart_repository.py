"""Abstract repository for buyer carts.

The order engine only ever empties a cart after a successful order; cart
editing belongs to the storefront UI.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class CartRepository(ABC):

    @abstractmethod
    def get(self, user_id: str) -> dict[str, int]:
        """Return the cart as ``{"<productId>_<color>_<size>": quantity}``."""

    @abstractmethod
    def save(self, user_id: str, items: dict[str, int]) -> None:
        """Replace a user's cart."""

    def clear(self, user_id: str) -> None:
        self.save(user_id, {})
