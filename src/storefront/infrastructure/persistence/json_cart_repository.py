"""JSON-file-backed implementation of CartRepository.

The file maps user ids to carts: ``{"<userId>": {"<productId>_<color>_<size>": qty}}``.
"""

from __future__ import annotations

import json
from pathlib import Path

from storefront.domain.repository.cart_repository import CartRepository
from storefront.infrastructure.persistence.file_lock import lock_for


class JsonCartRepository(CartRepository):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._lock = lock_for(file_path)
        self._ensure_file()

    def get(self, user_id: str) -> dict[str, int]:
        return dict(self._load_raw().get(user_id, {}))

    def save(self, user_id: str, items: dict[str, int]) -> None:
        with self._lock:
            carts = self._load_raw()
            carts[user_id] = dict(items)
            self._file_path.write_text(json.dumps(carts, indent=2) + "\n", encoding="utf-8")

    def _load_raw(self) -> dict[str, dict[str, int]]:
        with self._lock:
            return json.loads(self._file_path.read_text(encoding="utf-8"))

    def _ensure_file(self) -> None:
        with self._lock:
            if not self._file_path.exists():
                self._file_path.parent.mkdir(parents=True, exist_ok=True)
                self._file_path.write_text("{}", encoding="utf-8")
