"""
Cart Module - Ledger
=====================
The in-progress order of one browsing session.

A ledger holds at most one line per product, every line has quantity >= 1,
and every mutation is written through to its storage before returning.
Storage backends implement `load()` / `save(lines)`; the ledger itself knows
nothing about databases or files.
"""

import json
import logging
import os
import tempfile
from dataclasses import dataclass, replace
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterator, List, Optional, Protocol

from common.helpers import to_decimal

logger = logging.getLogger("dineflow.cart")


@dataclass(frozen=True)
class CartLineItem:
    product_id: int
    unit_price: Decimal
    quantity: int
    name: str = ""

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "name": self.name,
            "unit_price": str(self.unit_price),
            "quantity": self.quantity,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CartLineItem":
        return cls(
            product_id=int(data["product_id"]),
            unit_price=to_decimal(data["unit_price"]),
            quantity=int(data["quantity"]),
            name=data.get("name") or "",
        )


class CartStorage(Protocol):
    def load(self) -> List[CartLineItem]:
        ...

    def save(self, lines: List[CartLineItem]) -> None:
        ...


class MemoryCartStorage:
    """Keeps the last saved snapshot in memory (tests, throwaway sessions)."""

    def __init__(self, lines: Optional[List[CartLineItem]] = None):
        self.lines: List[CartLineItem] = list(lines or [])
        self.save_count = 0

    def load(self) -> List[CartLineItem]:
        return list(self.lines)

    def save(self, lines: List[CartLineItem]) -> None:
        self.lines = list(lines)
        self.save_count += 1


class FileCartStorage:
    """
    JSON file per session, rewritten in full on every save.
    Writes go to a temp file that is renamed over the target, so a crash
    never leaves a half-written cart behind.
    """

    def __init__(self, directory: str, session_key: str):
        safe_key = "".join(ch for ch in str(session_key) if ch.isalnum() or ch in "-_")
        if not safe_key:
            raise ValueError("session_key must contain letters or digits")
        self.path = os.path.join(directory, f"cart_{safe_key}.json")

    def load(self) -> List[CartLineItem]:
        if not os.path.exists(self.path):
            return []
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
            if not isinstance(raw, list):
                raise TypeError(f"expected a list of lines, got {type(raw).__name__}")
            lines = [CartLineItem.from_dict(row) for row in raw]
        except (OSError, json.JSONDecodeError, KeyError, TypeError, ValueError,
                AttributeError, InvalidOperation) as e:
            logger.warning(f"Discarding unreadable cart file {self.path}: {e!r}")
            return []
        return [line for line in lines if line.quantity >= 1]

    def save(self, lines: List[CartLineItem]) -> None:
        directory = os.path.dirname(self.path)
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=directory, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump([line.to_dict() for line in lines], f)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise


class CartLedger:

    def __init__(self, lines: Optional[List[CartLineItem]] = None, storage: Optional[CartStorage] = None):
        self._lines: Dict[int, CartLineItem] = {}
        for line in lines or []:
            if line.quantity >= 1:
                self._lines[line.product_id] = line
        self._storage = storage

    @classmethod
    def rehydrate(cls, storage: CartStorage) -> "CartLedger":
        """Rebuild the ledger saved by a previous request/session."""
        return cls(storage.load(), storage=storage)

    # ==========================================
    # Reads
    # ==========================================

    @property
    def lines(self) -> List[CartLineItem]:
        """Lines in insertion order (copies; mutate through the ledger only)."""
        return list(self._lines.values())

    def get(self, product_id: int) -> Optional[CartLineItem]:
        return self._lines.get(product_id)

    def is_empty(self) -> bool:
        return not self._lines

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self._lines.values())

    def __len__(self) -> int:
        return len(self._lines)

    def __iter__(self) -> Iterator[CartLineItem]:
        return iter(self.lines)

    def __contains__(self, product_id) -> bool:
        return product_id in self._lines

    # ==========================================
    # Mutations
    # ==========================================

    def add_item(self, product_id: int, unit_price, quantity: int = 1, name: str = "") -> Optional[CartLineItem]:
        """
        Add `quantity` of a product. Repeated adds accumulate on one line and
        keep the unit price captured by the first add.
        Quantities below 1 are refused (returns None, nothing persisted).
        """
        if quantity < 1:
            return None

        existing = self._lines.get(product_id)
        if existing:
            line = replace(existing, quantity=existing.quantity + quantity)
        else:
            price = to_decimal(unit_price)
            if price < 0:
                raise ValueError("unit_price must be non-negative")
            line = CartLineItem(product_id=product_id, unit_price=price, quantity=quantity, name=name)

        self._commit({**self._lines, product_id: line})
        return line

    def remove_item(self, product_id: int) -> None:
        if product_id not in self._lines:
            return
        lines = dict(self._lines)
        del lines[product_id]
        self._commit(lines)

    def set_quantity(self, product_id: int, quantity: int) -> Optional[CartLineItem]:
        """Overwrite a line's quantity; zero or below removes the line."""
        if quantity <= 0:
            self.remove_item(product_id)
            return None
        existing = self._lines.get(product_id)
        if not existing:
            return None
        line = replace(existing, quantity=quantity)
        self._commit({**self._lines, product_id: line})
        return line

    def clear(self) -> None:
        self._commit({})

    # ==========================================
    # Private helpers
    # ==========================================

    def _commit(self, lines: Dict[int, CartLineItem]) -> None:
        """Swap in the new state, then persist; roll back the swap if persisting fails."""
        previous = self._lines
        self._lines = lines
        if self._storage is None:
            return
        try:
            self._storage.save(self.lines)
        except Exception:
            self._lines = previous
            raise
