"""
Product model and form input parsing.

A product is the only entity in the catalog:

    {"id": "665f...", "name": "Keyboard", "price": 49.9, "stock": 12}

The id is opaque to the client; it is assigned by the server on create and
is never sent in create/update bodies.
"""
from __future__ import annotations

import math
import re
from dataclasses import asdict, dataclass
from typing import Any

from .errors import ValidationError

# Leading integer, the way a form field parse accepts "12" or "12 units"
_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")


@dataclass
class Product:
    """A catalog line item."""

    id: str
    name: str
    price: float
    stock: int

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Product:
        """Build a Product from an API payload.

        Missing numeric fields default to zero, matching how the server
        decodes a partial document.
        """
        return cls(
            id=str(data.get("id", "")),
            name=str(data.get("name", "")),
            price=float(data.get("price") or 0),
            stock=int(data.get("stock") or 0),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def payload(self) -> dict[str, Any]:
        """Return the create/update body for this product (no id)."""
        return {"name": self.name, "price": self.price, "stock": self.stock}

    @property
    def value(self) -> float:
        """Stock value of this line (price times units on hand)."""
        return self.price * self.stock


def _parse_price(raw: Any) -> float | None:
    if isinstance(raw, bool):
        return None
    try:
        if isinstance(raw, (int, float)):
            value = float(raw)
        else:
            value = float(str(raw).strip())
    except (ValueError, OverflowError):
        return None
    # float() accepts nan and inf; a price field does not
    if not math.isfinite(value):
        return None
    return value


def _parse_stock(raw: Any) -> int | None:
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        if not math.isfinite(raw):
            return None
        return int(raw)
    match = _INT_PREFIX.match(str(raw))
    if not match:
        return None
    return int(match.group(1))


def parse_product_form(name: Any, price: Any, stock: Any) -> dict[str, Any]:
    """Validate raw form input and return a create/update body.

    Only presence and numeric checks are performed: the name must be
    non-blank, the price must be a number and the stock an integer, and
    neither may be negative.

    Args:
        name: Product name as typed.
        price: Price as typed (string or number).
        stock: Units in stock as typed (string or number).

    Returns:
        Dict with "name", "price" and "stock" keys, ready to send.

    Raises:
        ValidationError: If any field is missing or not numeric.
    """
    clean_name = str(name or "").strip()
    parsed_price = _parse_price(price) if price not in (None, "") else None
    parsed_stock = _parse_stock(stock) if stock not in (None, "") else None

    if not clean_name or parsed_price is None or parsed_stock is None:
        raise ValidationError("Please fill in all fields correctly (name, price, stock).")
    if parsed_price < 0:
        raise ValidationError("Price cannot be negative.")
    if parsed_stock < 0:
        raise ValidationError("Stock cannot be negative.")

    return {"name": clean_name, "price": parsed_price, "stock": parsed_stock}
