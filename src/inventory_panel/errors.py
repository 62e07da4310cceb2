"""Exceptions raised by the inventory client and server."""
from __future__ import annotations


class InventoryError(Exception):
    """Base class for all inventory-panel errors."""


class ValidationError(InventoryError):
    """Product form input failed the presence/numeric checks."""


class NotFound(InventoryError):
    """No product with the requested id exists."""

    def __init__(self, product_id: str):
        super().__init__(f"Product not found: {product_id}")
        self.product_id = product_id


class ConnectionFailed(InventoryError):
    """The API server could not be reached (refused, DNS, timeout)."""


class APIError(InventoryError):
    """The API server answered with a non-2xx status."""

    def __init__(self, status: int, message: str):
        super().__init__(f"HTTP {status}: {message}")
        self.status = status
        self.message = message


class ReloadFailed(InventoryError):
    """A mutation went through but fetching the catalog afterwards failed.

    The server already holds the change; retrying the mutation would
    repeat it.
    """

    def __init__(self, action: str, cause: InventoryError):
        super().__init__(f"{action}, but reload failed: {cause}")
        self.action = action
        self.cause = cause
