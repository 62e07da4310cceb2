"""
Inventory Panel - a client for a product catalog API

Features:
- CRUD over a product catalog through its HTTP API
- One in-memory snapshot, reloaded in full after every change
- Table, dashboard and raw-JSON views derived from that snapshot
- Manual server-side backup trigger
- CLI and interactive console; reference FastAPI server
"""

from ._version import __version__
from .client import InventoryClient
from .errors import APIError, ConnectionFailed, InventoryError, NotFound, ValidationError
from .models import Product, parse_product_form
from .store import EditSession, ProductStore

__all__ = [
    "__version__",
    "InventoryClient",
    "ProductStore",
    "EditSession",
    "Product",
    "parse_product_form",
    "InventoryError",
    "ValidationError",
    "APIError",
    "ConnectionFailed",
    "NotFound",
]
