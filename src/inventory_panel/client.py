"""HTTP client for the product API.

The API exposes one resource and one action:

    GET    /products            full catalog
    POST   /products            create (server assigns the id)
    PUT    /products?id=<id>    replace name/price/stock
    DELETE /products?id=<id>    remove
    POST   /export              write a backup of the catalog on the server
    GET    /health              liveness
"""
from __future__ import annotations

import logging
from typing import Any

import requests

from .errors import APIError, ConnectionFailed
from .models import Product

logger = logging.getLogger(__name__)

DEFAULT_URL = "http://127.0.0.1:8080"
DEFAULT_TIMEOUT = 10.0


class InventoryClient:
    """Thin wrapper around requests for the product API.

    Every call returns decoded data or raises an InventoryError subclass;
    callers never see a requests exception.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_URL,
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls, config) -> InventoryClient:
        return cls(base_url=config.api_url, timeout=config.api_timeout)

    def _request(
        self,
        method: str,
        path: str,
        params: dict[str, str] | None = None,
        json_body: dict[str, Any] | None = None,
    ) -> requests.Response:
        url = f"{self.base_url}{path}"
        logger.debug("%s %s params=%s", method, url, params)
        try:
            response = self.session.request(
                method, url, params=params, json=json_body, timeout=self.timeout
            )
        except requests.Timeout as e:
            logger.warning("%s %s timed out: %s", method, url, e)
            raise ConnectionFailed(f"Request to {url} timed out") from e
        except requests.RequestException as e:
            logger.warning("%s %s failed: %s", method, url, e)
            raise ConnectionFailed(f"Could not reach {self.base_url}: {e}") from e

        if not response.ok:
            message = _error_message(response)
            logger.warning("%s %s -> %s %s", method, url, response.status_code, message)
            raise APIError(response.status_code, message)
        return response

    def list_products(self) -> list[Product]:
        """Fetch the full catalog."""
        response = self._request("GET", "/products")
        try:
            data = response.json()
        except ValueError as e:
            raise APIError(response.status_code, "Invalid JSON in product list") from e
        # The server may encode an empty collection as null
        data = data or []
        if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
            raise APIError(response.status_code, "Invalid product list")
        try:
            products = [Product.from_dict(item) for item in data]
        except (TypeError, ValueError, OverflowError) as e:
            raise APIError(response.status_code, f"Invalid product list: {e}") from e
        logger.debug("Fetched %d products", len(products))
        return products

    def create_product(self, data: dict[str, Any]) -> dict[str, Any]:
        """Create a product. Returns the server's response body."""
        response = self._request("POST", "/products", json_body=data)
        logger.info("Created product %r", data.get("name"))
        return _json_or_empty(response)

    def update_product(self, product_id: str, data: dict[str, Any]) -> dict[str, Any]:
        """Replace name, price and stock of an existing product."""
        response = self._request("PUT", "/products", params={"id": product_id}, json_body=data)
        logger.info("Updated product %s", product_id)
        return _json_or_empty(response)

    def delete_product(self, product_id: str) -> dict[str, Any]:
        response = self._request("DELETE", "/products", params={"id": product_id})
        logger.info("Deleted product %s", product_id)
        return _json_or_empty(response)

    def export_backup(self) -> str:
        """Ask the server to write its catalog to the backup file.

        Returns:
            The server's confirmation text.
        """
        response = self._request("POST", "/export")
        logger.info("Backup exported")
        return response.text.strip()

    def health(self) -> dict[str, Any]:
        return _json_or_empty(self._request("GET", "/health"))


def _json_or_empty(response: requests.Response) -> dict[str, Any]:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {"result": data}


def _error_message(response: requests.Response) -> str:
    """Extract a readable message from an error response.

    FastAPI sends {"detail": "..."}; plain servers send text.
    """
    try:
        data = response.json()
    except ValueError:
        return response.text.strip() or response.reason or "Unknown error"
    if isinstance(data, dict):
        detail = data.get("detail") or data.get("message") or data.get("error")
        if detail:
            return str(detail)
    return str(data)
