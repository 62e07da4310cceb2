"""
Client-side product snapshot, kept in sync with the API by full reloads.

The store holds exactly one list of products. Every view (table, dashboard,
raw JSON) is derived from that list, so switching views never costs a
request. Mutations are never applied locally: after a create, update or
delete succeeds the whole collection is fetched again and the list is
replaced. Between sending a mutation and finishing the reload the snapshot
is marked stale.
"""
from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any

from .client import InventoryClient
from .errors import InventoryError, NotFound, ReloadFailed
from .models import Product, parse_product_form

logger = logging.getLogger(__name__)


class ProductStore:
    """Single in-memory catalog snapshot backed by an InventoryClient."""

    def __init__(self, client: InventoryClient):
        self.client = client
        self._products: list[Product] = []
        self._fresh = False
        self._loaded_at: datetime | None = None

    @property
    def products(self) -> list[Product]:
        """The current snapshot (a copy; callers cannot patch it)."""
        return list(self._products)

    @property
    def is_fresh(self) -> bool:
        """True only right after a reload, before any further mutation."""
        return self._fresh

    @property
    def loaded_at(self) -> datetime | None:
        return self._loaded_at

    def __len__(self) -> int:
        return len(self._products)

    def find(self, product_id: str) -> Product:
        """Look up a product in the snapshot by id.

        Raises:
            NotFound: If the snapshot has no product with that id.
        """
        for product in self._products:
            if product.id == product_id:
                return product
        raise NotFound(product_id)

    def reload(self) -> list[Product]:
        """Fetch the whole catalog and replace the snapshot."""
        products = self.client.list_products()
        self._products = products
        self._fresh = True
        self._loaded_at = datetime.now()
        logger.debug("Snapshot reloaded: %d products", len(products))
        return self.products

    def save(self, form: dict[str, Any], product_id: str | None = None) -> list[Product]:
        """Create (no id) or update (with id) a product, then reload.

        Args:
            form: Raw "name", "price" and "stock" values.
            product_id: Id of the product being edited, or None to create.

        Returns:
            The reloaded snapshot.

        Raises:
            ValidationError: Input failed the presence/numeric check.
            ReloadFailed: The change was saved but the reload failed.
            InventoryError: The create/update request failed.
        """
        data = parse_product_form(form.get("name"), form.get("price"), form.get("stock"))
        self._fresh = False
        if product_id:
            self.client.update_product(product_id, data)
            action = "Product updated"
        else:
            self.client.create_product(data)
            action = "Product added"
        return self._reload_after(action)

    def _reload_after(self, action: str) -> list[Product]:
        try:
            return self.reload()
        except InventoryError as e:
            logger.warning("%s, but reload failed: %s", action, e)
            raise ReloadFailed(action, e) from e

    def delete(self, product_id: str, confirm: Callable[[Product | None], bool] | None = None) -> bool:
        """Delete a product, then reload.

        Args:
            product_id: Id of the product to delete.
            confirm: Optional callback receiving the product (None if it is
                not in the snapshot); returning False cancels the delete.

        Returns:
            True if the delete was sent, False if it was cancelled.

        Raises:
            ReloadFailed: The product was deleted but the reload failed.
        """
        if confirm is not None:
            try:
                product = self.find(product_id)
            except NotFound:
                product = None
            if not confirm(product):
                logger.debug("Delete of %s cancelled", product_id)
                return False
        self._fresh = False
        self.client.delete_product(product_id)
        self._reload_after("Product deleted")
        return True

    def export(self) -> str:
        """Trigger the server-side backup. The snapshot is not touched."""
        return self.client.export_backup()


class EditSession:
    """Form state for adding or editing one product.

    Mirrors a form with a hidden id field: empty id means "add", a filled
    id means "update".
    """

    def __init__(self):
        self.clear()

    def clear(self) -> None:
        self.product_id: str | None = None
        self.name: Any = ""
        self.price: Any = ""
        self.stock: Any = ""

    @property
    def is_editing(self) -> bool:
        return self.product_id is not None

    @property
    def submit_label(self) -> str:
        return "Update" if self.is_editing else "+ Add"

    def begin_edit(self, product: Product) -> None:
        """Load an existing product into the form."""
        self.product_id = product.id
        self.name = product.name
        self.price = product.price
        self.stock = product.stock

    def form(self) -> dict[str, Any]:
        return {"name": self.name, "price": self.price, "stock": self.stock}

    def submit(self, store: ProductStore) -> list[Product]:
        """Save through the store and reset the form.

        The form is reset as soon as the server accepts the change, even
        if the reload afterwards fails; it is kept only when the save
        itself was rejected.
        """
        try:
            products = store.save(self.form(), self.product_id)
        except ReloadFailed:
            self.clear()
            raise
        self.clear()
        return products
