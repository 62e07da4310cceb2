"""Shared fixtures."""
from unittest.mock import MagicMock

import pytest

from inventory_panel.models import Product


@pytest.fixture
def products():
    """A small catalog snapshot."""
    return [
        Product(id="a1", name="Keyboard", price=49.9, stock=12),
        Product(id="b2", name="Mouse", price=19.5, stock=3),
        Product(id="c3", name="Monitor", price=199.0, stock=0),
        Product(id="d4", name="USB cable", price=4.99, stock=120),
    ]


@pytest.fixture
def fake_client(products):
    """A MagicMock InventoryClient serving the products fixture."""
    client = MagicMock()
    client.list_products.return_value = list(products)
    client.export_backup.return_value = "Backup saved to seeds/products.json"
    return client
