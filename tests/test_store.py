"""Tests for the snapshot store and edit session."""
from unittest.mock import MagicMock, call

import pytest

from inventory_panel.errors import APIError, ConnectionFailed, NotFound, ReloadFailed, ValidationError
from inventory_panel.models import Product
from inventory_panel.store import EditSession, ProductStore


class TestReload:
    """Tests for ProductStore.reload."""

    def test_starts_empty_and_stale(self, fake_client):
        store = ProductStore(fake_client)

        assert store.products == []
        assert store.is_fresh is False
        assert store.loaded_at is None

    def test_reload_replaces_snapshot(self, fake_client, products):
        store = ProductStore(fake_client)

        result = store.reload()

        assert result == products
        assert len(store) == 4
        assert store.is_fresh is True
        assert store.loaded_at is not None

    def test_snapshot_copy_cannot_patch_store(self, fake_client):
        """Test that mutating the returned list does not change the store."""
        store = ProductStore(fake_client)
        store.reload()

        store.products.clear()

        assert len(store) == 4

    def test_find(self, fake_client):
        store = ProductStore(fake_client)
        store.reload()

        assert store.find("b2").name == "Mouse"
        with pytest.raises(NotFound):
            store.find("zz")


class TestSave:
    """Tests for ProductStore.save."""

    def test_create_then_reload(self, fake_client):
        """Test that create is followed by a full reload."""
        store = ProductStore(fake_client)
        new = Product(id="e5", name="Webcam", price=35.0, stock=8)
        fake_client.list_products.return_value = [new]

        result = store.save({"name": "Webcam", "price": "35", "stock": "8"})

        fake_client.create_product.assert_called_once_with({"name": "Webcam", "price": 35.0, "stock": 8})
        fake_client.update_product.assert_not_called()
        assert result == [new]
        assert store.is_fresh is True

    def test_update_then_reload(self, fake_client):
        store = ProductStore(fake_client)

        store.save({"name": "Mouse", "price": "21", "stock": "5"}, product_id="b2")

        fake_client.update_product.assert_called_once_with("b2", {"name": "Mouse", "price": 21.0, "stock": 5})
        fake_client.create_product.assert_not_called()

    def test_mutation_precedes_reload(self, fake_client):
        """Test that the snapshot is fetched after the mutation, not before."""
        store = ProductStore(fake_client)

        store.save({"name": "Mouse", "price": "21", "stock": "5"})

        names = [c[0] for c in fake_client.method_calls]
        assert names == ["create_product", "list_products"]

    def test_validation_error_sends_nothing(self, fake_client):
        store = ProductStore(fake_client)
        store.reload()
        fake_client.reset_mock()

        with pytest.raises(ValidationError):
            store.save({"name": "", "price": "1", "stock": "1"})

        assert fake_client.method_calls == []
        assert store.is_fresh is True

    def test_server_error_leaves_snapshot_stale(self, fake_client, products):
        """Test that a failed mutation keeps old contents and marks them stale."""
        store = ProductStore(fake_client)
        store.reload()
        fake_client.create_product.side_effect = APIError(500, "Error DB")

        with pytest.raises(APIError):
            store.save({"name": "Webcam", "price": "35", "stock": "8"})

        assert store.products == products
        assert store.is_fresh is False
        assert fake_client.list_products.call_count == 1

    def test_reload_failure_after_create_is_reload_failed(self, fake_client):
        """Test that a reload failure after a successful create is reported as such."""
        store = ProductStore(fake_client)
        fake_client.list_products.side_effect = ConnectionFailed("down")

        with pytest.raises(ReloadFailed) as exc_info:
            store.save({"name": "Webcam", "price": "35", "stock": "8"})

        assert exc_info.value.action == "Product added"
        assert isinstance(exc_info.value.cause, ConnectionFailed)
        fake_client.create_product.assert_called_once()
        assert store.is_fresh is False


class TestDelete:
    """Tests for ProductStore.delete."""

    def test_delete_then_reload(self, fake_client):
        store = ProductStore(fake_client)

        assert store.delete("a1") is True

        assert fake_client.method_calls == [call.delete_product("a1"), call.list_products()]

    def test_confirm_receives_product(self, fake_client):
        store = ProductStore(fake_client)
        store.reload()
        confirm = MagicMock(return_value=True)

        store.delete("b2", confirm=confirm)

        confirm.assert_called_once()
        assert confirm.call_args[0][0].name == "Mouse"

    def test_confirm_unknown_product_gets_none(self, fake_client):
        store = ProductStore(fake_client)
        confirm = MagicMock(return_value=True)

        store.delete("zz", confirm=confirm)

        confirm.assert_called_once_with(None)

    def test_cancelled_delete_sends_nothing(self, fake_client):
        store = ProductStore(fake_client)
        store.reload()
        fake_client.reset_mock()

        assert store.delete("a1", confirm=lambda product: False) is False

        fake_client.delete_product.assert_not_called()
        fake_client.list_products.assert_not_called()
        assert store.is_fresh is True


class TestExport:
    def test_export_does_not_touch_snapshot(self, fake_client):
        store = ProductStore(fake_client)

        assert store.export() == "Backup saved to seeds/products.json"
        fake_client.list_products.assert_not_called()
        assert store.is_fresh is False


class TestEditSession:
    """Tests for EditSession."""

    def test_new_session_adds(self):
        session = EditSession()
        assert session.is_editing is False
        assert session.submit_label == "+ Add"

    def test_begin_edit_loads_product(self, products):
        session = EditSession()
        session.begin_edit(products[1])

        assert session.is_editing is True
        assert session.submit_label == "Update"
        assert session.form() == {"name": "Mouse", "price": 19.5, "stock": 3}

    def test_submit_update_clears_form(self, fake_client, products):
        store = ProductStore(fake_client)
        session = EditSession()
        session.begin_edit(products[1])
        session.stock = "10"

        session.submit(store)

        fake_client.update_product.assert_called_once_with("b2", {"name": "Mouse", "price": 19.5, "stock": 10})
        assert session.is_editing is False
        assert session.name == ""

    def test_submit_clears_form_when_only_reload_fails(self, fake_client):
        store = ProductStore(fake_client)
        fake_client.list_products.side_effect = ConnectionFailed("down")
        session = EditSession()
        session.name, session.price, session.stock = "Webcam", "35", "8"

        with pytest.raises(ReloadFailed):
            session.submit(store)

        assert session.name == ""
        assert session.is_editing is False

    def test_failed_submit_keeps_form(self, fake_client):
        store = ProductStore(fake_client)
        session = EditSession()
        session.name = "Webcam"
        session.price = "abc"
        session.stock = "1"

        with pytest.raises(ValidationError):
            session.submit(store)

        assert session.name == "Webcam"
