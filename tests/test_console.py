"""Tests for the interactive console."""
import io

from inventory_panel.console import InventoryConsole
from inventory_panel.errors import ConnectionFailed
from inventory_panel.store import ProductStore


def run_console(client, script: str) -> str:
    """Run the console over a scripted stdin and return everything printed."""
    stdout = io.StringIO()
    console = InventoryConsole(ProductStore(client), stdin=io.StringIO(script), stdout=stdout)
    console.cmdloop()
    return stdout.getvalue()


class TestViews:
    """Tests for view toggling."""

    def test_initial_table(self, fake_client):
        output = run_console(fake_client, "quit\n")
        assert "[4/4 products]" in output
        assert "Keyboard" in output

    def test_toggle_views_without_refetch(self, fake_client):
        """Test that switching views reuses the snapshot."""
        output = run_console(fake_client, "view dashboard\nview json\nview table\nquit\n")

        assert "Inventory value" in output
        assert '"name": "Keyboard"' in output
        assert fake_client.list_products.call_count == 1

    def test_unknown_view(self, fake_client):
        output = run_console(fake_client, "view chart\nquit\n")
        assert "Unknown view 'chart'" in output

    def test_search(self, fake_client):
        output = run_console(fake_client, "search mo\nquit\n")
        assert "[2/4 products] search: 'mo'" in output
        assert fake_client.list_products.call_count == 1


class TestMutations:
    """Tests for add/edit/delete flows."""

    def test_add_inline(self, fake_client):
        output = run_console(fake_client, 'add "Webcam HD" 35 8\nquit\n')

        fake_client.create_product.assert_called_once_with({"name": "Webcam HD", "price": 35.0, "stock": 8})
        assert "✅ Product added" in output
        assert fake_client.list_products.call_count == 2

    def test_add_prompts(self, fake_client):
        run_console(fake_client, "add\nWebcam\n35\n8\nquit\n")
        fake_client.create_product.assert_called_once_with({"name": "Webcam", "price": 35.0, "stock": 8})

    def test_invalid_add_keeps_form_for_save(self, fake_client):
        """Test that a rejected form is kept, so save resubmits the same values."""
        output = run_console(fake_client, "add Webcam abc 8\nsave\nquit\n")

        assert output.count("❌ Please fill in all fields") == 2
        fake_client.create_product.assert_not_called()

    def test_add_partial_args_prompts_for_rest(self, fake_client):
        """Test that inline values are kept and only missing fields are asked."""
        output = run_console(fake_client, "add Webcam 35\n8\nquit\n")

        fake_client.create_product.assert_called_once_with({"name": "Webcam", "price": 35.0, "stock": 8})
        assert "Name:" not in output
        assert "Price:" not in output
        assert "Stock:" in output

    def test_add_too_many_args(self, fake_client):
        output = run_console(fake_client, "add Webcam 35 8 extra\nquit\n")

        assert "Too many values" in output
        fake_client.create_product.assert_not_called()

    def test_reload_failure_after_add_does_not_resubmit(self, fake_client, products):
        """Test that a save whose reload fails clears the form instead of allowing a duplicate."""
        fake_client.list_products.side_effect = [products, ConnectionFailed("down"), products]

        output = run_console(fake_client, "add Webcam 35 8\nsave\nquit\n")

        assert "⚠️  Product added, but reload failed: down" in output
        assert "✅ Product added" not in output
        # The second save submits an empty form, which fails validation
        assert fake_client.create_product.call_count == 1
        assert "❌ Please fill in all fields" in output

    def test_reload_failure_after_delete_is_a_warning(self, fake_client, products):
        fake_client.list_products.side_effect = [products, ConnectionFailed("down")]

        output = run_console(fake_client, "delete b2\ny\nquit\n")

        fake_client.delete_product.assert_called_once_with("b2")
        assert "⚠️  Product deleted, but reload failed: down" in output

    def test_edit_keeps_blank_answers(self, fake_client):
        """Test that empty answers keep the current values."""
        output = run_console(fake_client, "edit b2\n\n\n10\nquit\n")

        fake_client.update_product.assert_called_once_with("b2", {"name": "Mouse", "price": 19.5, "stock": 10})
        assert "✅ Product updated" in output

    def test_edit_unknown_id(self, fake_client):
        output = run_console(fake_client, "edit zz\nquit\n")
        assert "Product not found: zz" in output

    def test_delete_confirmed(self, fake_client):
        output = run_console(fake_client, "delete b2\ny\nquit\n")

        fake_client.delete_product.assert_called_once_with("b2")
        assert "Delete 'Mouse'?" in output
        assert "✅ Product deleted" in output

    def test_delete_cancelled(self, fake_client):
        output = run_console(fake_client, "delete b2\nn\nquit\n")

        fake_client.delete_product.assert_not_called()
        assert "Cancelled." in output

    def test_export(self, fake_client):
        output = run_console(fake_client, "export\nquit\n")
        assert "✅ Backup saved to seeds/products.json" in output


class TestErrors:
    def test_connection_failure_is_reported(self, fake_client):
        fake_client.list_products.side_effect = ConnectionFailed("Could not reach http://x")

        output = run_console(fake_client, "reload\nquit\n")

        assert output.count("❌ Could not reach http://x") == 2

    def test_eof_ends_session(self, fake_client):
        run_console(fake_client, "")

    def test_unknown_command(self, fake_client):
        output = run_console(fake_client, "frobnicate\nquit\n")
        assert "Unknown command: frobnicate" in output
