"""
Interactive inventory console.

One ProductStore backs the whole session. The active view (table,
dashboard or json) is re-rendered from the snapshot after every change;
toggling views or searching never hits the API.
"""
from __future__ import annotations

import cmd
import shlex

from .errors import InventoryError, ReloadFailed
from .store import EditSession, ProductStore
from .views import dashboard_metrics, raw_json, render_dashboard, render_table, table_rows

VIEWS = ("table", "dashboard", "json")


class InventoryConsole(cmd.Cmd):
    intro = "📦 Inventory console. Type 'help' for commands, 'quit' to leave."
    prompt = "inventory> "

    def __init__(
        self,
        store: ProductStore,
        low_threshold: int = 5,
        top_n: int = 5,
        currency: str = "$",
        stdin=None,
        stdout=None,
    ):
        super().__init__(stdin=stdin, stdout=stdout)
        if stdin is not None:
            self.use_rawinput = False
        self.store = store
        self.session = EditSession()
        self.view = "table"
        self.query = ""
        self.low_threshold = low_threshold
        self.top_n = top_n
        self.currency = currency

    # --- output helpers ---

    def say(self, text: str = "") -> None:
        self.stdout.write(text + "\n")

    def notify_ok(self, message: str) -> None:
        self.say(f"✅ {message}")

    def notify_error(self, message: str) -> None:
        self.say(f"❌ {message}")

    def notify_warning(self, message: str) -> None:
        self.say(f"⚠️  {message}")

    def ask(self, question: str) -> str:
        self.stdout.write(question)
        self.stdout.flush()
        if self.use_rawinput:
            try:
                return input()
            except EOFError:
                return ""
        return self.stdin.readline().rstrip("\n")

    def render(self) -> None:
        products = self.store.products
        if self.view == "dashboard":
            metrics = dashboard_metrics(products, self.top_n, self.low_threshold, self.currency)
            self.say(render_dashboard(metrics))
        elif self.view == "json":
            self.say(raw_json(products))
        else:
            rows = table_rows(products, self.query, self.low_threshold, self.currency)
            header = f"[{len(rows)}/{len(products)} products]"
            if self.query:
                header += f" search: {self.query!r}"
            self.say(header)
            self.say(render_table(rows, self.query))

    def _run(self, action) -> bool:
        """Run a store action; report InventoryError as a notification."""
        try:
            action()
        except ReloadFailed as e:
            # The server has the change; only the snapshot is out of date
            self.notify_warning(f"{e}. Use 'reload' to refresh.")
            return False
        except InventoryError as e:
            self.notify_error(str(e))
            return False
        return True

    # --- lifecycle ---

    def preloop(self) -> None:
        if self._run(self.store.reload):
            self.render()

    def emptyline(self) -> bool:
        return False

    def default(self, line: str) -> bool:
        self.notify_error(f"Unknown command: {line.split()[0]}")
        return False

    # --- commands ---

    def do_view(self, arg: str) -> None:
        """view [table|dashboard|json]  Switch the active view."""
        name = arg.strip().lower()
        if not name:
            self.say(f"Current view: {self.view}")
            return
        if name not in VIEWS:
            self.notify_error(f"Unknown view '{name}'. Choose from: {', '.join(VIEWS)}")
            return
        self.view = name
        self.render()

    def do_search(self, arg: str) -> None:
        """search [text]  Filter the table by name; no text clears the filter."""
        self.query = arg.strip()
        self.view = "table"
        self.render()

    def do_reload(self, arg: str) -> None:
        """reload  Fetch the catalog again."""
        if self._run(self.store.reload):
            self.render()

    def do_add(self, arg: str) -> None:
        """add [NAME PRICE STOCK]  Add a product; prompts for missing fields."""
        self.session.clear()
        if self._fill_form(arg):
            self._submit()

    def do_edit(self, arg: str) -> None:
        """edit ID [NAME PRICE STOCK]  Edit a product; prompts with current values."""
        try:
            parts = shlex.split(arg)
        except ValueError as e:
            self.notify_error(str(e))
            return
        if not parts:
            self.notify_error("Usage: edit ID [NAME PRICE STOCK]")
            return
        try:
            product = self.store.find(parts[0])
        except InventoryError as e:
            self.notify_error(str(e))
            return
        self.session.begin_edit(product)
        if self._fill_form(shlex.join(parts[1:])):
            self._submit()

    def do_cancel(self, arg: str) -> None:
        """cancel  Discard the form being edited."""
        self.session.clear()
        self.say("Form cleared.")

    def do_save(self, arg: str) -> None:
        """save  Retry submitting the current form."""
        self._submit()

    def do_delete(self, arg: str) -> None:
        """delete ID  Delete a product after confirmation."""
        product_id = arg.strip()
        if not product_id:
            self.notify_error("Usage: delete ID")
            return

        def confirm(product) -> bool:
            label = product.name if product else product_id
            return self.ask(f"Delete '{label}'? [y/N] ").strip().lower() == "y"

        deleted = []
        if self._run(lambda: deleted.append(self.store.delete(product_id, confirm=confirm))):
            if deleted and deleted[0]:
                self.notify_ok("Product deleted")
                self.render()
            else:
                self.say("Cancelled.")

    def do_export(self, arg: str) -> None:
        """export  Ask the server to write a backup of the catalog."""
        result = []
        self.say("Saving...")
        if self._run(lambda: result.append(self.store.export())):
            self.notify_ok(result[0] or "Backup saved")

    def do_quit(self, arg: str) -> bool:
        """quit  Leave the console."""
        return True

    do_exit = do_quit
    do_EOF = do_quit

    # --- form handling ---

    def _fill_form(self, arg: str) -> bool:
        try:
            values = shlex.split(arg) if arg.strip() else []
        except ValueError as e:
            self.notify_error(str(e))
            return False
        if len(values) > 3:
            self.notify_error("Too many values; expected NAME PRICE STOCK")
            return False
        fields = ("name", "price", "stock")
        for field, value in zip(fields, values):
            setattr(self.session, field, value)
        for field in fields[len(values):]:
            current = getattr(self.session, field)
            suffix = f" [{current}]" if current != "" else ""
            answer = self.ask(f"{field.capitalize()}{suffix}: ").strip()
            if answer:
                setattr(self.session, field, answer)
        return True

    def _submit(self) -> None:
        editing = self.session.is_editing
        if self._run(lambda: self.session.submit(self.store)):
            self.notify_ok("Product updated" if editing else "Product added")
            self.render()
