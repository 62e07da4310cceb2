#!/usr/bin/env python3
# PYTHON_ARGCOMPLETE_OK
"""
Command-line interface for inventory-panel
"""
from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import sys
from pathlib import Path

import argcomplete

from ._version import __version__
from .client import InventoryClient
from .config import Config
from .errors import InventoryError, ReloadFailed, ValidationError
from .store import ProductStore
from .views import dashboard_metrics, raw_json, render_dashboard, render_table, table_rows


def _store(config: Config) -> ProductStore:
    return ProductStore(InventoryClient.from_config(config))


def _print_table(store: ProductStore, config: Config, query: str = "") -> None:
    rows = table_rows(store.products, query, config.low_stock_threshold, config.currency)
    print(render_table(rows, query))


def list_command(config: Config, query: str = "", as_json: bool = False) -> int:
    """Print the product table (optionally filtered)."""
    store = _store(config)
    try:
        store.reload()
    except InventoryError as e:
        print(f"❌ Error loading products: {e}")
        return 1

    if as_json:
        rows = table_rows(store.products, query, config.low_stock_threshold, config.currency)
        print(json.dumps([dataclasses.asdict(r) for r in rows], indent=2, ensure_ascii=False))
    else:
        _print_table(store, config, query)
    return 0


def save_command(config: Config, name: str, price: str, stock: str, product_id: str | None = None) -> int:
    """Create or update a product, then show the reloaded table."""
    store = _store(config)
    try:
        store.save({"name": name, "price": price, "stock": stock}, product_id)
    except ValidationError as e:
        print(f"⚠️  {e}")
        return 1
    except ReloadFailed as e:
        print(f"✅ {e.action}")
        print(f"⚠️  Could not reload products: {e.cause}")
        return 0
    except InventoryError as e:
        print(f"❌ Error saving product: {e}")
        return 1

    print("✅ Product updated" if product_id else "✅ Product added")
    _print_table(store, config)
    return 0


def delete_command(config: Config, product_id: str, assume_yes: bool = False) -> int:
    """Delete a product after confirmation, then show the reloaded table."""
    store = _store(config)

    def confirm(product) -> bool:
        if assume_yes:
            return True
        label = product.name if product else product_id
        response = input(f"Delete '{label}'? [y/N] ")
        return response.lower() == 'y'

    try:
        if not assume_yes:
            # Load first so the prompt can show the product name
            store.reload()
        deleted = store.delete(product_id, confirm=confirm)
    except ReloadFailed as e:
        print(f"✅ {e.action}")
        print(f"⚠️  Could not reload products: {e.cause}")
        return 0
    except InventoryError as e:
        print(f"❌ Error deleting product: {e}")
        return 1

    if not deleted:
        print("Aborted.")
        return 1
    print("✅ Product deleted")
    _print_table(store, config)
    return 0


def dashboard_command(config: Config, as_json: bool = False) -> int:
    store = _store(config)
    try:
        store.reload()
    except InventoryError as e:
        print(f"❌ Error loading products: {e}")
        return 1

    metrics = dashboard_metrics(store.products, config.top_products, config.low_stock_threshold, config.currency)
    if as_json:
        print(json.dumps(metrics.to_dict(), indent=2, ensure_ascii=False))
    else:
        print(render_dashboard(metrics))
    return 0


def json_command(config: Config) -> int:
    """Print the raw catalog JSON."""
    store = _store(config)
    try:
        store.reload()
    except InventoryError as e:
        print(f"❌ Error loading products: {e}")
        return 1
    print(raw_json(store.products))
    return 0


def export_command(config: Config) -> int:
    """Trigger the server-side backup."""
    store = _store(config)
    print("💾 Saving backup...")
    try:
        message = store.export()
    except InventoryError as e:
        print(f"❌ Error saving backup: {e}")
        return 1
    print(f"✅ {message or 'Backup saved'}")
    return 0


def console_command(config: Config) -> int:
    from .console import InventoryConsole

    console = InventoryConsole(
        _store(config),
        low_threshold=config.low_stock_threshold,
        top_n=config.top_products,
        currency=config.currency,
    )
    try:
        console.cmdloop()
    except KeyboardInterrupt:
        print("\n\n👋 Bye")
    return 0


def api_command(config: Config, host: str, port: int, data_file: Path, seed_file: Path) -> int:
    """Start the product API server."""
    try:
        import uvicorn

        from . import api_server
    except ImportError as e:
        print(f"❌ Missing required package: {e}")
        print("\nInstall API server dependencies:")
        print('  pip install "inventory-panel[server]"')
        return 1

    api_server.configure(data_file, seed_file)

    print("🚀 Starting Inventory API Server...")
    print(f"📂 Data file: {data_file}")
    print(f"🌱 Seed/backup file: {seed_file}")
    print(f"🌐 Server will run at: http://{host}:{port}")
    print("Press Ctrl+C to stop\n")

    try:
        uvicorn.run(api_server.app, host=host, port=port, log_level="info")
    except KeyboardInterrupt:
        print("\n\n👋 Server stopped")
    return 0


def config_command(config: Config, show: bool = False, show_path: bool = False) -> int:
    if show_path or not show:
        if config.paths:
            for path in config.paths:
                print(f"📄 {path}")
        else:
            print("No config file found, using defaults")
    if show:
        print(json.dumps(config.data, indent=2, ensure_ascii=False))
    return 0


def build_parser(config: Config) -> argparse.ArgumentParser:
    parser_cli = argparse.ArgumentParser(
        description="Inventory Panel - Manage a product catalog over its HTTP API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Start the API server (seeds from seeds/products.json when empty)
  inventory-panel api

  # Show the product table, filtered by name
  inventory-panel list --search keyboard

  # Add and update products
  inventory-panel add "USB cable" 4.99 120
  inventory-panel update 665f1c2e9a7b3d0012345678 "USB-C cable" 5.49 100

  # Dashboard and raw JSON
  inventory-panel dashboard
  inventory-panel json

  # Write a backup on the server
  inventory-panel export

  # Interactive console with view toggling
  inventory-panel console
        """
    )
    parser_cli.add_argument(
        '--version', '-V',
        action='version',
        version=f'%(prog)s {__version__}'
    )
    parser_cli.add_argument('--url', type=str, help=f'API base URL (default: {config.api_url})')
    parser_cli.add_argument('--verbose', '-v', action='store_true', help='Enable debug logging')

    subparsers = parser_cli.add_subparsers(dest='command', help='Command to run')

    config_parser = subparsers.add_parser('config', help='Show configuration')
    config_parser.add_argument('--show', action='store_true', help='Show merged configuration')
    config_parser.add_argument('--path', action='store_true', help='Show config file path')

    list_parser = subparsers.add_parser('list', help='Show the product table')
    list_parser.add_argument('--search', '-s', type=str, default='', help='Filter by product name')
    list_parser.add_argument('--json', action='store_true', help='Output rows as JSON')

    add_parser = subparsers.add_parser('add', help='Add a product')
    add_parser.add_argument('name', type=str)
    add_parser.add_argument('price', type=str)
    add_parser.add_argument('stock', type=str)

    update_parser = subparsers.add_parser('update', help='Update a product')
    update_parser.add_argument('id', type=str)
    update_parser.add_argument('name', type=str)
    update_parser.add_argument('price', type=str)
    update_parser.add_argument('stock', type=str)

    delete_parser = subparsers.add_parser('delete', help='Delete a product')
    delete_parser.add_argument('id', type=str)
    delete_parser.add_argument('--yes', '-y', action='store_true', help='Do not ask for confirmation')

    dashboard_parser = subparsers.add_parser('dashboard', help='Show inventory metrics')
    dashboard_parser.add_argument('--json', action='store_true', help='Output metrics as JSON')

    subparsers.add_parser('json', help='Print the raw catalog JSON')
    subparsers.add_parser('export', help='Save a backup of the catalog on the server')
    subparsers.add_parser('console', help='Interactive console')

    api_parser = subparsers.add_parser('api', help='Start the product API server')
    api_parser.add_argument('--host', type=str, default=config.server_host,
                            help=f'Host to bind to (default: {config.server_host})')
    api_parser.add_argument('--port', '-p', type=int, default=config.server_port,
                            help=f'Port to listen on (default: {config.server_port})')
    api_parser.add_argument('--data', type=Path, default=config.data_file,
                            help=f'JSON data file (default: {config.data_file})')
    api_parser.add_argument('--seed', type=Path, default=config.seed_file,
                            help=f'Seed/backup file (default: {config.seed_file})')

    return parser_cli


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    config = Config()

    parser_cli = build_parser(config)
    argcomplete.autocomplete(parser_cli)
    args = parser_cli.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    if args.url:
        config.data.setdefault("api", {})["url"] = args.url

    if args.command == 'config':
        return config_command(config, show=args.show, show_path=args.path)
    elif args.command == 'list':
        return list_command(config, query=args.search, as_json=args.json)
    elif args.command == 'add':
        return save_command(config, args.name, args.price, args.stock)
    elif args.command == 'update':
        return save_command(config, args.name, args.price, args.stock, product_id=args.id)
    elif args.command == 'delete':
        return delete_command(config, args.id, assume_yes=args.yes)
    elif args.command == 'dashboard':
        return dashboard_command(config, as_json=args.json)
    elif args.command == 'json':
        return json_command(config)
    elif args.command == 'export':
        return export_command(config)
    elif args.command == 'console':
        return console_command(config)
    elif args.command == 'api':
        return api_command(config, args.host, args.port, args.data, args.seed)
    else:
        parser_cli.print_help()
        return 1


if __name__ == '__main__':
    sys.exit(main())
