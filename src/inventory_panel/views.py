"""
Views derived from a product snapshot.

Everything here is a pure function of a list of products. Nothing in this
module talks to the API; switching between table, dashboard and JSON is
free once the snapshot is loaded.
"""
from __future__ import annotations

import json
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

from .models import Product

EMPTY_MESSAGE = "No products in inventory"
NO_MATCH_MESSAGE = "No products match the search"

STATUS_OUT = "out"
STATUS_LOW = "low"
STATUS_OK = "ok"

STATUS_TAGS = {
    STATUS_OUT: "🔴 Out of stock",
    STATUS_LOW: "🟡 Low stock",
    STATUS_OK: "🟢 In stock",
}


def format_money(amount: float, currency: str = "$") -> str:
    return f"{currency}{amount:.2f}"


def stock_status(stock: int, low_threshold: int = 5) -> str:
    """Classify a stock level as out, low or ok."""
    if stock <= 0:
        return STATUS_OUT
    if stock < low_threshold:
        return STATUS_LOW
    return STATUS_OK


def filter_products(products: Iterable[Product], query: str = "") -> list[Product]:
    """Case-insensitive substring match on product name."""
    needle = (query or "").strip().lower()
    if not needle:
        return list(products)
    return [p for p in products if needle in p.name.lower()]


@dataclass
class TableRow:
    id: str
    name: str
    price: str
    stock: int
    status: str
    tag: str


def table_rows(
    products: Iterable[Product],
    query: str = "",
    low_threshold: int = 5,
    currency: str = "$",
) -> list[TableRow]:
    """Rows for the product table, filtered by query, in snapshot order."""
    rows = []
    for p in filter_products(products, query):
        status = stock_status(p.stock, low_threshold)
        rows.append(TableRow(
            id=p.id,
            name=p.name,
            price=format_money(p.price, currency),
            stock=p.stock,
            status=status,
            tag=STATUS_TAGS[status],
        ))
    return rows


@dataclass
class DashboardMetrics:
    """Aggregates shown on the dashboard."""

    product_count: int = 0
    total_units: int = 0
    total_value: float = 0.0
    low_stock_count: int = 0
    out_of_stock_count: int = 0
    top_products: list[Product] = field(default_factory=list)
    chart_labels: list[str] = field(default_factory=list)
    chart_values: list[int] = field(default_factory=list)
    currency: str = "$"

    @property
    def total_value_display(self) -> str:
        return format_money(self.total_value, self.currency)

    def to_dict(self) -> dict[str, Any]:
        return {
            "product_count": self.product_count,
            "total_units": self.total_units,
            "total_value": round(self.total_value, 2),
            "total_value_display": self.total_value_display,
            "low_stock_count": self.low_stock_count,
            "out_of_stock_count": self.out_of_stock_count,
            "top_products": [p.to_dict() for p in self.top_products],
            "chart_labels": self.chart_labels,
            "chart_values": self.chart_values,
        }


def dashboard_metrics(
    products: Sequence[Product],
    top_n: int = 5,
    low_threshold: int = 5,
    currency: str = "$",
) -> DashboardMetrics:
    """Compute dashboard aggregates from a snapshot.

    Top products are ranked by unit price, highest first; ties keep
    snapshot order. Chart series follow snapshot order.
    """
    metrics = DashboardMetrics(currency=currency)
    for p in products:
        metrics.product_count += 1
        metrics.total_units += p.stock
        metrics.total_value += p.value
        status = stock_status(p.stock, low_threshold)
        if status == STATUS_OUT:
            metrics.out_of_stock_count += 1
        elif status == STATUS_LOW:
            metrics.low_stock_count += 1
        metrics.chart_labels.append(p.name)
        metrics.chart_values.append(p.stock)

    ranked = sorted(products, key=lambda p: p.price, reverse=True)
    metrics.top_products = ranked[:max(top_n, 0)]
    return metrics


def raw_json(products: Iterable[Product]) -> str:
    """The snapshot as indented JSON, the way the backup file is written."""
    return json.dumps([p.to_dict() for p in products], indent=2, ensure_ascii=False)


def render_table(rows: Sequence[TableRow], query: str = "") -> str:
    """Plain-text table for terminal output."""
    if not rows:
        return NO_MATCH_MESSAGE if query else EMPTY_MESSAGE

    headers = ("ID", "Name", "Price", "Stock", "Status")
    cells = [(r.id, r.name, r.price, str(r.stock), r.tag) for r in rows]
    widths = [max(len(h), *(len(c[i]) for c in cells)) for i, h in enumerate(headers)]

    def fmt(values: Sequence[str]) -> str:
        # Price and stock are right-aligned
        parts = []
        for i, value in enumerate(values):
            parts.append(value.rjust(widths[i]) if i in (2, 3) else value.ljust(widths[i]))
        return "  ".join(parts).rstrip()

    lines = [fmt(headers), fmt(["-" * w for w in widths])]
    lines.extend(fmt(c) for c in cells)
    return "\n".join(lines)


def render_dashboard(metrics: DashboardMetrics) -> str:
    lines = [
        f"📦 Products:        {metrics.product_count}",
        f"🔢 Units in stock:  {metrics.total_units}",
        f"💰 Inventory value: {metrics.total_value_display}",
        f"🟡 Low stock:       {metrics.low_stock_count}",
        f"🔴 Out of stock:    {metrics.out_of_stock_count}",
    ]
    if metrics.top_products:
        lines.append("")
        lines.append(f"Top {len(metrics.top_products)} by price:")
        for i, p in enumerate(metrics.top_products, 1):
            lines.append(f"  {i}. {p.name} - {format_money(p.price, metrics.currency)} ({p.stock} in stock)")
    if metrics.chart_labels:
        lines.append("")
        lines.append("Stock by product:")
        width = max(len(label) for label in metrics.chart_labels)
        peak = max(metrics.chart_values) or 1
        for label, value in zip(metrics.chart_labels, metrics.chart_values):
            bar = "█" * max(0, round(30 * value / peak))
            lines.append(f"  {label.ljust(width)} {bar} {value}")
    return "\n".join(lines)
