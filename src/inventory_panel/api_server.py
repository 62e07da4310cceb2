#!/usr/bin/env python3
"""
FastAPI server for the product catalog.

Serves the endpoints the client expects, backed by a JSON data file:

    GET/POST /products, PUT/DELETE /products?id=..., POST /export, GET /health

On startup an empty data file is seeded from the seed file (if present);
POST /export writes the current catalog back to the seed file, so a backup
can be committed and restores itself on the next fresh start.
"""
from __future__ import annotations

import json
import logging
import secrets
import threading
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, Optional

from fastapi import FastAPI, HTTPException, Query, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field

from .errors import NotFound

logger = logging.getLogger(__name__)


def new_product_id() -> str:
    """24 hex chars, the shape of a document-store object id."""
    return secrets.token_hex(12)


class JsonProductRepository:
    """Products stored as a JSON list in a single file.

    The whole file is read and rewritten on every operation; the catalog is
    small and this keeps the file always valid on disk.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = threading.Lock()

    def _read(self) -> list[dict[str, Any]]:
        if not self.path.exists():
            return []
        with open(self.path, encoding="utf-8") as f:
            data = json.load(f)
        return data or []

    def _write(self, products: list[dict[str, Any]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(products, f, indent=2, ensure_ascii=False)
        tmp.replace(self.path)

    def count(self) -> int:
        with self._lock:
            return len(self._read())

    def all(self) -> list[dict[str, Any]]:
        with self._lock:
            return self._read()

    def insert(self, data: dict[str, Any]) -> dict[str, Any]:
        with self._lock:
            products = self._read()
            product = {"id": new_product_id(), **data}
            products.append(product)
            self._write(products)
        return product

    def insert_many(self, items: list[dict[str, Any]]) -> int:
        with self._lock:
            products = self._read()
            for item in items:
                product = {
                    "id": str(item.get("id") or new_product_id()),
                    "name": item.get("name", ""),
                    "price": item.get("price", 0),
                    "stock": item.get("stock", 0),
                }
                products.append(product)
            self._write(products)
        return len(items)

    def update(self, product_id: str, data: dict[str, Any]) -> dict[str, Any]:
        with self._lock:
            products = self._read()
            for product in products:
                if product.get("id") == product_id:
                    product.update(name=data["name"], price=data["price"], stock=data["stock"])
                    self._write(products)
                    return product
        raise NotFound(product_id)

    def delete(self, product_id: str) -> None:
        with self._lock:
            products = self._read()
            remaining = [p for p in products if p.get("id") != product_id]
            if len(remaining) == len(products):
                raise NotFound(product_id)
            self._write(remaining)


def seed_repository(repo: JsonProductRepository, seed_file: Path) -> int:
    """Load the seed file into an empty repository.

    Returns:
        Number of products inserted (0 if the repository already had data
        or there was no usable seed file).
    """
    if repo.count() > 0:
        logger.info("Database already has data; skipping seed")
        return 0

    seed_file = Path(seed_file)
    if not seed_file.exists():
        logger.info("No seed file at %s; starting empty", seed_file)
        return 0

    try:
        with open(seed_file, encoding="utf-8") as f:
            items = json.load(f)
    except json.JSONDecodeError as e:
        logger.error("Could not read seed file %s: %s", seed_file, e)
        return 0

    if not items:
        return 0
    inserted = repo.insert_many(items)
    logger.info("Loaded %d products from %s", inserted, seed_file)
    return inserted


# Module state, set by configure() or on startup from Config
repository: Optional[JsonProductRepository] = None
seed_path: Optional[Path] = None


def configure(data_file: Path, seed_file: Path) -> None:
    global repository, seed_path
    repository = JsonProductRepository(data_file)
    seed_path = Path(seed_file)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the repository and seed it on startup."""
    if repository is None:
        from .config import Config

        config = Config()
        configure(config.data_file, config.seed_file)
    seed_repository(repository, seed_path)
    logger.info("Serving %d products from %s", repository.count(), repository.path)
    yield


app = FastAPI(title="Inventory Product API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


class ProductIn(BaseModel):
    """Create/update body."""
    name: str = Field(min_length=1)
    price: float = Field(ge=0)
    stock: int = Field(ge=0)


class ProductOut(ProductIn):
    id: str


def _require_id(product_id: Optional[str]) -> str:
    if not product_id:
        raise HTTPException(status_code=400, detail="Missing id parameter")
    return product_id


@app.get("/health")
def health() -> dict[str, Any]:
    return {"status": "ok", "products": repository.count()}


@app.get("/products", response_model=list[ProductOut])
def list_products() -> list[dict[str, Any]]:
    return repository.all()


@app.post("/products", status_code=status.HTTP_201_CREATED, response_model=ProductOut)
def create_product(product: ProductIn) -> dict[str, Any]:
    return repository.insert(product.model_dump())


@app.put("/products")
def update_product(product: ProductIn, id: Optional[str] = Query(default=None)) -> dict[str, str]:
    product_id = _require_id(id)
    try:
        repository.update(product_id, product.model_dump())
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    return {"message": "Product updated"}


@app.delete("/products")
def delete_product(id: Optional[str] = Query(default=None)) -> dict[str, str]:
    product_id = _require_id(id)
    try:
        repository.delete(product_id)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    return {"message": "Product deleted"}


@app.post("/export", response_class=PlainTextResponse)
def export_products() -> str:
    """Write the catalog, indented, to the seed file."""
    products = repository.all()
    try:
        seed_path.parent.mkdir(parents=True, exist_ok=True)
        with open(seed_path, "w", encoding="utf-8") as f:
            json.dump(products, f, indent=2, ensure_ascii=False)
    except OSError as e:
        logger.error("Backup to %s failed: %s", seed_path, e)
        raise HTTPException(status_code=500, detail="Error writing backup file") from e
    logger.info("Backup saved to %s", seed_path)
    return f"Backup saved to {seed_path}"
