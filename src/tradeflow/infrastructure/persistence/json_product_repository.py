"""JSON-file-backed implementation of ProductRepository."""

from __future__ import annotations

import copy
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from decimal import Decimal
from pathlib import Path

from tradeflow.domain.exceptions import StockTransactionTimeout
from tradeflow.domain.model.product import SupplierProduct
from tradeflow.domain.model.value_objects import Money
from tradeflow.domain.repository.product_repository import (
    ProductRepository,
    StockTransaction,
)
from tradeflow.infrastructure.persistence._json_store import (
    ensure_file,
    load_records,
    lock_for,
    write_records,
)

logger = logging.getLogger(__name__)


class _JsonStockTransaction(StockTransaction):
    """Working copy of the whole product file, written back on commit."""

    def __init__(self, products: dict[str, SupplierProduct]) -> None:
        self.products = products
        self.dirty = False

    def get(self, product_id: str) -> SupplierProduct | None:
        product = self.products.get(product_id)
        return copy.deepcopy(product) if product is not None else None

    def save(self, product: SupplierProduct) -> None:
        self.products[product.id] = copy.deepcopy(product)  # type: ignore[index]
        self.dirty = True


class JsonProductRepository(ProductRepository):

    def __init__(self, file_path: Path, lock_timeout: float = 10.0) -> None:
        self._file_path = file_path
        self._lock_timeout = lock_timeout
        self._lock = lock_for(file_path)
        ensure_file(file_path)

    # --- ProductRepository interface ------------------------------------------

    def get_by_id(self, product_id: str) -> SupplierProduct | None:
        return self._load().get(product_id)

    def list_all(self) -> list[SupplierProduct]:
        return list(self._load().values())

    def list_by_supplier(self, supplier_id: str) -> list[SupplierProduct]:
        return [p for p in self._load().values() if p.supplier_id == supplier_id]

    def save(self, product: SupplierProduct) -> None:
        with self._lock:
            products = self._load()
            if product.id is None:
                product.id = self._next_id(products)
            products[product.id] = product
            self._persist(products)

    @contextmanager
    def transaction(self) -> Iterator[StockTransaction]:
        if not self._lock.acquire(timeout=self._lock_timeout):
            raise StockTransactionTimeout(
                f"Could not lock {self._file_path.name} within {self._lock_timeout}s"
            )
        try:
            tx = _JsonStockTransaction(self._load())
            yield tx
            if tx.dirty:
                self._persist(tx.products)
        except Exception:
            logger.debug("Stock transaction on %s rolled back", self._file_path.name)
            raise
        finally:
            self._lock.release()

    # --- Serialization helpers ------------------------------------------------

    @staticmethod
    def _next_id(products: dict[str, SupplierProduct]) -> str:
        if not products:
            return "1"
        return str(max(int(pid) for pid in products) + 1)

    def _load(self) -> dict[str, SupplierProduct]:
        return {
            item["id"]: self._to_domain(item)
            for item in load_records(self._file_path)
        }

    def _persist(self, products: dict[str, SupplierProduct]) -> None:
        write_records(self._file_path, [self._to_raw(p) for p in products.values()])

    @staticmethod
    def _to_raw(p: SupplierProduct) -> dict:
        return {
            "id": p.id,
            "supplier_id": p.supplier_id,
            "name": p.name,
            "sku": p.sku,
            "selling_price": str(p.selling_price.amount),
            "production_price": str(p.production_price.amount),
            "currency": p.selling_price.currency,
            "quantity": p.quantity,
            "min_order_quantity": p.min_order_quantity,
            "low_stock_threshold": p.low_stock_threshold,
            "low_stock_alert": p.low_stock_alert,
            "last_stock_update": (
                p.last_stock_update.isoformat() if p.last_stock_update else None
            ),
            "is_active": p.is_active,
        }

    @staticmethod
    def _to_domain(item: dict) -> SupplierProduct:
        currency = item.get("currency", "USD")
        last_update = item.get("last_stock_update")
        return SupplierProduct(
            id=item["id"],
            supplier_id=item["supplier_id"],
            name=item["name"],
            sku=item["sku"],
            selling_price=Money(Decimal(item["selling_price"]), currency),
            production_price=Money(Decimal(item["production_price"]), currency),
            quantity=item["quantity"],
            min_order_quantity=item.get("min_order_quantity", 1),
            low_stock_threshold=item.get("low_stock_threshold", 10),
            low_stock_alert=item.get("low_stock_alert", False),
            last_stock_update=datetime.fromisoformat(last_update) if last_update else None,
            is_active=item.get("is_active", True),
        )
