"""Domain service: Bulk Stock Transaction Manager.

Applies one order's worth of stock ledger entries as a single unit: either
every product changes or none does.  Each entry re-reads its product inside
the transaction before deciding, so two orders racing for the last units
of a product cannot both pass the stock check.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime, timezone

from tradeflow.domain.exceptions import EntityNotFoundError, InsufficientStock
from tradeflow.domain.model.order import Order
from tradeflow.domain.model.product import SupplierProduct
from tradeflow.domain.model.stock import StockAdjustment, StockOperation, apply_adjustment
from tradeflow.domain.repository.product_repository import (
    ProductRepository,
    StockTransaction,
)

logger = logging.getLogger(__name__)


class BulkStockService:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def apply(self, adjustments: Iterable[StockAdjustment]) -> list[SupplierProduct]:
        """Run a batch in its own transaction."""
        with self._product_repo.transaction() as tx:
            return self.apply_in(tx, adjustments)

    def apply_in(
        self,
        tx: StockTransaction,
        adjustments: Iterable[StockAdjustment],
    ) -> list[SupplierProduct]:
        """Run a batch inside the caller's transaction.

        The first failing entry raises; the caller's transaction then rolls
        back every entry staged before it.
        """
        adjustments = list(adjustments)
        now = datetime.now(timezone.utc)
        results: list[SupplierProduct] = []

        for adj in adjustments:
            product = tx.get(adj.product_id)
            if product is None:
                raise EntityNotFoundError(f"Product not found: {adj.product_id}")
            if adj.operation is StockOperation.DECREASE and product.quantity < adj.quantity:
                logger.warning(
                    "Stock batch rejected: %s has %d, %d requested",
                    product.name, product.quantity, adj.quantity,
                )
                raise InsufficientStock(product.name, product.quantity, adj.quantity)
            apply_adjustment(product, adj, now=now)
            tx.save(product)
            results.append(product)

        logger.info(
            "Stock batch staged: %s",
            ", ".join(f"{a.operation.value} {a.quantity} x {a.product_id}" for a in adjustments),
        )
        return results

    # --- Order-level helpers --------------------------------------------------

    def reserve_for_order(self, tx: StockTransaction, order: Order) -> list[SupplierProduct]:
        """Take every line item's quantity out of stock."""
        return self.apply_in(tx, self._adjustments(order, StockOperation.DECREASE))

    def restore_for_order(self, tx: StockTransaction, order: Order) -> list[SupplierProduct]:
        """Put every line item's quantity back into stock."""
        return self.apply_in(tx, self._adjustments(order, StockOperation.INCREASE))

    @staticmethod
    def _adjustments(order: Order, operation: StockOperation) -> list[StockAdjustment]:
        return [
            StockAdjustment(
                product_id=line.product_id,
                quantity=line.quantity.value,
                operation=operation,
            )
            for line in order.items
        ]
