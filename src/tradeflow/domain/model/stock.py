"""Stock ledger entries: one requested change to one product's quantity."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from tradeflow.domain.model.product import SupplierProduct


class StockOperation(Enum):
    DECREASE = "decrease"
    INCREASE = "increase"
    SET = "set"


@dataclass(frozen=True)
class StockAdjustment:
    product_id: str
    quantity: int
    operation: StockOperation


def apply_adjustment(
    product: SupplierProduct,
    adjustment: StockAdjustment,
    now: datetime | None = None,
) -> None:
    """Dispatch a single ledger entry to the product."""
    if adjustment.operation is StockOperation.DECREASE:
        product.decrease_stock(adjustment.quantity, now=now)
    elif adjustment.operation is StockOperation.INCREASE:
        product.increase_stock(adjustment.quantity, now=now)
    else:
        product.set_stock(adjustment.quantity, now=now)
