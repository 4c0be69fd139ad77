"""Application service: Show Stock use case (query)."""

from __future__ import annotations

from dataclasses import dataclass

from tradeflow.domain.exceptions import EntityNotFoundError
from tradeflow.domain.model.product import SupplierProduct
from tradeflow.domain.repository.product_repository import ProductRepository


@dataclass(frozen=True)
class StockLine:
    product_id: str
    product_name: str
    quantity: int
    low_stock_threshold: int
    low_stock_alert: bool
    last_stock_update: str | None


class ShowStockHandler:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def handle(self, supplier_id: str | None = None) -> list[StockLine]:
        products = (
            self._product_repo.list_by_supplier(supplier_id)
            if supplier_id
            else self._product_repo.list_all()
        )
        return [self._to_line(p) for p in products]

    def for_product(self, product_id: str) -> StockLine:
        product = self._product_repo.get_by_id(product_id)
        if product is None:
            raise EntityNotFoundError(f"Product not found: {product_id}")
        return self._to_line(product)

    @staticmethod
    def _to_line(product: SupplierProduct) -> StockLine:
        return StockLine(
            product_id=product.id,  # type: ignore[arg-type]
            product_name=product.name,
            quantity=product.quantity,
            low_stock_threshold=product.low_stock_threshold,
            low_stock_alert=product.low_stock_alert,
            last_stock_update=(
                product.last_stock_update.isoformat() if product.last_stock_update else None
            ),
        )
