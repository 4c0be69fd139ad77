"""Application services: manual stock corrections (supplier).

Both go through the bulk stock service, so a manual change takes the same
store lock and follows the same ledger rules as an order reservation.
"""

from __future__ import annotations

from tradeflow.application.dto import Actor, ProductDTO, to_product_dto
from tradeflow.application.order_workflow import require_role
from tradeflow.domain.exceptions import EntityNotFoundError, ValidationError
from tradeflow.domain.model.product import SupplierProduct
from tradeflow.domain.model.status import ActorRole
from tradeflow.domain.model.stock import StockAdjustment, StockOperation
from tradeflow.domain.repository.product_repository import ProductRepository
from tradeflow.domain.service.bulk_stock_service import BulkStockService


def _owned_product(repo: ProductRepository, product_id: str, actor: Actor) -> SupplierProduct:
    require_role(actor, ActorRole.SUPPLIER)
    product = repo.get_by_id(product_id)
    if product is None or product.supplier_id != actor.id:
        raise EntityNotFoundError(f"Product not found: {product_id}")
    return product


class SetStockHandler:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo
        self._stock = BulkStockService(product_repo)

    def handle(self, product_id: str, actor: Actor, quantity: int) -> ProductDTO:
        """Overwrite the quantity on hand."""
        _owned_product(self._product_repo, product_id, actor)
        [product] = self._stock.apply(
            [StockAdjustment(product_id, quantity, StockOperation.SET)]
        )
        return to_product_dto(product)


class AdjustStockHandler:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo
        self._stock = BulkStockService(product_repo)

    def handle(
        self,
        product_id: str,
        actor: Actor,
        operation: str,
        quantity: int,
    ) -> ProductDTO:
        """Apply a single ``increase`` or ``decrease`` entry."""
        try:
            op = StockOperation(operation)
        except ValueError:
            raise ValidationError(f"Unknown stock operation: {operation!r}") from None
        if op is StockOperation.SET:
            raise ValidationError("Use the set operation to overwrite stock")

        _owned_product(self._product_repo, product_id, actor)
        [product] = self._stock.apply([StockAdjustment(product_id, quantity, op)])
        return to_product_dto(product)
