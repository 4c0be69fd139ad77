"""Application service: Add Product use case (supplier)."""

from __future__ import annotations

import logging

from tradeflow.application.dto import Actor, ProductDTO, to_product_dto
from tradeflow.application.order_workflow import require_role
from tradeflow.domain.exceptions import ValidationError
from tradeflow.domain.model.product import DEFAULT_LOW_STOCK_THRESHOLD, SupplierProduct
from tradeflow.domain.model.status import ActorRole
from tradeflow.domain.model.value_objects import Money
from tradeflow.domain.repository.product_repository import ProductRepository

logger = logging.getLogger(__name__)


class AddProductHandler:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def handle(
        self,
        actor: Actor,
        name: str,
        selling_price: str,
        production_price: str,
        quantity: int = 0,
        min_order_quantity: int = 1,
        low_stock_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD,
    ) -> ProductDTO:
        """Add a product to the calling supplier's catalog."""
        require_role(actor, ActorRole.SUPPLIER)

        for existing in self._product_repo.list_by_supplier(actor.id):
            if existing.name.lower() == (name or "").strip().lower():
                raise ValidationError(f"Product '{existing.name}' already exists")

        price = Money.of(selling_price)
        if price.amount <= 0:
            raise ValidationError("Product price must be greater than zero")

        product = SupplierProduct.create(
            supplier_id=actor.id,
            name=name,
            selling_price=price,
            production_price=Money.of(production_price),
            quantity=quantity,
            min_order_quantity=min_order_quantity,
            low_stock_threshold=low_stock_threshold,
        )
        self._product_repo.save(product)

        logger.info("Product %s (%s) added by supplier %s", product.id, product.sku, actor.id)
        return to_product_dto(product)


class ListProductsHandler:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def handle(self, supplier_id: str | None = None) -> list[ProductDTO]:
        """Products of one supplier, or the whole catalog."""
        products = (
            self._product_repo.list_by_supplier(supplier_id)
            if supplier_id
            else self._product_repo.list_all()
        )
        return [to_product_dto(p) for p in products]
