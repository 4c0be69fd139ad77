"""Application service: Create Order use case (wholesaler).

Orchestrates product lookup, the Order aggregate and the stock
reservation.  Stock is reserved and the order is added inside a single
stock transaction: if either fails, neither happens.
"""

from __future__ import annotations

import logging

from tradeflow.application.dto import OrderDTO, OrderItemSpec, ShippingAddressSpec, to_order_dto
from tradeflow.domain.exceptions import (
    EntityNotFoundError,
    InsufficientStock,
    ValidationError,
)
from tradeflow.domain.model.order import Order, OrderLineItem, ShippingAddress
from tradeflow.domain.model.value_objects import Quantity
from tradeflow.domain.repository.order_repository import OrderRepository
from tradeflow.domain.repository.product_repository import ProductRepository
from tradeflow.domain.service.bulk_stock_service import BulkStockService

logger = logging.getLogger(__name__)


class CreateOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        product_repo: ProductRepository,
    ) -> None:
        self._order_repo = order_repo
        self._product_repo = product_repo
        self._stock = BulkStockService(product_repo)

    def handle(
        self,
        wholesaler_id: str,
        supplier_id: str,
        item_specs: list[OrderItemSpec],
        shipping_address: ShippingAddressSpec,
        order_notes: str = "",
    ) -> OrderDTO:
        """Place a new purchase order.

        Steps:
        1. Validate the request shape (no side effects yet).
        2. Resolve each product and build line items with *current* prices
           (snapshot).
        3. Reserve stock and add the order atomically.
        """
        if not supplier_id or not str(supplier_id).strip():
            raise ValidationError("Supplier ID is required")
        if not item_specs:
            raise ValidationError("Order items are required and must be a non-empty list")
        for spec in item_specs:
            if not spec.product_id:
                raise ValidationError("Each item must have productId and quantity")
            Quantity(spec.quantity)

        address = ShippingAddress.create(
            street=shipping_address.street,
            city=shipping_address.city,
            country=shipping_address.country,
            state=shipping_address.state,
            postal_code=shipping_address.postal_code,
        )

        line_items = [self._line_item(supplier_id, spec) for spec in item_specs]

        order = Order.create(
            wholesaler_id=wholesaler_id,
            supplier_id=supplier_id,
            items=line_items,
            shipping_address=address,
            order_notes=order_notes,
        )

        with self._product_repo.transaction() as tx:
            self._stock.reserve_for_order(tx, order)
            self._order_repo.add(order)

        logger.info(
            "Order %s created by wholesaler %s for supplier %s (%s)",
            order.order_number, order.wholesaler_id, order.supplier_id, order.total_amount,
        )
        return to_order_dto(order)

    def _line_item(self, supplier_id: str, spec: OrderItemSpec) -> OrderLineItem:
        product = self._product_repo.get_by_id(spec.product_id)
        if product is None or product.supplier_id != supplier_id:
            raise EntityNotFoundError(f"Product not found with ID: {spec.product_id}")
        if not product.is_active:
            raise ValidationError(f"Product {product.name} is not available for ordering")
        if spec.quantity < product.min_order_quantity:
            raise ValidationError(
                f"Minimum order quantity for {product.name} is {product.min_order_quantity}"
            )
        # Early, friendlier failure; the stock transaction re-checks.
        if not product.has_sufficient_stock(spec.quantity):
            raise InsufficientStock(product.name, product.quantity, spec.quantity)

        return OrderLineItem(
            product_id=product.id,  # type: ignore[arg-type]
            product_name=product.name,
            quantity=Quantity(spec.quantity),
            unit_price=product.selling_price,  # <-- price snapshot
        )
