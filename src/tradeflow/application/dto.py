"""Data Transfer Objects: plain containers that cross layer boundaries.

DTOs carry data between the CLI / HTTP layers and the application layer
without exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass

from tradeflow.domain.model.order import Order
from tradeflow.domain.model.product import SupplierProduct
from tradeflow.domain.model.status import TIMESTAMP_FIELDS, ActorRole


@dataclass(frozen=True)
class Actor:
    """Who is calling: a role plus that party's ID."""

    role: ActorRole
    id: str


@dataclass(frozen=True)
class OrderItemSpec:
    """Input: what the wholesaler asked for (product ID + quantity)."""

    product_id: str
    quantity: int


@dataclass(frozen=True)
class ShippingAddressSpec:
    street: str | None
    city: str | None
    country: str | None
    state: str | None = None
    postal_code: str | None = None


@dataclass(frozen=True)
class OrderLineItemDTO:
    product_id: str
    product_name: str
    quantity: int
    unit_price: str  # formatted, e.g. "$15.00"
    line_total: str


@dataclass(frozen=True)
class OrderDTO:
    """Output: a complete order as displayed to one of its parties."""

    id: int
    order_number: str
    status: str
    payment_status: str
    wholesaler_id: str
    supplier_id: str
    items: list[OrderLineItemDTO]
    total_amount: str
    discounts: str
    tax_amount: str
    final_amount: str
    shipping_address: str
    order_notes: str
    assigned_transporter_id: str | None
    return_transporter_id: str | None
    return_reason: str
    transporter_notes: str
    return_notes: str
    estimated_delivery_date: str | None
    timestamps: dict[str, str]
    notes: list[str]
    version: int
    created_at: str
    updated_at: str


@dataclass(frozen=True)
class TimelineEntryDTO:
    timestamp: str
    from_status: str | None
    to_status: str
    actor_role: str
    actor_id: str | None
    reason: str


@dataclass(frozen=True)
class ProductDTO:
    id: str
    supplier_id: str
    name: str
    sku: str
    selling_price: str
    production_price: str
    quantity: int
    min_order_quantity: int
    low_stock_threshold: int
    low_stock_alert: bool
    last_stock_update: str | None
    is_active: bool
    stock_value: str
    profit_margin: str | None = None


# --- Mapping -------------------------------------------------------------------


def to_order_dto(order: Order) -> OrderDTO:
    timestamps = {}
    for name in [*TIMESTAMP_FIELDS.values(), "return_transporter_assigned_at"]:
        value = getattr(order, name)
        if value is not None:
            timestamps[name] = value.isoformat()

    return OrderDTO(
        id=order.id,  # type: ignore[arg-type]
        order_number=order.order_number,
        status=order.status.value,
        payment_status=order.payment_status.value,
        wholesaler_id=order.wholesaler_id,
        supplier_id=order.supplier_id,
        items=[
            OrderLineItemDTO(
                product_id=item.product_id,
                product_name=item.product_name,
                quantity=item.quantity.value,
                unit_price=str(item.unit_price),
                line_total=str(item.line_total),
            )
            for item in order.items
        ],
        total_amount=str(order.total_amount),
        discounts=str(order.discounts),
        tax_amount=str(order.tax_amount),
        final_amount=str(order.final_amount),
        shipping_address=order.shipping_address.full_address,
        order_notes=order.order_notes,
        assigned_transporter_id=order.assigned_transporter_id,
        return_transporter_id=order.return_transporter_id,
        return_reason=order.return_reason,
        transporter_notes=order.transporter_notes,
        return_notes=order.return_notes,
        estimated_delivery_date=(
            order.estimated_delivery_date.isoformat()
            if order.estimated_delivery_date
            else None
        ),
        timestamps=timestamps,
        notes=[str(note) for note in order.notes],
        version=order.version,
        created_at=order.created_at.isoformat(),
        updated_at=order.updated_at.isoformat(),
    )


def to_product_dto(product: SupplierProduct) -> ProductDTO:
    margin = product.profit_margin
    return ProductDTO(
        id=product.id,  # type: ignore[arg-type]
        supplier_id=product.supplier_id,
        name=product.name,
        sku=product.sku,
        selling_price=str(product.selling_price),
        production_price=str(product.production_price),
        quantity=product.quantity,
        min_order_quantity=product.min_order_quantity,
        low_stock_threshold=product.low_stock_threshold,
        low_stock_alert=product.low_stock_alert,
        last_stock_update=(
            product.last_stock_update.isoformat() if product.last_stock_update else None
        ),
        is_active=product.is_active,
        stock_value=str(product.stock_value),
        profit_margin=f"{margin}%" if margin is not None else None,
    )
