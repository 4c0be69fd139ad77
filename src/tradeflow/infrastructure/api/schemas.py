"""Request bodies for the HTTP API.

Field names follow the JSON the clients send (camelCase); the Python
attributes stay snake_case.  Money fields accept JSON numbers or strings.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class _Body(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class OrderItemSchema(_Body):
    product_id: str = Field(alias="productId")
    quantity: int


class ShippingAddressSchema(_Body):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    postal_code: Optional[str] = Field(default=None, alias="postalCode")


class CreateOrderRequest(_Body):
    supplier_id: str = Field(alias="supplierId")
    items: list[OrderItemSchema]
    shipping_address: ShippingAddressSchema = Field(alias="shippingAddress")
    order_notes: str = Field(default="", alias="orderNotes")


class StatusChangeRequest(_Body):
    status: str
    reason: Optional[str] = None
    transporter_id: Optional[str] = Field(default=None, alias="transporterId")
    estimated_delivery_date: Optional[datetime] = Field(
        default=None, alias="estimatedDeliveryDate"
    )


class AssignTransporterRequest(_Body):
    transporter_id: str = Field(alias="transporterId")
    notes: Optional[str] = None
    estimated_delivery_date: Optional[datetime] = Field(
        default=None, alias="estimatedDeliveryDate"
    )


class TransporterStatusRequest(_Body):
    status: str
    notes: Optional[str] = None


class NoteRequest(_Body):
    notes: str


class PricingRequest(_Body):
    discounts: Decimal = Decimal("0")
    tax_amount: Decimal = Field(default=Decimal("0"), alias="taxAmount")


class CreateProductRequest(_Body):
    name: str
    selling_price: Decimal = Field(alias="sellingPrice")
    production_price: Decimal = Field(alias="productionPrice")
    quantity: int = 0
    min_order_quantity: int = Field(default=1, alias="minOrderQuantity")
    low_stock_threshold: int = Field(default=10, alias="lowStockThreshold")


class StockUpdateRequest(_Body):
    """``operation`` is one of ``set``, ``increase`` or ``decrease``."""

    quantity: int
    operation: str = "set"
