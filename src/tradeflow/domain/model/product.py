"""SupplierProduct aggregate and its stock ledger.

A supplier product is the unit of stock that wholesaler orders draw from.
Its quantity is mutated only through ``decrease_stock``, ``increase_stock``
and ``set_stock``; each of them recomputes the low-stock flag and stamps
``last_stock_update`` together with the new quantity.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal

from tradeflow.domain.exceptions import InsufficientStock, ValidationError
from tradeflow.domain.model.derivations import generate_sku
from tradeflow.domain.model.value_objects import Money

DEFAULT_LOW_STOCK_THRESHOLD = 10


@dataclass
class SupplierProduct:
    """Aggregate root for a supplier's stock-keeping unit.

    Invariants:
    - ``quantity`` is never negative
    - ``low_stock_alert == (quantity <= low_stock_threshold)`` after every
      stock mutation
    """

    id: str | None
    supplier_id: str
    name: str
    selling_price: Money
    production_price: Money
    quantity: int = 0
    min_order_quantity: int = 1
    low_stock_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD
    low_stock_alert: bool = False
    last_stock_update: datetime | None = None
    is_active: bool = True
    sku: str = field(default_factory=generate_sku)

    # --- Factory --------------------------------------------------------------

    @staticmethod
    def create(
        supplier_id: str,
        name: str,
        selling_price: Money,
        production_price: Money,
        quantity: int = 0,
        min_order_quantity: int = 1,
        low_stock_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD,
        now: datetime | None = None,
    ) -> SupplierProduct:
        """Create a new product, enforcing all invariants."""
        if not supplier_id or not supplier_id.strip():
            raise ValidationError("Supplier ID is required")
        if not name or not name.strip():
            raise ValidationError("Product name is required")
        if len(name.strip()) > 100:
            raise ValidationError("Product name cannot exceed 100 characters")
        if min_order_quantity < 1:
            raise ValidationError("Minimum order quantity must be at least 1")
        if low_stock_threshold < 0:
            raise ValidationError("Low stock threshold cannot be negative")

        product = SupplierProduct(
            id=None,
            supplier_id=supplier_id.strip(),
            name=name.strip(),
            selling_price=selling_price,
            production_price=production_price,
            min_order_quantity=min_order_quantity,
            low_stock_threshold=low_stock_threshold,
        )
        product.set_stock(quantity, now=now)
        return product

    # --- Stock ledger ---------------------------------------------------------

    def decrease_stock(self, quantity: int, now: datetime | None = None) -> None:
        """Take ``quantity`` units out of stock.

        Raises InsufficientStock, leaving the product untouched, when more
        units are requested than are on hand.
        """
        self._require_positive(quantity, "Decrease")
        if quantity > self.quantity:
            raise InsufficientStock(self.name, self.quantity, quantity)
        self._record_quantity(max(0, self.quantity - quantity), now)

    def increase_stock(self, quantity: int, now: datetime | None = None) -> None:
        """Put ``quantity`` units back into stock (no upper bound)."""
        self._require_positive(quantity, "Increase")
        self._record_quantity(self.quantity + quantity, now)

    def set_stock(self, quantity: int, now: datetime | None = None) -> None:
        """Overwrite the quantity; used for manual corrections only."""
        if not isinstance(quantity, int) or isinstance(quantity, bool):
            raise ValidationError("Stock quantity must be an integer")
        if quantity < 0:
            raise ValidationError("Stock quantity cannot be negative")
        self._record_quantity(quantity, now)

    def has_sufficient_stock(self, quantity: int) -> bool:
        return self.quantity >= quantity

    # --- Computed properties --------------------------------------------------

    @property
    def profit_margin(self) -> Decimal | None:
        """Margin over production cost, in percent."""
        if self.production_price.amount <= 0:
            return None
        diff = self.selling_price.amount - self.production_price.amount
        return (diff / self.production_price.amount * 100).quantize(Decimal("0.01"))

    @property
    def stock_value(self) -> Money:
        return self.production_price * self.quantity

    # --- Internal helpers -----------------------------------------------------

    def _record_quantity(self, quantity: int, now: datetime | None) -> None:
        self.quantity = quantity
        self.low_stock_alert = quantity <= self.low_stock_threshold
        self.last_stock_update = now or datetime.now(timezone.utc)

    @staticmethod
    def _require_positive(quantity: int, operation: str) -> None:
        if not isinstance(quantity, int) or isinstance(quantity, bool):
            raise ValidationError(f"{operation} quantity must be an integer")
        if quantity <= 0:
            raise ValidationError(f"{operation} quantity must be positive")
