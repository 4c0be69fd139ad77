"""JSON-file-backed implementation of OrderRepository.

Each order record carries a ``version``; ``save`` and ``delete`` compare it
with the caller's copy under the file lock before writing.
"""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from pathlib import Path

from tradeflow.domain.exceptions import ConcurrencyConflict
from tradeflow.domain.model.order import (
    Order,
    OrderLineItem,
    OrderNote,
    ShippingAddress,
    StatusEvent,
)
from tradeflow.domain.model.status import (
    TIMESTAMP_FIELDS,
    ActorRole,
    OrderStatus,
    PaymentStatus,
)
from tradeflow.domain.model.value_objects import Money, Quantity
from tradeflow.domain.repository.order_repository import OrderRepository
from tradeflow.infrastructure.persistence._json_store import (
    ensure_file,
    load_records,
    lock_for,
    write_records,
)

logger = logging.getLogger(__name__)

_TIMESTAMP_ATTRS = [*TIMESTAMP_FIELDS.values(), "return_transporter_assigned_at"]


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _parse(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


class JsonOrderRepository(OrderRepository):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._lock = lock_for(file_path)
        ensure_file(file_path)

    # --- OrderRepository interface --------------------------------------------

    def next_id(self) -> int:
        orders = load_records(self._file_path)
        if not orders:
            return 1
        return max(o["id"] for o in orders) + 1

    def get_by_id(self, order_id: int) -> Order | None:
        for raw in load_records(self._file_path):
            if raw["id"] == order_id:
                return self._to_domain(raw)
        return None

    def list_all(self) -> list[Order]:
        orders = [self._to_domain(raw) for raw in load_records(self._file_path)]
        return sorted(orders, key=lambda o: (o.created_at, o.id or 0), reverse=True)

    def add(self, order: Order) -> None:
        with self._lock:
            orders = load_records(self._file_path)
            order.id = self.next_id()
            order.version = 1
            orders.append(self._to_raw(order))
            write_records(self._file_path, orders)

    def save(self, order: Order) -> None:
        with self._lock:
            orders = load_records(self._file_path)
            index = self._index_checked(orders, order)
            raw = self._to_raw(order)
            raw["version"] = order.version + 1
            orders[index] = raw
            write_records(self._file_path, orders)
            order.version += 1

    def delete(self, order: Order) -> None:
        with self._lock:
            orders = load_records(self._file_path)
            del orders[self._index_checked(orders, order)]
            write_records(self._file_path, orders)

    # --- Helpers --------------------------------------------------------------

    def _index_checked(self, orders: list[dict], order: Order) -> int:
        for i, raw in enumerate(orders):
            if raw["id"] == order.id:
                if raw["version"] != order.version:
                    logger.warning(
                        "Stale write to order %s: stored v%s, caller has v%s",
                        order.order_number, raw["version"], order.version,
                    )
                    raise ConcurrencyConflict(
                        f"Order {order.order_number} was modified by another request"
                    )
                return i
        raise ConcurrencyConflict(f"Order {order.order_number} no longer exists")

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(order: Order) -> dict:
        addr = order.shipping_address
        return {
            "id": order.id,
            "order_number": order.order_number,
            "version": order.version,
            "wholesaler_id": order.wholesaler_id,
            "supplier_id": order.supplier_id,
            "status": order.status.value,
            "payment_status": order.payment_status.value,
            "currency": order.discounts.currency,
            "discounts": str(order.discounts.amount),
            "tax_amount": str(order.tax_amount.amount),
            "order_notes": order.order_notes,
            "shipping_address": {
                "street": addr.street,
                "city": addr.city,
                "state": addr.state,
                "country": addr.country,
                "postal_code": addr.postal_code,
            },
            "items": [
                {
                    "product_id": item.product_id,
                    "product_name": item.product_name,
                    "quantity": item.quantity.value,
                    "unit_price": str(item.unit_price.amount),
                    "currency": item.unit_price.currency,
                }
                for item in order.items
            ],
            "assigned_transporter_id": order.assigned_transporter_id,
            "return_transporter_id": order.return_transporter_id,
            "estimated_delivery_date": _iso(order.estimated_delivery_date),
            "return_reason": order.return_reason,
            "transporter_notes": order.transporter_notes,
            "return_notes": order.return_notes,
            "timestamps": {
                name: _iso(getattr(order, name))
                for name in _TIMESTAMP_ATTRS
                if getattr(order, name) is not None
            },
            "events": [
                {
                    "timestamp": e.timestamp.isoformat(),
                    "from_status": e.from_status.value if e.from_status else None,
                    "to_status": e.to_status.value,
                    "actor_role": e.actor_role.value,
                    "actor_id": e.actor_id,
                    "reason": e.reason,
                }
                for e in order.events
            ],
            "notes": [
                {
                    "timestamp": n.timestamp.isoformat(),
                    "actor_role": n.actor_role.value,
                    "text": n.text,
                }
                for n in order.notes
            ],
            "created_at": order.created_at.isoformat(),
            "updated_at": order.updated_at.isoformat(),
        }

    @staticmethod
    def _to_domain(raw: dict) -> Order:
        currency = raw.get("currency", "USD")
        items = [
            OrderLineItem(
                product_id=i["product_id"],
                product_name=i["product_name"],
                quantity=Quantity(i["quantity"]),
                unit_price=Money(Decimal(i["unit_price"]), i.get("currency", currency)),
            )
            for i in raw["items"]
        ]
        timestamps = {
            name: _parse(raw.get("timestamps", {}).get(name)) for name in _TIMESTAMP_ATTRS
        }
        return Order(
            id=raw["id"],
            order_number=raw["order_number"],
            version=raw["version"],
            wholesaler_id=raw["wholesaler_id"],
            supplier_id=raw["supplier_id"],
            items=items,
            shipping_address=ShippingAddress(**raw["shipping_address"]),
            status=OrderStatus(raw["status"]),
            payment_status=PaymentStatus(raw.get("payment_status", "pending")),
            discounts=Money(Decimal(raw.get("discounts", "0")), currency),
            tax_amount=Money(Decimal(raw.get("tax_amount", "0")), currency),
            order_notes=raw.get("order_notes", ""),
            assigned_transporter_id=raw.get("assigned_transporter_id"),
            return_transporter_id=raw.get("return_transporter_id"),
            estimated_delivery_date=_parse(raw.get("estimated_delivery_date")),
            return_reason=raw.get("return_reason", ""),
            transporter_notes=raw.get("transporter_notes", ""),
            return_notes=raw.get("return_notes", ""),
            events=[
                StatusEvent(
                    timestamp=datetime.fromisoformat(e["timestamp"]),
                    from_status=OrderStatus(e["from_status"]) if e["from_status"] else None,
                    to_status=OrderStatus(e["to_status"]),
                    actor_role=ActorRole(e["actor_role"]),
                    actor_id=e.get("actor_id"),
                    reason=e.get("reason", ""),
                )
                for e in raw.get("events", [])
            ],
            notes=[
                OrderNote(
                    timestamp=datetime.fromisoformat(n["timestamp"]),
                    actor_role=ActorRole(n["actor_role"]),
                    text=n["text"],
                )
                for n in raw.get("notes", [])
            ],
            created_at=datetime.fromisoformat(raw["created_at"]),
            updated_at=datetime.fromisoformat(raw["updated_at"]),
            **timestamps,
        )
