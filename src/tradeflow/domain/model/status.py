"""Closed enumerations shared by the order aggregate and the state machine."""

from __future__ import annotations

from enum import Enum


class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    IN_PRODUCTION = "in_production"
    READY_FOR_DELIVERY = "ready_for_delivery"
    ASSIGNED_TO_TRANSPORTER = "assigned_to_transporter"
    ACCEPTED_BY_TRANSPORTER = "accepted_by_transporter"
    IN_TRANSIT = "in_transit"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    CERTIFIED = "certified"
    RETURN_REQUESTED = "return_requested"
    RETURN_ACCEPTED = "return_accepted"
    RETURN_IN_TRANSIT = "return_in_transit"
    RETURNED_TO_SUPPLIER = "returned_to_supplier"


class PaymentStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    PARTIALLY_PAID = "partially_paid"
    REFUNDED = "refunded"


class ActorRole(Enum):
    WHOLESALER = "wholesaler"
    SUPPLIER = "supplier"
    TRANSPORTER = "transporter"
    # A transporter acting on an order it claimed for the return trip.
    RETURN_TRANSPORTER = "return_transporter"


TERMINAL_STATUSES: frozenset[OrderStatus] = frozenset({
    OrderStatus.CANCELLED,
    OrderStatus.CERTIFIED,
    OrderStatus.RETURNED_TO_SUPPLIER,
})

RETURN_WORKFLOW_STATUSES: frozenset[OrderStatus] = frozenset({
    OrderStatus.RETURN_REQUESTED,
    OrderStatus.RETURN_ACCEPTED,
    OrderStatus.RETURN_IN_TRANSIT,
    OrderStatus.RETURNED_TO_SUPPLIER,
})

# Cancelling from these statuses puts the reserved stock back; later on the
# goods are already committed to production or shipping.
STOCK_RESTORING_STATUSES: frozenset[OrderStatus] = frozenset({
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
})

# Order attribute stamped the first time each status is entered.
TIMESTAMP_FIELDS: dict[OrderStatus, str] = {
    OrderStatus.CONFIRMED: "confirmed_at",
    OrderStatus.IN_PRODUCTION: "production_started_at",
    OrderStatus.READY_FOR_DELIVERY: "ready_for_delivery_at",
    OrderStatus.ASSIGNED_TO_TRANSPORTER: "transporter_assigned_at",
    OrderStatus.ACCEPTED_BY_TRANSPORTER: "transporter_accepted_at",
    OrderStatus.IN_TRANSIT: "in_transit_at",
    OrderStatus.DELIVERED: "delivered_at",
    OrderStatus.CANCELLED: "cancelled_at",
    OrderStatus.CERTIFIED: "certified_at",
    OrderStatus.RETURN_REQUESTED: "return_requested_at",
    OrderStatus.RETURN_ACCEPTED: "return_accepted_at",
    OrderStatus.RETURN_IN_TRANSIT: "return_in_transit_at",
    OrderStatus.RETURNED_TO_SUPPLIER: "returned_to_supplier_at",
}
