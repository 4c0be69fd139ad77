"""Integration tests for delivery: assignment and transporter status updates."""

from datetime import datetime, timezone

import pytest

from tradeflow.application.assign_transporter import AssignTransporterHandler
from tradeflow.application.change_order_status import ChangeOrderStatusHandler
from tradeflow.application.create_order import CreateOrderHandler
from tradeflow.application.dto import Actor, OrderItemSpec, ShippingAddressSpec
from tradeflow.application.transporter_status import TransporterStatusHandler
from tradeflow.domain.exceptions import EntityNotFoundError, TransitionDenied, ValidationError
from tradeflow.domain.model.status import ActorRole, OrderStatus
from tests.fakes import FakeOrderRepository, FakeProductRepository, make_product

WHOLESALER = Actor(ActorRole.WHOLESALER, "w-1")
SUPPLIER = Actor(ActorRole.SUPPLIER, "s-1")
CARRIER = Actor(ActorRole.TRANSPORTER, "t-1")
ADDRESS = ShippingAddressSpec(street="1 Main St", city="Springfield", country="USA")


def _ready_order():
    """Fake repos with one order in ready_for_delivery."""
    order_repo = FakeOrderRepository()
    product_repo = FakeProductRepository([make_product("x", 10)])
    dto = CreateOrderHandler(order_repo, product_repo).handle(
        "w-1", "s-1", [OrderItemSpec("x", 2)], ADDRESS
    )
    status = ChangeOrderStatusHandler(order_repo, product_repo)
    for target in ("confirmed", "in_production", "ready_for_delivery"):
        status.handle(dto.id, SUPPLIER, target)
    return order_repo, product_repo, dto.id


class TestAssignTransporter:

    def test_assign(self):
        order_repo, product_repo, order_id = _ready_order()
        eta = datetime(2024, 7, 1, tzinfo=timezone.utc)
        dto = AssignTransporterHandler(order_repo, product_repo).handle(
            order_id, SUPPLIER, "t-1", notes="dock 4", estimated_delivery_date=eta
        )
        assert dto.status == "assigned_to_transporter"
        assert dto.assigned_transporter_id == "t-1"
        assert dto.transporter_notes == "dock 4"
        assert dto.estimated_delivery_date == eta.isoformat()

    def test_assign_before_ready_rejected(self):
        order_repo = FakeOrderRepository()
        product_repo = FakeProductRepository([make_product("x", 10)])
        dto = CreateOrderHandler(order_repo, product_repo).handle(
            "w-1", "s-1", [OrderItemSpec("x", 1)], ADDRESS
        )
        with pytest.raises(TransitionDenied):
            AssignTransporterHandler(order_repo, product_repo).handle(dto.id, SUPPLIER, "t-1")
        assert order_repo.get_by_id(dto.id).assigned_transporter_id is None

    def test_wholesaler_cannot_assign(self):
        order_repo, product_repo, order_id = _ready_order()
        with pytest.raises(ValidationError, match="requires the supplier role"):
            AssignTransporterHandler(order_repo, product_repo).handle(order_id, WHOLESALER, "t-1")


class TestDelivery:

    def test_full_delivery_then_certify(self):
        order_repo, product_repo, order_id = _ready_order()
        AssignTransporterHandler(order_repo, product_repo).handle(order_id, SUPPLIER, "t-1")
        carrier = TransporterStatusHandler(order_repo, product_repo)
        for target in ("accepted_by_transporter", "in_transit", "delivered"):
            carrier.handle(order_id, CARRIER, target)

        ChangeOrderStatusHandler(order_repo, product_repo).handle(
            order_id, WHOLESALER, "certified"
        )
        order = order_repo.get_by_id(order_id)
        assert order.status is OrderStatus.CERTIFIED
        assert order.delivered_at is not None
        assert order.certified_at is not None
        assert order.is_terminal

    def test_notes_recorded(self):
        order_repo, product_repo, order_id = _ready_order()
        AssignTransporterHandler(order_repo, product_repo).handle(order_id, SUPPLIER, "t-1")
        dto = TransporterStatusHandler(order_repo, product_repo).handle(
            order_id, CARRIER, "accepted_by_transporter", notes="on my way"
        )
        assert dto.transporter_notes == "on my way"
        assert any("on my way" in note for note in dto.notes)

    def test_transporter_cancel_does_not_restore_stock(self):
        order_repo, product_repo, order_id = _ready_order()
        AssignTransporterHandler(order_repo, product_repo).handle(order_id, SUPPLIER, "t-1")
        TransporterStatusHandler(order_repo, product_repo).handle(order_id, CARRIER, "cancelled")
        assert product_repo.get_by_id("x").quantity == 8

    def test_skipping_a_step_rejected(self):
        order_repo, product_repo, order_id = _ready_order()
        AssignTransporterHandler(order_repo, product_repo).handle(order_id, SUPPLIER, "t-1")
        with pytest.raises(TransitionDenied):
            TransporterStatusHandler(order_repo, product_repo).handle(order_id, CARRIER, "delivered")

    def test_other_transporter_sees_not_found(self):
        order_repo, product_repo, order_id = _ready_order()
        AssignTransporterHandler(order_repo, product_repo).handle(order_id, SUPPLIER, "t-1")
        with pytest.raises(EntityNotFoundError):
            TransporterStatusHandler(order_repo, product_repo).handle(
                order_id, Actor(ActorRole.TRANSPORTER, "t-2"), "accepted_by_transporter"
            )
