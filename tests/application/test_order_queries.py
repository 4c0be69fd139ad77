"""Integration tests for notes, pricing, listings and the timeline."""

import pytest

from tradeflow.application.add_order_note import AddOrderNoteHandler
from tradeflow.application.change_order_status import ChangeOrderStatusHandler
from tradeflow.application.create_order import CreateOrderHandler
from tradeflow.application.dto import Actor, OrderItemSpec, ShippingAddressSpec
from tradeflow.application.list_orders import ListOrdersHandler
from tradeflow.application.set_order_pricing import SetOrderPricingHandler
from tradeflow.application.show_order import ShowOrderHandler
from tradeflow.domain.exceptions import EntityNotFoundError, UnknownStatus, ValidationError
from tradeflow.domain.model.status import ActorRole
from tests.fakes import FakeOrderRepository, FakeProductRepository, make_product

WHOLESALER = Actor(ActorRole.WHOLESALER, "w-1")
SUPPLIER = Actor(ActorRole.SUPPLIER, "s-1")
ADDRESS = ShippingAddressSpec(street="1 Main St", city="Springfield", country="USA")


def _setup():
    """Two orders by w-1 and one by w-2, all with supplier s-1."""
    order_repo = FakeOrderRepository()
    product_repo = FakeProductRepository([make_product("x", 100, price="20.00")])
    create = CreateOrderHandler(order_repo, product_repo)
    ids = [
        create.handle(w, "s-1", [OrderItemSpec("x", 5)], ADDRESS).id
        for w in ("w-1", "w-1", "w-2")
    ]
    return order_repo, product_repo, ids


class TestNotes:

    def test_any_party_can_add_a_note(self):
        order_repo, _, [order_id, *_] = _setup()
        handler = AddOrderNoteHandler(order_repo)
        handler.handle(order_id, WHOLESALER, "please call first")
        dto = handler.handle(order_id, SUPPLIER, "noted")
        assert [n.split("] ", 1)[1] for n in dto.notes] == ["please call first", "noted"]

    def test_stranger_cannot_add_a_note(self):
        order_repo, _, [order_id, *_] = _setup()
        with pytest.raises(EntityNotFoundError):
            AddOrderNoteHandler(order_repo).handle(
                order_id, Actor(ActorRole.TRANSPORTER, "t-1"), "hello"
            )


class TestPricing:

    def test_supplier_sets_discount_and_tax(self):
        order_repo, _, [order_id, *_] = _setup()
        dto = SetOrderPricingHandler(order_repo).handle(
            order_id, SUPPLIER, discounts="10", tax_amount="4.50"
        )
        assert dto.total_amount == "$100.00"
        assert dto.final_amount == "$94.50"

    def test_wholesaler_cannot_set_pricing(self):
        order_repo, _, [order_id, *_] = _setup()
        with pytest.raises(ValidationError):
            SetOrderPricingHandler(order_repo).handle(order_id, WHOLESALER, discounts="10")

    def test_invalid_amount(self):
        order_repo, _, [order_id, *_] = _setup()
        with pytest.raises(ValidationError, match="Invalid money amount"):
            SetOrderPricingHandler(order_repo).handle(order_id, SUPPLIER, discounts="lots")


class TestListings:

    def test_wholesaler_sees_own_orders_newest_first(self):
        order_repo, _, ids = _setup()
        dtos = ListOrdersHandler(order_repo).handle(WHOLESALER)
        assert [d.id for d in dtos] == [ids[1], ids[0]]

    def test_supplier_sees_all_its_orders(self):
        order_repo, _, _ = _setup()
        assert len(ListOrdersHandler(order_repo).handle(SUPPLIER)) == 3

    def test_status_filter(self):
        order_repo, product_repo, ids = _setup()
        ChangeOrderStatusHandler(order_repo, product_repo).handle(ids[0], SUPPLIER, "confirmed")
        dtos = ListOrdersHandler(order_repo).handle(SUPPLIER, status="confirmed")
        assert [d.id for d in dtos] == [ids[0]]

    def test_unknown_status_filter(self):
        order_repo, _, _ = _setup()
        with pytest.raises(UnknownStatus):
            ListOrdersHandler(order_repo).handle(SUPPLIER, status="lost")


class TestShowOrder:

    def test_show(self):
        order_repo, _, [order_id, *_] = _setup()
        dto = ShowOrderHandler(order_repo).handle(order_id, WHOLESALER)
        assert dto.id == order_id
        assert dto.items[0].line_total == "$100.00"

    def test_timeline_follows_events(self):
        order_repo, product_repo, [order_id, *_] = _setup()
        status = ChangeOrderStatusHandler(order_repo, product_repo)
        status.handle(order_id, SUPPLIER, "confirmed")
        status.handle(order_id, WHOLESALER, "cancelled", reason="found cheaper")

        timeline = ShowOrderHandler(order_repo).timeline(order_id, WHOLESALER)
        assert [(e.from_status, e.to_status) for e in timeline] == [
            (None, "pending"),
            ("pending", "confirmed"),
            ("confirmed", "cancelled"),
        ]
        assert timeline[-1].reason == "found cheaper"
        assert timeline[-1].actor_role == "wholesaler"

    def test_hidden_from_other_wholesaler(self):
        order_repo, _, [order_id, *_] = _setup()
        with pytest.raises(EntityNotFoundError):
            ShowOrderHandler(order_repo).timeline(order_id, Actor(ActorRole.WHOLESALER, "w-2"))
