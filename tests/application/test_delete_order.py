"""Integration tests for deleting pending orders."""

import pytest

from tradeflow.application.change_order_status import ChangeOrderStatusHandler
from tradeflow.application.create_order import CreateOrderHandler
from tradeflow.application.delete_order import DeleteOrderHandler
from tradeflow.application.dto import Actor, OrderItemSpec, ShippingAddressSpec
from tradeflow.domain.exceptions import EntityNotFoundError, ValidationError
from tradeflow.domain.model.status import ActorRole, OrderStatus
from tests.fakes import FakeOrderRepository, FakeProductRepository, make_product

WHOLESALER = Actor(ActorRole.WHOLESALER, "w-1")
ADDRESS = ShippingAddressSpec(street="1 Main St", city="Springfield", country="USA")


def _setup():
    order_repo = FakeOrderRepository()
    product_repo = FakeProductRepository([make_product("x", 10), make_product("y", 10)])
    dto = CreateOrderHandler(order_repo, product_repo).handle(
        "w-1", "s-1", [OrderItemSpec("x", 4), OrderItemSpec("y", 1)], ADDRESS
    )
    return DeleteOrderHandler(order_repo, product_repo), order_repo, product_repo, dto.id


class TestDeleteOrder:

    def test_delete_pending_restores_stock(self):
        handler, order_repo, product_repo, order_id = _setup()
        handler.handle(order_id, WHOLESALER)
        assert order_repo.get_by_id(order_id) is None
        assert product_repo.get_by_id("x").quantity == 10
        assert product_repo.get_by_id("y").quantity == 10

    def test_confirmed_order_cannot_be_deleted(self):
        handler, order_repo, product_repo, order_id = _setup()
        ChangeOrderStatusHandler(order_repo, product_repo).handle(
            order_id, Actor(ActorRole.SUPPLIER, "s-1"), "confirmed"
        )
        with pytest.raises(ValidationError, match="Only pending orders"):
            handler.handle(order_id, WHOLESALER)
        assert order_repo.get_by_id(order_id).status is OrderStatus.CONFIRMED
        assert product_repo.get_by_id("x").quantity == 6
        assert product_repo.get_by_id("y").quantity == 9

    def test_other_wholesaler_sees_not_found(self):
        handler, order_repo, _, order_id = _setup()
        with pytest.raises(EntityNotFoundError):
            handler.handle(order_id, Actor(ActorRole.WHOLESALER, "w-2"))
        assert order_repo.get_by_id(order_id) is not None

    def test_supplier_cannot_delete(self):
        handler, _, _, order_id = _setup()
        with pytest.raises(ValidationError, match="requires the wholesaler role"):
            handler.handle(order_id, Actor(ActorRole.SUPPLIER, "s-1"))
