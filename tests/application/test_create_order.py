"""Integration tests for the CreateOrder use case.

Uses in-memory fake repositories, no file I/O.
"""

import threading

import pytest

from tradeflow.application.create_order import CreateOrderHandler
from tradeflow.application.delete_order import DeleteOrderHandler
from tradeflow.application.dto import Actor, OrderItemSpec, ShippingAddressSpec
from tradeflow.domain.exceptions import EntityNotFoundError, InsufficientStock, ValidationError
from tradeflow.domain.model.status import ActorRole
from tradeflow.domain.model.value_objects import Money
from tests.fakes import FakeOrderRepository, FakeProductRepository, make_product

ADDRESS = ShippingAddressSpec(street="1 Main St", city="Springfield", country="USA")


def _setup(
    products=None,
) -> tuple[CreateOrderHandler, FakeOrderRepository, FakeProductRepository]:
    """Build handler with fake repos, optionally pre-loaded with products."""
    if products is None:
        products = [
            make_product("1", 20, price="15.00"),
            make_product("2", 20, price="25.00"),
            make_product("3", 20, supplier_id="s-2"),
        ]
    order_repo = FakeOrderRepository()
    product_repo = FakeProductRepository(products)
    handler = CreateOrderHandler(order_repo, product_repo)
    return handler, order_repo, product_repo


class TestCreateOrderHappyPath:

    def test_creates_pending_order_with_correct_total(self):
        handler, _, _ = _setup()
        dto = handler.handle("w-1", "s-1", [OrderItemSpec("1", 3), OrderItemSpec("2", 5)], ADDRESS)
        assert dto.status == "pending"
        assert dto.total_amount == "$170.00"
        assert dto.final_amount == "$170.00"
        assert dto.shipping_address == "1 Main St, Springfield, USA"
        assert len(dto.items) == 2

    def test_assigns_id_and_version(self):
        handler, order_repo, _ = _setup()
        dto = handler.handle("w-1", "s-1", [OrderItemSpec("1", 1)], ADDRESS)
        assert dto.id == 1
        assert dto.version == 1
        assert order_repo.get_by_id(1).order_number == dto.order_number

    def test_reserves_stock(self):
        handler, _, product_repo = _setup()
        handler.handle("w-1", "s-1", [OrderItemSpec("1", 3), OrderItemSpec("2", 5)], ADDRESS)
        assert product_repo.get_by_id("1").quantity == 17
        assert product_repo.get_by_id("2").quantity == 15

    def test_price_snapshot_at_creation(self):
        handler, order_repo, product_repo = _setup()
        dto = handler.handle("w-1", "s-1", [OrderItemSpec("1", 1)], ADDRESS)

        widget = product_repo.get_by_id("1")
        widget.selling_price = Money.of("99.99")
        product_repo.save(widget)

        assert str(order_repo.get_by_id(dto.id).total_amount) == "$15.00"


class TestCreateOrderValidation:

    def test_empty_items_rejected(self):
        handler, _, _ = _setup()
        with pytest.raises(ValidationError, match="non-empty"):
            handler.handle("w-1", "s-1", [], ADDRESS)

    def test_zero_quantity_rejected(self):
        handler, _, _ = _setup()
        with pytest.raises(ValidationError, match="must be positive"):
            handler.handle("w-1", "s-1", [OrderItemSpec("1", 0)], ADDRESS)

    def test_incomplete_address_rejected(self):
        handler, order_repo, _ = _setup()
        with pytest.raises(ValidationError, match="shipping address"):
            handler.handle(
                "w-1", "s-1", [OrderItemSpec("1", 1)], ShippingAddressSpec("1 Main St", None, "USA")
            )
        assert order_repo.list_all() == []

    def test_unknown_product(self):
        handler, _, _ = _setup()
        with pytest.raises(EntityNotFoundError, match="Product not found with ID: 99"):
            handler.handle("w-1", "s-1", [OrderItemSpec("99", 1)], ADDRESS)

    def test_product_of_another_supplier(self):
        handler, _, _ = _setup()
        with pytest.raises(EntityNotFoundError):
            handler.handle("w-1", "s-1", [OrderItemSpec("3", 1)], ADDRESS)

    def test_inactive_product(self):
        handler, _, _ = _setup([make_product("1", 20, is_active=False)])
        with pytest.raises(ValidationError, match="not available"):
            handler.handle("w-1", "s-1", [OrderItemSpec("1", 1)], ADDRESS)

    def test_minimum_order_quantity(self):
        handler, _, _ = _setup([make_product("1", 20, min_order_quantity=5)])
        with pytest.raises(ValidationError, match="Minimum order quantity for Product 1 is 5"):
            handler.handle("w-1", "s-1", [OrderItemSpec("1", 4)], ADDRESS)


class TestReservationAtomicity:

    def test_insufficient_stock_leaves_everything_untouched(self):
        handler, order_repo, product_repo = _setup(
            [make_product("1", 10), make_product("2", 2)]
        )
        with pytest.raises(InsufficientStock, match="Available: 2, Requested: 3"):
            handler.handle("w-1", "s-1", [OrderItemSpec("1", 4), OrderItemSpec("2", 3)], ADDRESS)
        assert product_repo.get_by_id("1").quantity == 10
        assert product_repo.get_by_id("2").quantity == 2
        assert order_repo.list_all() == []

    def test_repeated_product_lines_fail_together(self):
        handler, order_repo, product_repo = _setup([make_product("1", 5)])
        with pytest.raises(InsufficientStock, match="Available: 2, Requested: 3"):
            handler.handle("w-1", "s-1", [OrderItemSpec("1", 3), OrderItemSpec("1", 3)], ADDRESS)
        assert product_repo.get_by_id("1").quantity == 5
        assert order_repo.list_all() == []

    def test_repeated_product_lines_reserve_and_restore_each_line(self):
        handler, order_repo, product_repo = _setup([make_product("1", 10)])
        dto = handler.handle(
            "w-1", "s-1", [OrderItemSpec("1", 2), OrderItemSpec("1", 3)], ADDRESS
        )
        assert [item.quantity for item in dto.items] == [2, 3]
        assert product_repo.get_by_id("1").quantity == 5

        DeleteOrderHandler(order_repo, product_repo).handle(
            dto.id, Actor(ActorRole.WHOLESALER, "w-1")
        )
        assert product_repo.get_by_id("1").quantity == 10

    def test_concurrent_orders_for_the_last_units(self):
        handler, order_repo, product_repo = _setup([make_product("1", 5)])
        outcomes: list[str] = []
        barrier = threading.Barrier(2)

        def place(wholesaler_id: str) -> None:
            barrier.wait()
            try:
                handler.handle(wholesaler_id, "s-1", [OrderItemSpec("1", 3)], ADDRESS)
                outcomes.append("ok")
            except InsufficientStock:
                outcomes.append("insufficient")

        threads = [threading.Thread(target=place, args=(w,)) for w in ("w-a", "w-b")]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sorted(outcomes) == ["insufficient", "ok"]
        assert product_repo.get_by_id("1").quantity == 2
        assert len(order_repo.list_all()) == 1
