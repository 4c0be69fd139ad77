"""Tests for the all-or-nothing stock batch."""

import threading

import pytest

from tradeflow.domain.exceptions import EntityNotFoundError, InsufficientStock
from tradeflow.domain.model.stock import StockAdjustment, StockOperation
from tradeflow.domain.service.bulk_stock_service import BulkStockService
from tests.fakes import FakeProductRepository, make_product


def _repo(**stock: int) -> FakeProductRepository:
    return FakeProductRepository([make_product(pid, qty) for pid, qty in stock.items()])


def _dec(product_id: str, qty: int) -> StockAdjustment:
    return StockAdjustment(product_id, qty, StockOperation.DECREASE)


class TestApply:

    def test_applies_every_entry(self):
        repo = _repo(x=5, y=5)
        BulkStockService(repo).apply([_dec("x", 2), _dec("y", 3)])
        assert repo.get_by_id("x").quantity == 3
        assert repo.get_by_id("y").quantity == 2

    def test_failing_entry_rolls_back_earlier_ones(self):
        repo = _repo(x=5, y=1)
        with pytest.raises(InsufficientStock):
            BulkStockService(repo).apply([_dec("x", 2), _dec("y", 3)])
        assert repo.get_by_id("x").quantity == 5
        assert repo.get_by_id("y").quantity == 1

    def test_missing_product_rolls_back(self):
        repo = _repo(x=5)
        with pytest.raises(EntityNotFoundError, match="Product not found: nope"):
            BulkStockService(repo).apply([_dec("x", 2), _dec("nope", 1)])
        assert repo.get_by_id("x").quantity == 5

    def test_set_and_increase(self):
        repo = _repo(x=5)
        BulkStockService(repo).apply([
            StockAdjustment("x", 1, StockOperation.SET),
            StockAdjustment("x", 4, StockOperation.INCREASE),
        ])
        assert repo.get_by_id("x").quantity == 5


class TestConcurrentReservations:

    def test_only_one_of_two_competing_batches_succeeds(self):
        repo = _repo(x=5)
        service = BulkStockService(repo)
        outcomes: list[str] = []
        barrier = threading.Barrier(2)

        def reserve() -> None:
            barrier.wait()
            try:
                service.apply([_dec("x", 3)])
                outcomes.append("ok")
            except InsufficientStock:
                outcomes.append("insufficient")

        threads = [threading.Thread(target=reserve) for _ in range(2)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sorted(outcomes) == ["insufficient", "ok"]
        assert repo.get_by_id("x").quantity == 2
