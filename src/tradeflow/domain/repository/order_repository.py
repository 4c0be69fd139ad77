"""Abstract repository for the Order aggregate.

Writes are optimistic: ``save`` and ``delete`` only succeed if the stored
``version`` still equals the version the caller read.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from tradeflow.domain.model.order import Order
from tradeflow.domain.model.status import OrderStatus


class OrderRepository(ABC):

    @abstractmethod
    def next_id(self) -> int:
        """Generate the next unique order ID."""

    @abstractmethod
    def get_by_id(self, order_id: int) -> Order | None:
        """Return an order by its ID, or None if not found."""

    @abstractmethod
    def list_all(self) -> list[Order]:
        """Return every order, newest first."""

    @abstractmethod
    def add(self, order: Order) -> None:
        """Persist a new order, assigning its ID and version 1."""

    @abstractmethod
    def save(self, order: Order) -> None:
        """Persist an updated order and bump its version.

        Raises ConcurrencyConflict, writing nothing, if the stored version
        differs from ``order.version``.
        """

    @abstractmethod
    def delete(self, order: Order) -> None:
        """Remove an order; same version check as ``save``."""

    def list_open_returns(self) -> list[Order]:
        """Return requests no transporter has claimed yet."""
        return [
            o
            for o in self.list_all()
            if o.status is OrderStatus.RETURN_REQUESTED and o.return_transporter_id is None
        ]
