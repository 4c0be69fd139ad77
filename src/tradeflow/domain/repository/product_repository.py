"""Abstract repository for the SupplierProduct aggregate.

Defined in the domain layer so the domain never depends on
infrastructure. Concrete implementations (JSON, in-memory) live in the
infrastructure layer and in the test fakes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager

from tradeflow.domain.model.product import SupplierProduct


class StockTransaction(ABC):
    """Transaction-local view of the product store.

    Reads see the transaction's own writes.  Nothing written through the
    transaction is visible outside it until the enclosing
    ``ProductRepository.transaction()`` block exits cleanly.
    """

    @abstractmethod
    def get(self, product_id: str) -> SupplierProduct | None:
        """Load a product for update inside the transaction."""

    @abstractmethod
    def save(self, product: SupplierProduct) -> None:
        """Stage a product change for commit."""


class ProductRepository(ABC):

    @abstractmethod
    def get_by_id(self, product_id: str) -> SupplierProduct | None:
        """Return a product by its ID, or None if not found."""

    @abstractmethod
    def list_all(self) -> list[SupplierProduct]:
        """Return every product."""

    @abstractmethod
    def list_by_supplier(self, supplier_id: str) -> list[SupplierProduct]:
        """Return the products owned by one supplier."""

    @abstractmethod
    def save(self, product: SupplierProduct) -> None:
        """Persist a new (ID assigned here) or updated product."""

    @abstractmethod
    def transaction(self) -> AbstractContextManager[StockTransaction]:
        """Open an all-or-nothing unit of work over the product store.

        Commits on clean exit; on any exception every staged change is
        discarded and the exception propagates.
        """
