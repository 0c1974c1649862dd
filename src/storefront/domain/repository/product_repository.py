"""Abstract repository for the Product aggregate and its ledger quantity.

Defined in the domain layer so the domain never depends on
infrastructure.  Concrete implementations (SQL, in-memory) live in the
infrastructure layer and the test suite.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.model.product import Product


class ProductRepository(ABC):

    @abstractmethod
    def get_by_id(self, product_id: str) -> Product | None:
        """Return a product by its ID, or None if not found."""

    @abstractmethod
    def get_by_name(self, name: str) -> Product | None:
        """Return a product by its name (case-insensitive), or None."""

    @abstractmethod
    def list_all(self) -> list[Product]:
        """Return every product in the catalog."""

    @abstractmethod
    def save(self, product: Product) -> None:
        """Persist a new or updated product."""

    @abstractmethod
    def lock_for_update(self, product_id: str) -> Product | None:
        """Take the product's serialization token and return the product.

        The token is scoped to the current unit of work and released when
        it commits or rolls back.  Two units locking the same product run
        one after the other; different products never contend.
        """

    @abstractmethod
    def adjust_stock(self, product_id: str, delta: int) -> int:
        """Atomically add ``delta`` to the ledger quantity.

        Must be a single conditional write, never read-then-write.
        Returns the new quantity.  Raises InsufficientStockError if the
        result would be negative and ProductNotFoundError if the product
        does not exist.
        """
