"""SQLAlchemy implementation of ProductRepository (the inventory ledger's
storage)."""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import func, select, text, update
from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import set_committed_value

from storefront.domain.exceptions import InsufficientStockError, ProductNotFoundError
from storefront.domain.model.product import Product
from storefront.domain.model.value_objects import Money, utc_now
from storefront.domain.repository.product_repository import ProductRepository
from storefront.infrastructure.persistence.orm import ProductRow


class SqlAlchemyProductRepository(ProductRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    # --- ProductRepository interface ------------------------------------------

    def get_by_id(self, product_id: str) -> Product | None:
        row = self._session.get(ProductRow, product_id)
        return self._to_domain(row) if row is not None else None

    def get_by_name(self, name: str) -> Product | None:
        row = (
            self._session.query(ProductRow)
            .filter(func.lower(ProductRow.name) == name.strip().lower())
            .first()
        )
        return self._to_domain(row) if row is not None else None

    def list_all(self) -> list[Product]:
        rows = self._session.query(ProductRow).order_by(ProductRow.id).all()
        return [self._to_domain(row) for row in rows]

    def save(self, product: Product) -> None:
        row = self._session.get(ProductRow, product.id)
        if row is None:
            row = ProductRow(id=product.id)
            self._session.add(row)
        row.name = product.name
        row.price = product.price.amount
        row.currency = product.price.currency
        row.stock_quantity = product.stock_quantity
        row.updated_at = utc_now()
        self._session.flush()

    def lock_for_update(self, product_id: str) -> Product | None:
        if self._session.get_bind().dialect.name == "postgresql":
            # Transaction-scoped advisory lock keyed on the product id;
            # released automatically on commit or rollback.
            self._session.execute(
                text("SELECT pg_advisory_xact_lock(hashtext(:key))"),
                {"key": f"product:{product_id}"},
            )
            query = self._session.query(ProductRow).filter(ProductRow.id == product_id)
        else:
            query = (
                self._session.query(ProductRow)
                .filter(ProductRow.id == product_id)
                .with_for_update()
            )
        row = query.populate_existing().first()
        return self._to_domain(row) if row is not None else None

    def adjust_stock(self, product_id: str, delta: int) -> int:
        # Change-with-floor-check in one statement; the WHERE clause is
        # the serialization point for concurrent deductions.
        new_quantity = self._session.execute(
            update(ProductRow)
            .where(ProductRow.id == product_id)
            .where(ProductRow.stock_quantity + delta >= 0)
            .values(
                stock_quantity=ProductRow.stock_quantity + delta,
                updated_at=utc_now(),
            )
            .returning(ProductRow.stock_quantity)
            .execution_options(synchronize_session=False)
        ).scalar()

        if new_quantity is None:
            current = self._session.execute(
                select(ProductRow.stock_quantity).where(ProductRow.id == product_id)
            ).scalar()
            if current is None:
                raise ProductNotFoundError(f"Product not found: '{product_id}'")
            raise InsufficientStockError(product_id, -delta, current)

        row = self._session.get(ProductRow, product_id)
        set_committed_value(row, "stock_quantity", new_quantity)
        return int(new_quantity)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_domain(row: ProductRow) -> Product:
        return Product(
            id=row.id,
            name=row.name,
            price=Money(Decimal(str(row.price)), row.currency or "USD"),
            stock_quantity=row.stock_quantity,
        )
