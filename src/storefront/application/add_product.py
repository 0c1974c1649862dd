"""Application service: Add Product use case."""

from __future__ import annotations

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.product import Product
from storefront.domain.model.value_objects import Money
from storefront.domain.repository.unit_of_work import UnitOfWork


class AddProductHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(
        self,
        name: str,
        price: str,
        stock: int = 0,
        product_id: str | None = None,
    ) -> Product:
        """Add a new product to the catalog with an initial stock count."""
        if not name or not name.strip():
            raise ValidationError("Product name is required")
        unit_price = Money.of(price)
        if unit_price.amount <= 0:
            raise ValidationError("Product price must be greater than zero")

        with self._uow as uow:
            if uow.products.get_by_name(name.strip()) is not None:
                raise ValidationError(f"Product '{name}' already exists")

            if product_id is None:
                # Auto-assign the next numeric ID
                numeric = [int(p.id) for p in uow.products.list_all() if p.id.isdigit()]
                product_id = str(max(numeric) + 1) if numeric else "1"
            elif uow.products.get_by_id(product_id) is not None:
                raise ValidationError(f"Product ID '{product_id}' already exists")

            product = Product(
                id=product_id,
                name=name.strip(),
                price=unit_price,
                stock_quantity=stock,
            )
            uow.products.save(product)
            uow.commit()
        return product
