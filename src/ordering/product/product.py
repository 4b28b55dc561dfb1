"""Product aggregate: the stock ledger orders reserve against.

Products carry the price and stock level that the order builder snapshots
at purchase time. Stock is only enforced for products that track it.
"""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Integer, String, ValueObject

from ordering.domain import ordering
from ordering.errors import InsufficientStock
from ordering.product.events import ProductAdded, ProductRestocked, StockReserved
from ordering.shared.money import Money


@ordering.aggregate
class Product:
    name = String(required=True, max_length=255)
    sku = String(required=True, max_length=64)
    price = ValueObject(Money, required=True)
    stock = Integer(default=0, min_value=0)
    track_stock = Boolean(default=True)
    low_stock_threshold = Integer(default=5, min_value=0)
    is_active = Boolean(default=True)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(
        cls,
        name: str,
        sku: str,
        price: Money,
        stock: int = 0,
        track_stock: bool = True,
        low_stock_threshold: int = 5,
    ):
        now = datetime.now(UTC)
        product = cls(
            name=name,
            sku=sku.strip().upper(),
            price=price,
            stock=stock,
            track_stock=track_stock,
            low_stock_threshold=low_stock_threshold,
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductAdded(
                product_id=str(product.id),
                sku=product.sku,
                name=product.name,
                price_amount=price.amount,
                currency=price.currency,
                stock=product.stock,
                added_at=now,
            )
        )
        return product

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def is_in_stock(self) -> bool:
        return not self.track_stock or self.stock > 0

    def is_low_stock(self) -> bool:
        return self.track_stock and self.stock <= self.low_stock_threshold

    # -------------------------------------------------------------------
    # Stock movements
    # -------------------------------------------------------------------
    @staticmethod
    def _assert_positive_quantity(quantity: int) -> None:
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1."]})

    def reserve(self, quantity: int) -> None:
        """Take ``quantity`` units out of stock.

        Untracked products always succeed and keep their stock figure.
        """
        self._assert_positive_quantity(quantity)

        if self.track_stock:
            if self.stock < quantity:
                raise InsufficientStock(self.id, requested=quantity, available=self.stock)
            self.stock -= quantity
            self.updated_at = datetime.now(UTC)

        self.raise_(
            StockReserved(
                product_id=str(self.id),
                quantity=quantity,
                remaining=self.stock,
                tracked=self.track_stock,
            )
        )

    def restock(self, quantity: int) -> None:
        self._assert_positive_quantity(quantity)

        if self.track_stock:
            self.stock += quantity
            self.updated_at = datetime.now(UTC)

        self.raise_(
            ProductRestocked(
                product_id=str(self.id),
                quantity=quantity,
                stock=self.stock,
            )
        )


@ordering.repository(part_of=Product)
class ProductRepository:
    def find_by_sku(self, sku: str) -> Product | None:
        results = self._dao.query.filter(sku=sku.strip().upper()).all()
        return results.items[0] if results.items else None
