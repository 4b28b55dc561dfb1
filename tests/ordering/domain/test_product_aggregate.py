import pytest
from ordering.errors import InsufficientStock
from ordering.product.events import ProductAdded, StockReserved
from ordering.product.product import Product
from ordering.shared.money import Money
from protean.exceptions import ValidationError


def _product(**overrides):
    defaults = {"name": "Trail Shoe", "sku": " shoe-1 ", "price": Money.of("100", "USD"), "stock": 5}
    defaults.update(overrides)
    return Product.create(**defaults)


class TestProductCreation:
    def test_sku_is_upper_cased(self):
        assert _product().sku == "SHOE-1"

    def test_raises_product_added(self):
        product = _product()
        assert len(product._events) == 1
        assert isinstance(product._events[0], ProductAdded)
        assert product._events[0].price_amount == "100.00"

    def test_negative_stock_rejected(self):
        with pytest.raises(ValidationError):
            _product(stock=-1)


class TestReserve:
    def test_reserve_decrements_stock(self):
        product = _product()
        product.reserve(2)
        assert product.stock == 3

    def test_reserve_entire_stock(self):
        product = _product()
        product.reserve(5)
        assert product.stock == 0
        assert not product.is_in_stock()

    def test_reserve_more_than_available(self):
        product = _product(stock=1)
        with pytest.raises(InsufficientStock) as exc:
            product.reserve(2)
        assert exc.value.requested == 2
        assert exc.value.available == 1
        assert exc.value.messages["quantity"] == [
            f"Insufficient stock for product {product.id}. Requested: 2, Available: 1"
        ]
        assert product.stock == 1

    def test_untracked_product_never_runs_out(self):
        product = _product(stock=0, track_stock=False)
        product.reserve(50)
        assert product.stock == 0
        assert product.is_in_stock()

    def test_reserve_raises_stock_reserved(self):
        product = _product()
        product._events.clear()
        product.reserve(2)
        event = product._events[-1]
        assert isinstance(event, StockReserved)
        assert event.remaining == 3
        assert event.tracked is True

    def test_zero_quantity_rejected(self):
        with pytest.raises(ValidationError) as exc:
            _product().reserve(0)
        assert exc.value.messages == {"quantity": ["Quantity must be at least 1."]}


class TestRestock:
    def test_restock_increments_stock(self):
        product = _product(stock=0)
        product.restock(4)
        assert product.stock == 4

    def test_low_stock(self):
        product = _product(stock=5, low_stock_threshold=5)
        assert product.is_low_stock()
        product.restock(1)
        assert not product.is_low_stock()
