"""Product creation: command and handler."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Boolean, Integer, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.product.product import Product
from ordering.shared.money import Money


@ordering.command(part_of="Product")
class AddProduct:
    name = String(required=True, max_length=255)
    sku = String(required=True, max_length=64)
    price = String(required=True, max_length=32)  # decimal string, e.g. "19.99"
    currency = String(max_length=3, default="USD")
    stock = Integer(default=0)
    track_stock = Boolean(default=True)
    low_stock_threshold = Integer(default=5)


@ordering.command_handler(part_of=Product)
class AddProductHandler:
    @handle(AddProduct)
    def add_product(self, command):
        repo = current_domain.repository_for(Product)
        if repo.find_by_sku(command.sku) is not None:
            raise ValidationError({"sku": [f"A product with SKU {command.sku.upper()} already exists"]})

        product = Product.create(
            name=command.name,
            sku=command.sku,
            price=Money.of(command.price, command.currency or "USD"),
            stock=command.stock or 0,
            track_stock=command.track_stock if command.track_stock is not None else True,
            low_stock_threshold=command.low_stock_threshold if command.low_stock_threshold is not None else 5,
        )
        repo.add(product)
        return str(product.id)
