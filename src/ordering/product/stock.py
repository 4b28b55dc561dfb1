"""Stock ledger: reserve and restock products.

``StockLedger`` works inside whatever unit of work is active: reservations
mutate the loaded aggregates immediately and in call order, and nothing is
written until ``flush()``. The order builder relies on this to keep stock
and order persistence in a single commit.
"""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from ordering.domain import logger, ordering
from ordering.errors import ProductNotFound
from ordering.product.product import Product


class StockLedger:
    def __init__(self) -> None:
        self._loaded: dict[str, Product] = {}
        self._touched: dict[str, Product] = {}

    def get_product(self, product_id) -> Product:
        key = str(product_id)
        if key not in self._loaded:
            try:
                self._loaded[key] = current_domain.repository_for(Product).get(key)
            except ObjectNotFoundError as exc:
                raise ProductNotFound(key) from exc
        return self._loaded[key]

    def reserve(self, product_id, quantity: int) -> Product:
        product = self.get_product(product_id)
        product.reserve(quantity)
        self._touched[str(product.id)] = product
        logger.debug(
            "Stock reserved",
            product_id=str(product.id),
            quantity=quantity,
            remaining=product.stock,
        )
        return product

    def restock(self, product_id, quantity: int) -> Product:
        product = self.get_product(product_id)
        product.restock(quantity)
        self._touched[str(product.id)] = product
        return product

    def flush(self) -> None:
        repo = current_domain.repository_for(Product)
        for product in self._touched.values():
            repo.add(product)
        self._touched.clear()


@ordering.command(part_of="Product")
class ReserveStock:
    product_id = Identifier(required=True)
    quantity = Integer(required=True)


@ordering.command(part_of="Product")
class RestockProduct:
    product_id = Identifier(required=True)
    quantity = Integer(required=True)


@ordering.command_handler(part_of=Product)
class StockLedgerHandler:
    @handle(ReserveStock)
    def reserve_stock(self, command):
        ledger = StockLedger()
        product = ledger.reserve(command.product_id, command.quantity)
        ledger.flush()
        return str(product.id)

    @handle(RestockProduct)
    def restock_product(self, command):
        ledger = StockLedger()
        product = ledger.restock(command.product_id, command.quantity)
        ledger.flush()
        return str(product.id)


# ---------------------------------------------------------------------------
# Collaborator API
# ---------------------------------------------------------------------------
def get_product(product_id) -> Product:
    return StockLedger().get_product(product_id)


def reserve_stock(product_id, quantity: int) -> Product:
    """Reserve stock in its own unit of work and return the updated product."""
    current_domain.process(ReserveStock(product_id=str(product_id), quantity=quantity), asynchronous=False)
    return get_product(product_id)


def restock_product(product_id, quantity: int) -> Product:
    current_domain.process(RestockProduct(product_id=str(product_id), quantity=quantity), asynchronous=False)
    return get_product(product_id)
