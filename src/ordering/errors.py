"""Typed failures raised by the Ordering domain.

Business rule violations extend protean's ``ValidationError`` so they carry a
``{field: [message]}`` dictionary the API layer can return verbatim. Lookups
that come back empty extend ``ObjectNotFoundError``.
"""

from protean.exceptions import ObjectNotFoundError, ValidationError


class InvalidOrderData(ValidationError):
    """A draft or order failed business validation."""

    def __init__(self, reason: str, field: str = "order"):
        self.reason = reason
        self.field = field
        super().__init__({field: [f"Invalid order data: {reason}"]})


class InsufficientStock(ValidationError):
    """Requested quantity exceeds the tracked stock of a product."""

    def __init__(self, product_id, requested: int, available: int):
        self.product_id = str(product_id)
        self.requested = requested
        self.available = available
        super().__init__(
            {
                "quantity": [
                    f"Insufficient stock for product {product_id}. Requested: {requested}, Available: {available}"
                ]
            }
        )


class UserAlreadyExists(ValidationError):
    def __init__(self, email: str):
        self.email = email
        super().__init__({"email": ["An account with this email address already exists."]})


class ProductNotFound(ObjectNotFoundError):
    def __init__(self, product_id):
        self.product_id = str(product_id)
        super().__init__({"product_id": [f"Product with ID {product_id} not found"]})


class OrderNotFound(ObjectNotFoundError):
    def __init__(self, order_id):
        self.order_id = str(order_id)
        super().__init__({"order_id": [f"Order with ID {order_id} not found"]})


class CustomerNotFound(ObjectNotFoundError):
    def __init__(self, customer_id):
        self.customer_id = str(customer_id)
        super().__init__({"customer_id": [f"Customer with ID {customer_id} not found"]})
