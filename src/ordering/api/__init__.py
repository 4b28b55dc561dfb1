"""Ordering domain API package."""

from ordering.api.routes import customer_router, order_router, product_router

__all__ = ["product_router", "customer_router", "order_router"]
