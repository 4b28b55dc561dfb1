"""Ordering bounded context: Products, Customers and Orders.

Owns the stock ledger and the order aggregate so that stock reservation and
order placement commit or roll back inside a single unit of work.
"""

import structlog
from protean.domain import Domain

ordering = Domain(name="ordering")

logger = structlog.get_logger(__name__)
