"""Payments bounded context: Payment intents and gateway reconciliation.

Creates and confirms payment intents against an external gateway and applies
gateway webhook events to locally persisted payments.
"""

import structlog
from protean.domain import Domain

payments = Domain(name="payments")

logger = structlog.get_logger(__name__)
