"""Payment gateway factory.

Provides get_gateway() / set_gateway() to swap implementations:
- FakeStripeGateway for development and testing (default)
- StripeGateway when PAYMENT_GATEWAY=stripe, configured from
  STRIPE_SECRET_KEY and STRIPE_WEBHOOK_SECRET
"""

import os

from payments.gateway.port import PaymentGateway

_current_gateway: PaymentGateway | None = None


def _build_gateway() -> PaymentGateway:
    adapter = os.environ.get("PAYMENT_GATEWAY", "fake").lower()
    if adapter == "fake":
        from payments.gateway.fake_adapter import FakeStripeGateway

        return FakeStripeGateway()
    if adapter == "stripe":
        from payments.gateway.stripe_adapter import StripeGateway

        api_key = os.environ.get("STRIPE_SECRET_KEY")
        webhook_secret = os.environ.get("STRIPE_WEBHOOK_SECRET")
        if not api_key or not webhook_secret:
            raise ValueError("STRIPE_SECRET_KEY and STRIPE_WEBHOOK_SECRET must be set for the stripe gateway")
        return StripeGateway(api_key=api_key, webhook_secret=webhook_secret)
    raise ValueError(f"Unknown payment gateway adapter: {adapter}")


def get_gateway() -> PaymentGateway:
    """Return the current payment gateway, building it on first use."""
    global _current_gateway
    if _current_gateway is None:
        _current_gateway = _build_gateway()
    return _current_gateway


def set_gateway(gateway: PaymentGateway) -> None:
    """Override the active payment gateway (useful for tests)."""
    global _current_gateway
    _current_gateway = gateway


def reset_gateway() -> None:
    global _current_gateway
    _current_gateway = None
