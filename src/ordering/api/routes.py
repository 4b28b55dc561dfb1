"""FastAPI routes for the Ordering domain: products, customers and orders."""

import json

from fastapi import APIRouter
from protean.utils.globals import current_domain

from ordering.api.schemas import (
    AddProductRequest,
    AdvanceOrderStatusRequest,
    ClaimGuestOrderRequest,
    ConvertGuestOrderRequest,
    CustomerIdResponse,
    MoneySchema,
    OrderIdResponse,
    OrderItemResponse,
    OrderResponse,
    PlaceCustomerOrderRequest,
    PlaceGuestOrderRequest,
    ProductIdResponse,
    RegisterCustomerRequest,
    StatusResponse,
    StockMovementRequest,
    StockResponse,
)
from ordering.customer.registration import RegisterCustomer
from ordering.order.conversion import ClaimGuestOrder, ConvertGuestOrder, load_order
from ordering.order.lifecycle import AdvanceOrderStatus
from ordering.order.order import Order
from ordering.order.placement import PlaceCustomerOrder, PlaceGuestOrder
from ordering.product.creation import AddProduct
from ordering.product.stock import RestockProduct, get_product


def _money(money) -> MoneySchema:
    return MoneySchema(amount=money.amount, currency=money.currency)


def _order_response(order: Order) -> OrderResponse:
    return OrderResponse(
        order_id=str(order.id),
        order_number=order.order_number.value,
        status=order.status,
        currency=order.currency,
        customer_id=str(order.customer_id) if order.customer_id else None,
        guest_email=order.guest_email.address if order.guest_email else None,
        contact_email=order.contact_email(),
        items=[
            OrderItemResponse(
                product_id=str(item.product_id),
                product_name=item.product_name,
                product_sku=item.product_sku,
                unit_price=_money(item.unit_price),
                quantity=item.quantity,
                total_price=_money(item.total_price),
            )
            for item in order.items
        ],
        subtotal=_money(order.subtotal),
        tax_amount=_money(order.tax_amount),
        shipping_amount=_money(order.shipping_amount),
        discount_amount=_money(order.discount_amount),
        total=_money(order.total),
        notes=order.notes,
        metadata=order.get_metadata(),
    )


# ---------------------------------------------------------------------------
# Product Router
# ---------------------------------------------------------------------------
product_router = APIRouter(prefix="/products", tags=["products"])


@product_router.post("", status_code=201, response_model=ProductIdResponse)
async def add_product(body: AddProductRequest) -> ProductIdResponse:
    """Add a product to the stock ledger."""
    command = AddProduct(
        name=body.name,
        sku=body.sku,
        price=body.price,
        currency=body.currency,
        stock=body.stock,
        track_stock=body.track_stock,
        low_stock_threshold=body.low_stock_threshold,
    )
    result = current_domain.process(command, asynchronous=False)
    return ProductIdResponse(product_id=result)


@product_router.post("/{product_id}/restock", response_model=StockResponse)
async def restock_product(product_id: str, body: StockMovementRequest) -> StockResponse:
    """Put units back into stock."""
    current_domain.process(RestockProduct(product_id=product_id, quantity=body.quantity), asynchronous=False)
    product = get_product(product_id)
    return StockResponse(product_id=str(product.id), stock=product.stock, track_stock=product.track_stock)


# ---------------------------------------------------------------------------
# Customer Router
# ---------------------------------------------------------------------------
customer_router = APIRouter(prefix="/customers", tags=["customers"])


@customer_router.post("", status_code=201, response_model=CustomerIdResponse)
async def register_customer(body: RegisterCustomerRequest) -> CustomerIdResponse:
    """Register a customer account."""
    command = RegisterCustomer(
        email=body.email,
        first_name=body.first_name,
        last_name=body.last_name,
        phone=body.phone,
    )
    result = current_domain.process(command, asynchronous=False)
    return CustomerIdResponse(customer_id=result)


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("/guest", status_code=201, response_model=OrderIdResponse)
async def place_guest_order(body: PlaceGuestOrderRequest) -> OrderIdResponse:
    """Place an order for a guest buyer."""
    command = PlaceGuestOrder(
        draft=json.dumps(body.draft.model_dump()),
        guest=json.dumps(body.guest.model_dump()),
    )
    result = current_domain.process(command, asynchronous=False)
    return OrderIdResponse(order_id=result)


@order_router.post("/customer/{customer_id}", status_code=201, response_model=OrderIdResponse)
async def place_customer_order(customer_id: str, body: PlaceCustomerOrderRequest) -> OrderIdResponse:
    """Place an order on behalf of a registered customer."""
    command = PlaceCustomerOrder(
        customer_id=customer_id,
        draft=json.dumps(body.draft.model_dump()),
    )
    result = current_domain.process(command, asynchronous=False)
    return OrderIdResponse(order_id=result)


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str) -> OrderResponse:
    return _order_response(load_order(order_id))


@order_router.post("/{order_id}/convert", response_model=OrderIdResponse)
async def convert_guest_order(order_id: str, body: ConvertGuestOrderRequest) -> OrderIdResponse:
    """Attach a guest order to an existing customer."""
    command = ConvertGuestOrder(order_id=order_id, customer_id=body.customer_id)
    result = current_domain.process(command, asynchronous=False)
    return OrderIdResponse(order_id=result)


@order_router.post("/{order_id}/claim", response_model=CustomerIdResponse)
async def claim_guest_order(order_id: str, body: ClaimGuestOrderRequest) -> CustomerIdResponse:
    """Attach a guest order to the account matching its email, registering one if needed."""
    command = ClaimGuestOrder(order_id=order_id, phone=body.phone)
    result = current_domain.process(command, asynchronous=False)
    return CustomerIdResponse(customer_id=result)


@order_router.put("/{order_id}/status", response_model=StatusResponse)
async def advance_order_status(order_id: str, body: AdvanceOrderStatusRequest) -> StatusResponse:
    command = AdvanceOrderStatus(order_id=order_id, status=body.status)
    result = current_domain.process(command, asynchronous=False)
    return StatusResponse(status=result)
