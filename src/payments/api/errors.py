"""HTTP error mapping for Payments failures.

Gateway problems surface as 502 with the generic processing message only.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from payments.domain import logger
from payments.errors import PaymentProcessingError


async def payment_processing_error_handler(request: Request, exc: PaymentProcessingError) -> JSONResponse:
    logger.error("Payment processing failed", path=request.url.path, reason=exc.reason)
    return JSONResponse(status_code=502, content={"error": str(exc)})


def register_payment_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PaymentProcessingError, payment_processing_error_handler)
