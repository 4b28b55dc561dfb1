"""HTTP error mapping for Ordering failures protean does not map itself."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ordering.errors import UserAlreadyExists


async def user_already_exists_handler(request: Request, exc: UserAlreadyExists) -> JSONResponse:
    return JSONResponse(status_code=409, content={"error": exc.messages})


def register_ordering_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(UserAlreadyExists, user_already_exists_handler)
