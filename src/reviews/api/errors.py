"""Map domain errors to HTTP responses.

Handlers are looked up along the exception's MRO, so the specific classes
registered here win over the generic Protean handlers.
"""

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.integrations.fastapi import register_exception_handlers

from reviews.errors import (
    Forbidden,
    StoreUnavailable,
    TransactionConflict,
    Unauthorized,
)

_STATUS_CODES = {
    ValidationError: 400,
    ObjectNotFoundError: 404,
    Unauthorized: 401,
    Forbidden: 403,
    TransactionConflict: 409,
    StoreUnavailable: 503,
}


def _error_body(exc: Exception, detail) -> dict:
    return {"error": type(exc).__name__, "detail": jsonable_encoder(detail)}


def _validation_error(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content=_error_body(exc, exc.messages))


def _not_found_error(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
    # Protean's ObjectNotFoundError keeps its payload in args only
    detail = getattr(exc, "messages", None) or (exc.args[0] if exc.args else str(exc))
    return JSONResponse(status_code=404, content=_error_body(exc, detail))


def _reviews_error(request: Request, exc) -> JSONResponse:
    status_code = next(code for cls, code in _STATUS_CODES.items() if isinstance(exc, cls))
    return JSONResponse(status_code=status_code, content=_error_body(exc, exc.message))


def _request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content=_error_body(exc, exc.errors()))


def register_error_handlers(app: FastAPI) -> None:
    register_exception_handlers(app)

    app.add_exception_handler(ValidationError, _validation_error)
    app.add_exception_handler(ObjectNotFoundError, _not_found_error)
    for cls in (Unauthorized, Forbidden, TransactionConflict, StoreUnavailable):
        app.add_exception_handler(cls, _reviews_error)
    app.add_exception_handler(RequestValidationError, _request_validation_error)
