#!/usr/bin/env python3
"""
Error handlers mapping service exceptions to HTTP responses.
"""

import logging
from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse

from core.exceptions import (
    ServiceException,
    UserNotFoundException,
    InvalidTransferException,
    InsufficientFundsException,
    PaymentDeclinedException,
    StoreUnavailableException,
)

logger = logging.getLogger(__name__)

STATUS_CODES = {
    UserNotFoundException: 404,
    InvalidTransferException: 400,
    InsufficientFundsException: 400,
    PaymentDeclinedException: 402,
    StoreUnavailableException: 503,
}


def status_code_for(exc: ServiceException) -> int:
    for exc_type, status_code in STATUS_CODES.items():
        if isinstance(exc, exc_type):
            return status_code
    return 500


async def service_exception_handler(
    request: Request,
    exc: ServiceException
) -> JSONResponse:
    """
    Handle service layer exceptions.

    Args:
        request: The FastAPI request.
        exc: The service exception.

    Returns:
        JSONResponse with error details.
    """
    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.error(f"Service error in {request.url.path}: {exc}", exc_info=True)
    else:
        logger.info(f"Rejected request to {request.url.path}: {exc}")

    content = {
        "success": False,
        "error": str(exc),
        "type": exc.__class__.__name__
    }
    if isinstance(exc, PaymentDeclinedException):
        content["reason"] = exc.reason
        if exc.transaction is not None:
            content["transaction_id"] = exc.transaction.id

    return JSONResponse(status_code=status_code, content=content)


async def http_exception_handler(
    request: Request,
    exc: HTTPException
) -> JSONResponse:
    """
    Handle FastAPI HTTP exceptions with consistent format.
    """
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "error": exc.detail,
            "type": "HTTPException"
        }
    )


async def general_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """
    Handle unexpected exceptions.
    """
    logger.exception(f"Unexpected error in {request.url.path}")

    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Internal server error",
            "type": "InternalError"
        }
    )
