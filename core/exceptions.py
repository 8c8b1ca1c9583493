#!/usr/bin/env python3
"""
Service-layer exceptions shared by the matching engine and the credit ledger.

Every failure the core surfaces is one of these; the web layer maps them
to HTTP status codes in web/backend/exceptions.py.
"""

from typing import Any, Optional


class ServiceException(Exception):
    """Base exception for service layer errors."""
    pass


class UserNotFoundException(ServiceException):
    """Raised when a user id does not resolve to a profile."""

    def __init__(self, user_id: Any):
        super().__init__(f"User {user_id} not found")
        self.user_id = user_id


class InvalidTransferException(ServiceException):
    """Raised for self-transfers and amounts outside the allowed range."""
    pass


class InsufficientFundsException(ServiceException):
    """Raised when a sender's balance does not cover a spend."""
    pass


class PaymentDeclinedException(ServiceException):
    """Raised when the payment gateway rejects a top-up.

    The failed transaction row has already been committed when this is
    raised; it is attached for the caller's audit view.
    """

    def __init__(self, reason: str, transaction: Optional[Any] = None):
        super().__init__(f"Payment failed: {reason}")
        self.reason = reason
        self.transaction = transaction


class StoreUnavailableException(ServiceException):
    """Raised when the database fails; the in-flight unit of work is rolled back."""
    pass
