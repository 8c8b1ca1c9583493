#!/usr/bin/env python3
"""
Ledger Models - payment descriptors, gateway outcomes and transaction records.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional

from database.models import TimeTransaction, TransactionType, TransactionStatus


@dataclass(frozen=True)
class CardDetails:
    """Card used for a top-up. Only the last four digits are ever persisted."""
    card_number: str
    expiry_month: str
    expiry_year: str
    cvv: str
    cardholder_name: str

    @property
    def normalized_number(self) -> str:
        return ''.join(self.card_number.split())

    @property
    def last4(self) -> str:
        return self.normalized_number[-4:]

    @property
    def masked(self) -> str:
        return f"Card ending in {self.last4}"

    def __repr__(self) -> str:
        return f"CardDetails(card={self.masked!r}, cardholder_name={self.cardholder_name!r})"


@dataclass(frozen=True)
class GatewayResult:
    """Outcome of a simulated card charge."""
    success: bool
    transaction_ref: Optional[str] = None
    error: Optional[str] = None


@dataclass
class TransactionRecord:
    """Detached copy of a TimeTransaction row, safe to use after the session closes."""
    id: int
    user_id: int
    type: TransactionType
    amount: Decimal
    balance_before: Decimal
    balance_after: Decimal
    status: TransactionStatus
    description: Optional[str] = None
    payment_method: Optional[str] = None
    transaction_ref: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_orm(cls, row: TimeTransaction) -> "TransactionRecord":
        return cls(
            id=row.id,
            user_id=row.user_id,
            type=TransactionType(row.type),
            amount=Decimal(row.amount),
            balance_before=Decimal(row.balance_before),
            balance_after=Decimal(row.balance_after),
            status=TransactionStatus(row.status),
            description=row.description,
            payment_method=row.payment_method,
            transaction_ref=row.transaction_ref,
            metadata=dict(row.metadata_ or {}),
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    @property
    def signed_amount(self) -> Decimal:
        return self.amount * self.type.sign
