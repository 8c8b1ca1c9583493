#!/usr/bin/env python3
"""
Request models for API endpoints.
"""

from decimal import Decimal
from pydantic import BaseModel, Field
from typing import Optional

from core.ledger.models import CardDetails


class PaymentMethod(BaseModel):
    """Card details for a top-up. All fields are required."""
    card_number: str = Field(..., min_length=1, description="Card number, spaces allowed")
    expiry_month: str = Field(..., min_length=1)
    expiry_year: str = Field(..., min_length=1)
    cvv: str = Field(..., min_length=1)
    cardholder_name: str = Field(..., min_length=1)

    def to_card(self) -> CardDetails:
        return CardDetails(
            card_number=self.card_number,
            expiry_month=self.expiry_month,
            expiry_year=self.expiry_year,
            cvv=self.cvv,
            cardholder_name=self.cardholder_name,
        )


class TopUpRequest(BaseModel):
    """Request to buy credits with a card."""
    user_id: int
    amount: Decimal = Field(..., description="Credits to buy (range enforced by the ledger)")
    payment_method: PaymentMethod


class SpendRequest(BaseModel):
    """Request to transfer credits to another user."""
    from_user_id: int
    to_user_id: int
    amount: Decimal
    description: str = Field(..., min_length=1)
    skill_name: Optional[str] = None
