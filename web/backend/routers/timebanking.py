#!/usr/bin/env python3
"""
Time banking endpoints - balances, history, top-ups and transfers.
"""

import logging
from typing import Optional
from fastapi import APIRouter, Depends, Path, Query

from core.ledger import TimeBankingService
from ..dependencies import get_time_banking_service
from ..models.requests import TopUpRequest, SpendRequest
from ..models.responses import (
    BalanceResponse,
    TransactionsResponse,
    TransactionSummary,
    TopUpResponse,
    SpendResponse
)
from ..utils import credits_to_float

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/timebanking", tags=["timebanking"])


@router.get("/balance/{user_id}", response_model=BalanceResponse)
def get_balance(
    user_id: int = Path(..., ge=1),
    service: TimeBankingService = Depends(get_time_banking_service)
):
    """Current credit balance of a user."""
    balance = service.get_user_balance(user_id)
    return BalanceResponse(success=True, user_id=user_id, balance=credits_to_float(balance))


@router.get("/transactions/{user_id}", response_model=TransactionsResponse)
def get_transactions(
    user_id: int = Path(..., ge=1),
    limit: Optional[int] = Query(default=None, ge=1, le=500, description="Maximum rows, newest first"),
    service: TimeBankingService = Depends(get_time_banking_service)
):
    """Transaction history of a user, including failed top-ups."""
    records = service.get_user_transactions(user_id, limit)
    transactions = [TransactionSummary.from_record(r) for r in records]
    return TransactionsResponse(success=True, count=len(transactions), transactions=transactions)


@router.post("/topup", response_model=TopUpResponse)
def top_up(
    request: TopUpRequest,
    service: TimeBankingService = Depends(get_time_banking_service)
):
    """
    Buy credits with a card.

    Declined cards answer 402; the failed attempt stays in the history.
    """
    record = service.top_up_credits(
        request.user_id,
        request.amount,
        request.payment_method.to_card()
    )
    return TopUpResponse(success=True, transaction=TransactionSummary.from_record(record))


@router.post("/spend", response_model=SpendResponse)
def spend(
    request: SpendRequest,
    service: TimeBankingService = Depends(get_time_banking_service)
):
    """Transfer credits to another user (spend row + earn row)."""
    records = service.spend_credits(
        request.from_user_id,
        request.to_user_id,
        request.amount,
        request.description,
        request.skill_name
    )
    return SpendResponse(
        success=True,
        transactions=[TransactionSummary.from_record(r) for r in records]
    )
