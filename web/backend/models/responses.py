#!/usr/bin/env python3
"""
Response models for API endpoints.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Dict, Any

from core.ledger.models import TransactionRecord
from core.matcher.models import MatchResult
from ..utils import credits_to_float, safe_datetime_iso


class MatchUser(BaseModel):
    """Public view of a matched user."""
    id: int
    name: Optional[str]
    bio: Optional[str]
    location: Optional[str]
    time_credits: float


class MatchSummary(BaseModel):
    """One ranked partner."""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "user": {
                    "id": 2,
                    "name": "Bea",
                    "bio": "Yoga teacher",
                    "location": "Lisbon",
                    "time_credits": 25.0
                },
                "match_score": 97,
                "match_reasons": [
                    "They can teach you: Yoga",
                    "You can teach them: JavaScript",
                    "Complete profile",
                    "Active community member"
                ],
                "common_skills": [],
                "complementary_skills": ["Yoga", "JavaScript"],
                "rating": 4.2,
                "review_count": 5
            }
        }
    )

    user: MatchUser
    match_score: int
    match_reasons: List[str]
    common_skills: List[str]
    complementary_skills: List[str]
    rating: Optional[float] = Field(None, ge=0, le=5)
    review_count: int = 0

    @classmethod
    def from_result(cls, result: MatchResult) -> "MatchSummary":
        return cls(
            user=MatchUser(
                id=result.user.id,
                name=result.user.name,
                bio=result.user.bio,
                location=result.user.location,
                time_credits=credits_to_float(result.user.time_credits),
            ),
            match_score=result.match_score,
            match_reasons=result.match_reasons,
            common_skills=result.common_skills,
            complementary_skills=result.complementary_skills,
            rating=result.rating,
            review_count=result.review_count,
        )


class MatchesResponse(BaseModel):
    """Response for match search."""
    success: bool
    count: int
    matches: List[MatchSummary]


class RecommendationsResponse(BaseModel):
    success: bool
    recommendations: List[str]


class TransactionSummary(BaseModel):
    """A ledger row as shown to its owner."""
    id: int
    type: str
    amount: float
    balance_before: float
    balance_after: float
    status: str
    description: Optional[str]
    payment_method: Optional[str] = None
    transaction_ref: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[str] = None

    @classmethod
    def from_record(cls, record: TransactionRecord) -> "TransactionSummary":
        return cls(
            id=record.id,
            type=record.type.value,
            amount=credits_to_float(record.amount),
            balance_before=credits_to_float(record.balance_before),
            balance_after=credits_to_float(record.balance_after),
            status=record.status.value,
            description=record.description,
            payment_method=record.payment_method,
            transaction_ref=record.transaction_ref,
            metadata=record.metadata,
            created_at=safe_datetime_iso(record.created_at),
        )


class BalanceResponse(BaseModel):
    success: bool
    user_id: int
    balance: float


class TransactionsResponse(BaseModel):
    success: bool
    count: int
    transactions: List[TransactionSummary]


class TopUpResponse(BaseModel):
    success: bool
    transaction: TransactionSummary


class SpendResponse(BaseModel):
    success: bool
    transactions: List[TransactionSummary]
