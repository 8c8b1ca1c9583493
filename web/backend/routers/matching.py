#!/usr/bin/env python3
"""
Matching endpoints - partner search and skill recommendations.
"""

import logging
from typing import Optional
from fastapi import APIRouter, Depends, Path, Query

from core.matcher import MatchingService
from database.models import SkillType
from ..dependencies import get_matching_service
from ..models.responses import MatchesResponse, MatchSummary, RecommendationsResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/matching", tags=["matching"])


@router.get("/find/{user_id}", response_model=MatchesResponse)
def find_matches(
    user_id: int = Path(..., ge=1),
    skill: Optional[str] = Query(default=None, description="Only users listing a skill containing this text"),
    skill_type: Optional[SkillType] = Query(default=None, alias="type", description="With skill: offer or seek"),
    min_rating: Optional[float] = Query(default=None, ge=0, le=5, description="Drop candidates rated below this"),
    limit: int = Query(default=10, ge=1, le=100, description="Maximum results to return"),
    service: MatchingService = Depends(get_matching_service)
):
    """
    Find skill-exchange partners for a user.

    Returns candidates sorted by match score (highest first). Candidates
    without any visible reviews are never removed by min_rating.
    """
    results = service.find_matches(
        user_id,
        skill_name=skill,
        skill_type=skill_type,
        min_rating=min_rating,
        limit=limit
    )
    matches = [MatchSummary.from_result(r) for r in results]

    return MatchesResponse(success=True, count=len(matches), matches=matches)


@router.get("/recommendations/{user_id}", response_model=RecommendationsResponse)
def get_recommendations(
    user_id: int = Path(..., ge=1),
    service: MatchingService = Depends(get_matching_service)
):
    """
    Popular offered skills the user does not list yet.
    """
    return RecommendationsResponse(
        success=True,
        recommendations=service.recommend_skills(user_id)
    )
