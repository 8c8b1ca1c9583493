"""Matcher Module - partner scoring and ranking for skill exchange."""
from core.matcher.models import (
    SkillListing, UserProfile, RatingAggregate, MatchResult
)
from core.matcher.scorer import score_match
from core.matcher.service import MatchingService

__all__ = [
    'MatchingService', 'score_match',
    'SkillListing', 'UserProfile', 'RatingAggregate', 'MatchResult'
]
