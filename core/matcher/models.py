#!/usr/bin/env python3
"""
Matching Models - typed records exchanged with the profile and review stores.

Repositories convert ORM rows into these before they reach the scorer, so
scoring never depends on query column names or a live session.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from database.models import SkillType


@dataclass(frozen=True)
class SkillListing:
    """One offered or sought skill on a user's profile."""
    skill_name: str
    type: SkillType
    proficiency_level: Optional[str] = None
    years_experience: Optional[int] = None
    description: Optional[str] = None
    category: Optional[str] = None
    skill_id: Optional[int] = None

    @property
    def key(self) -> str:
        return self.skill_name.lower()

    @property
    def is_offer(self) -> bool:
        return self.type == SkillType.OFFER


@dataclass
class UserProfile:
    """A user together with their skill listings."""
    id: int
    name: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    time_credits: Decimal = Decimal('0')
    created_at: Optional[datetime] = None
    skills: List[SkillListing] = field(default_factory=list)


@dataclass(frozen=True)
class RatingAggregate:
    """Average and count of a user's visible reviews."""
    average: float = 0.0
    count: int = 0

    @property
    def rating(self) -> Optional[float]:
        """The average, or None when the user has no visible reviews."""
        return self.average if self.count > 0 else None


@dataclass
class MatchResult:
    """Scored compatibility of one candidate with the subject user."""
    user: UserProfile
    match_score: int = 0
    match_reasons: List[str] = field(default_factory=list)
    common_skills: List[str] = field(default_factory=list)
    complementary_skills: List[str] = field(default_factory=list)
    rating: Optional[float] = None
    review_count: int = 0
