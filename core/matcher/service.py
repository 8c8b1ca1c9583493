#!/usr/bin/env python3
"""
Matching Service - ranks candidate partners for a user.

Builds a candidate pool (everyone else, or holders of a skill name
substring), prefetches listings and rating aggregates for the whole pool,
scores each candidate with the match scorer, then filters, sorts and
truncates.

Reads are not transactional with respect to ledger writes: a score may
reflect a balance or skill set that changes right after it was read.
"""
from typing import List, Optional, TYPE_CHECKING
import logging

from sqlalchemy.exc import SQLAlchemyError

from core.config_loader import MatchingConfig
from core.exceptions import UserNotFoundException, StoreUnavailableException
from core.matcher.models import MatchResult, UserProfile
from core.matcher.scorer import score_match
from database.models import SkillType

if TYPE_CHECKING:
    from database.repositories import ProfileRepository, ReviewRepository

logger = logging.getLogger(__name__)


def _sort_key(result: MatchResult):
    # Highest score first; equal scores by candidate id for a stable order
    return (-result.match_score, result.user.id)


class MatchingService:
    """
    Service for finding skill-exchange partners and recommending skills.

    Repositories are bound to the caller's session; this service never
    writes.
    """

    def __init__(
        self,
        profiles: "ProfileRepository",
        reviews: "ReviewRepository",
        config: Optional[MatchingConfig] = None
    ):
        self.profiles = profiles
        self.reviews = reviews
        self.config = config or MatchingConfig()

    def _store_timeout(self, timeout: Optional[float]) -> Optional[float]:
        return self.config.store_timeout_seconds if timeout is None else timeout

    def _get_subject(self, user_id: int) -> UserProfile:
        subject = self.profiles.get_profile(user_id)
        if subject is None:
            raise UserNotFoundException(user_id)
        return subject

    def _candidate_ids(
        self,
        subject_id: int,
        skill_name: Optional[str],
        skill_type: Optional[SkillType]
    ) -> List[int]:
        if skill_name:
            ids = self.profiles.find_users_by_skill_substring(skill_name, skill_type)
        else:
            ids = self.profiles.list_user_ids_except(subject_id)
        return [uid for uid in ids if uid != subject_id]

    def find_matches(
        self,
        user_id: int,
        skill_name: Optional[str] = None,
        skill_type: Optional[SkillType] = None,
        min_rating: Optional[float] = None,
        limit: Optional[int] = None,
        timeout: Optional[float] = None
    ) -> List[MatchResult]:
        """
        Find and rank partners for a user.

        Args:
            user_id: Subject user
            skill_name: Restrict the pool to users listing a skill containing this text
            skill_type: With skill_name, only consider listings of this direction
            min_rating: Drop candidates whose rating is present and below this
            limit: Maximum results, at least 1 (defaults to config.default_limit)
            timeout: Seconds bounding each store query (defaults to
                config.store_timeout_seconds)

        Returns:
            MatchResults sorted by score (highest first), ties by candidate id

        Raises:
            ValueError: If limit is below 1
            UserNotFoundException: If user_id has no profile
            StoreUnavailableException: If the database fails or a query times out
        """
        limit = self.config.default_limit if limit is None else limit
        if limit < 1:
            raise ValueError(f"limit must be at least 1, got {limit}")

        try:
            self.profiles.set_statement_timeout(self._store_timeout(timeout))
            subject = self._get_subject(user_id)
            candidate_ids = self._candidate_ids(subject.id, skill_name, skill_type)
            candidates = self.profiles.get_profiles(candidate_ids)
            ratings = self.reviews.rating_aggregates([c.id for c in candidates])
        except SQLAlchemyError as e:
            logger.error(f"Failed to load match candidates for user {user_id}: {e}", exc_info=True)
            raise StoreUnavailableException(f"Database unavailable: {e.__class__.__name__}") from e

        results = []
        for candidate in candidates:
            result = score_match(subject, candidate, ratings.get(candidate.id), self.config)

            # No rating is not a low rating
            if min_rating is not None and result.rating is not None and result.rating < min_rating:
                continue

            results.append(result)

        results.sort(key=_sort_key)

        logger.info(
            f"Scored {len(candidates)} candidates for user {user_id}, "
            f"returning top {min(len(results), limit)}"
        )
        return results[:limit]

    def recommend_skills(self, user_id: int, timeout: Optional[float] = None) -> List[str]:
        """
        Suggest popular offered skills the user does not list yet.

        Takes the recommendation_pool most offered skills platform-wide,
        removes any the user already lists in either direction, and returns
        the first recommendation_limit names.

        Raises:
            UserNotFoundException: If user_id has no profile
            StoreUnavailableException: If the database fails or a query times out
        """
        try:
            self.profiles.set_statement_timeout(self._store_timeout(timeout))
            subject = self._get_subject(user_id)
            popular = self.profiles.most_offered_skills(self.config.recommendation_pool)
        except SQLAlchemyError as e:
            logger.error(f"Failed to get skill recommendations for user {user_id}: {e}", exc_info=True)
            raise StoreUnavailableException(f"Database unavailable: {e.__class__.__name__}") from e

        known = {listing.key for listing in subject.skills}
        recommendations = [name for name, _count in popular if name.lower() not in known]
        return recommendations[:self.config.recommendation_limit]
