#!/usr/bin/env python3
"""
Match Scorer - compatibility score between a subject user and a candidate.

Additive point contributions from:
- Complementary skills (one side seeks what the other offers)
- Common interests (both offer or both seek the same skill)
- Skill-level compatibility (teach/learn pairing and proficiency gap)
- Candidate rating
- Profile completeness
- Activity (credit balance)

Pure functions with no I/O. Missing data contributes nothing; nothing here
raises for absent bios, ratings or skills. Skill names are compared
case-insensitively but reported with the casing stored on the listing.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Optional, Tuple
import logging

from core.config_loader import MatchingConfig
from core.matcher.models import SkillListing, UserProfile, RatingAggregate, MatchResult

logger = logging.getLogger(__name__)

LEVEL_ORDINALS = {
    'beginner': 1,
    'intermediate': 2,
    'advanced': 3,
    'expert': 4,
}
DEFAULT_LEVEL = LEVEL_ORDINALS['intermediate']

DEFAULT_CONFIG = MatchingConfig()


def _names(skills: Iterable[SkillListing], offers: bool) -> Dict[str, str]:
    """Lower-cased name -> display name, in listing order."""
    names: Dict[str, str] = {}
    for listing in skills:
        if listing.is_offer == offers and listing.key not in names:
            names[listing.key] = listing.skill_name
    return names


def _intersect(ordered: Dict[str, str], other: Dict[str, str], display: Dict[str, str]) -> List[str]:
    """Display names of keys in both maps, following the order of `ordered`."""
    return [display[key] for key in ordered if key in other]


def _dedupe(names: Iterable[str]) -> List[str]:
    seen = set()
    result = []
    for name in names:
        if name.lower() not in seen:
            seen.add(name.lower())
            result.append(name)
    return result


def level_ordinal(proficiency_level: Optional[str]) -> int:
    if not proficiency_level:
        return DEFAULT_LEVEL
    return LEVEL_ORDINALS.get(str(proficiency_level).lower(), DEFAULT_LEVEL)


def calculate_complementary_score(
    subject: UserProfile,
    candidate: UserProfile,
    config: MatchingConfig
) -> Tuple[float, List[str], List[str]]:
    """
    Score skills one party seeks and the other offers.

    Directional: "wants from candidate" pairs the subject's seeks with the
    candidate's offers, and vice versa.

    Returns: (points, reasons, complementary skill names)
    """
    subject_offers = _names(subject.skills, offers=True)
    subject_seeks = _names(subject.skills, offers=False)
    candidate_offers = _names(candidate.skills, offers=True)
    candidate_seeks = _names(candidate.skills, offers=False)

    wants_from_candidate = _intersect(subject_seeks, candidate_offers, candidate_offers)
    wants_from_subject = _intersect(candidate_seeks, subject_offers, subject_offers)

    points = (len(wants_from_candidate) + len(wants_from_subject)) * config.complementary_points
    reasons = []
    if wants_from_candidate:
        reasons.append(f"They can teach you: {', '.join(wants_from_candidate)}")
    if wants_from_subject:
        reasons.append(f"You can teach them: {', '.join(wants_from_subject)}")

    return points, reasons, wants_from_candidate + wants_from_subject


def calculate_common_score(
    subject: UserProfile,
    candidate: UserProfile,
    config: MatchingConfig
) -> Tuple[float, List[str], List[str]]:
    """
    Score skills both parties offer or both seek.

    Returns: (points, reasons, common skill names)
    """
    subject_offers = _names(subject.skills, offers=True)
    subject_seeks = _names(subject.skills, offers=False)
    candidate_offers = _names(candidate.skills, offers=True)
    candidate_seeks = _names(candidate.skills, offers=False)

    common_offered = _intersect(subject_offers, candidate_offers, subject_offers)
    common_sought = _intersect(subject_seeks, candidate_seeks, subject_seeks)

    points = (len(common_offered) + len(common_sought)) * config.common_points
    reasons = []
    if common_offered:
        reasons.append(f"You both teach: {', '.join(common_offered)}")
    if common_sought:
        reasons.append(f"You both want to learn: {', '.join(common_sought)}")

    return points, reasons, common_offered + common_sought


def calculate_skill_level_score(
    subject: UserProfile,
    candidate: UserProfile,
    config: MatchingConfig
) -> float:
    """
    Score each subject listing against the first candidate listing with the
    same skill name.

    Differing directions (teach vs learn) earn direction_mismatch_points.
    A proficiency gap of exactly 1 or 2 tiers earns level_gap_points,
    whichever side is stronger; missing tiers count as intermediate.
    """
    first_listing: Dict[str, SkillListing] = {}
    for listing in candidate.skills:
        first_listing.setdefault(listing.key, listing)

    points = 0.0
    for listing in subject.skills:
        match = first_listing.get(listing.key)
        if match is None:
            continue

        if listing.type != match.type:
            points += config.direction_mismatch_points

        gap = abs(level_ordinal(listing.proficiency_level) - level_ordinal(match.proficiency_level))
        if gap in (1, 2):
            points += config.level_gap_points

    return points


def calculate_rating_score(
    rating: Optional[float],
    config: MatchingConfig
) -> Tuple[float, List[str]]:
    """Scale a 0-5 rating onto rating_max_points; no rating scores zero."""
    if not rating or rating <= 0:
        return 0.0, []

    points = (rating / 5.0) * config.rating_max_points
    reasons = []
    if rating >= config.highly_rated_threshold:
        reasons.append("Highly rated by community")
    elif rating >= config.well_rated_threshold:
        reasons.append("Well rated by community")
    return points, reasons


def calculate_completeness_score(
    candidate: UserProfile,
    config: MatchingConfig
) -> Tuple[float, List[str]]:
    points = 0.0
    if candidate.name:
        points += 2
    if candidate.bio:
        points += 3
    if candidate.location:
        points += 2
    if candidate.skills:
        points += 3

    reasons = ["Complete profile"] if points >= config.complete_profile_threshold else []
    return points, reasons


def calculate_activity_score(
    balance: Optional[Decimal],
    config: MatchingConfig
) -> Tuple[float, List[str]]:
    """Credit balance as an activity signal, capped at activity_cap points."""
    if balance is None or balance <= 0:
        return 0.0, []

    balance_value = float(balance)
    points = min(balance_value, config.activity_cap)
    reasons = ["Active community member"] if balance_value >= config.active_member_threshold else []
    return points, reasons


def round_score(score: float) -> int:
    return int(Decimal(str(score)).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def score_match(
    subject: UserProfile,
    candidate: UserProfile,
    rating: Optional[RatingAggregate] = None,
    config: Optional[MatchingConfig] = None
) -> MatchResult:
    """
    Compute the match of `candidate` for `subject`.

    Not symmetric: reasons are phrased from the subject's point of view and
    the rating, completeness and activity terms describe the candidate only.

    Args:
        subject: The user matches are being found for
        candidate: The user being scored
        rating: Candidate's visible-review aggregate (None = no reviews)
        config: Point values; defaults to MatchingConfig()

    Returns:
        MatchResult with integer score, reasons and skill sets
    """
    config = config or DEFAULT_CONFIG
    rating = rating or RatingAggregate()

    score = 0.0
    reasons: List[str] = []

    complementary_points, complementary_reasons, complementary = calculate_complementary_score(
        subject, candidate, config
    )
    score += complementary_points
    reasons.extend(complementary_reasons)

    common_points, common_reasons, common = calculate_common_score(subject, candidate, config)
    score += common_points
    reasons.extend(common_reasons)

    score += calculate_skill_level_score(subject, candidate, config)

    rating_points, rating_reasons = calculate_rating_score(rating.rating, config)
    score += rating_points
    reasons.extend(rating_reasons)

    completeness_points, completeness_reasons = calculate_completeness_score(candidate, config)
    score += completeness_points
    reasons.extend(completeness_reasons)

    activity_points, activity_reasons = calculate_activity_score(candidate.time_credits, config)
    score += activity_points
    reasons.extend(activity_reasons)

    logger.debug(
        f"User {subject.id} -> {candidate.id}: complementary={complementary_points:.1f}, "
        f"common={common_points:.1f}, rating={rating_points:.1f}, total={score:.1f}"
    )

    return MatchResult(
        user=candidate,
        match_score=round_score(score),
        match_reasons=reasons,
        common_skills=_dedupe(common),
        complementary_skills=_dedupe(complementary),
        rating=rating.rating,
        review_count=rating.count,
    )
