"""
Tests for MatchingService ranking, filtering and recommendations.

Repositories are mocked; the scorer runs for real.
"""
import pytest
from decimal import Decimal
from unittest.mock import Mock

from sqlalchemy.exc import OperationalError

from core.config_loader import MatchingConfig
from core.exceptions import UserNotFoundException, StoreUnavailableException
from core.matcher import MatchingService
from core.matcher.models import SkillListing, UserProfile, RatingAggregate
from database.models import SkillType
from database.repositories import ProfileRepository, ReviewRepository


def listing(name, skill_type):
    return SkillListing(skill_name=name, type=skill_type)


class TestFindMatches:
    """Test suite for MatchingService.find_matches."""

    @pytest.fixture
    def subject(self):
        return UserProfile(
            id=1,
            name="Ana",
            skills=[listing("JavaScript", SkillType.OFFER), listing("Yoga", SkillType.SEEK)]
        )

    @pytest.fixture
    def candidates(self):
        return [
            # Offers what the subject seeks
            UserProfile(id=2, name="Bea", skills=[listing("Yoga", SkillType.OFFER)]),
            # Nothing in common
            UserProfile(id=3, name="Cy", skills=[listing("Knitting", SkillType.OFFER)]),
            # Same profile as Bea, higher id
            UserProfile(id=4, name="Dan", skills=[listing("Yoga", SkillType.OFFER)]),
        ]

    @pytest.fixture
    def profiles(self, subject, candidates):
        mock = Mock(spec=ProfileRepository)
        mock.get_profile.side_effect = lambda uid: subject if uid == subject.id else None
        mock.list_user_ids_except.return_value = [c.id for c in candidates]
        mock.find_users_by_skill_substring.return_value = [1, 2]
        mock.get_profiles.side_effect = lambda ids: [c for c in candidates if c.id in ids]
        return mock

    @pytest.fixture
    def reviews(self):
        mock = Mock(spec=ReviewRepository)
        mock.rating_aggregates.return_value = {}
        return mock

    @pytest.fixture
    def service(self, profiles, reviews):
        return MatchingService(profiles, reviews, MatchingConfig())

    def test_ranked_by_score_then_id(self, service):
        results = service.find_matches(1)

        assert [r.user.id for r in results] == [2, 4, 3]
        assert results[0].match_score == results[1].match_score
        assert results[0].match_score > results[2].match_score

    def test_idempotent(self, service):
        first = service.find_matches(1)
        second = service.find_matches(1)

        assert [(r.user.id, r.match_score, r.match_reasons) for r in first] == \
               [(r.user.id, r.match_score, r.match_reasons) for r in second]

    def test_limit(self, service):
        results = service.find_matches(1, limit=1)

        assert [r.user.id for r in results] == [2]

    @pytest.mark.parametrize("limit", [0, -1])
    def test_limit_below_one_rejected(self, service, profiles, limit):
        with pytest.raises(ValueError):
            service.find_matches(1, limit=limit)

        profiles.get_profile.assert_not_called()

    def test_default_limit_from_config(self, profiles, reviews):
        service = MatchingService(profiles, reviews, MatchingConfig(default_limit=2))

        assert len(service.find_matches(1)) == 2

    def test_min_rating_keeps_unrated(self, service, reviews):
        reviews.rating_aggregates.return_value = {
            2: RatingAggregate(average=4.0, count=3),
            3: RatingAggregate(average=4.8, count=10),
        }

        results = service.find_matches(1, min_rating=4.5)

        # 2 is rated below the threshold, 4 has no reviews at all
        assert sorted(r.user.id for r in results) == [3, 4]
        unrated = next(r for r in results if r.user.id == 4)
        assert unrated.rating is None
        assert unrated.review_count == 0

    def test_ratings_fetched_in_one_batch(self, service, profiles, reviews):
        service.find_matches(1)

        profiles.get_profiles.assert_called_once_with([2, 3, 4])
        reviews.rating_aggregates.assert_called_once_with([2, 3, 4])

    def test_skill_filter_excludes_subject(self, service, profiles):
        results = service.find_matches(1, skill_name="yog", skill_type=SkillType.OFFER)

        profiles.find_users_by_skill_substring.assert_called_once_with("yog", SkillType.OFFER)
        profiles.list_user_ids_except.assert_not_called()
        assert [r.user.id for r in results] == [2]

    def test_unknown_subject(self, service):
        with pytest.raises(UserNotFoundException):
            service.find_matches(99)

    def test_store_failure(self, service, profiles):
        profiles.get_profile.side_effect = OperationalError("SELECT 1", {}, Exception("connection refused"))

        with pytest.raises(StoreUnavailableException):
            service.find_matches(1)

    def test_statement_timeout_applied(self, service, profiles):
        service.find_matches(1)
        profiles.set_statement_timeout.assert_called_once_with(5.0)

        profiles.set_statement_timeout.reset_mock()
        service.find_matches(1, timeout=0.25)
        profiles.set_statement_timeout.assert_called_once_with(0.25)

    def test_statement_timeout_exceeded(self, service, profiles):
        profiles.set_statement_timeout.side_effect = OperationalError(
            "SELECT 1", {}, Exception("canceling statement due to statement timeout")
        )

        with pytest.raises(StoreUnavailableException):
            service.find_matches(1, timeout=0.01)
        profiles.get_profile.assert_not_called()

    def test_balance_changes_ranking(self, service, candidates):
        candidates[2].time_credits = Decimal("25")

        results = service.find_matches(1)

        assert [r.user.id for r in results] == [4, 2, 3]


class TestRecommendSkills:
    """Test suite for MatchingService.recommend_skills."""

    @pytest.fixture
    def profiles(self):
        mock = Mock(spec=ProfileRepository)
        mock.get_profile.return_value = UserProfile(
            id=1,
            skills=[listing("python", SkillType.OFFER), listing("Yoga", SkillType.SEEK)]
        )
        mock.most_offered_skills.return_value = [
            ("Python", 12), ("Cooking", 9), ("Yoga", 7), ("Guitar", 5),
            ("Spanish", 4), ("Chess", 3), ("Drawing", 2), ("Knitting", 1),
        ]
        return mock

    @pytest.fixture
    def service(self, profiles):
        return MatchingService(profiles, Mock(spec=ReviewRepository))

    def test_drops_known_skills(self, service, profiles):
        recommendations = service.recommend_skills(1)

        assert recommendations == ["Cooking", "Guitar", "Spanish", "Chess", "Drawing"]
        profiles.most_offered_skills.assert_called_once_with(20)

    def test_unknown_user(self, service, profiles):
        profiles.get_profile.return_value = None

        with pytest.raises(UserNotFoundException):
            service.recommend_skills(99)

    def test_store_failure_is_not_an_empty_list(self, service, profiles):
        profiles.most_offered_skills.side_effect = OperationalError("SELECT 1", {}, Exception("timeout"))

        with pytest.raises(StoreUnavailableException):
            service.recommend_skills(1)

    def test_statement_timeout_applied(self, service, profiles):
        service.recommend_skills(1, timeout=2)

        profiles.set_statement_timeout.assert_called_once_with(2)
