import logging
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy import select, func
from sqlalchemy.orm import joinedload

from database.models import User, UserSkill, Skill, SkillType
from database.repositories.base import BaseRepository
from core.matcher.models import SkillListing, UserProfile

logger = logging.getLogger(__name__)


def _escape_like(text: str) -> str:
    return text.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')


def _to_listing(user_skill: UserSkill) -> SkillListing:
    skill = user_skill.skill
    return SkillListing(
        skill_name=skill.name,
        type=SkillType(user_skill.type),
        proficiency_level=(
            user_skill.proficiency_level.value
            if user_skill.proficiency_level is not None else None
        ),
        years_experience=user_skill.years_experience,
        description=user_skill.description,
        category=skill.category.name if skill.category is not None else None,
        skill_id=skill.id,
    )


def _to_profile(user: User, skills: List[SkillListing]) -> UserProfile:
    return UserProfile(
        id=user.id,
        name=user.name,
        bio=user.bio,
        location=user.location,
        time_credits=Decimal(user.time_credits if user.time_credits is not None else 0),
        created_at=user.created_at,
        skills=skills,
    )


class ProfileRepository(BaseRepository):
    """Read access to users and their skill listings."""

    def _skills_query(self):
        return (
            select(UserSkill)
            .options(joinedload(UserSkill.skill).joinedload(Skill.category))
            .order_by(UserSkill.id)
        )

    def get_profile(self, user_id: int) -> Optional[UserProfile]:
        user = self.db.get(User, user_id)
        if user is None:
            return None
        return _to_profile(user, self.list_skills(user_id))

    def get_profiles(self, user_ids: Iterable[int]) -> List[UserProfile]:
        """Load several profiles with their listings in two queries, ordered by id."""
        ids = list(dict.fromkeys(user_ids))
        if not ids:
            return []

        users = self.db.execute(
            select(User).where(User.id.in_(ids)).order_by(User.id)
        ).scalars().all()
        skills = self.list_skills_for_users(ids)
        return [_to_profile(user, skills.get(user.id, [])) for user in users]

    def list_skills(self, user_id: int) -> List[SkillListing]:
        stmt = self._skills_query().where(UserSkill.user_id == user_id)
        return [_to_listing(us) for us in self.db.execute(stmt).scalars().all()]

    def list_skills_for_users(self, user_ids: Iterable[int]) -> Dict[int, List[SkillListing]]:
        ids = list(user_ids)
        result: Dict[int, List[SkillListing]] = {uid: [] for uid in ids}
        if not ids:
            return result

        stmt = self._skills_query().where(UserSkill.user_id.in_(ids))
        for user_skill in self.db.execute(stmt).scalars().all():
            result[user_skill.user_id].append(_to_listing(user_skill))
        return result

    def list_user_ids_except(self, user_id: int) -> List[int]:
        stmt = select(User.id).where(User.id != user_id).order_by(User.id)
        return list(self.db.execute(stmt).scalars().all())

    def find_users_by_skill_substring(
        self,
        text: str,
        skill_type: Optional[SkillType] = None
    ) -> List[int]:
        """Ids of users with a listing whose skill name contains text (case-insensitive)."""
        stmt = (
            select(UserSkill.user_id)
            .join(Skill, Skill.id == UserSkill.skill_id)
            .where(Skill.name.ilike(f"%{_escape_like(text)}%", escape='\\'))
        )
        if skill_type is not None:
            stmt = stmt.where(UserSkill.type == SkillType(skill_type))

        stmt = stmt.distinct().order_by(UserSkill.user_id)
        return list(self.db.execute(stmt).scalars().all())

    def most_offered_skills(self, top_n: int) -> List[Tuple[str, int]]:
        """(skill name, offer-listing count) pairs, most offered first."""
        skill_count = func.count(UserSkill.id).label('skill_count')
        stmt = (
            select(Skill.name, skill_count)
            .join(UserSkill, UserSkill.skill_id == Skill.id)
            .where(UserSkill.type == SkillType.OFFER)
            .group_by(Skill.name)
            .order_by(skill_count.desc(), Skill.name)
            .limit(top_n)
        )
        return [(name, int(count)) for name, count in self.db.execute(stmt).all()]
