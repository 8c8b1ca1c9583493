import enum

from sqlalchemy import (
    Column, Integer, Text, TIMESTAMP, ForeignKey, Enum, UniqueConstraint, CheckConstraint, Index, func
)
from sqlalchemy.orm import relationship

from .base import Base


class SkillType(str, enum.Enum):
    OFFER = 'offer'
    SEEK = 'seek'


class ProficiencyLevel(str, enum.Enum):
    BEGINNER = 'beginner'
    INTERMEDIATE = 'intermediate'
    ADVANCED = 'advanced'
    EXPERT = 'expert'


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class SkillCategory(Base):
    __tablename__ = 'skill_categories'

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False, unique=True)
    description = Column(Text)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())

    skills = relationship("Skill", back_populates="category")


class Skill(Base):
    __tablename__ = 'skills'

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False, unique=True)
    description = Column(Text)
    category_id = Column(Integer, ForeignKey('skill_categories.id', ondelete='SET NULL'), nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())

    category = relationship("SkillCategory", back_populates="skills")
    user_skills = relationship("UserSkill", back_populates="skill", cascade="all, delete-orphan")


class UserSkill(Base):
    """
    A user's listing of a skill, either offered (can teach) or sought
    (wants to learn).

    One listing per (user, skill, type): a duplicate insert violates
    uq_user_skill_type instead of being merged.
    """
    __tablename__ = 'user_skills'

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    skill_id = Column(Integer, ForeignKey('skills.id', ondelete='CASCADE'), nullable=False)

    type = Column(
        Enum(SkillType, name='skill_type', values_callable=_enum_values),
        nullable=False
    )
    # Only meaningful for offers
    proficiency_level = Column(
        Enum(ProficiencyLevel, name='proficiency_level', values_callable=_enum_values),
        nullable=True
    )
    years_experience = Column(Integer, nullable=True)
    description = Column(Text)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())

    user = relationship("User", back_populates="user_skills")
    skill = relationship("Skill", back_populates="user_skills")

    __table_args__ = (
        UniqueConstraint('user_id', 'skill_id', 'type', name='uq_user_skill_type'),
        CheckConstraint(
            'years_experience IS NULL OR (years_experience >= 0 AND years_experience <= 50)',
            name='ck_user_skills_years_experience'
        ),
        Index('idx_user_skills_user', 'user_id'),
        Index('idx_user_skills_skill_type', 'skill_id', 'type'),
    )
