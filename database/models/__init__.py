from .base import Base, JSONType
from .user import User, STARTING_CREDITS
from .skill import SkillCategory, Skill, UserSkill, SkillType, ProficiencyLevel
from .review import Review, ReviewType
from .transaction import TimeTransaction, TransactionType, TransactionStatus, TERMINAL_STATUSES

__all__ = [
    'Base',
    'JSONType',
    'User',
    'STARTING_CREDITS',
    'SkillCategory',
    'Skill',
    'UserSkill',
    'SkillType',
    'ProficiencyLevel',
    'Review',
    'ReviewType',
    'TimeTransaction',
    'TransactionType',
    'TransactionStatus',
    'TERMINAL_STATUSES',
]
