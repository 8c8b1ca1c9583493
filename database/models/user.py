from sqlalchemy import Column, Integer, Text, TIMESTAMP, Numeric, CheckConstraint, Index, func
from sqlalchemy.orm import relationship

from .base import Base

STARTING_CREDITS = 10


class User(Base):
    """
    Marketplace member.

    time_credits is owned by the credit ledger: it is only written inside
    TimeBankingService units of work, together with a TimeTransaction row.
    """
    __tablename__ = 'users'

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(Text, nullable=False, unique=True)
    name = Column(Text)
    bio = Column(Text)
    location = Column(Text)
    avatar_url = Column(Text)

    time_credits = Column(Numeric(10, 2), nullable=False, default=STARTING_CREDITS)

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    user_skills = relationship("UserSkill", back_populates="user", cascade="all, delete-orphan")
    transactions = relationship("TimeTransaction", back_populates="user")

    __table_args__ = (
        CheckConstraint('time_credits >= 0', name='ck_users_time_credits_non_negative'),
        Index('idx_users_email', 'email'),
    )
