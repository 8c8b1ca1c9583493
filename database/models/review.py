import enum

from sqlalchemy import (
    Column, Integer, Text, Boolean, TIMESTAMP, ForeignKey, Enum, UniqueConstraint, CheckConstraint, Index, func
)
from sqlalchemy.orm import relationship

from .base import Base


class ReviewType(str, enum.Enum):
    TEACHER_REVIEW = 'teacher_review'
    STUDENT_REVIEW = 'student_review'


class Review(Base):
    """
    Rating left by one user for another after an exchange.

    Only visible reviews count towards a user's rating aggregate; the
    reviewee may hide a review.
    """
    __tablename__ = 'reviews'

    id = Column(Integer, primary_key=True, autoincrement=True)
    reviewer_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    reviewee_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    exchange_id = Column(Integer, nullable=True)

    type = Column(
        Enum(ReviewType, name='review_type', values_callable=lambda e: [m.value for m in e]),
        nullable=False
    )
    rating = Column(Integer, nullable=False)
    comment = Column(Text)
    skill_name = Column(Text)
    is_visible = Column(Boolean, nullable=False, default=True)

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    reviewer = relationship("User", foreign_keys=[reviewer_id])
    reviewee = relationship("User", foreign_keys=[reviewee_id])

    __table_args__ = (
        CheckConstraint('rating >= 1 AND rating <= 5', name='ck_reviews_rating_range'),
        CheckConstraint('reviewer_id <> reviewee_id', name='ck_reviews_not_self'),
        UniqueConstraint('reviewer_id', 'reviewee_id', 'exchange_id', name='uq_reviews_exchange'),
        Index('idx_reviews_reviewee_visible', 'reviewee_id', 'is_visible'),
    )
