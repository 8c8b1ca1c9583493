import enum

from sqlalchemy import (
    Column, Integer, Text, String, Numeric, TIMESTAMP, ForeignKey, Enum, CheckConstraint, Index, func
)
from sqlalchemy.orm import relationship

from .base import Base, JSONType


class TransactionType(str, enum.Enum):
    TOPUP = 'topup'
    SPEND = 'spend'
    EARN = 'earn'
    REFUND = 'refund'

    @property
    def sign(self) -> int:
        """Direction this kind moves the owner's balance."""
        return -1 if self is TransactionType.SPEND else 1


class TransactionStatus(str, enum.Enum):
    PENDING = 'pending'
    COMPLETED = 'completed'
    FAILED = 'failed'
    CANCELLED = 'cancelled'


TERMINAL_STATUSES = frozenset({
    TransactionStatus.COMPLETED,
    TransactionStatus.FAILED,
    TransactionStatus.CANCELLED,
})


class TimeTransaction(Base):
    """
    Append-only ledger row recording one balance change for one user.

    balance_after == balance_before + sign(type) * amount. A peer transfer
    is always a spend row plus an earn row written in the same unit of work.
    """
    __tablename__ = 'time_transactions'

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)

    type = Column(
        Enum(TransactionType, name='transaction_type', values_callable=lambda e: [m.value for m in e]),
        nullable=False
    )
    amount = Column(Numeric(10, 2), nullable=False)
    balance_before = Column(Numeric(10, 2), nullable=False)
    balance_after = Column(Numeric(10, 2), nullable=False)
    status = Column(
        Enum(TransactionStatus, name='transaction_status', values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=TransactionStatus.PENDING
    )

    description = Column(Text)
    payment_method = Column(String(100))
    transaction_ref = Column(String(50))
    # "metadata" is reserved on declarative classes
    metadata_ = Column('metadata', JSONType, nullable=True)

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="transactions")

    __table_args__ = (
        CheckConstraint('amount > 0', name='ck_time_transactions_amount_positive'),
        Index('idx_time_transactions_user_created', 'user_id', 'created_at'),
        Index('idx_time_transactions_status', 'status'),
    )
