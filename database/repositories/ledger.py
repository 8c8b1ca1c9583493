import logging
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import select

from database.models import User, TimeTransaction, TransactionType, TransactionStatus, TERMINAL_STATUSES
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class LedgerRepository(BaseRepository):
    """
    Balances and the append-only transaction log.

    Meant to be used through database.uow.ledger_uow(), which makes every
    write performed with one repository instance commit or roll back
    together.
    """

    def get_user(self, user_id: int) -> Optional[User]:
        return self.db.get(User, user_id)

    def get_user_for_update(self, user_id: int) -> Optional[User]:
        """Load a user row with a row lock held until the unit of work ends."""
        stmt = select(User).where(User.id == user_id).with_for_update()
        return self.db.execute(stmt).scalar_one_or_none()

    def get_users_for_update(self, user_ids: Iterable[int]) -> Dict[int, User]:
        """Lock several user rows, always in ascending id order."""
        ids = sorted(set(user_ids))
        stmt = select(User).where(User.id.in_(ids)).order_by(User.id).with_for_update()
        return {user.id: user for user in self.db.execute(stmt).scalars().all()}

    def get_balance(self, user_id: int) -> Optional[Decimal]:
        stmt = select(User.time_credits).where(User.id == user_id)
        value = self.db.execute(stmt).scalar_one_or_none()
        return Decimal(value) if value is not None else None

    def set_balance(self, user: User, value: Decimal) -> None:
        if value < 0:
            raise ValueError(f"Balance for user {user.id} cannot go negative ({value})")
        user.time_credits = value

    def append_transaction(
        self,
        user_id: int,
        type: TransactionType,
        amount: Decimal,
        balance_before: Decimal,
        balance_after: Decimal,
        status: TransactionStatus = TransactionStatus.PENDING,
        description: Optional[str] = None,
        payment_method: Optional[str] = None,
        transaction_ref: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> TimeTransaction:
        transaction = TimeTransaction(
            user_id=user_id,
            type=type,
            amount=amount,
            balance_before=balance_before,
            balance_after=balance_after,
            status=status,
            description=description,
            payment_method=payment_method,
            transaction_ref=transaction_ref,
            metadata_=metadata or {},
        )
        self.db.add(transaction)
        self.db.flush()  # Generate ID
        return transaction

    def _resolve(self, transaction: TimeTransaction, status: TransactionStatus) -> None:
        current = TransactionStatus(transaction.status)
        if current in TERMINAL_STATUSES:
            raise ValueError(
                f"Transaction {transaction.id} is {current.value}; only pending transactions can move to {status.value}"
            )
        transaction.status = status

    def complete_transaction(
        self,
        transaction: TimeTransaction,
        transaction_ref: Optional[str] = None
    ) -> None:
        self._resolve(transaction, TransactionStatus.COMPLETED)
        if transaction_ref is not None:
            transaction.transaction_ref = transaction_ref
        self.db.flush()

    def fail_transaction(self, transaction: TimeTransaction, error: str) -> None:
        self._resolve(transaction, TransactionStatus.FAILED)
        transaction.metadata_ = {**(transaction.metadata_ or {}), 'error': error}
        self.db.flush()

    def list_transactions(self, user_id: int, limit: int = 50) -> List[TimeTransaction]:
        stmt = (
            select(TimeTransaction)
            .where(TimeTransaction.user_id == user_id)
            .order_by(TimeTransaction.created_at.desc(), TimeTransaction.id.desc())
            .limit(limit)
        )
        return list(self.db.execute(stmt).scalars().all())
