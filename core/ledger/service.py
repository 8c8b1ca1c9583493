#!/usr/bin/env python3
"""
Time Banking Service - the only writer of credit balances.

Operations:
- Top-up: card payment through the simulated gateway, pending -> completed|failed
- Spend: peer transfer written as a spend row plus an earn row
- Balance and transaction history reads

Every balance change runs inside one ledger unit of work: transaction rows
and balance updates commit or roll back together. User rows are locked
(SELECT ... FOR UPDATE) before balances are read, so concurrent operations
on the same user serialise in the database.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import List, Optional
import logging

from core.config_loader import LedgerConfig
from core.exceptions import (
    UserNotFoundException,
    InvalidTransferException,
    InsufficientFundsException,
    PaymentDeclinedException,
)
from core.ledger.gateway import SimulatedPaymentGateway
from core.ledger.models import CardDetails, TransactionRecord
from database.database import Database
from database.models import TransactionType, TransactionStatus
from database.uow import ledger_uow

logger = logging.getLogger(__name__)

CENT = Decimal('0.01')


def _to_amount(value) -> Decimal:
    """Convert to a two-decimal Decimal, rejecting anything that is not a finite amount."""
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise InvalidTransferException(f"Invalid amount: {value!r}")

    if not amount.is_finite():
        raise InvalidTransferException(f"Invalid amount: {value!r}")
    try:
        quantized = amount.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        # More digits than the decimal context can hold at cent precision
        raise InvalidTransferException(f"Amount out of range: {value!r}")
    if amount != quantized:
        raise InvalidTransferException("Amount must have at most 2 decimal places")
    return quantized


class TimeBankingService:
    """
    Credit ledger over the users and time_transactions tables.

    Owns no session: each operation opens its own unit of work on the
    injected Database.
    """

    def __init__(
        self,
        database: Database,
        gateway: Optional[SimulatedPaymentGateway] = None,
        config: Optional[LedgerConfig] = None
    ):
        self.database = database
        self.config = config or LedgerConfig()
        self.gateway = gateway or SimulatedPaymentGateway(
            delay_seconds=self.config.gateway_delay_seconds,
            timeout_seconds=self.config.gateway_timeout_seconds,
            max_amount=self.config.max_topup_amount
        )

    def _store_timeout(self, timeout: Optional[float]) -> Optional[float]:
        return self.config.store_timeout_seconds if timeout is None else timeout

    def top_up_credits(
        self,
        user_id: int,
        amount,
        card: CardDetails,
        timeout: Optional[float] = None
    ) -> TransactionRecord:
        """
        Buy credits with a card.

        A declined payment still commits the transaction row as failed
        (with the decline reason in metadata) before raising, so the
        attempt stays on the user's history. The balance only changes on
        approval.

        Args:
            user_id: User receiving the credits
            amount: Credits to buy, 0 < amount <= max_topup_amount
            card: Card details; only the last four digits are stored
            timeout: Seconds bounding the gateway call and each store
                statement (defaults: gateway_timeout_seconds and
                store_timeout_seconds)

        Returns:
            The completed top-up transaction

        Raises:
            InvalidTransferException: Amount out of range (nothing written)
            UserNotFoundException: Unknown user (nothing written)
            PaymentDeclinedException: Gateway declined or timed out
            StoreUnavailableException: Database failure or a statement
                exceeding timeout (rolled back)
        """
        amount = _to_amount(amount)
        if amount <= 0 or amount > self.config.max_topup_amount:
            raise InvalidTransferException(
                f"Amount must be greater than 0 and at most {self.config.max_topup_amount}"
            )

        declined_reason = None
        with ledger_uow(self.database, self._store_timeout(timeout)) as repo:
            user = repo.get_user_for_update(user_id)
            if user is None:
                raise UserNotFoundException(user_id)

            balance_before = Decimal(user.time_credits)
            balance_after = balance_before + amount

            transaction = repo.append_transaction(
                user_id=user.id,
                type=TransactionType.TOPUP,
                amount=amount,
                balance_before=balance_before,
                balance_after=balance_after,
                status=TransactionStatus.PENDING,
                description=f"Credit top-up via card ending in {card.last4}",
                payment_method=card.masked,
                metadata={
                    'card_last4': card.last4,
                    'cardholder_name': card.cardholder_name,
                }
            )

            result = self.gateway.charge(card, amount, timeout=timeout)

            if not result.success:
                repo.fail_transaction(transaction, result.error)
                declined_reason = result.error
            else:
                repo.set_balance(user, balance_after)
                repo.complete_transaction(transaction, result.transaction_ref)

            repo.flush()
            record = TransactionRecord.from_orm(transaction)

        if declined_reason is not None:
            logger.warning(f"Top-up of {amount} for user {user_id} declined: {declined_reason}")
            raise PaymentDeclinedException(declined_reason, transaction=record)

        logger.info(f"User {user_id} topped up {amount} credits successfully")
        return record

    def spend_credits(
        self,
        from_user_id: int,
        to_user_id: int,
        amount,
        description: str,
        skill_name: Optional[str] = None,
        timeout: Optional[float] = None
    ) -> List[TransactionRecord]:
        """
        Transfer credits from one user to another.

        Writes a completed spend row for the sender and a completed earn row
        for the recipient, each pointing at the other, plus both balance
        updates, in one unit of work. Nothing is written when the sender
        cannot cover the amount. Each statement is bounded by `timeout`
        seconds (default store_timeout_seconds).

        Returns:
            [spend transaction, earn transaction]

        Raises:
            InvalidTransferException: Self-transfer or non-positive amount
            UserNotFoundException: Sender or recipient unknown
            InsufficientFundsException: Sender balance below amount
            StoreUnavailableException: Database failure or a statement
                exceeding timeout (rolled back)
        """
        if from_user_id == to_user_id:
            raise InvalidTransferException("Cannot transfer credits to yourself")

        amount = _to_amount(amount)
        if amount <= 0:
            raise InvalidTransferException("Amount must be positive")

        with ledger_uow(self.database, self._store_timeout(timeout)) as repo:
            users = repo.get_users_for_update([from_user_id, to_user_id])
            sender = users.get(from_user_id)
            recipient = users.get(to_user_id)
            if sender is None:
                raise UserNotFoundException(from_user_id)
            if recipient is None:
                raise UserNotFoundException(to_user_id)

            sender_before = Decimal(sender.time_credits)
            recipient_before = Decimal(recipient.time_credits)
            if sender_before < amount:
                raise InsufficientFundsException(
                    f"Insufficient credits: balance {sender_before}, requested {amount}"
                )

            spend = repo.append_transaction(
                user_id=sender.id,
                type=TransactionType.SPEND,
                amount=amount,
                balance_before=sender_before,
                balance_after=sender_before - amount,
                status=TransactionStatus.COMPLETED,
                description=description,
                metadata={
                    'recipient_id': recipient.id,
                    'recipient_name': recipient.name,
                    'skill_name': skill_name,
                }
            )
            earn = repo.append_transaction(
                user_id=recipient.id,
                type=TransactionType.EARN,
                amount=amount,
                balance_before=recipient_before,
                balance_after=recipient_before + amount,
                status=TransactionStatus.COMPLETED,
                description=description,
                metadata={
                    'sender_id': sender.id,
                    'sender_name': sender.name,
                    'skill_name': skill_name,
                    'paired_transaction_id': spend.id,
                }
            )
            spend.metadata_ = {**spend.metadata_, 'paired_transaction_id': earn.id}

            repo.set_balance(sender, sender_before - amount)
            repo.set_balance(recipient, recipient_before + amount)

            repo.flush()
            records = [TransactionRecord.from_orm(spend), TransactionRecord.from_orm(earn)]

        logger.info(f"Credit transfer: {from_user_id} -> {to_user_id}, amount: {amount}")
        return records

    def get_user_balance(self, user_id: int, timeout: Optional[float] = None) -> Decimal:
        with ledger_uow(self.database, self._store_timeout(timeout)) as repo:
            balance = repo.get_balance(user_id)
        if balance is None:
            raise UserNotFoundException(user_id)
        return balance

    def get_user_transactions(
        self,
        user_id: int,
        limit: Optional[int] = None,
        timeout: Optional[float] = None
    ) -> List[TransactionRecord]:
        """Most recent transactions first, all statuses included."""
        limit = self.config.default_history_limit if limit is None else limit
        with ledger_uow(self.database, self._store_timeout(timeout)) as repo:
            if repo.get_user(user_id) is None:
                raise UserNotFoundException(user_id)
            return [TransactionRecord.from_orm(t) for t in repo.list_transactions(user_id, limit)]
