#!/usr/bin/env python3
"""
Simulated card payment gateway.

Deterministic stand-in for a payment processor so that top-ups are
reproducible in tests and demos. No money moves anywhere.

Decline rules:
- 4000000000000002: insufficient funds
- 4000000000000069: expired card
- CVV 000: invalid CVV
- amount above the limit: exceeds limit
Everything else is approved with a fresh TXN_ reference.
"""

import logging
import secrets
import string
import time
from decimal import Decimal
from typing import Callable, Optional

from core.ledger.models import CardDetails, GatewayResult

logger = logging.getLogger(__name__)

DECLINED_CARDS = {
    '4000000000000002': 'Card declined - insufficient funds',
    '4000000000000069': 'Card expired',
}
INVALID_CVV = '000'

_REF_ALPHABET = string.digits + string.ascii_lowercase


class SimulatedPaymentGateway:
    """Fake card processor with a configurable processing delay."""

    def __init__(
        self,
        delay_seconds: float = 0.0,
        timeout_seconds: float = 10.0,
        max_amount: Decimal = Decimal("1000"),
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.time
    ):
        self.delay_seconds = delay_seconds
        self.timeout_seconds = timeout_seconds
        self.max_amount = Decimal(max_amount)
        self._sleep = sleep
        self._clock = clock

    def _new_reference(self) -> str:
        suffix = ''.join(secrets.choice(_REF_ALPHABET) for _ in range(9))
        return f"TXN_{int(self._clock() * 1000)}_{suffix}"

    def charge(
        self,
        card: CardDetails,
        amount: Decimal,
        timeout: Optional[float] = None
    ) -> GatewayResult:
        """
        Charge a card.

        A processing delay longer than the timeout resolves as a decline,
        after waiting out the timeout.

        Args:
            card: Card to charge
            amount: Amount in credits (1 credit = 1 currency unit)
            timeout: Seconds to wait for the processor (defaults to timeout_seconds)

        Returns:
            GatewayResult with transaction_ref on approval or error on decline
        """
        timeout = self.timeout_seconds if timeout is None else timeout
        if self.delay_seconds > timeout:
            self._sleep(timeout)
            logger.warning(f"Payment gateway timed out after {timeout}s for {card.masked}")
            return GatewayResult(success=False, error='Payment gateway timed out')
        if self.delay_seconds > 0:
            self._sleep(self.delay_seconds)

        number = card.normalized_number
        if number in DECLINED_CARDS:
            return GatewayResult(success=False, error=DECLINED_CARDS[number])
        if card.cvv == INVALID_CVV:
            return GatewayResult(success=False, error='Invalid CVV')
        if Decimal(amount) > self.max_amount:
            return GatewayResult(success=False, error='Transaction amount exceeds limit')

        return GatewayResult(success=True, transaction_ref=self._new_reference())
