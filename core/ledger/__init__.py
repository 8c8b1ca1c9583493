"""Ledger Module - time-credit balances, top-ups and peer transfers."""
from core.ledger.models import CardDetails, GatewayResult, TransactionRecord
from core.ledger.gateway import SimulatedPaymentGateway
from core.ledger.service import TimeBankingService

__all__ = [
    'TimeBankingService', 'SimulatedPaymentGateway',
    'CardDetails', 'GatewayResult', 'TransactionRecord'
]
