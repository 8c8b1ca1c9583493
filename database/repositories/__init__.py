from database.repositories.base import BaseRepository
from database.repositories.profile import ProfileRepository
from database.repositories.review import ReviewRepository
from database.repositories.ledger import LedgerRepository

__all__ = [
    'BaseRepository',
    'ProfileRepository',
    'ReviewRepository',
    'LedgerRepository',
]
