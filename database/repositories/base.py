from typing import Optional

from sqlalchemy import text
from sqlalchemy.orm import Session


class BaseRepository:
    """Holds the session a unit of work hands to each repository."""

    def __init__(self, db: Session):
        self.db = db

    def flush(self) -> None:
        self.db.flush()

    def set_statement_timeout(self, seconds: Optional[float]) -> None:
        """
        Bound every statement for the rest of the current transaction.

        PostgreSQL cancels a statement that runs longer and raises
        OperationalError. Other backends have no per-transaction setting;
        there this is a no-op.
        """
        if seconds is None or self.db.get_bind().dialect.name != 'postgresql':
            return
        milliseconds = max(int(seconds * 1000), 1)
        self.db.execute(text(f"SET LOCAL statement_timeout = {milliseconds}"))
