import contextlib
import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from core.exceptions import StoreUnavailableException
from database.database import Database
from database.repositories import LedgerRepository

logger = logging.getLogger(__name__)


@contextlib.contextmanager
def ledger_uow(database: Database, timeout: Optional[float] = None):
    """Per-unit-of-work transaction scope for balance-changing operations.

    Yields a LedgerRepository bound to a fresh Session. Commits on success,
    rolls back on exception, always closes. Database errors (including a
    failed commit, or a statement cancelled by `timeout` seconds on
    PostgreSQL) surface as StoreUnavailableException.

    Usage:
        with ledger_uow(database) as repo:
            user = repo.get_user_for_update(user_id)
            # perform operations...
        # commit happens automatically on successful exit
    """
    session = database.SessionLocal()
    try:
        repo = LedgerRepository(session)
        repo.set_statement_timeout(timeout)
        yield repo
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Database error, rolled back ledger unit of work: {e}", exc_info=True)
        raise StoreUnavailableException(f"Database unavailable: {e.__class__.__name__}") from e
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
