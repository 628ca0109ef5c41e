"""Transaction scope for stock engine operations.

Every mutating engine operation runs through run_in_transaction():

1. Bound lock waits (SET LOCAL lock_timeout on PostgreSQL; the SQLite
   driver timeout is set on the engine).
2. Run the operation. Rows it mutates are locked with lock_rows(), which
   always acquires locks in ascending primary-key order so two multi-item
   reservations can never deadlock on each other.
3. Commit once. Any exception rolls the whole unit back.
4. Lock timeouts, serialization failures and optimistic version
   mismatches are retried with linear backoff, then surfaced as
   ConcurrencyConflictError.
"""

import logging
import time
from typing import Callable, Iterable, List, Optional, Type, TypeVar

from sqlalchemy import select, text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from kitchen_ledger.core.config import get_settings
from kitchen_ledger.core.exceptions import ConcurrencyConflictError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# PostgreSQL SQLSTATEs: serialization_failure, deadlock_detected, lock_not_available
RETRYABLE_SQLSTATES = frozenset({"40001", "40P01", "55P03"})
# Drivers without a SQLSTATE (SQLite) only report contention in the message
RETRYABLE_MESSAGES = ("database is locked", "database table is locked", "deadlock")


def is_retryable(exc: BaseException) -> bool:
    """True for contention failures that a fresh attempt can succeed past.

    Version mismatches always qualify. An OperationalError only does when
    the driver reports a lock or serialization failure. Anything else, such as
    a missing table, is permanent and propagates unchanged.
    """
    if isinstance(exc, StaleDataError):
        return True
    if not isinstance(exc, OperationalError):
        return False
    orig = exc.orig
    sqlstate = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if sqlstate in RETRYABLE_SQLSTATES:
        return True
    message = str(orig).lower()
    return any(fragment in message for fragment in RETRYABLE_MESSAGES)


def _apply_lock_timeout(db: Session, lock_timeout_ms: int) -> None:
    if db.get_bind().dialect.name == "postgresql":
        # SET does not accept bind parameters; the value is an int from settings
        db.execute(text(f"SET LOCAL lock_timeout = {int(lock_timeout_ms)}"))


def run_in_transaction(
    db: Session,
    operation: Callable[[], T],
    name: str,
    max_attempts: Optional[int] = None,
    backoff_ms: Optional[int] = None,
) -> T:
    """Run ``operation`` as one atomic unit of work, retrying on contention.

    ``operation`` must load everything it touches from the session by id:
    on retry the session has been rolled back and earlier ORM state is expired.
    """
    settings = get_settings()
    attempts = max_attempts or settings.transaction_max_attempts
    backoff = settings.transaction_retry_backoff_ms if backoff_ms is None else backoff_ms

    for attempt in range(1, attempts + 1):
        try:
            _apply_lock_timeout(db, settings.lock_timeout_ms)
            result = operation()
            db.commit()
            return result
        except (OperationalError, StaleDataError) as exc:
            db.rollback()
            if not is_retryable(exc):
                logger.error(f"{name}: failed with {exc.__class__.__name__}: {exc}")
                raise
            if attempt >= attempts:
                logger.error(
                    f"{name}: giving up after {attempt} attempt(s): {exc.__class__.__name__}"
                )
                raise ConcurrencyConflictError(name, attempt) from exc
            logger.warning(
                f"{name}: concurrent modification on attempt {attempt}/{attempts}, retrying"
            )
            if backoff:
                time.sleep(backoff * attempt / 1000)
        except Exception:
            db.rollback()
            raise

    # attempts >= 1 is enforced by settings validation
    raise ConcurrencyConflictError(name, attempts)


def lock_rows(db: Session, model: Type[T], ids: Iterable[int]) -> List[T]:
    """Load rows by id with SELECT ... FOR UPDATE in ascending id order.

    populate_existing refreshes any instance already in the identity map so
    the caller always checks invariants against the locked, current values.
    SQLite ignores FOR UPDATE; there the database-level write lock and the
    mapper version counter provide the same guarantee.
    """
    ordered_ids = sorted(set(ids))
    if not ordered_ids:
        return []
    stmt = (
        select(model)
        .where(model.id.in_(ordered_ids))
        .order_by(model.id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return list(db.execute(stmt).scalars().all())
