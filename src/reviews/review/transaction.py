"""Retry policy around review commands.

Each review command is handled by Protean inside its own ``UnitOfWork``: the
review change, the product's rating figures and the reviewer's stats commit
together or not at all. When that commit loses an optimistic-concurrency race
(or a concurrent insert collides on a primary key) the whole command is
dispatched again after a short, jittered exponential backoff, so the next
attempt re-reads what the winner committed.
"""

import random
import time
from collections.abc import Callable
from typing import TypeVar

import structlog
from protean.exceptions import ExpectedVersionError
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError

from reviews.errors import StoreUnavailable, TransactionConflict

logger = structlog.get_logger(__name__)

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BASE_DELAY = 0.05

# Lost races: somebody else committed first
_CONFLICT_ERRORS = (ExpectedVersionError, IntegrityError)

# Failures that mean the store itself is out of reach
_STORE_ERRORS = (ConnectionError, TimeoutError, OperationalError, InterfaceError)


class TransactionCoordinator:
    def __init__(
        self,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        base_delay: float = DEFAULT_BASE_DELAY,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.sleep = sleep

    def backoff(self, attempt: int) -> float:
        """Delay before retry number ``attempt``: doubles each time, jittered down to half."""
        ceiling = self.base_delay * 2 ** (attempt - 1)
        return random.uniform(ceiling / 2, ceiling)

    def run(self, dispatch: Callable[[], T], **context) -> T:
        """Call ``dispatch`` until it commits.

        ``dispatch`` must build and process a fresh command on every call.
        Errors other than lost races propagate unchanged; the unit of work
        that raised them has already rolled back.
        """
        last_conflict = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                return dispatch()
            except _CONFLICT_ERRORS as exc:
                last_conflict = exc
                logger.warning(
                    "Review command lost a concurrent update",
                    attempt=attempt,
                    max_attempts=self.max_attempts,
                    error=type(exc).__name__,
                    **context,
                )
            except _STORE_ERRORS as exc:
                logger.error("Review store unavailable", error=str(exc), **context)
                raise StoreUnavailable("Review store is unavailable", **context) from exc

            if attempt < self.max_attempts:
                self.sleep(self.backoff(attempt))

        raise TransactionConflict(
            f"Gave up after {self.max_attempts} conflicting attempts",
            **context,
        ) from last_conflict
