"""Bounded retry and error translation for store calls.

Idempotent reads are retried with exponential backoff + jitter when the
database connection fails transiently; writes run once. Whatever still fails
is logged and surfaced as ``StoreError`` so callers see a generic
"try again" problem instead of a driver traceback.
"""

from __future__ import annotations

import logging
from functools import wraps
from typing import Any, Awaitable, Callable, TypeVar

from sqlalchemy.exc import DBAPIError, IntegrityError, InterfaceError, OperationalError, SQLAlchemyError
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
    wait_random,
)

from shift_tracker.common.exceptions import StoreError
from shift_tracker.config import settings

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Awaitable[Any]])


def is_transient_error(exception: BaseException) -> bool:
    """True for connection-level failures worth another attempt."""
    if isinstance(exception, IntegrityError):
        return False
    if isinstance(exception, DBAPIError) and exception.connection_invalidated:
        return True
    return isinstance(exception, (OperationalError, InterfaceError, ConnectionError, TimeoutError))


def _log_retry(operation: str) -> Callable[[RetryCallState], None]:
    def log(retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        wait_time = retry_state.next_action.sleep if retry_state.next_action else 0
        logger.warning(
            "Retry attempt %d for %s in %.2fs: %s",
            retry_state.attempt_number,
            operation,
            wait_time,
            type(exc).__name__ if exc else "unknown error",
        )

    return log


def _retrying(operation: str) -> AsyncRetrying:
    base = settings.STORE_RETRY_BASE_DELAY_SECONDS
    return AsyncRetrying(
        stop=stop_after_attempt(max(1, settings.STORE_RETRY_ATTEMPTS)),
        wait=wait_exponential(multiplier=base, max=settings.STORE_RETRY_MAX_DELAY_SECONDS)
        + wait_random(0, base),
        retry=retry_if_exception(is_transient_error),
        before_sleep=_log_retry(operation),
        reraise=True,
    )


def store_read(operation: str) -> Callable[[F], F]:
    """Decorate an idempotent store method: retry transient failures.

    The decorated method's owner must expose the session as ``self.db``.
    Each attempt runs inside a SAVEPOINT; a failed attempt rolls back only
    that savepoint, so work the request already flushed survives the retry.
    """

    def decorator(fn: F) -> F:
        @wraps(fn)
        async def wrapper(self, *args, **kwargs):
            try:
                async for attempt in _retrying(operation):
                    with attempt:
                        savepoint = await self.db.begin_nested()
                        try:
                            result = await fn(self, *args, **kwargs)
                        except Exception:
                            if savepoint.is_active:
                                await savepoint.rollback()
                            raise
                        await savepoint.commit()
                        return result
            except SQLAlchemyError as exc:
                logger.exception("Store read '%s' failed", operation)
                raise StoreError(operation) from exc

        return wrapper  # type: ignore[return-value]

    return decorator


def store_write(operation: str) -> Callable[[F], F]:
    """Decorate a store mutation: single attempt, IntegrityError passes through.

    Constraint violations carry meaning (duplicate id, duplicate date) and are
    translated by the caller; every other driver failure becomes StoreError.
    """

    def decorator(fn: F) -> F:
        @wraps(fn)
        async def wrapper(self, *args, **kwargs):
            try:
                return await fn(self, *args, **kwargs)
            except IntegrityError:
                raise
            except SQLAlchemyError as exc:
                logger.exception("Store write '%s' failed", operation)
                raise StoreError(operation) from exc

        return wrapper  # type: ignore[return-value]

    return decorator
