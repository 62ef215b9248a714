from __future__ import annotations

import logging
import random
import time
from typing import Callable, TypeVar

from ..core.exceptions import DomainError, InternalError, TransientStorageError
from ..core.result import OperationResult

logger = logging.getLogger(__name__)

T = TypeVar("T")


def retry_delay(attempt: int, backoff_seconds: float) -> float:
    base = backoff_seconds * (2 ** (attempt - 1))
    return base + random.uniform(0, 0.05 * attempt)


def run_operation(
    op_name: str,
    func: Callable[[], T],
    *,
    max_attempts: int = 3,
    backoff_seconds: float = 0.1,
    sleep: Callable[[float], None] = time.sleep,
) -> OperationResult[T]:
    """Execute a core operation and return a typed result.

    Lock wait timeouts and deadlocks are retried with exponential backoff;
    every other domain error is returned as-is on the first attempt. Any
    other exception is logged and reported as an ``InternalError``.
    """

    attempt = 1
    while True:
        try:
            return OperationResult.success(func())
        except TransientStorageError as exc:
            if attempt >= max_attempts:
                logger.error(
                    "Storage contention persisted, giving up",
                    extra={"event": "db_retry_exhausted", "op": op_name, "attempts": attempt, "error": str(exc)},
                )
                return OperationResult.failure(InternalError("Internal server error"))

            delay = retry_delay(attempt, backoff_seconds)
            logger.warning(
                "Transient DB failure detected, retrying",
                extra={"event": "db_retry", "op": op_name, "attempt": attempt, "delay": delay, "error": str(exc)},
            )
            sleep(delay)
            attempt += 1
        except DomainError as exc:
            logger.info("%s rejected: %s", op_name, exc.message)
            return OperationResult.failure(exc)
        except Exception:
            # Connection loss, data and integrity errors surface only as a generic failure.
            logger.exception("%s failed", op_name, extra={"event": "operation_failed", "op": op_name})
            return OperationResult.failure(InternalError("Internal server error"))
