import mysql.connector
import pytest

from src.lesson_scheduler.lesson_scheduler.common.retry import retry_delay, run_operation
from src.lesson_scheduler.lesson_scheduler.core.exceptions import (
    ConflictError,
    InternalError,
    TransientStorageError,
    ValidationError,
)


class _Flaky:
    def __init__(self, failures: int):
        self.failures = failures
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise TransientStorageError("Lock wait timeout exceeded")
        return "done"


def test_success_is_wrapped():
    result = run_operation("op", lambda: 42)

    assert result.ok
    assert result.unwrap() == 42


def test_transient_errors_are_retried_with_backoff():
    delays = []
    flaky = _Flaky(failures=2)

    result = run_operation("op", flaky, max_attempts=3, backoff_seconds=0.1, sleep=delays.append)

    assert result.value == "done"
    assert flaky.calls == 3
    assert len(delays) == 2
    assert delays[0] >= 0.1
    assert delays[1] >= 0.2


def test_exhausted_retries_become_internal_error():
    flaky = _Flaky(failures=5)

    result = run_operation("op", flaky, max_attempts=3, sleep=lambda _: None)

    assert not result.ok
    assert isinstance(result.error, InternalError)
    assert flaky.calls == 3


def test_domain_errors_are_not_retried():
    calls = []

    def reject():
        calls.append(1)
        raise ValidationError("bad input")

    result = run_operation("op", reject, sleep=lambda _: pytest.fail("should not sleep"))

    assert isinstance(result.error, ValidationError)
    assert result.error.to_dict() == {"error": "validation", "message": "bad input"}
    assert calls == [1]


def test_unwrap_raises_the_typed_error():
    def busy():
        raise ConflictError("busy", [])

    result = run_operation("op", busy)

    with pytest.raises(ConflictError):
        result.unwrap()


def test_retry_delay_grows_exponentially():
    assert 0.4 <= retry_delay(3, 0.1) <= 0.4 + 0.15


def test_non_transient_storage_errors_become_internal_error():
    calls = []

    def unreachable():
        calls.append(1)
        raise mysql.connector.errors.DatabaseError(msg="Can't connect to MySQL server", errno=2003)

    result = run_operation("op", unreachable, sleep=lambda _: pytest.fail("should not sleep"))

    assert not result.ok
    assert isinstance(result.error, InternalError)
    assert result.error.to_dict() == {"error": "internal", "message": "Internal server error"}
    assert calls == [1]
