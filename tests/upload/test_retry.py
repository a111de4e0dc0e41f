"""Tests for upload/retry.py."""

from __future__ import annotations

import pytest

from impactplane.upload.retry import retry


class FlakyOperation:
    """Fails ``failures`` times, then returns ``value``."""

    def __init__(self, failures: int, value: str = "ok") -> None:
        self.failures = failures
        self.value = value
        self.calls = 0

    def __call__(self) -> str:
        self.calls += 1
        if self.calls <= self.failures:
            raise TimeoutError(f"attempt {self.calls} timed out")
        return self.value


class TestRetry:
    def test_returns_immediately_on_success(self) -> None:
        op = FlakyOperation(failures=0)

        assert retry(3, op) == "ok"
        assert op.calls == 1

    def test_succeeds_on_last_attempt(self) -> None:
        """n-1 failures then success returns the value after n calls."""
        op = FlakyOperation(failures=2)

        assert retry(3, op) == "ok"
        assert op.calls == 3

    def test_stops_early_on_success(self) -> None:
        op = FlakyOperation(failures=1)

        retry(5, op)

        assert op.calls == 2

    def test_raises_last_error_when_exhausted(self) -> None:
        """Always failing operation is invoked exactly n times."""
        op = FlakyOperation(failures=10)

        with pytest.raises(TimeoutError, match="attempt 4 timed out"):
            retry(4, op)
        assert op.calls == 4

    def test_last_error_is_not_wrapped(self) -> None:
        errors = [ValueError("first"), KeyError("second")]

        def op() -> None:
            raise errors.pop(0)

        with pytest.raises(KeyError) as exc_info:
            retry(2, op)
        assert exc_info.value.args == ("second",)

    def test_any_exception_is_retried_by_default(self) -> None:
        outcomes: list[Exception | None] = [RuntimeError("boom"), None]

        def op() -> str:
            outcome = outcomes.pop(0)
            if outcome is not None:
                raise outcome
            return "done"

        assert retry(2, op) == "done"

    def test_errors_outside_retry_on_propagate_immediately(self) -> None:
        op = FlakyOperation(failures=3)

        with pytest.raises(TimeoutError):
            retry(3, op, retry_on=(ConnectionError,))
        assert op.calls == 1

    @pytest.mark.parametrize("attempts", [0, -1])
    def test_rejects_non_positive_attempts(self, attempts: int) -> None:
        with pytest.raises(ValueError):
            retry(attempts, lambda: None)
