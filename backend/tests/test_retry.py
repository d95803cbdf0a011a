import pytest

from hrdocs.errors import RemoteErrorKind, RemoteStoreError
from hrdocs.services.retry import backoff_delay, with_retry


class Flaky:
    def __init__(self, failures, result="ok"):
        self.failures = list(failures)
        self.result = result
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.failures:
            raise self.failures.pop(0)
        return self.result


class TestWithRetry:
    async def test_returns_first_success(self, no_sleep, sleeps):
        op = Flaky([])
        assert await with_retry(op, sleep=no_sleep) == "ok"
        assert op.calls == 1
        assert sleeps == []

    async def test_recovers_after_failures(self, no_sleep, sleeps):
        op = Flaky([RuntimeError("boom"), RuntimeError("boom")])
        assert await with_retry(op, sleep=no_sleep) == "ok"
        assert op.calls == 3
        assert sleeps == [2.0, 4.0]

    async def test_always_failing_is_attempted_three_times(self, no_sleep):
        error = RemoteStoreError(RemoteErrorKind.TRANSIENT, "throttled", 429)

        async def op():
            op.calls += 1
            raise error

        op.calls = 0
        with pytest.raises(RemoteStoreError) as exc_info:
            await with_retry(op, sleep=no_sleep)
        assert op.calls == 3
        assert exc_info.value is error
        assert exc_info.value.message == "throttled"

    async def test_last_error_is_raised_unchanged(self, no_sleep):
        op = Flaky([ValueError("first"), KeyError("second"), TypeError("third")])
        with pytest.raises(TypeError, match="third"):
            await with_retry(op, sleep=no_sleep)

    async def test_custom_attempts(self, no_sleep):
        op = Flaky([RuntimeError("x")] * 5)
        with pytest.raises(RuntimeError):
            await with_retry(op, attempts=5, sleep=no_sleep)
        assert op.calls == 5


class TestBackoff:
    def test_grows_exponentially(self):
        assert backoff_delay(1) == 2.0
        assert backoff_delay(2) == 4.0

    def test_is_capped(self):
        assert backoff_delay(3) == 5.0
        assert backoff_delay(10, base=1.0, cap=5.0) == 5.0
