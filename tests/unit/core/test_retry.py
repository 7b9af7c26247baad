"""Unit tests for the retry executor."""

import pydantic
import pytest

from dpcheck.core.retry import RetryPolicy, retry


class Flaky:
    """Fails ``failures`` times with distinct errors, then returns ``result``."""

    def __init__(self, failures: int, result="ok", error_type=RuntimeError):
        self.failures = failures
        self.result = result
        self.error_type = error_type
        self.calls = 0
        self.errors = []

    async def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            error = self.error_type(f"failure {self.calls}")
            self.errors.append(error)
            raise error
        return self.result


@pytest.mark.asyncio
@pytest.mark.parametrize("attempts", [1, 2, 3, 5])
async def test_always_failing_action_runs_exactly_max_attempts(attempts, sleep_recorder):
    action = Flaky(failures=100)

    with pytest.raises(RuntimeError) as exc_info:
        await retry(action, max_attempts=attempts, sleep=sleep_recorder)

    assert action.calls == attempts
    assert exc_info.value is action.errors[-1]
    assert len(sleep_recorder.delays) == attempts - 1


@pytest.mark.asyncio
async def test_returns_first_success(sleep_recorder):
    action = Flaky(failures=2, result={"status": 200})

    result = await retry(action, sleep=sleep_recorder)

    assert result == {"status": 200}
    assert action.calls == 3
    assert sleep_recorder.delays == [1.0, 2.0]


@pytest.mark.asyncio
async def test_success_on_first_attempt_does_not_sleep(sleep_recorder):
    action = Flaky(failures=0)

    assert await retry(action, sleep=sleep_recorder) == "ok"
    assert sleep_recorder.delays == []


@pytest.mark.asyncio
async def test_backoff_delays_are_exponential_and_capped(sleep_recorder):
    action = Flaky(failures=100)

    with pytest.raises(RuntimeError):
        await retry(
            action,
            max_attempts=7,
            initial_delay=1000,
            backoff_factor=2,
            max_delay=10000,
            sleep=sleep_recorder,
        )

    assert sleep_recorder.delays == [1.0, 2.0, 4.0, 8.0, 10.0, 10.0]


@pytest.mark.asyncio
async def test_error_kind_is_not_wrapped(sleep_recorder):
    class Boom(Exception):
        pass

    action = Flaky(failures=100, error_type=Boom)

    with pytest.raises(Boom):
        await retry(action, max_attempts=2, sleep=sleep_recorder)


@pytest.mark.asyncio
async def test_non_retryable_errors_propagate_immediately(sleep_recorder):
    action = Flaky(failures=100, error_type=KeyError)

    with pytest.raises(KeyError):
        await retry(action, max_attempts=5, retry_on=(ConnectionError,), sleep=sleep_recorder)

    assert action.calls == 1
    assert sleep_recorder.delays == []


def test_policy_delay_formula():
    policy = RetryPolicy(initial_delay_ms=1000, backoff_factor=2, max_delay_ms=10000)

    assert [policy.delay_for(i) for i in range(1, 8)] == [
        1000,
        2000,
        4000,
        8000,
        10000,
        10000,
        10000,
    ]


def test_policy_defaults():
    policy = RetryPolicy()

    assert policy.max_attempts == 3
    assert policy.initial_delay_ms == 1000
    assert policy.backoff_factor == 2
    assert policy.max_delay_ms == 10000


def test_policy_delay_overflow_is_capped():
    policy = RetryPolicy(backoff_factor=10)
    assert policy.delay_for(10_000) == policy.max_delay_ms


def test_policy_rejects_attempt_zero():
    with pytest.raises(ValueError):
        RetryPolicy().delay_for(0)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"max_attempts": 0},
        {"initial_delay_ms": -1},
        {"backoff_factor": 0.5},
        {"max_delay_ms": -5},
    ],
)
def test_policy_validation(kwargs):
    with pytest.raises(pydantic.ValidationError):
        RetryPolicy(**kwargs)
