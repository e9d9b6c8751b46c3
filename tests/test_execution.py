from __future__ import annotations

import pytest

from app.domain.action_types import ActionType
from app.domain.errors import DuplicateSubmissionError, TransientExecutionError
from app.services.execution import (
    SubmissionGuard,
    build_report,
    call_with_retry,
    is_transient_error,
)


def test_transient_failures_are_retried_with_growing_delays():
    calls = []
    sleeps = []

    def flaky():
        calls.append(1)
        if len(calls) < 3:
            raise TransientExecutionError("rpc timeout")
        return {"txHash": "0x1"}

    assert call_with_retry(flaky, sleep=sleeps.append) == {"txHash": "0x1"}
    assert len(calls) == 3
    assert sleeps == [2, 4]


def test_retry_gives_up_after_three_attempts():
    calls = []
    sleeps = []

    def always_down():
        calls.append(1)
        raise ConnectionError("network unreachable")

    with pytest.raises(ConnectionError):
        call_with_retry(always_down, sleep=sleeps.append)
    assert len(calls) == 3
    assert sleeps == [2, 4]


def test_delay_is_capped():
    sleeps = []

    def always_down():
        raise TimeoutError("timed out")

    with pytest.raises(TimeoutError):
        call_with_retry(always_down, max_attempts=4, max_delay_s=5, sleep=sleeps.append)
    assert sleeps == [2, 4, 5]


def test_non_transient_errors_are_not_retried():
    calls = []

    def rejected():
        calls.append(1)
        raise ValueError("insufficient balance")

    with pytest.raises(ValueError):
        call_with_retry(rejected, sleep=lambda _: None)
    assert len(calls) == 1


@pytest.mark.parametrize(
    "exc,expected",
    [
        (TransientExecutionError("x"), True),
        (TimeoutError(), True),
        (RuntimeError("429 Too Many Requests"), True),
        (RuntimeError("Bad Gateway"), True),
        (RuntimeError("RPC node unavailable"), True),
        (ValueError("invalid pin"), False),
    ],
)
def test_is_transient_error(exc, expected):
    assert is_transient_error(exc) is expected


def test_build_report_shapes():
    ok = build_report(ActionType.CREATE_WALLET, result={"txHash": "0x1", "publicKey": "0x2"})
    assert ok == {"source": "CREATE_WALLET", "text": "", "metadata": {"txHash": "0x1", "publicKey": "0x2"}}

    failed = build_report(ActionType.STAKE_USDC, error="reverted")
    assert failed["metadata"] == {"error": "reverted"}


def test_submission_guard_allows_one_report_per_prompt():
    guard = SubmissionGuard()
    report = guard.run("prompt-1", ActionType.CREATE_WALLET, lambda: {"txHash": "0x1", "publicKey": "0x2"})

    assert report["metadata"]["txHash"] == "0x1"
    assert guard.is_claimed("prompt-1")
    with pytest.raises(DuplicateSubmissionError):
        guard.run("prompt-1", ActionType.CREATE_WALLET, lambda: {"txHash": "0x3", "publicKey": "0x4"})


def test_submission_guard_reports_failures():
    guard = SubmissionGuard()

    def broken():
        raise ValueError("user rejected")

    report = guard.run("prompt-2", ActionType.APPROVE_TOKEN, broken, sleep=lambda _: None)
    assert report == {"source": "APPROVE_TOKEN", "text": "", "metadata": {"error": "user rejected"}}


def test_submission_guard_forgets_oldest_claims():
    guard = SubmissionGuard(max_claims=2)
    for prompt_id in ("p1", "p2", "p3"):
        guard.claim(prompt_id)

    assert not guard.is_claimed("p1")
    assert guard.is_claimed("p2")
    assert guard.is_claimed("p3")
    with pytest.raises(DuplicateSubmissionError):
        guard.claim("p3")
