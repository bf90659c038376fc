"""Tests for long-running operation polling."""

import pytest

from gemini_file_search.errors import ErrorKind, OperationFailedError, PollTimeoutError
from gemini_file_search.models import Operation
from gemini_file_search.operations import OperationPoller

OPERATION_NAME = "fileSearchStores/abc/operations/op1"


class ScriptedOperation:
    """Returns ``done=False`` for the first ``pending`` polls, then the final state."""

    def __init__(self, pending: int, final: dict | None = None):
        self.pending = pending
        self.final = final or {"done": True, "response": {"documentName": "doc1"}}
        self.calls: list[str] = []

    def __call__(self, name: str) -> Operation:
        self.calls.append(name)
        if len(self.calls) <= self.pending:
            return Operation(name=name, done=False)
        return Operation.model_validate({"name": name, **self.final})


def test_wait_returns_third_poll_payload(fake_clock):
    fetch = ScriptedOperation(pending=2)
    poller = OperationPoller(fetch, clock=fake_clock, sleep=fake_clock.sleep)

    operation = poller.wait(OPERATION_NAME, timeout=100, poll_interval=2)

    assert operation.done
    assert operation.response == {"documentName": "doc1"}
    assert len(fetch.calls) == 3
    assert fake_clock.sleeps == [2, 2]
    assert 2 * 2 <= fake_clock.now < 100


def test_wait_returns_immediately_when_done(fake_clock):
    fetch = ScriptedOperation(pending=0)
    poller = OperationPoller(fetch, clock=fake_clock, sleep=fake_clock.sleep)

    poller.wait(OPERATION_NAME, timeout=10, poll_interval=2)

    assert fetch.calls == [OPERATION_NAME]
    assert fake_clock.sleeps == []


def test_wait_times_out_when_never_done(fake_clock):
    fetch = ScriptedOperation(pending=10_000)
    poller = OperationPoller(fetch, clock=fake_clock, sleep=fake_clock.sleep)

    with pytest.raises(PollTimeoutError) as exc_info:
        poller.wait(OPERATION_NAME, timeout=5, poll_interval=2)

    assert exc_info.value.operation_name == OPERATION_NAME
    assert exc_info.value.elapsed >= 5
    assert exc_info.value.kind is ErrorKind.POLL_TIMEOUT
    assert fake_clock.now >= 5
    # Polls at t=0, 2, 4; the sleep to t=6 crosses the deadline
    assert len(fetch.calls) == 3


def test_embedded_error_is_returned_not_raised(fake_clock):
    failed = {"done": True, "error": {"code": 3, "message": "Unsupported file type"}}
    fetch = ScriptedOperation(pending=1, final=failed)
    poller = OperationPoller(fetch, clock=fake_clock, sleep=fake_clock.sleep)

    operation = poller.wait(OPERATION_NAME, timeout=10, poll_interval=1)

    assert operation.done
    assert operation.error.message == "Unsupported file type"
    assert not operation.succeeded
    with pytest.raises(OperationFailedError) as exc_info:
        operation.raise_for_error()
    assert exc_info.value.error["code"] == 3


def test_backoff_grows_interval_up_to_cap(fake_clock):
    fetch = ScriptedOperation(pending=4)
    poller = OperationPoller(fetch, clock=fake_clock, sleep=fake_clock.sleep)

    poller.wait(OPERATION_NAME, timeout=100, poll_interval=1, backoff=2.0, max_interval=3)

    assert fake_clock.sleeps == [1, 2, 3, 3]


def test_invalid_poll_settings_are_rejected(fake_clock):
    poller = OperationPoller(ScriptedOperation(pending=0), clock=fake_clock, sleep=fake_clock.sleep)

    with pytest.raises(ValueError):
        poller.wait(OPERATION_NAME, poll_interval=-1)
    with pytest.raises(ValueError):
        poller.wait(OPERATION_NAME, backoff=0.5)
