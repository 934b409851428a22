from __future__ import annotations

from types import SimpleNamespace

import pytest

from appmanager.core.states import NamespaceState, SessionClusterState
from appmanager.errors import ApiError, FetchError, InvalidStateError, WaitTimeoutError
from appmanager.wait import wait_for_state, wait_until_gone


def _fetcher(states, clock=None):
    calls = []

    def fetch():
        state = states[min(len(calls), len(states) - 1)]
        calls.append(clock.now if clock else None)
        if isinstance(state, Exception):
            raise state
        return SimpleNamespace(state=state)

    return fetch, calls


def _wait(fetch, target, clock, *, interval=1, timeout=5, is_valid=NamespaceState.is_valid):
    return wait_for_state(
        fetch,
        target,
        is_valid,
        interval=interval,
        timeout=timeout,
        sleep=clock.sleep,
        clock=clock,
    )


def test_invalid_target_state_fetches_nothing(clock):
    fetch, calls = _fetcher(["ACTIVE"])
    with pytest.raises(InvalidStateError) as excinfo:
        _wait(fetch, "DONE", clock)
    assert str(excinfo.value) == "use a wrong state: DONE"
    assert excinfo.value.state == "DONE"
    assert calls == []
    assert clock.sleeps == []


def test_invalid_state_is_a_value_error(clock):
    fetch, _ = _fetcher(["ACTIVE"])
    with pytest.raises(ValueError):
        _wait(fetch, "", clock)


def test_namespace_becomes_active_on_third_poll(clock):
    fetch, calls = _fetcher(["INIT", "INIT", "ACTIVE"], clock)
    result = _wait(fetch, "ACTIVE", clock)
    assert result.state == "ACTIVE"
    assert calls == [1, 2, 3]
    assert clock.now == 3


def test_first_check_happens_after_one_interval(clock):
    fetch, calls = _fetcher(["RUNNING"], clock)
    _wait(fetch, "RUNNING", clock, interval=3, timeout=180, is_valid=SessionClusterState.is_valid)
    assert calls == [3]


def test_timeout_after_polls_never_match(clock):
    fetch, calls = _fetcher(["STARTING"], clock)
    with pytest.raises(WaitTimeoutError) as excinfo:
        _wait(fetch, "RUNNING", clock, is_valid=SessionClusterState.is_valid)
    assert calls == [1, 2, 3, 4, 5]
    assert clock.now == 5
    assert excinfo.value.last_state == "STARTING"
    assert excinfo.value.timeout == 5
    assert isinstance(excinfo.value, TimeoutError)


def test_timeout_shorter_than_interval_never_fetches(clock):
    fetch, calls = _fetcher(["ACTIVE"], clock)
    with pytest.raises(WaitTimeoutError):
        _wait(fetch, "ACTIVE", clock, interval=3, timeout=2)
    assert calls == []
    assert clock.now == 2


def test_fetch_error_aborts_without_retry(clock):
    boom = RuntimeError("connection reset")
    fetch, calls = _fetcher(["INIT", boom, "ACTIVE"], clock)
    with pytest.raises(FetchError) as excinfo:
        _wait(fetch, "ACTIVE", clock)
    assert excinfo.value.__cause__ is boom
    assert "connection reset" in str(excinfo.value)
    assert len(calls) == 2


def test_non_positive_interval_is_rejected(clock):
    fetch, calls = _fetcher(["ACTIVE"], clock)
    with pytest.raises(ValueError):
        _wait(fetch, "ACTIVE", clock, interval=0)
    assert calls == []


def test_wait_until_gone_returns_on_not_found(clock):
    fetch, calls = _fetcher(
        ["MARKED_FOR_DELETION", ApiError(404, "namespace not found")], clock
    )
    wait_until_gone(fetch, interval=1, timeout=5, sleep=clock.sleep, clock=clock)
    assert calls == [1, 2]


def test_wait_until_gone_surfaces_other_api_errors(clock):
    err = ApiError(500, "boom")
    fetch, _ = _fetcher([err], clock)
    with pytest.raises(FetchError) as excinfo:
        wait_until_gone(fetch, interval=1, timeout=5, sleep=clock.sleep, clock=clock)
    assert excinfo.value.__cause__ is err


def test_wait_until_gone_times_out(clock):
    fetch, calls = _fetcher(["MARKED_FOR_DELETION"], clock)
    with pytest.raises(WaitTimeoutError) as excinfo:
        wait_until_gone(fetch, interval=2, timeout=5, sleep=clock.sleep, clock=clock)
    assert calls == [2, 4]
    assert "to be deleted" in str(excinfo.value)
