from __future__ import annotations

import threading

import pytest

from code_tracker.scheduler import Scheduler

from conftest import FakeMonotonic


@pytest.fixture
def monotonic() -> FakeMonotonic:
    return FakeMonotonic()


def test_periodic_callback_runs_when_due(monotonic):
    scheduler = Scheduler(monotonic=monotonic)
    calls = []
    scheduler.call_every(1.0, lambda: calls.append(monotonic()))

    assert scheduler.run_pending() == 0
    monotonic.advance(1.0)
    assert scheduler.run_pending() == 1
    monotonic.advance(0.5)
    assert scheduler.run_pending() == 0
    monotonic.advance(0.5)
    scheduler.run_pending()

    assert len(calls) == 2


def test_missed_ticks_are_skipped(monotonic):
    scheduler = Scheduler(monotonic=monotonic)
    calls = []
    scheduler.call_every(1.0, lambda: calls.append(1))

    monotonic.advance(30.0)
    scheduler.run_pending()
    scheduler.run_pending()

    assert calls == [1]


def test_cancelled_timer_stops_running(monotonic):
    scheduler = Scheduler(monotonic=monotonic)
    calls = []
    handle = scheduler.call_every(1.0, lambda: calls.append(1))

    handle.cancel()
    monotonic.advance(5.0)
    scheduler.run_pending()

    assert handle.cancelled is True
    assert calls == []


def test_rejects_non_positive_interval(monotonic):
    with pytest.raises(ValueError):
        Scheduler(monotonic=monotonic).call_every(0, lambda: None)


def test_posted_events_run_in_order_before_timers(monotonic):
    scheduler = Scheduler(monotonic=monotonic)
    order = []
    scheduler.call_every(1.0, lambda: order.append("tick"))
    scheduler.post(lambda: order.append("a"))
    scheduler.post(lambda: order.append("b"))

    monotonic.advance(1.0)
    scheduler.run_pending()

    assert order == ["a", "b", "tick"]


def test_failing_callback_does_not_stop_dispatch(monotonic, caplog):
    scheduler = Scheduler(monotonic=monotonic)
    seen = []

    def boom():
        raise RuntimeError("boom")

    scheduler.post(boom)
    scheduler.post(lambda: seen.append("after"))
    scheduler.run_pending()

    assert seen == ["after"]
    assert "failed" in caplog.text


def test_submit_returns_result_and_exceptions(monotonic):
    scheduler = Scheduler(monotonic=monotonic)
    ok = scheduler.submit(lambda: 42)

    def fail():
        raise ValueError("nope")

    bad = scheduler.submit(fail)
    scheduler.run_pending()

    assert ok.result(timeout=0) == 42
    with pytest.raises(ValueError):
        bad.result(timeout=0)


def test_loop_thread_serves_submissions_until_stopped():
    scheduler = Scheduler()
    stop_event = threading.Event()
    thread = threading.Thread(target=scheduler.run_until_stopped, args=(stop_event,))
    thread.start()
    try:
        future = scheduler.submit(threading.current_thread)
        assert future.result(timeout=5) is thread
    finally:
        stop_event.set()
        thread.join(timeout=5)

    assert not thread.is_alive()
