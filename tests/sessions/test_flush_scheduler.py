"""Tests for sessionpulse.sessions.flush_scheduler."""

from __future__ import annotations

import threading
from datetime import datetime
from unittest.mock import MagicMock

import pytest

from sessionpulse.config.settings import ConfigSessionTracking
from sessionpulse.sessions.flush_scheduler import SessionFlushScheduler
from sessionpulse.sessions.tracker import SessionTracker
from tests.helpers import RecordingDelivery, RecordingSerializer, at_ms

WAIT_SECONDS = 5.0


@pytest.fixture
def scheduler_tracker() -> tuple[SessionTracker, RecordingDelivery, RecordingSerializer]:
    delivery = RecordingDelivery()
    serializer = RecordingSerializer()
    tracker = SessionTracker(
        ConfigSessionTracking(), delivery=delivery, serializer=serializer
    )
    return tracker, delivery, serializer


class TestSessionFlushScheduler:
    def test_rejects_non_positive_interval(self) -> None:
        tracker = SessionTracker(ConfigSessionTracking(), delivery=MagicMock())
        with pytest.raises(ValueError):
            SessionFlushScheduler(tracker, interval_seconds=0)

    def test_periodic_flush_sends_completed_minutes_only(
        self,
        scheduler_tracker: tuple[
            SessionTracker, RecordingDelivery, RecordingSerializer
        ],
    ) -> None:
        tracker, delivery, serializer = scheduler_tracker
        tracker.start_new_session(at_ms(10_000_000), auto_captured=False)
        tracker.start_new_session(at_ms(10_130_000), auto_captured=False)

        scheduler = SessionFlushScheduler(
            tracker, interval_seconds=0.01, clock=lambda: at_ms(10_135_000)
        )
        scheduler.start()
        try:
            assert delivery.delivered.wait(WAIT_SECONDS)
        finally:
            scheduler.stop(flush_remaining=False)

        assert serializer.payloads[0].counts_by_minute() == {at_ms(9_960_000): 1}
        assert tracker.aggregator.pending_sessions() == 1

    def test_stop_flushes_remaining(
        self,
        scheduler_tracker: tuple[
            SessionTracker, RecordingDelivery, RecordingSerializer
        ],
    ) -> None:
        tracker, delivery, serializer = scheduler_tracker
        scheduler = SessionFlushScheduler(
            tracker, interval_seconds=60.0, clock=lambda: at_ms(10_000_000)
        )
        scheduler.start()
        tracker.start_new_session(at_ms(10_000_000), auto_captured=False)

        scheduler.stop()

        assert not scheduler.is_running
        assert len(delivery.calls) == 1
        assert serializer.payloads[0].total_sessions() == 1

    def test_stop_without_flush_leaves_queue(
        self,
        scheduler_tracker: tuple[
            SessionTracker, RecordingDelivery, RecordingSerializer
        ],
    ) -> None:
        tracker, delivery, _ = scheduler_tracker
        scheduler = SessionFlushScheduler(tracker, interval_seconds=60.0)
        scheduler.start()
        tracker.start_new_session(at_ms(0), auto_captured=False)

        scheduler.stop(flush_remaining=False)

        assert delivery.calls == []
        assert tracker.aggregator.pending_sessions() == 1

    def test_start_is_idempotent(
        self,
        scheduler_tracker: tuple[
            SessionTracker, RecordingDelivery, RecordingSerializer
        ],
    ) -> None:
        tracker, _, _ = scheduler_tracker
        scheduler = SessionFlushScheduler(tracker, interval_seconds=60.0)
        scheduler.start()
        first = [t for t in threading.enumerate() if t.name == "sessionpulse-flush"]
        scheduler.start()
        second = [t for t in threading.enumerate() if t.name == "sessionpulse-flush"]
        scheduler.stop(flush_remaining=False)

        assert len(first) == len(second)
        assert not scheduler.is_running

    def test_stop_before_start_is_safe(
        self,
        scheduler_tracker: tuple[
            SessionTracker, RecordingDelivery, RecordingSerializer
        ],
    ) -> None:
        tracker, delivery, _ = scheduler_tracker
        scheduler = SessionFlushScheduler(tracker, interval_seconds=60.0)
        scheduler.stop()
        scheduler.stop()
        assert delivery.calls == []

    def test_flush_failure_is_logged_and_loop_continues(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        attempts = threading.Semaphore(0)

        def fail(body: bytes, headers: object) -> None:
            attempts.release()
            raise OSError("backend down")

        delivery = MagicMock()
        delivery.deliver.side_effect = fail
        tracker = SessionTracker(ConfigSessionTracking(), delivery=delivery)
        minute = [0]

        def clock() -> datetime:  # each tick completes the previous minute
            minute[0] += 1
            tracker.start_new_session(at_ms(minute[0] * 60_000), auto_captured=False)
            return at_ms((minute[0] + 1) * 60_000)

        scheduler = SessionFlushScheduler(tracker, interval_seconds=0.01, clock=clock)
        with caplog.at_level("WARNING", logger="sessionpulse.sessions.flush_scheduler"):
            scheduler.start()
            try:
                assert attempts.acquire(timeout=WAIT_SECONDS)
                assert attempts.acquire(timeout=WAIT_SECONDS)
            finally:
                scheduler.stop(flush_remaining=False)

        assert any("Session flush failed" in r.getMessage() for r in caplog.records)

    def test_start_waits_for_stopping_thread_to_exit(self) -> None:
        entered = threading.Event()
        release = threading.Event()

        def slow_flush(now: datetime) -> None:
            entered.set()
            release.wait(WAIT_SECONDS)

        tracker = MagicMock(spec=SessionTracker)
        tracker.flush_completed_sessions.side_effect = slow_flush
        scheduler = SessionFlushScheduler(tracker, interval_seconds=0.01)
        scheduler.start()
        old_thread = scheduler._thread
        assert old_thread is not None
        assert entered.wait(WAIT_SECONDS)

        stopper = threading.Thread(
            target=scheduler.stop, kwargs={"flush_remaining": False}
        )
        stopper.start()
        while not scheduler._stop_event.is_set():
            stopper.join(timeout=0.001)

        starter = threading.Thread(target=scheduler.start)
        starter.start()
        starter.join(timeout=0.1)
        try:
            assert starter.is_alive()
            assert scheduler._thread is old_thread
        finally:
            release.set()
            stopper.join(WAIT_SECONDS)
            starter.join(WAIT_SECONDS)

        assert not old_thread.is_alive()
        assert scheduler.is_running
        assert scheduler._thread is not old_thread
        scheduler.stop(flush_remaining=False)
        assert not scheduler.is_running

    def test_restart_after_stop_runs_again(
        self,
        scheduler_tracker: tuple[
            SessionTracker, RecordingDelivery, RecordingSerializer
        ],
    ) -> None:
        tracker, _, _ = scheduler_tracker
        scheduler = SessionFlushScheduler(tracker, interval_seconds=60.0)
        scheduler.start()
        scheduler.stop(flush_remaining=False)
        scheduler.start()
        try:
            assert scheduler.is_running
        finally:
            scheduler.stop(flush_remaining=False)
        assert not scheduler.is_running
