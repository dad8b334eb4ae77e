# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Background timer that flushes completed minutes from a tracker.

One daemon thread waits on a stop event for ``interval_seconds`` and then
calls ``SessionTracker.flush_completed_sessions``. Stopping the scheduler
optionally performs a final unconditional flush so queued counts are not
left behind at shutdown.

Failures raised by a flush are logged and the loop keeps going; the
tracker has already dropped the drained counts (at-most-once delivery).
"""

from __future__ import annotations

import logging
import threading

from sessionpulse.sessions.tracker import Clock, SessionTracker, utc_now

logger = logging.getLogger(__name__)

SCHEDULER_THREAD_NAME = "sessionpulse-flush"
SCHEDULER_JOIN_TIMEOUT_SECONDS: float = 10.0


class SessionFlushScheduler:
    """Periodic completed-minute flush for one tracker."""

    def __init__(
        self,
        tracker: SessionTracker,
        interval_seconds: float,
        clock: Clock | None = None,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError(f"interval_seconds must be positive, got {interval_seconds}")
        self._tracker = tracker
        self._interval_seconds = interval_seconds
        self._clock: Clock = clock or utc_now
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._state_lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the flush thread. Calling it while running does nothing."""
        with self._state_lock:
            if self.is_running:
                logger.debug("Session flush scheduler already running")
                return
            self._stop_event = threading.Event()
            self._thread = threading.Thread(
                target=self._run,
                args=(self._stop_event,),
                name=SCHEDULER_THREAD_NAME,
                daemon=True,
            )
            self._thread.start()
        logger.info(
            "Session flush scheduler started",
            extra={"interval_seconds": self._interval_seconds},
        )

    def stop(self, flush_remaining: bool = True) -> None:
        """Stop the flush thread and optionally flush everything still queued.

        The join happens under the state lock, so a concurrent ``start()``
        waits until the old thread has exited before launching a new one.
        A thread that outlives the join timeout stays recorded and keeps
        ``is_running`` true.
        """
        with self._state_lock:
            self._stop_event.set()
            thread = self._thread
            if thread is not None:
                thread.join(timeout=SCHEDULER_JOIN_TIMEOUT_SECONDS)
                if thread.is_alive():
                    logger.warning(
                        f"Session flush thread did not exit within "
                        f"{SCHEDULER_JOIN_TIMEOUT_SECONDS}s"
                    )
                else:
                    self._thread = None
                    logger.info("Session flush scheduler stopped")

        if flush_remaining:
            self._flush(final=True)

    def _run(self, stop_event: threading.Event) -> None:
        while not stop_event.wait(self._interval_seconds):
            self._flush(final=False)

    def _flush(self, final: bool) -> None:
        now = self._clock()
        try:
            if final:
                self._tracker.flush_sessions(now)
            else:
                self._tracker.flush_completed_sessions(now)
        except Exception as exc:
            logger.warning("Session flush failed: %s", exc, exc_info=True)


__all__ = ["SessionFlushScheduler"]
