# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Application-facing entry point for session tracking.

Wires a SessionTracker to a serializer, a delivery and a background flush
scheduler, reading the wall clock on the caller's behalf.

Usage:
    from sessionpulse.client import SessionClient

    with SessionClient() as client:
        client.start_session()
        ...
    # leaving the block stops the scheduler and flushes what is queued
"""

from __future__ import annotations

import logging
from types import TracebackType

from sessionpulse.config.settings import ConfigSessionTracking, get_settings
from sessionpulse.sessions.flush_scheduler import SessionFlushScheduler
from sessionpulse.sessions.models import ModelSession, ModelSessionPayload
from sessionpulse.sessions.protocol_delivery import (
    ProtocolSessionDelivery,
    ProtocolSessionSerializer,
)
from sessionpulse.sessions.tracker import Clock, SessionTracker, utc_now

logger = logging.getLogger(__name__)


class SessionClient:
    """Tracker, collaborators and scheduler behind one small API.

    Args:
        config: Tracking configuration; defaults to the cached environment
            settings.
        delivery: Payload delivery; defaults to HTTP delivery to
            ``config.sessions_endpoint``.
        serializer: Payload serializer; defaults to JSON.
        clock: Source of "now"; defaults to ``datetime.now(UTC)``.
    """

    def __init__(
        self,
        config: ConfigSessionTracking | None = None,
        delivery: ProtocolSessionDelivery | None = None,
        serializer: ProtocolSessionSerializer | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._config = config or get_settings()
        if delivery is None:
            from sessionpulse.delivery.http_delivery import HttpSessionDelivery

            delivery = HttpSessionDelivery.from_config(self._config)
        self._delivery = delivery
        self._clock: Clock = clock or utc_now
        self._tracker = SessionTracker(
            self._config, delivery=delivery, serializer=serializer
        )
        self._scheduler = SessionFlushScheduler(
            self._tracker,
            interval_seconds=self._config.flush_interval_seconds,
            clock=self._clock,
        )
        self._closed = False

    @property
    def tracker(self) -> SessionTracker:
        return self._tracker

    @property
    def scheduler(self) -> SessionFlushScheduler:
        return self._scheduler

    @property
    def current_session(self) -> ModelSession | None:
        return self._tracker.get_session()

    def start_session(self, auto_captured: bool = False) -> ModelSession | None:
        """Start a session now and return the tracker's current session.

        The return value is the previous session when the start was
        rejected by policy.
        """
        self._check_open()
        self._tracker.start_new_session(self._clock(), auto_captured=auto_captured)
        return self._tracker.get_session()

    def flush(self) -> ModelSessionPayload | None:
        """Deliver everything queued, including the current minute."""
        self._check_open()
        return self._tracker.flush_sessions(self._clock())

    def start(self) -> None:
        """Start periodic flushing."""
        self._check_open()
        self._scheduler.start()

    def _check_open(self) -> None:
        if self._closed:
            raise RuntimeError("SessionClient is closed")

    def close(self) -> None:
        """Stop flushing, deliver what is still queued, release the delivery."""
        if self._closed:
            return
        self._closed = True
        self._scheduler.stop(flush_remaining=True)
        self._delivery.close()
        logger.debug("SessionClient closed")

    def __enter__(self) -> SessionClient:
        self.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


__all__ = ["SessionClient"]
