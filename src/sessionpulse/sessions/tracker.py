# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Session tracker: current-session slot, start policy and flush.

Start Policy (evaluated in order, first failure wins):
    1. Auto-captured start while auto capture is disabled -> ignored.
    2. Release stage outside ``notify_release_stages`` -> ignored.

Ignored starts are silent. Call sites are fire-and-forget instrumentation,
so a rejected start only produces a debug log line.

Thread Safety:
    One threading.Lock covers the (current session, aggregator) pair. A
    start replaces the session and increments its bucket inside the lock;
    a flush drains inside the same lock. A start racing a flush is either
    entirely in that flush's payload or entirely in the next one. Reading
    the current session does not take the lock; the slot is only ever
    rebound to a complete frozen model.

    Serialization and delivery run outside the lock so a slow backend
    never blocks session starts.

Timing:
    Every operation takes ``now`` from the caller. The tracker never reads
    the wall clock itself, which keeps bucket assignment deterministic.

Example:
    >>> from datetime import UTC, datetime
    >>> from unittest.mock import MagicMock
    >>> from sessionpulse.config import ConfigSessionTracking
    >>> tracker = SessionTracker(ConfigSessionTracking(), delivery=MagicMock())
    >>> tracker.start_new_session(datetime.now(UTC), auto_captured=False)
    >>> tracker.state
    <EnumTrackerState.HAS_SESSION: 'has_session'>
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from datetime import UTC, datetime

from sessionpulse import __version__
from sessionpulse.config.settings import ConfigSessionTracking
from sessionpulse.sessions.bucket_aggregator import SessionBucketAggregator
from sessionpulse.sessions.enums import EnumSessionRejection, EnumTrackerState
from sessionpulse.sessions.models import (
    ModelAppInfo,
    ModelDeviceInfo,
    ModelNotifierInfo,
    ModelSession,
    ModelSessionCount,
    ModelSessionPayload,
)
from sessionpulse.sessions.protocol_delivery import (
    ProtocolSessionDelivery,
    ProtocolSessionSerializer,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

PAYLOAD_VERSION = "1.0"
HEADER_API_KEY = "Sessionpulse-Api-Key"
HEADER_PAYLOAD_VERSION = "Sessionpulse-Payload-Version"
HEADER_SENT_AT = "Sessionpulse-Sent-At"


def utc_now() -> datetime:
    """Default clock."""
    return datetime.now(UTC)


class SessionTracker:
    """Owns the current session and the per-minute counts awaiting delivery.

    Each instance has its own slot and aggregator; nothing is process-global,
    so independent trackers never see each other's sessions.

    Attributes:
        config: Read-only tracking configuration.
        aggregator: Minute-bucket counts not yet delivered.
    """

    def __init__(
        self,
        config: ConfigSessionTracking,
        delivery: ProtocolSessionDelivery,
        serializer: ProtocolSessionSerializer | None = None,
    ) -> None:
        if serializer is None:
            from sessionpulse.delivery.serializer import JsonSessionSerializer

            serializer = JsonSessionSerializer()

        self._config = config
        self._delivery = delivery
        self._serializer = serializer
        self._aggregator = SessionBucketAggregator()
        self._current_session: ModelSession | None = None
        self._lock = threading.Lock()
        self._device = ModelDeviceInfo.from_host()

    @property
    def config(self) -> ConfigSessionTracking:
        return self._config

    @property
    def aggregator(self) -> SessionBucketAggregator:
        return self._aggregator

    @property
    def state(self) -> EnumTrackerState:
        if self._current_session is None:
            return EnumTrackerState.NO_SESSION
        return EnumTrackerState.HAS_SESSION

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    def start_new_session(self, now: datetime, auto_captured: bool) -> None:
        """Start a session at ``now`` unless the start policy rejects it."""
        rejection = self._check_start_policy(auto_captured)
        if rejection is not None:
            logger.debug(
                "Session start ignored",
                extra={
                    "reason": rejection.value,
                    "release_stage": self._config.release_stage,
                },
            )
            return

        session = ModelSession(started_at=now)
        with self._lock:
            self._current_session = session
            self._aggregator.increment(session.started_at)

    def get_session(self) -> ModelSession | None:
        """Return the most recently accepted session, or None."""
        return self._current_session

    def _check_start_policy(self, auto_captured: bool) -> EnumSessionRejection | None:
        if auto_captured and not self._config.auto_capture_sessions:
            return EnumSessionRejection.AUTO_CAPTURE_DISABLED
        if not self._config.should_track_release_stage():
            return EnumSessionRejection.RELEASE_STAGE_FILTERED
        return None

    # ------------------------------------------------------------------
    # Flushing
    # ------------------------------------------------------------------

    def flush_sessions(self, now: datetime) -> ModelSessionPayload | None:
        """Deliver every queued bucket.

        Returns the delivered payload, or None when nothing was queued (in
        which case delivery is not called). Serializer and delivery errors
        propagate; the drained counts are not restored.
        """
        with self._lock:
            drained = self._aggregator.drain_all()
        return self._deliver(drained, now)

    def flush_completed_sessions(self, now: datetime) -> ModelSessionPayload | None:
        """Deliver only buckets for minutes that ended before ``now``'s minute.

        The bucket for the current minute stays queued, so a periodic flush
        never ships a minute that can still grow.
        """
        with self._lock:
            drained = self._aggregator.drain_before(now)
        return self._deliver(drained, now)

    def _deliver(
        self, drained: dict[datetime, int], now: datetime
    ) -> ModelSessionPayload | None:
        if not drained:
            logger.debug("No queued sessions to flush")
            return None

        payload = self._build_payload(drained, now)
        body = self._serializer.serialize(payload)
        headers = self._build_headers(payload)
        self._delivery.deliver(body, headers)

        logger.debug(
            "Delivered session payload",
            extra={
                "buckets": len(payload.session_counts),
                "sessions": payload.total_sessions(),
            },
        )
        return payload

    def _build_payload(
        self, drained: dict[datetime, int], now: datetime
    ) -> ModelSessionPayload:
        counts = tuple(
            ModelSessionCount(started_at=minute, sessions_started=count)
            for minute, count in sorted(drained.items())
        )
        return ModelSessionPayload(
            sent_at=now,
            session_counts=counts,
            notifier=ModelNotifierInfo(version=__version__),
            app=ModelAppInfo(
                release_stage=self._config.release_stage,
                version=self._config.app_version,
            ),
            device=self._device,
        )

    def _build_headers(self, payload: ModelSessionPayload) -> dict[str, str]:
        headers = {
            "Content-Type": self._serializer.content_type,
            HEADER_PAYLOAD_VERSION: PAYLOAD_VERSION,
            HEADER_SENT_AT: payload.sent_at.isoformat(),
        }
        if self._config.api_key:
            headers[HEADER_API_KEY] = self._config.api_key
        return headers


__all__ = [
    "Clock",
    "HEADER_API_KEY",
    "HEADER_PAYLOAD_VERSION",
    "HEADER_SENT_AT",
    "PAYLOAD_VERSION",
    "SessionTracker",
    "utc_now",
]
