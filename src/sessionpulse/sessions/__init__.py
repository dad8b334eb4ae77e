# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Session tracking components.

Key Components:
    - SessionTracker: current-session slot, start policy, flush
    - SessionBucketAggregator: thread-safe per-minute counts
    - SessionFlushScheduler: periodic completed-minute flush
    - ProtocolSessionDelivery / ProtocolSessionSerializer: collaborator contracts
    - ModelSession, ModelSessionPayload: frozen value models

Data Flow:
    ```
    start_new_session -> policy -> slot + aggregator
    flush_sessions    -> drain -> payload -> serializer -> delivery
    ```

Example:
    >>> from sessionpulse.sessions import SessionTracker
    >>> from sessionpulse.config import ConfigSessionTracking
    >>> from unittest.mock import MagicMock
    >>> tracker = SessionTracker(ConfigSessionTracking(), delivery=MagicMock())
    >>> tracker.get_session() is None
    True
"""

from __future__ import annotations

from sessionpulse.sessions.bucket_aggregator import (
    SessionBucketAggregator,
    minute_bucket,
)
from sessionpulse.sessions.enums import EnumSessionRejection, EnumTrackerState
from sessionpulse.sessions.flush_scheduler import SessionFlushScheduler
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
from sessionpulse.sessions.tracker import Clock, SessionTracker, utc_now

__all__ = [
    # Protocols
    "ProtocolSessionDelivery",
    "ProtocolSessionSerializer",
    # Implementation
    "SessionBucketAggregator",
    "SessionFlushScheduler",
    "SessionTracker",
    "minute_bucket",
    # Clock
    "Clock",
    "utc_now",
    # Enums
    "EnumSessionRejection",
    "EnumTrackerState",
    # Models
    "ModelAppInfo",
    "ModelDeviceInfo",
    "ModelNotifierInfo",
    "ModelSession",
    "ModelSessionCount",
    "ModelSessionPayload",
]
