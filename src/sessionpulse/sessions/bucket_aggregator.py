# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Per-minute session counting.

Sessions are keyed by the UTC minute they started in. A key is equivalent
to ``floor(epoch_ms / 60000) * 60000``; the local timezone never affects
which bucket a session lands in.

Thread Safety:
    All methods take one threading.Lock. ``drain_all`` and ``drain_before``
    copy and clear in the same critical section, so every increment is seen
    by exactly one drain.
"""

from __future__ import annotations

import threading
from datetime import datetime

from sessionpulse.sessions.models import ensure_utc


def minute_bucket(timestamp: datetime) -> datetime:
    """Truncate ``timestamp`` to its UTC minute.

    Example:
        >>> from datetime import UTC, datetime
        >>> minute_bucket(datetime(2017, 10, 28, 16, 58, 21, 500, tzinfo=UTC))
        datetime.datetime(2017, 10, 28, 16, 58, tzinfo=datetime.timezone.utc)
    """
    return ensure_utc(timestamp).replace(second=0, microsecond=0)


class SessionBucketAggregator:
    """Running count of session starts per minute bucket.

    Every key present has a count of at least 1. Keys leave only through a
    drain.
    """

    def __init__(self) -> None:
        self._counts: dict[datetime, int] = {}
        self._lock = threading.Lock()

    def increment(self, minute_key: datetime) -> int:
        """Add one session to ``minute_key`` and return the new count."""
        key = minute_bucket(minute_key)
        with self._lock:
            count = self._counts.get(key, 0) + 1
            self._counts[key] = count
            return count

    def drain_all(self) -> dict[datetime, int]:
        """Return every bucket and leave the aggregator empty."""
        with self._lock:
            drained = self._counts
            self._counts = {}
        return drained

    def drain_before(self, minute_key: datetime) -> dict[datetime, int]:
        """Return and remove only the buckets strictly older than ``minute_key``."""
        cutoff = minute_bucket(minute_key)
        with self._lock:
            drained = {k: v for k, v in self._counts.items() if k < cutoff}
            for key in drained:
                del self._counts[key]
        return drained

    def pending_buckets(self) -> int:
        with self._lock:
            return len(self._counts)

    def pending_sessions(self) -> int:
        with self._lock:
            return sum(self._counts.values())

    def __len__(self) -> int:
        return self.pending_buckets()


__all__ = ["SessionBucketAggregator", "minute_bucket"]
