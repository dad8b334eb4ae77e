"""Test doubles and time helpers shared across the suite."""

from __future__ import annotations

import threading
from collections.abc import Mapping
from datetime import UTC, datetime, timedelta

from sessionpulse.delivery.serializer import JsonSessionSerializer
from sessionpulse.sessions.models import ModelSessionPayload

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def at_ms(epoch_ms: int) -> datetime:
    """UTC datetime for a millisecond epoch timestamp."""
    return EPOCH + timedelta(milliseconds=epoch_ms)


class RecordingDelivery:
    """Delivery that keeps every call for inspection."""

    def __init__(self) -> None:
        self.calls: list[tuple[bytes, dict[str, str]]] = []
        self.closed = False
        self.delivered = threading.Event()
        self._lock = threading.Lock()

    def deliver(self, body: bytes, headers: Mapping[str, str]) -> None:
        with self._lock:
            self.calls.append((body, dict(headers)))
        self.delivered.set()

    def close(self) -> None:
        self.closed = True


class RecordingSerializer(JsonSessionSerializer):
    """JSON serializer that also remembers the payload objects it saw."""

    def __init__(self) -> None:
        self.payloads: list[ModelSessionPayload] = []
        self._lock = threading.Lock()

    def serialize(self, payload: ModelSessionPayload) -> bytes:
        with self._lock:
            self.payloads.append(payload)
        return super().serialize(payload)
