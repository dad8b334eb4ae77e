# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Value models for session tracking.

All models are frozen pydantic models. Datetimes are normalised to UTC on
construction: naive values are taken to already be UTC, aware values are
converted.

Wire Shape (JSON, camelCase via alias generator):
    {
        "sentAt": "...",
        "sessionCounts": [{"startedAt": "...", "sessionsStarted": 3}],
        "notifier": {...}, "app": {...}, "device": {...}
    }
"""

from __future__ import annotations

import platform
import socket
from datetime import UTC, datetime, timedelta
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

NOTIFIER_NAME = "sessionpulse"
NOTIFIER_URL = "https://pypi.org/project/sessionpulse/"


def ensure_utc(value: datetime) -> datetime:
    """Return ``value`` as a UTC-aware datetime."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    if value.utcoffset() == timedelta(0):
        if value.tzinfo is not UTC:
            return value.replace(tzinfo=UTC)
        return value
    return value.astimezone(UTC)


def _normalise_datetime(v: object) -> object:
    if not isinstance(v, datetime):
        return v
    return ensure_utc(v)


class ModelSession(BaseModel):
    """One accepted session start. Never mutated after creation."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    session_id: UUID = Field(default_factory=uuid4)
    started_at: datetime = Field(...)

    @field_validator("started_at", mode="before")
    @classmethod
    def ensure_utc_aware(cls, v: object) -> object:
        return _normalise_datetime(v)


class _WireModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )


class ModelSessionCount(_WireModel):
    """Number of sessions started within one minute bucket."""

    started_at: datetime = Field(..., description="Minute bucket, seconds dropped")
    sessions_started: int = Field(..., ge=1)

    @field_validator("started_at", mode="before")
    @classmethod
    def ensure_utc_aware(cls, v: object) -> object:
        return _normalise_datetime(v)


class ModelNotifierInfo(_WireModel):
    name: str = NOTIFIER_NAME
    version: str
    url: str = NOTIFIER_URL


class ModelAppInfo(_WireModel):
    release_stage: str
    version: str | None = None


class ModelDeviceInfo(_WireModel):
    hostname: str | None = None
    os_name: str | None = None
    os_version: str | None = None

    @classmethod
    def from_host(cls) -> ModelDeviceInfo:
        """Describe the machine this process runs on."""
        return cls(
            hostname=socket.gethostname() or None,
            os_name=platform.system() or None,
            os_version=platform.release() or None,
        )


class ModelSessionPayload(_WireModel):
    """Snapshot of drained bucket counts handed to serializer and delivery.

    ``session_counts`` is ordered by minute, oldest first.
    """

    sent_at: datetime
    session_counts: tuple[ModelSessionCount, ...] = Field(..., min_length=1)
    notifier: ModelNotifierInfo
    app: ModelAppInfo
    device: ModelDeviceInfo = Field(default_factory=ModelDeviceInfo)

    @field_validator("sent_at", mode="before")
    @classmethod
    def ensure_utc_aware(cls, v: object) -> object:
        return _normalise_datetime(v)

    def counts_by_minute(self) -> dict[datetime, int]:
        return {c.started_at: c.sessions_started for c in self.session_counts}

    def total_sessions(self) -> int:
        return sum(c.sessions_started for c in self.session_counts)


__all__ = [
    "ModelAppInfo",
    "ModelDeviceInfo",
    "ModelNotifierInfo",
    "ModelSession",
    "ModelSessionCount",
    "ModelSessionPayload",
    "ensure_utc",
]
