"""Shared fixtures for sessionpulse tests."""

from __future__ import annotations

import os
from collections.abc import Iterator

import pytest

from sessionpulse.config.settings import ConfigSessionTracking, clear_settings_cache
from sessionpulse.sessions.tracker import SessionTracker
from tests.helpers import RecordingDelivery, RecordingSerializer


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep SESSIONPULSE_* variables from the host out of every test."""
    for key in list(os.environ):
        if key.upper().startswith("SESSIONPULSE_"):
            monkeypatch.delenv(key, raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def config() -> ConfigSessionTracking:
    return ConfigSessionTracking(api_key="api-key")


@pytest.fixture
def delivery() -> RecordingDelivery:
    return RecordingDelivery()


@pytest.fixture
def serializer() -> RecordingSerializer:
    return RecordingSerializer()


@pytest.fixture
def tracker(
    config: ConfigSessionTracking,
    delivery: RecordingDelivery,
    serializer: RecordingSerializer,
) -> SessionTracker:
    tracker = SessionTracker(config, delivery=delivery, serializer=serializer)
    assert tracker.get_session() is None
    return tracker
