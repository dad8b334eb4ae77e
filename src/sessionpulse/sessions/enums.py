# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Enums for session tracking.

State Transitions:
    NO_SESSION -> HAS_SESSION: first accepted session start
    HAS_SESSION -> HAS_SESSION: every later accepted start replaces the session

There is no terminal state; a tracker lives for the process lifetime.
"""

from __future__ import annotations

from enum import StrEnum


class EnumTrackerState(StrEnum):
    """Whether a tracker currently exposes a session.

    Example:
        >>> EnumTrackerState("has_session")
        <EnumTrackerState.HAS_SESSION: 'has_session'>
    """

    NO_SESSION = "no_session"
    HAS_SESSION = "has_session"


class EnumSessionRejection(StrEnum):
    """Why a session start was ignored.

    Rejections are never raised; the value only appears in debug logs.
    """

    AUTO_CAPTURE_DISABLED = "auto_capture_disabled"
    RELEASE_STAGE_FILTERED = "release_stage_filtered"


__all__ = [
    "EnumSessionRejection",
    "EnumTrackerState",
]
