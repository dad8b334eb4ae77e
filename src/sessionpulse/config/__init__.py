# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""sessionpulse configuration - Pydantic Settings for environment configuration."""

from __future__ import annotations

from .settings import ConfigSessionTracking, clear_settings_cache, get_settings

__all__ = [
    "ConfigSessionTracking",
    "clear_settings_cache",
    "get_settings",
]
