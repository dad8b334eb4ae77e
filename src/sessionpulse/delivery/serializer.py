# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""JSON serializer for session payloads."""

from __future__ import annotations

from sessionpulse.sessions.models import ModelSessionPayload

JSON_CONTENT_TYPE = "application/json"


class JsonSessionSerializer:
    """Encodes a payload as UTF-8 JSON with camelCase keys."""

    @property
    def content_type(self) -> str:
        return JSON_CONTENT_TYPE

    def serialize(self, payload: ModelSessionPayload) -> bytes:
        return payload.model_dump_json(by_alias=True).encode("utf-8")


__all__: list[str] = ["JSON_CONTENT_TYPE", "JsonSessionSerializer"]
