# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Bundled serializer and delivery for session payloads.

Imports are lazy so that the tracker can pull in the serializer without
importing httpx. Use explicit imports where possible:
``from sessionpulse.delivery.http_delivery import HttpSessionDelivery``
"""

from __future__ import annotations

__all__: list[str] = [
    "HttpSessionDelivery",
    "JSON_CONTENT_TYPE",
    "JsonSessionSerializer",
]


def __getattr__(name: str) -> object:
    if name == "HttpSessionDelivery":
        from sessionpulse.delivery.http_delivery import HttpSessionDelivery

        return HttpSessionDelivery
    if name in ("JsonSessionSerializer", "JSON_CONTENT_TYPE"):
        from sessionpulse.delivery import serializer

        return getattr(serializer, name)
    raise AttributeError(f"module 'sessionpulse.delivery' has no attribute {name!r}")
