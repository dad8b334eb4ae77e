# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Protocols for the collaborators a session tracker hands payloads to.

The tracker never knows the wire format or the transport. It builds a
ModelSessionPayload, asks a serializer for bytes and passes those bytes
with a header mapping to a delivery, exactly once per non-empty flush.

Delivery Contract:
    - ``deliver`` is called synchronously from the flushing thread.
    - Failures are the delivery's concern. The tracker does not retry or
      re-buffer; once ``deliver`` has been called the counts are gone
      from the tracker (at-most-once).
    - ``deliver`` is never called with an empty payload.

Serializer Contract:
    - ``serialize`` is pure and has no side effects.
    - ``content_type`` becomes the Content-Type header.

Example:
    >>> class PrintDelivery:
    ...     def deliver(self, body, headers):
    ...         print(headers["Content-Type"], len(body))
    ...     def close(self):
    ...         pass
    >>> isinstance(PrintDelivery(), ProtocolSessionDelivery)
    True
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from sessionpulse.sessions.models import ModelSessionPayload


@runtime_checkable
class ProtocolSessionSerializer(Protocol):
    """Turns a session payload into transport bytes."""

    @property
    def content_type(self) -> str: ...

    def serialize(self, payload: ModelSessionPayload) -> bytes: ...


@runtime_checkable
class ProtocolSessionDelivery(Protocol):
    """Ships serialized session payloads to the backend."""

    def deliver(self, body: bytes, headers: Mapping[str, str]) -> None: ...

    def close(self) -> None: ...


__all__ = [
    "ProtocolSessionDelivery",
    "ProtocolSessionSerializer",
]
