# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Synchronous HTTP delivery for session payloads.

POSTs the serialized payload to the sessions endpoint. Delivery is
fire-and-forget from the tracker's point of view: transport errors and
non-2xx responses are logged, never raised, and never retried.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

import httpx

from sessionpulse.config.settings import ConfigSessionTracking

logger = logging.getLogger(__name__)


class HttpSessionDelivery:
    """Delivers session payloads with an ``httpx.Client``.

    When no client is passed one is created and owned (and closed) by this
    delivery. A caller-supplied client is left open on ``close()``.

    Args:
        endpoint: Absolute URL of the sessions endpoint.
        timeout: Request timeout in seconds.
        client: Optional pre-configured client (shared pools, test transports).
    """

    def __init__(
        self,
        endpoint: str,
        timeout: float = 5.0,
        client: httpx.Client | None = None,
    ) -> None:
        self._endpoint = endpoint
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout)

    @classmethod
    def from_config(cls, config: ConfigSessionTracking) -> HttpSessionDelivery:
        return cls(
            endpoint=str(config.sessions_endpoint),
            timeout=config.delivery_timeout_seconds,
        )

    @property
    def endpoint(self) -> str:
        return self._endpoint

    def deliver(self, body: bytes, headers: Mapping[str, str]) -> None:
        try:
            response = self._client.post(
                self._endpoint,
                content=body,
                headers=dict(headers),
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning(
                f"Session delivery to {self._endpoint} failed: {e}",
                extra={"endpoint": self._endpoint, "bytes": len(body)},
            )
            return

        if response.is_success:
            logger.debug(
                "Session payload accepted",
                extra={"status_code": response.status_code, "bytes": len(body)},
            )
            return

        logger.warning(
            f"Session delivery to {self._endpoint} rejected with "
            f"HTTP {response.status_code}",
            extra={"status_code": response.status_code, "bytes": len(body)},
        )

    def close(self) -> None:
        if self._owns_client:
            self._client.close()


__all__: list[str] = ["HttpSessionDelivery"]
