"""Context Broker client speaking NGSI v1 over HTTP."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from context_adapter.core.config import BrokerConfig
from context_adapter.ngsi.models import Tenant

logger = logging.getLogger(__name__)


class ContextBrokerClient:
    """Talks to the configured Context Broker.

    Both operations return the raw ``httpx.Response``; interpreting the body
    is up to the caller. Transport errors propagate as ``httpx.HTTPError``.
    """

    def __init__(
        self,
        config: BrokerConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self._http = httpx.AsyncClient(
            base_url=config.base_url,
            timeout=httpx.Timeout(config.timeout_seconds),
            transport=transport,
        )

    # -- public API ----------------------------------------------------------

    async def send_query_context(self, tenant: Tenant, payload: dict[str, Any]) -> httpx.Response:
        return await self._post("/queryContext", tenant, payload)

    async def send_update_context(self, tenant: Tenant, payload: dict[str, Any]) -> httpx.Response:
        logger.info(
            "Sending updateContext to %s/updateContext with payload: %s",
            self.config.base_url, payload,
        )
        return await self._post("/updateContext", tenant, payload)

    async def close(self) -> None:
        await self._http.aclose()

    # -- internal ------------------------------------------------------------

    async def _post(self, path: str, tenant: Tenant, payload: dict[str, Any]) -> httpx.Response:
        return await self._http.post(path, json=payload, headers=tenant.to_headers())
