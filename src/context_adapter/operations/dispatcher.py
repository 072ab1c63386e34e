"""Outbound calls to third-party services."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import BaseModel

from context_adapter.core.config import ThirdPartyConfig
from context_adapter.core.errors import ThirdPartyError
from context_adapter.ngsi.models import ServiceDescriptor, Tenant

logger = logging.getLogger(__name__)


class ThirdPartyResponse(BaseModel):
    """Successful third-party response."""

    status_code: int
    body: Any = None


def service_url(service: ServiceDescriptor) -> str:
    path = service.mapping_value("path")
    if isinstance(path, str) and path:
        return service.endpoint.rstrip("/") + "/" + path.lstrip("/")
    return service.endpoint


class ThirdPartyDispatcher:
    """Issues exactly one HTTP call per operation. No retries."""

    def __init__(
        self,
        config: ThirdPartyConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self._http = httpx.AsyncClient(
            timeout=httpx.Timeout(config.default_timeout_seconds),
            transport=transport,
        )

    async def dispatch(
        self,
        service: ServiceDescriptor,
        payload: Any,
        tenant: Tenant,
    ) -> ThirdPartyResponse:
        """Send ``payload`` to the service.

        Raises:
            ThirdPartyError: on transport failure or a non-2xx response.
        """
        url = service_url(service)
        timeout = service.timeout_seconds or self.config.default_timeout_seconds
        logger.debug("Sending %s %s with payload: %s", service.method, url, payload)

        try:
            resp = await self._http.request(
                service.method,
                url,
                json=payload,
                headers=tenant.to_headers(),
                timeout=timeout,
            )
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise ThirdPartyError.from_transport(exc) from exc

        if not resp.is_success:
            raise ThirdPartyError.from_response(resp)

        try:
            body = resp.json()
        except ValueError:
            body = resp.text
        return ThirdPartyResponse(status_code=resp.status_code, body=body)

    async def close(self) -> None:
        await self._http.aclose()
