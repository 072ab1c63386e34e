"""Resolve service descriptors from the Context Broker."""

from __future__ import annotations

import logging

from context_adapter.broker.client import ContextBrokerClient
from context_adapter.core.errors import BadService
from context_adapter.ngsi.descriptors import parse_service_descriptor, service_query_payload
from context_adapter.ngsi.models import ServiceDescriptor, Tenant
from context_adapter.ngsi.validator import validate_service_query_response

logger = logging.getLogger(__name__)


class ServiceResolver:
    """Looks up the service entity referenced by an operation.

    Descriptors are fetched fresh on every call, never cached.
    """

    def __init__(self, broker: ContextBrokerClient) -> None:
        self._broker = broker

    async def resolve(self, service_id: str | None, tenant: Tenant) -> ServiceDescriptor:
        if not service_id:
            raise BadService(service_id)

        response = await self._broker.send_query_context(tenant, service_query_payload(service_id))
        try:
            body = response.json()
        except ValueError:
            logger.warning(
                "Undecodable queryContext response for service %r (HTTP %d)",
                service_id, response.status_code,
            )
            raise BadService(service_id) from None

        error = validate_service_query_response(body, service_id)
        if error is not None:
            logger.warning("Invalid service descriptor for %r: %s", service_id, body)
            raise error

        service = parse_service_descriptor(body, service_id)
        logger.debug("Service descriptor: %s", service.to_wire())
        return service
