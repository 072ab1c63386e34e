"""Per-request operation pipeline.

An updateContext request is handled in two phases. ``accept_update`` runs
before the reply: it validates the payload and extracts the operation.
``process_operation`` runs after the reply has been sent: it resolves the
service, calls the third party and notifies the outcome. Errors in the second
phase are terminal for the operation and only surface as a ``closed``
notification.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from context_adapter.broker.resolver import ServiceResolver
from context_adapter.core.config import Settings
from context_adapter.core.errors import AdapterError, ThirdPartyError
from context_adapter.ngsi.descriptors import extract_operation_descriptor
from context_adapter.ngsi.models import NGSIResponse, OperationDescriptor, Tenant
from context_adapter.ngsi.validator import is_polling_update, validate_update_request
from context_adapter.operations.dispatcher import ThirdPartyDispatcher
from context_adapter.operations.interaction import (
    build_outbound_payload,
    build_webhook_url,
    expects_callback,
)
from context_adapter.operations.notifier import Notifier, build_ngsi_response

logger = logging.getLogger(__name__)


class OperationPipeline:
    """Validate, resolve, dispatch and notify one operation."""

    def __init__(
        self,
        settings: Settings,
        resolver: ServiceResolver,
        dispatcher: ThirdPartyDispatcher,
        notifier: Notifier,
    ) -> None:
        self._settings = settings
        self._resolver = resolver
        self._dispatcher = dispatcher
        self._notifier = notifier

    def accept_update(self, payload: Any) -> tuple[NGSIResponse, OperationDescriptor | None]:
        """Build the reply for an updateContext request.

        Returns the NGSI response and, for valid non-polling requests, the
        operation to process once the reply is out.
        """
        if is_polling_update(payload):
            logger.debug("Polling updateContext request received: %s", payload)
            return build_ngsi_response(None, payload), None

        error = validate_update_request(payload)
        if error is not None:
            logger.warning("Some error occurred when processing the request: %s", error)
            return build_ngsi_response(error, payload), None

        operation = extract_operation_descriptor(payload)
        logger.debug("Operation descriptor: %s", operation.to_wire())
        return build_ngsi_response(None, payload), operation

    async def process_operation(self, operation: OperationDescriptor, tenant: Tenant) -> None:
        try:
            service = await self._resolver.resolve(operation.service_id, tenant)
        except (AdapterError, httpx.HTTPError) as exc:
            logger.warning("400 - Service resolution failed for button %r: %s", operation.button_id, exc)
            await self._notifier.notify_closed(exc, operation, tenant)
            return

        webhook = build_webhook_url(self._settings, operation)
        payload = build_outbound_payload(service, operation, webhook)

        try:
            response = await self._dispatcher.dispatch(service, payload, tenant)
        except ThirdPartyError as exc:
            logger.warning("Error response from the Third Party: %s", exc)
            await self._notifier.notify_closed(exc, operation, tenant)
            return

        logger.debug("Successful response from the Third Party: %s", response.body)

        if not expects_callback(service):
            await self._notifier.notify_completed(operation, response.body, tenant, service)
            return

        if self._settings.third_party.notify_in_progress:
            await self._notifier.notify_in_progress(operation, response.body, tenant)
        logger.debug(
            "Waiting for the update from the Third Party for button %r", operation.button_id
        )
