"""Status notifications towards the Context Broker and NGSI responses.

Notifications are best effort: a failed delivery is logged and reported as
``False`` to the caller, never raised. By the time a notification is sent the
original requester already has its reply.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from context_adapter.broker.client import ContextBrokerClient
from context_adapter.core.errors import NotificationError, describe_error
from context_adapter.ngsi.models import (
    ATTRIBUTE_TYPE_STRING,
    UPDATE_ACTION,
    ButtonAttr,
    ContextResponse,
    NGSIResponse,
    OperationDescriptor,
    OperationStatus,
    ServiceDescriptor,
    StatusCode,
    Tenant,
)
from context_adapter.operations.results import ResultMapper

logger = logging.getLogger(__name__)

OK_STATUS = StatusCode(code="200", reason_phrase="OK")


# --- Payload builders ---


def _attribute(name: str, value: Any) -> dict[str, Any]:
    return {"name": name, "type": ATTRIBUTE_TYPE_STRING, "value": value}


def _button_update(button_id: str, attributes: list[dict[str, Any]]) -> dict[str, Any]:
    return {
        "contextElements": [
            {
                "id": button_id,
                "type": ButtonAttr.ENTITY_TYPE,
                "isPattern": "false",
                "attributes": attributes,
            }
        ],
        "updateAction": UPDATE_ACTION,
    }


def error_result(error: BaseException) -> str:
    code, message = describe_error(error)
    return f"0,{code},{message}"


def external_request_id(ack: Any) -> str:
    """Identifier the third party assigned to the request."""
    if isinstance(ack, dict) and ack.get("id") is not None:
        return str(ack["id"])
    if isinstance(ack, str):
        return ack
    return json.dumps(ack, sort_keys=True, default=str)


def in_progress_payload(operation: OperationDescriptor, ack: Any) -> dict[str, Any]:
    return _button_update(
        operation.button_id,
        [
            _attribute(ButtonAttr.EXTERNAL_ID, external_request_id(ack)),
            _attribute(ButtonAttr.OPERATION_STATUS, OperationStatus.IN_PROGRESS.value),
        ],
    )


def completed_payload(operation: OperationDescriptor, result: str) -> dict[str, Any]:
    return _button_update(
        operation.button_id,
        [
            _attribute(ButtonAttr.OPERATION_STATUS, OperationStatus.COMPLETED.value),
            _attribute(ButtonAttr.OPERATION_RESULT, result),
            _attribute(ButtonAttr.IOTA_OPERATION_RESULT, result),
        ],
    )


def closed_payload(operation: OperationDescriptor, error: BaseException) -> dict[str, Any]:
    result = error_result(error)
    return _button_update(
        operation.button_id,
        [
            _attribute(ButtonAttr.OPERATION_STATUS, OperationStatus.CLOSED.value),
            _attribute(ButtonAttr.IOTA_OPERATION_STATUS, OperationStatus.CLOSED.value),
            _attribute(ButtonAttr.OPERATION_RESULT, result),
            _attribute(ButtonAttr.IOTA_OPERATION_RESULT, result),
        ],
    )


# --- NGSI responses ---


def build_ngsi_response(error: BaseException | None, payload: Any) -> NGSIResponse:
    """Response to an updateContext request: one entry per context element."""
    if error is None:
        status = OK_STATUS
    else:
        code, message = describe_error(error)
        status = StatusCode(code="400", reason_phrase=f"{code} - {message}")

    elements = payload.get("contextElements") if isinstance(payload, dict) else None
    if isinstance(elements, list) and elements:
        entries = [ContextResponse(context_element=el, status_code=status) for el in elements]
    else:
        entries = [ContextResponse(status_code=status)]
    return NGSIResponse(context_responses=entries)


def build_query_response(payload: Any) -> NGSIResponse:
    """Response to a queryContext request forwarded by the broker.

    The adapter keeps no entity state, so requested attributes are echoed back
    with empty values.
    """
    entities = payload.get("entities") if isinstance(payload, dict) else None
    requested = payload.get("attributes") if isinstance(payload, dict) else None
    names = [n for n in requested or [] if isinstance(n, str)]

    entries: list[ContextResponse] = []
    for entity in entities or []:
        if not isinstance(entity, dict):
            continue
        element = {
            "id": entity.get("id"),
            "type": entity.get("type"),
            "isPattern": "false",
            "attributes": [_attribute(name, "") for name in names],
        }
        entries.append(ContextResponse(context_element=element, status_code=OK_STATUS))
    if not entries:
        entries.append(ContextResponse(status_code=OK_STATUS))
    return NGSIResponse(context_responses=entries)


# --- Notifier ---


class Notifier:
    """Writes operation status changes back into the context model."""

    def __init__(
        self,
        broker: ContextBrokerClient,
        result_mapper: ResultMapper | None = None,
    ) -> None:
        self._broker = broker
        self._results = result_mapper or ResultMapper()

    async def notify_in_progress(
        self, operation: OperationDescriptor, ack: Any, tenant: Tenant
    ) -> bool:
        return await self._send(
            OperationStatus.IN_PROGRESS, operation, in_progress_payload(operation, ack), tenant
        )

    async def notify_completed(
        self,
        operation: OperationDescriptor,
        body: Any,
        tenant: Tenant,
        service: ServiceDescriptor | None = None,
    ) -> bool:
        result = self._results.for_service(service).extract(body)
        return await self._send(
            OperationStatus.COMPLETED, operation, completed_payload(operation, result), tenant
        )

    async def notify_closed(
        self, error: BaseException, operation: OperationDescriptor, tenant: Tenant
    ) -> bool:
        return await self._send(
            OperationStatus.CLOSED, operation, closed_payload(operation, error), tenant
        )

    async def _send(
        self,
        status: OperationStatus,
        operation: OperationDescriptor,
        payload: dict[str, Any],
        tenant: Tenant,
    ) -> bool:
        try:
            resp = await self._broker.send_update_context(tenant, payload)
        except httpx.HTTPError as exc:
            self._log_failure(status, operation, NotificationError(str(exc) or exc.__class__.__name__))
            return False

        if not resp.is_success:
            self._log_failure(
                status,
                operation,
                NotificationError(f"Context Broker responded {resp.status_code}: {resp.text}"),
            )
            return False

        logger.debug(
            "Operation %s notified for button %r, Context Broker response: %s",
            status.value, operation.button_id, resp.text,
        )
        return True

    @staticmethod
    def _log_failure(
        status: OperationStatus, operation: OperationDescriptor, error: NotificationError
    ) -> None:
        logger.warning(
            "Could not notify operation %s for button %r: %s",
            status.value, operation.button_id, error,
        )
