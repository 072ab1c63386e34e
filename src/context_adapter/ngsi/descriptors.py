"""Map NGSI attributes onto operation and service descriptors."""

from __future__ import annotations

import json
from typing import Any

from context_adapter.core.errors import BadService
from context_adapter.ngsi.models import (
    ButtonAttr,
    InteractionType,
    OperationAction,
    OperationDescriptor,
    OperationStatus,
    ServiceAttr,
    ServiceDescriptor,
)

_OPERATION_FIELDS = {
    ButtonAttr.CA_EXTERNAL_ID: "external_button_id",
    ButtonAttr.CA_SERVICE_ID: "service_id",
    ButtonAttr.CA_OPERATION_ACTION: "action",
    ButtonAttr.CA_OPERATION_EXTRA: "extra",
    ButtonAttr.CA_OPERATION_STATUS: "status",
}

_SERVICE_FIELDS = {
    ServiceAttr.ENDPOINT: "endpoint",
    ServiceAttr.METHOD: "method",
    ServiceAttr.AUTHENTICATION: "authentication",
    ServiceAttr.MAPPING: "mapping",
    ServiceAttr.TIMEOUT: "timeout",
    ServiceAttr.INTERACTION_TYPE: "interaction_type",
}


def _enum_or_none(enum_cls: type, value: Any) -> Any:
    try:
        return enum_cls(value)
    except (TypeError, ValueError):
        return None


def _str_or_none(value: Any) -> str | None:
    return str(value) if value is not None else None


def extract_operation_descriptor(payload: dict[str, Any]) -> OperationDescriptor:
    """Build the operation descriptor from a validated updateContext payload.

    Only the first context element describes the operation. Unknown
    attributes are ignored and repeated attributes resolve to the last value.
    """
    element = payload["contextElements"][0]
    fields: dict[str, Any] = {}
    for attr in element.get("attributes", []):
        if not isinstance(attr, dict):
            continue
        field = _OPERATION_FIELDS.get(attr.get("name"))
        if field is not None:
            fields[field] = attr.get("value")

    for key in ("external_button_id", "service_id"):
        fields[key] = _str_or_none(fields.get(key))
    fields["action"] = _enum_or_none(OperationAction, fields.get("action"))
    fields["status"] = _enum_or_none(OperationStatus, fields.get("status"))
    return OperationDescriptor(button_id=element["id"], **fields)


def operation_from_callback(body: Any) -> OperationDescriptor | None:
    """Reconstruct an operation descriptor from a third-party callback body.

    Accepts either a bare descriptor (``{"buttonId": ...}``) or the wrapped
    form sent to asynchronous third parties
    (``{"operationDescriptor": {...}, ...}``).
    """
    if not isinstance(body, dict):
        return None
    source = body.get("operationDescriptor")
    if not isinstance(source, dict):
        source = body
    button_id = source.get("buttonId")
    if not isinstance(button_id, str) or not button_id:
        return None
    return OperationDescriptor(
        button_id=button_id,
        external_button_id=_str_or_none(source.get("externalButtonId")),
        service_id=_str_or_none(source.get("serviceId")),
        action=_enum_or_none(OperationAction, source.get("action")),
        extra=source.get("extra"),
    )


def service_query_payload(service_id: str) -> dict[str, Any]:
    """queryContext body asking for a service entity's descriptor attributes."""
    return {
        "entities": [
            {
                "id": service_id,
                "type": ServiceAttr.ENTITY_TYPE,
                "isPattern": "false",
            }
        ],
        "attributes": list(ServiceAttr.QUERIED),
    }


def _parse_timeout(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _parse_mapping(value: Any) -> Any:
    if isinstance(value, str) and value.lstrip().startswith("{"):
        try:
            return json.loads(value)
        except ValueError:
            return value
    return value


def parse_service_descriptor(body: dict[str, Any], service_id: str) -> ServiceDescriptor:
    """Map a validated queryContext response onto a service descriptor."""
    responses = body.get("contextResponses") or []
    if not responses:
        raise BadService(service_id)

    fields: dict[str, Any] = {}
    for attr in responses[0]["contextElement"]["attributes"]:
        if not isinstance(attr, dict):
            continue
        field = _SERVICE_FIELDS.get(attr.get("name"))
        if field is not None:
            fields[field] = attr.get("value")

    if not isinstance(fields.get("endpoint"), str) or not fields["endpoint"]:
        raise BadService(service_id)

    method = fields.get("method")
    fields["method"] = method.upper() if isinstance(method, str) and method else "POST"
    fields["timeout"] = _parse_timeout(fields.get("timeout"))
    fields["mapping"] = _parse_mapping(fields.get("mapping"))
    interaction = fields.get("interaction_type")
    if isinstance(interaction, str):
        interaction = interaction.lower()
    fields["interaction_type"] = (
        _enum_or_none(InteractionType, interaction)
        or InteractionType.SYNCHRONOUS
    )
    return ServiceDescriptor(id=service_id, **fields)
