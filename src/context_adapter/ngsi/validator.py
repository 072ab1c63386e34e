"""Structural checks for inbound updates and service lookups.

Validation never raises: callers receive the error object (or ``None``) and
decide how to surface it.
"""

from __future__ import annotations

from typing import Any

from context_adapter.core.errors import BadPayload, BadService
from context_adapter.ngsi.models import (
    UPDATE_ACTION,
    ButtonAttr,
    OperationAction,
    ServiceAttr,
)

MAX_CONTEXT_ELEMENTS = 2
MIN_ATTRIBUTES = 4
MAX_ATTRIBUTES = 6


def attribute_names(attributes: list[Any]) -> set[str]:
    return {
        attr["name"]
        for attr in attributes
        if isinstance(attr, dict) and isinstance(attr.get("name"), str)
    }


def attribute_value(attributes: list[Any], name: str) -> Any:
    """Value of the last attribute called ``name``, if any."""
    value = None
    for attr in attributes:
        if isinstance(attr, dict) and attr.get("name") == name:
            value = attr.get("value")
    return value


def _is_not_pattern(value: Any) -> bool:
    return value is False or value == "false"


def _is_entity(element: Any) -> bool:
    if not isinstance(element, dict):
        return False
    for key in ("id", "type"):
        if not isinstance(element.get(key), str) or not element[key]:
            return False
    return _is_not_pattern(element.get("isPattern"))


def _attribute_list(element: dict[str, Any]) -> list[Any] | None:
    attributes = element.get("attributes")
    if not isinstance(attributes, list):
        return None
    if not MIN_ATTRIBUTES <= len(attributes) <= MAX_ATTRIBUTES:
        return None
    if not all(isinstance(attr, dict) for attr in attributes):
        return None
    return attributes


def _button_attributes_ok(attributes: list[Any]) -> bool:
    names = attribute_names(attributes)
    if not all(name in names for name in ButtonAttr.MANDATORY):
        return False
    action = attribute_value(attributes, ButtonAttr.CA_OPERATION_ACTION)
    if not isinstance(action, str) or action not in {a.value for a in OperationAction}:
        return False
    if action == OperationAction.ASYNCHRONOUS_CREATE.value:
        return ButtonAttr.CA_OPERATION_STATUS in names
    return True


def _context_elements(payload: Any) -> list[Any] | None:
    if not isinstance(payload, dict):
        return None
    elements = payload.get("contextElements")
    return elements if isinstance(elements, list) else None


def is_polling_update(payload: Any) -> bool:
    """True for well-shaped updates carrying no operation attributes."""
    elements = _context_elements(payload)
    if elements is None or "updateAction" not in payload:
        return False
    for element in elements:
        if not isinstance(element, dict):
            return False
        attributes = element.get("attributes") or []
        if not isinstance(attributes, list):
            return False
        if attribute_names(attributes) & set(ButtonAttr.MANDATORY):
            return False
    return True


def validate_update_request(payload: Any) -> BadPayload | None:
    """Check an inbound updateContext payload describing a button operation."""
    elements = _context_elements(payload)
    if elements is None or payload.get("updateAction") != UPDATE_ACTION:
        return BadPayload(payload)
    if len(elements) > MAX_CONTEXT_ELEMENTS:
        return BadPayload(payload)

    for element in elements:
        if not _is_entity(element):
            return BadPayload(payload)
        attributes = _attribute_list(element)
        if attributes is None or not _button_attributes_ok(attributes):
            return BadPayload(payload)
    return None


def validate_service_query_response(body: Any, service_id: str | None) -> BadService | None:
    """Check the Context Broker answer to a service descriptor lookup."""
    if not isinstance(body, dict):
        return BadService(service_id)
    responses = body.get("contextResponses")
    if not isinstance(responses, list) or len(responses) > MAX_CONTEXT_ELEMENTS:
        return BadService(service_id)

    for entry in responses:
        if not isinstance(entry, dict):
            return BadService(service_id)
        status = entry.get("statusCode")
        if not isinstance(status, dict):
            return BadService(service_id)
        if str(status.get("code")) != "200" or status.get("reasonPhrase") != "OK":
            return BadService(service_id)
        element = entry.get("contextElement")
        if not _is_entity(element):
            return BadService(service_id)
        attributes = _attribute_list(element)
        if attributes is None:
            return BadService(service_id)
        names = attribute_names(attributes)
        if not all(name in names for name in ServiceAttr.MANDATORY):
            return BadService(service_id)
    return None
