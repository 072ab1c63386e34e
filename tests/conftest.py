"""Shared test fixtures and helpers."""

from __future__ import annotations

import json
from typing import Any

import httpx
import pytest

from context_adapter.core.config import (
    BrokerConfig,
    CallbackConfig,
    ServerConfig,
    Settings,
    ThirdPartyConfig,
)
from context_adapter.ngsi.models import Tenant

BROKER_URL = "http://localhost:1026/v1"
THIRD_PARTY_URL = "http://third-party.test/lamp"
WEBHOOK_URL = "http://localhost:9999/v1/update"

TENANT_HEADERS = {"Fiware-Service": "blackbutton", "Fiware-ServicePath": "/"}
TENANT = Tenant(service="blackbutton", service_path="/")

MANDATORY_ATTRIBUTES = ["aux_external_id", "aux_service_id", "aux_op_action", "aux_op_extra"]


def attr(name: str, value: Any) -> dict[str, Any]:
    return {"name": name, "type": "string", "value": value}


def update_payload(
    action: str = "S",
    *,
    button_id: str = "button-1",
    service_id: str = "lamp-color",
    omit: tuple[str, ...] = (),
    with_status: bool = True,
    extra_attributes: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    """A button operation updateContext payload, well-formed by default."""
    attributes = [
        attr("aux_external_id", "ext-1"),
        attr("aux_service_id", service_id),
        attr("aux_op_action", action),
        attr("aux_op_extra", "{}"),
    ]
    if with_status:
        attributes.append(attr("aux_op_status", "in_progress"))
    attributes = [a for a in attributes if a["name"] not in omit]
    attributes.extend(extra_attributes or [])
    return {
        "contextElements": [
            {
                "id": button_id,
                "type": "BlackButton",
                "isPattern": "false",
                "attributes": attributes,
            }
        ],
        "updateAction": "UPDATE",
    }


def service_query_body(
    service_id: str = "lamp-color",
    *,
    endpoint: str = THIRD_PARTY_URL,
    method: str = "POST",
    interaction_type: str | None = "synchronous",
    mapping: Any = "{}",
    timeout: Any = "5000",
    code: str = "200",
    reason: str = "OK",
) -> dict[str, Any]:
    """Context Broker answer to a service descriptor lookup."""
    attributes = [
        attr("endpoint", endpoint),
        attr("method", method),
        attr("authentication", "none"),
        attr("mapping", mapping),
        attr("timeout", timeout),
    ]
    if interaction_type is not None:
        attributes.append(attr("interaction_type", interaction_type))
    return {
        "contextResponses": [
            {
                "contextElement": {
                    "id": service_id,
                    "type": "service",
                    "isPattern": "false",
                    "attributes": attributes,
                },
                "statusCode": {"code": code, "reasonPhrase": reason},
            }
        ]
    }


def sent_json(request: httpx.Request) -> Any:
    return json.loads(request.content)


def sent_attributes(request: httpx.Request) -> dict[str, Any]:
    """Attribute name -> value of the single element of a sent updateContext."""
    element = sent_json(request)["contextElements"][0]
    return {a["name"]: a["value"] for a in element["attributes"]}


def make_settings(**callback: Any) -> Settings:
    return Settings(
        log_format="text",
        server=ServerConfig(host="localhost", port=9999, path="/v1"),
        callback=CallbackConfig(path="/update", **callback),
        broker=BrokerConfig(host="localhost", port=1026, path="/v1"),
        third_party=ThirdPartyConfig(result_mappings_path=""),
    )


@pytest.fixture
def settings() -> Settings:
    return make_settings()
