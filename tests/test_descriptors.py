"""Tests for operation and service descriptor extraction."""

from __future__ import annotations

import pytest

from context_adapter.core.errors import BadService
from context_adapter.ngsi.descriptors import (
    extract_operation_descriptor,
    operation_from_callback,
    parse_service_descriptor,
    service_query_payload,
)
from context_adapter.ngsi.models import (
    InteractionType,
    OperationAction,
    OperationStatus,
    Tenant,
)
from tests.conftest import attr, service_query_body, update_payload


class TestExtractOperationDescriptor:
    def test_fields(self) -> None:
        op = extract_operation_descriptor(update_payload("C"))
        assert op.button_id == "button-1"
        assert op.external_button_id == "ext-1"
        assert op.service_id == "lamp-color"
        assert op.action is OperationAction.ASYNCHRONOUS_CREATE
        assert op.extra == "{}"
        assert op.status is OperationStatus.IN_PROGRESS

    def test_status_absent(self) -> None:
        op = extract_operation_descriptor(update_payload("S", with_status=False))
        assert op.status is None

    def test_repeated_attribute_last_wins(self) -> None:
        payload = update_payload(extra_attributes=[attr("aux_service_id", "taxi-booking")])
        assert extract_operation_descriptor(payload).service_id == "taxi-booking"

    def test_numeric_ids_become_strings(self) -> None:
        payload = update_payload()
        for a in payload["contextElements"][0]["attributes"]:
            if a["name"] == "aux_external_id":
                a["value"] = 42
        assert extract_operation_descriptor(payload).external_button_id == "42"

    def test_only_first_element_is_used(self) -> None:
        payload = update_payload(button_id="first")
        second = update_payload(button_id="second")["contextElements"][0]
        payload["contextElements"].append(second)
        assert extract_operation_descriptor(payload).button_id == "first"

    def test_wire_form_is_camel_case(self) -> None:
        wire = extract_operation_descriptor(update_payload("S", with_status=False)).to_wire()
        assert wire == {
            "buttonId": "button-1",
            "externalButtonId": "ext-1",
            "serviceId": "lamp-color",
            "action": "S",
            "extra": "{}",
        }


class TestOperationFromCallback:
    def test_bare_descriptor(self) -> None:
        op = operation_from_callback({"buttonId": "b1", "serviceId": "lamp-color", "details": {}})
        assert op.button_id == "b1"
        assert op.service_id == "lamp-color"

    def test_wrapped_descriptor(self) -> None:
        body = {
            "operationDescriptor": {"buttonId": "b2", "action": "C"},
            "details": {"rgb": "00FF00"},
        }
        op = operation_from_callback(body)
        assert op.button_id == "b2"
        assert op.action is OperationAction.ASYNCHRONOUS_CREATE

    def test_numeric_ids_become_strings(self) -> None:
        op = operation_from_callback({"buttonId": "b1", "externalButtonId": 7, "serviceId": 42})
        assert op.external_button_id == "7"
        assert op.service_id == "42"

    @pytest.mark.parametrize("body", [None, "b1", {}, {"buttonId": ""}, {"details": {"rgb": "x"}}])
    def test_without_button_id(self, body) -> None:
        assert operation_from_callback(body) is None


class TestServiceQueryPayload:
    def test_shape(self) -> None:
        payload = service_query_payload("lamp-color")
        assert payload["entities"] == [
            {"id": "lamp-color", "type": "service", "isPattern": "false"}
        ]
        assert "interaction_type" in payload["attributes"]
        assert "endpoint" in payload["attributes"]


class TestParseServiceDescriptor:
    def test_fields(self) -> None:
        body = service_query_body(method="put", timeout="2500", interaction_type="ASYNCHRONOUS")
        service = parse_service_descriptor(body, "lamp-color")
        assert service.id == "lamp-color"
        assert service.endpoint == "http://third-party.test/lamp"
        assert service.method == "PUT"
        assert service.timeout == 2500.0
        assert service.timeout_seconds == 2.5
        assert service.interaction_type is InteractionType.ASYNCHRONOUS

    def test_defaults(self) -> None:
        body = service_query_body(method="", interaction_type=None, timeout="n/a")
        service = parse_service_descriptor(body, "lamp-color")
        assert service.method == "POST"
        assert service.timeout is None
        assert service.timeout_seconds is None
        assert service.interaction_type is InteractionType.SYNCHRONOUS

    def test_unknown_interaction_type_defaults_to_synchronous(self) -> None:
        body = service_query_body(interaction_type="eventually")
        service = parse_service_descriptor(body, "lamp-color")
        assert service.interaction_type is InteractionType.SYNCHRONOUS

    def test_mapping_json_string_is_parsed(self) -> None:
        body = service_query_body(mapping='{"path": "/colour", "result": "data.value"}')
        service = parse_service_descriptor(body, "lamp-color")
        assert service.mapping_value("path") == "/colour"
        assert service.mapping_value("result") == "data.value"

    def test_opaque_mapping_is_kept(self) -> None:
        service = parse_service_descriptor(service_query_body(mapping="none"), "lamp-color")
        assert service.mapping == "none"
        assert service.mapping_value("path") is None

    def test_non_object_attributes_are_skipped(self) -> None:
        body = service_query_body()
        body["contextResponses"][0]["contextElement"]["attributes"].insert(0, "junk")
        service = parse_service_descriptor(body, "lamp-color")
        assert service.endpoint == "http://third-party.test/lamp"

    def test_no_responses(self) -> None:
        with pytest.raises(BadService):
            parse_service_descriptor({"contextResponses": []}, "lamp-color")

    def test_empty_endpoint(self) -> None:
        with pytest.raises(BadService):
            parse_service_descriptor(service_query_body(endpoint=""), "lamp-color")


class TestTenant:
    def test_headers(self) -> None:
        tenant = Tenant(service="blackbutton", service_path="/city", correlator="abc")
        headers = tenant.to_headers()
        assert headers["Fiware-Service"] == "blackbutton"
        assert headers["Fiware-ServicePath"] == "/city"
        assert headers["Unica-Correlator"] == "abc"
        assert headers["Content-Type"] == "application/json"

    def test_no_correlator_header(self) -> None:
        headers = Tenant(service="s", service_path="/").to_headers()
        assert "Unica-Correlator" not in headers
