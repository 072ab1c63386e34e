"""NGSI entities, descriptors and response envelopes."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

UPDATE_ACTION = "UPDATE"
ATTRIBUTE_TYPE_STRING = "string"

SERVICE_HEADER = "fiware-service"
SERVICE_PATH_HEADER = "fiware-servicepath"
CORRELATOR_HEADER = "unica-correlator"


class ButtonAttr:
    """Attribute names of the button entity."""

    ENTITY_TYPE = "BlackButton"

    EXTERNAL_ID = "external_id"
    CA_EXTERNAL_ID = "aux_external_id"
    CA_SERVICE_ID = "aux_service_id"
    CA_OPERATION_ACTION = "aux_op_action"
    CA_OPERATION_EXTRA = "aux_op_extra"
    CA_OPERATION_STATUS = "aux_op_status"
    CA_OPERATION_RESULT = "aux_op_result"

    OPERATION_STATUS = "op_status"
    IOTA_OPERATION_STATUS = "lazy_op_status"
    OPERATION_RESULT = "op_result"
    IOTA_OPERATION_RESULT = "lazy_op_result"

    MANDATORY = (CA_EXTERNAL_ID, CA_SERVICE_ID, CA_OPERATION_ACTION, CA_OPERATION_EXTRA)


class ServiceAttr:
    """Attribute names of the service entity."""

    ENTITY_TYPE = "service"

    ENDPOINT = "endpoint"
    METHOD = "method"
    AUTHENTICATION = "authentication"
    MAPPING = "mapping"
    TIMEOUT = "timeout"
    INTERACTION_TYPE = "interaction_type"

    MANDATORY = (ENDPOINT, METHOD, AUTHENTICATION, MAPPING, TIMEOUT)
    QUERIED = (*MANDATORY, INTERACTION_TYPE)


class OperationAction(str, Enum):
    """What the caller expects from the third party."""

    SYNCHRONOUS = "S"
    ASYNCHRONOUS_CREATE = "C"


class OperationStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    CLOSED = "closed"
    COMPLETED = "completed"


class InteractionType(str, Enum):
    """How the third party answers: inline or via a later callback."""

    SYNCHRONOUS = "synchronous"
    ASYNCHRONOUS = "asynchronous"


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class OperationDescriptor(_WireModel):
    """One button-triggered operation."""

    button_id: str
    external_button_id: str | None = None
    service_id: str | None = None
    action: OperationAction | None = None
    extra: Any = None
    status: OperationStatus | None = None


class ServiceDescriptor(_WireModel):
    """How to reach a third party."""

    id: str
    endpoint: str
    method: str = "POST"
    authentication: Any = None
    mapping: Any = None
    timeout: float | None = None
    interaction_type: InteractionType = InteractionType.SYNCHRONOUS

    @property
    def timeout_seconds(self) -> float | None:
        return self.timeout / 1000 if self.timeout is not None else None

    def mapping_value(self, key: str) -> Any:
        if isinstance(self.mapping, dict):
            return self.mapping.get(key)
        return None


class Tenant(BaseModel):
    """Service/subservice pair propagated on every outbound call."""

    service: str
    service_path: str
    correlator: str | None = None

    def to_headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "Fiware-Service": self.service,
            "Fiware-ServicePath": self.service_path,
        }
        if self.correlator:
            headers["Unica-Correlator"] = self.correlator
        return headers


class StatusCode(_WireModel):
    code: str
    reason_phrase: str


class ContextResponse(_WireModel):
    context_element: Any = None
    status_code: StatusCode


class NGSIResponse(_WireModel):
    """Per-entity status envelope returned for update/query requests."""

    context_responses: list[ContextResponse] = Field(default_factory=list)
