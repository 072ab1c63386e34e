"""NGSI v1 data model, validation and descriptor mapping."""

from context_adapter.ngsi.descriptors import (
    extract_operation_descriptor,
    operation_from_callback,
    parse_service_descriptor,
    service_query_payload,
)
from context_adapter.ngsi.models import (
    InteractionType,
    NGSIResponse,
    OperationAction,
    OperationDescriptor,
    OperationStatus,
    ServiceDescriptor,
    Tenant,
)
from context_adapter.ngsi.validator import (
    is_polling_update,
    validate_service_query_response,
    validate_update_request,
)

__all__ = [
    "InteractionType",
    "NGSIResponse",
    "OperationAction",
    "OperationDescriptor",
    "OperationStatus",
    "ServiceDescriptor",
    "Tenant",
    "extract_operation_descriptor",
    "is_polling_update",
    "operation_from_callback",
    "parse_service_descriptor",
    "service_query_payload",
    "validate_service_query_response",
    "validate_update_request",
]
