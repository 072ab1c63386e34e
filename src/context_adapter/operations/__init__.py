"""Operation translation and correlation engine."""

from context_adapter.operations.correlator import CallbackCorrelator
from context_adapter.operations.dispatcher import ThirdPartyDispatcher, ThirdPartyResponse
from context_adapter.operations.notifier import Notifier, build_ngsi_response, build_query_response
from context_adapter.operations.pipeline import OperationPipeline
from context_adapter.operations.results import FieldPathExtractor, ResultMapper

__all__ = [
    "CallbackCorrelator",
    "FieldPathExtractor",
    "Notifier",
    "OperationPipeline",
    "ResultMapper",
    "ThirdPartyDispatcher",
    "ThirdPartyResponse",
    "build_ngsi_response",
    "build_query_response",
]
