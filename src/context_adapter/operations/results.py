"""Per-service extraction of operation results from third-party bodies."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Protocol

import yaml
from pydantic import BaseModel, ValidationError

from context_adapter.ngsi.models import ServiceDescriptor

logger = logging.getLogger(__name__)

DEFAULT_RESULT_PATH = "details.rgb"
DEFAULT_RESULT = "Default rgb"
UNKNOWN_FORMAT_RESULT = "The Third Party responded with an unknown response format"


class ResultExtractor(Protocol):
    def extract(self, body: Any) -> str: ...


class FieldPathExtractor(BaseModel):
    """Reads a dotted field path from a JSON body.

    If the leaf is missing ``default`` is returned; if its parent is missing
    the body is considered to be in an unknown format.
    """

    path: str = DEFAULT_RESULT_PATH
    default: str = DEFAULT_RESULT

    def extract(self, body: Any) -> str:
        *parents, leaf = self.path.split(".")
        node = body
        for key in parents:
            if not isinstance(node, dict) or key not in node:
                return UNKNOWN_FORMAT_RESULT
            node = node[key]
        if not isinstance(node, dict):
            return UNKNOWN_FORMAT_RESULT
        value = node.get(leaf)
        if value is None or value == "":
            return self.default
        if isinstance(value, str):
            return value
        return json.dumps(value, sort_keys=True)


class ResultMapper:
    """Chooses the result extractor for a service.

    Precedence: the ``result`` entry of the service mapping, then the
    mappings file (``services: {<service id>: {path, default}}``), then the
    ``details.rgb`` default.
    """

    def __init__(self, mappings_path: str | Path | None = None) -> None:
        self._extractors: dict[str, FieldPathExtractor] = {}
        self._default = FieldPathExtractor()
        if mappings_path:
            self._load_mappings(Path(mappings_path))

    def _load_mappings(self, path: Path) -> None:
        if not path.exists():
            return
        with open(path) as fh:
            data = yaml.safe_load(fh) or {}
        for service_id, entry in (data.get("services") or {}).items():
            entry = entry or {}
            self._extractors[str(service_id)] = FieldPathExtractor(
                path=entry.get("path", DEFAULT_RESULT_PATH),
                default=entry.get("default", DEFAULT_RESULT),
            )

    @property
    def service_ids(self) -> list[str]:
        return list(self._extractors)

    def for_service(self, service: ServiceDescriptor | None) -> ResultExtractor:
        if service is None:
            return self._default
        inline = service.mapping_value("result")
        if isinstance(inline, str) and inline:
            return FieldPathExtractor(path=inline)
        if isinstance(inline, dict) and inline.get("path"):
            try:
                return FieldPathExtractor(
                    path=inline["path"],
                    default=inline.get("default", DEFAULT_RESULT),
                )
            except ValidationError:
                logger.warning("Ignoring invalid result mapping for service %r: %s", service.id, inline)
        return self._extractors.get(service.id, self._default)
