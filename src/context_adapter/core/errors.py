"""Error taxonomy for the operation pipeline.

Every error carries a short machine ``code`` and a human ``message``. The pair
is what ends up in NGSI reason phrases (``"<code> - <message>"``) and in the
``op_result`` of closed operations (``"0,<code>,<message>"``).
"""

from __future__ import annotations

import json
from typing import Any

import httpx


class AdapterError(Exception):
    """Base class for errors raised while handling an operation."""

    code = "ADAPTER_ERROR"

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    def __str__(self) -> str:
        return f"{self.code} - {self.message}"


class BadPayload(AdapterError):
    """Inbound updateContext payload is not well-formed."""

    code = "BAD_PAYLOAD"

    def __init__(self, payload: Any) -> None:
        self.payload = payload
        super().__init__(f"The request payload is not valid: {_dump(payload)}")


class BadService(AdapterError):
    """The service descriptor could not be retrieved or is not valid."""

    code = "BAD_SERVICE"

    def __init__(self, service_id: str | None) -> None:
        self.service_id = service_id
        super().__init__(f"The service {service_id!r} is not valid or could not be retrieved")


class ThirdPartyError(AdapterError):
    """Transport failure or non-success response from a third party."""

    code = "THIRD_PARTY_ERROR"

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, code=code)
        self.status_code = status_code

    @classmethod
    def from_response(cls, response: httpx.Response) -> ThirdPartyError:
        return cls(
            response.reason_phrase or "Unsuccessful response",
            code=str(response.status_code),
            status_code=response.status_code,
        )

    @classmethod
    def from_transport(cls, exc: Exception) -> ThirdPartyError:
        return cls(str(exc) or exc.__class__.__name__, code=exc.__class__.__name__)


class NotificationError(AdapterError):
    """A status notification could not be delivered to the Context Broker."""

    code = "NOTIFICATION_ERROR"


def describe_error(exc: BaseException) -> tuple[str, str]:
    """Return the ``(code, message)`` pair for any exception."""
    if isinstance(exc, AdapterError):
        return exc.code, exc.message
    return exc.__class__.__name__, str(exc) or exc.__class__.__name__


def _dump(payload: Any) -> str:
    try:
        return json.dumps(payload, sort_keys=True, default=str)
    except ValueError:
        return repr(payload)
