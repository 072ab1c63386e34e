"""Interaction routing between callers and third-party services.

Everything here is pure: the same inputs always produce the same outputs.
"""

from __future__ import annotations

import hashlib
import hmac
from typing import Any
from urllib.parse import urlencode

from context_adapter.core.config import Settings
from context_adapter.ngsi.models import (
    InteractionType,
    OperationAction,
    OperationDescriptor,
    ServiceDescriptor,
)


def correlation_token(secret: str, button_id: str) -> str:
    """HMAC-SHA256 of the button id, used to authenticate callbacks."""
    return hmac.new(secret.encode(), button_id.encode(), hashlib.sha256).hexdigest()


def callback_base_url(settings: Settings) -> str:
    base = settings.callback.public_base_url
    if base:
        base = base.rstrip("/")
    else:
        base = f"http://{settings.server.host}:{settings.server.port}"
    return f"{base}{settings.server.path}{settings.callback.path}"


def build_webhook_url(settings: Settings, operation: OperationDescriptor) -> str:
    """Webhook the third party must POST its eventual result to."""
    url = callback_base_url(settings)
    if settings.callback.secret:
        token = correlation_token(settings.callback.secret, operation.button_id)
        url = f"{url}?{urlencode({'token': token})}"
    return url


def build_outbound_payload(
    service: ServiceDescriptor,
    operation: OperationDescriptor,
    webhook_url: str,
) -> dict[str, Any]:
    """Body of the third-party request.

    Synchronous actions pass the operation descriptor through untouched;
    asynchronous-create actions wrap it together with the webhook URL.
    """
    descriptor = operation.to_wire()
    if operation.action is OperationAction.ASYNCHRONOUS_CREATE:
        return {"operationDescriptor": descriptor, "webHook": webhook_url}
    return descriptor


def expects_callback(service: ServiceDescriptor) -> bool:
    """Whether completion arrives later through the webhook.

    Synchronous services are completed straight from their response.
    """
    return service.interaction_type is InteractionType.ASYNCHRONOUS
