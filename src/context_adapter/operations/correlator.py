"""Correlation of asynchronous third-party callbacks."""

from __future__ import annotations

import hmac
import logging
from typing import Any

from context_adapter.ngsi.descriptors import operation_from_callback
from context_adapter.ngsi.models import Tenant
from context_adapter.operations.interaction import correlation_token
from context_adapter.operations.notifier import Notifier

logger = logging.getLogger(__name__)


class CallbackCorrelator:
    """Turns a third-party callback into a ``completed`` notification.

    No operation state is kept between the original request and the callback;
    the callback body carries the button id. When ``secret`` is set the
    callback must also present the ``token`` embedded in the webhook URL.
    """

    def __init__(self, notifier: Notifier, secret: str | None = None) -> None:
        self._notifier = notifier
        self._secret = secret

    async def handle(self, body: Any, tenant: Tenant, token: str | None = None) -> bool:
        """Process a callback. Returns True if a notification was delivered."""
        operation = operation_from_callback(body)
        if operation is None:
            logger.warning("Callback without a button id, ignoring: %s", body)
            return False

        if self._secret is not None:
            expected = correlation_token(self._secret, operation.button_id)
            if token is None or not hmac.compare_digest(expected, token):
                logger.warning(
                    "Callback for button %r rejected: invalid correlation token",
                    operation.button_id,
                )
                return False

        logger.debug("Asynchronous update from third party for button %r", operation.button_id)
        return await self._notifier.notify_completed(operation, body, tenant)
