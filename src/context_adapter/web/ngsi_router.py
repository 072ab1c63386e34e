"""NGSI endpoints exposed to the Context Broker and to third parties."""

from __future__ import annotations

import json
import logging
from importlib.metadata import PackageNotFoundError, version
from typing import Any

from fastapi import APIRouter, BackgroundTasks, Depends, Request, Response

from context_adapter.ngsi.models import Tenant
from context_adapter.operations.notifier import build_query_response
from context_adapter.web.middleware import require_tenant

logger = logging.getLogger(__name__)

NO_VERSION_INFO = "No version information available"


async def read_payload(request: Request) -> Any:
    """Decoded JSON body, or ``None`` when empty or not JSON."""
    raw = await request.body()
    if not raw:
        return None
    try:
        return json.loads(raw)
    except ValueError:
        return None


def package_version() -> str:
    try:
        return version("context-adapter")
    except PackageNotFoundError:
        return NO_VERSION_INFO


def build_router(base_path: str, callback_path: str) -> APIRouter:
    """NGSI routes mounted under the configured adapter path."""
    router = APIRouter()

    @router.get("/version")
    async def get_version() -> dict[str, str]:
        return {"version": package_version()}

    @router.get("/kpis")
    async def get_kpis(request: Request) -> dict[str, Any]:
        return request.app.state.request_counter.snapshot().model_dump(by_alias=True)

    @router.post(f"{base_path}/updateContext")
    async def update_context(
        request: Request,
        background_tasks: BackgroundTasks,
        tenant: Tenant = Depends(require_tenant),
    ) -> dict[str, Any]:
        """Reply immediately; the operation itself runs after the response."""
        payload = await read_payload(request)
        logger.debug("updateContext request received: %s", payload)

        pipeline = request.app.state.pipeline
        response, operation = pipeline.accept_update(payload)
        if operation is not None:
            background_tasks.add_task(pipeline.process_operation, operation, tenant)
        return response.to_wire()

    @router.post(f"{base_path}/queryContext")
    async def query_context(
        request: Request,
        tenant: Tenant = Depends(require_tenant),
    ) -> dict[str, Any]:
        payload = await read_payload(request)
        logger.debug("queryContext request received: %s", payload)
        return build_query_response(payload).to_wire()

    @router.post(f"{base_path}{callback_path}")
    async def third_party_update(
        request: Request,
        background_tasks: BackgroundTasks,
        token: str | None = None,
        tenant: Tenant = Depends(require_tenant),
    ) -> Response:
        """Asynchronous result from a third party. Always acknowledged."""
        payload = await read_payload(request)
        logger.debug("Asynchronous update request from third party: %s", payload)
        background_tasks.add_task(request.app.state.correlator.handle, payload, tenant, token)
        return Response(status_code=200)

    return router
