"""FastAPI application for the Context Adapter.

Exposes the NGSI updateContext/queryContext endpoints, the third-party
callback endpoint and the version/KPI endpoints.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from context_adapter.broker.client import ContextBrokerClient
from context_adapter.broker.resolver import ServiceResolver
from context_adapter.core.config import Settings
from context_adapter.core.logging import configure_logging
from context_adapter.core.metrics import RequestCounter
from context_adapter.operations.correlator import CallbackCorrelator
from context_adapter.operations.dispatcher import ThirdPartyDispatcher
from context_adapter.operations.notifier import Notifier
from context_adapter.operations.pipeline import OperationPipeline
from context_adapter.operations.results import ResultMapper
from context_adapter.web.middleware import LogContextMiddleware, register_error_handlers
from context_adapter.web.ngsi_router import build_router, package_version

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    broker: ContextBrokerClient | None = None,
    dispatcher: ThirdPartyDispatcher | None = None,
    result_mapper: ResultMapper | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Uses the factory pattern so tests can create isolated app instances
    with their own collaborators.

    Args:
        settings: Application settings. Defaults to Settings().
        broker: Optional pre-built Context Broker client.
        dispatcher: Optional pre-built third-party dispatcher.
        result_mapper: Optional pre-built result mapper.

    Returns:
        A configured FastAPI instance.
    """
    if settings is None:
        settings = Settings()

    configure_logging(
        level=settings.log_level,
        log_format=settings.log_format,
        service_name=settings.service_name,
    )

    if broker is None:
        broker = ContextBrokerClient(settings.broker)
    if dispatcher is None:
        dispatcher = ThirdPartyDispatcher(settings.third_party)
    if result_mapper is None:
        result_mapper = ResultMapper(settings.third_party.result_mappings_path)

    notifier = Notifier(broker, result_mapper)
    pipeline = OperationPipeline(
        settings=settings,
        resolver=ServiceResolver(broker),
        dispatcher=dispatcher,
        notifier=notifier,
    )
    correlator = CallbackCorrelator(notifier, secret=settings.callback.secret)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "Context Adapter listening on %s:%d%s, Context Broker at %s",
            settings.server.host, settings.server.port, settings.server.path,
            settings.broker.base_url,
        )
        yield
        logger.info("Stopping the Context Adapter...")
        await dispatcher.close()
        await broker.close()

    app = FastAPI(
        title="Context Adapter",
        description="Bridges NGSI context updates and third-party HTTP services",
        version=package_version(),
        lifespan=lifespan,
    )

    # Store on app state for access in route handlers
    app.state.settings = settings
    app.state.request_counter = RequestCounter()
    app.state.pipeline = pipeline
    app.state.notifier = notifier
    app.state.correlator = correlator

    app.add_middleware(LogContextMiddleware)
    register_error_handlers(app)
    app.include_router(build_router(settings.server.path, settings.callback.path))

    return app
