"""Run the Context Adapter server.

Usage:
    python -m context_adapter

Equivalent to ``uvicorn context_adapter.web.app:create_app --factory`` bound
to the configured ``CA_HOST``/``CA_PORT``.
"""

from __future__ import annotations

import uvicorn

from context_adapter.core.config import Settings


def main() -> None:
    settings = Settings()
    uvicorn.run(
        "context_adapter.web.app:create_app",
        factory=True,
        host=settings.server.host,
        port=settings.server.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
