"""
pep_gateway.api.__main__

Entrypoint for running the gateway via `python -m pep_gateway.api`.

Responsibilities:
- Load settings.
- Create the app.
- Start uvicorn with graceful shutdown (stop accepting, drain, force-close).
"""

from __future__ import annotations

import uvicorn

from pep_gateway.api.app import create_app
from pep_gateway.settings import get_settings


def main() -> None:
    settings = get_settings()
    app = create_app(settings=settings)

    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_config=None,  # structlog
        # In-flight requests get this long to finish after SIGTERM/SIGINT.
        timeout_graceful_shutdown=settings.shutdown_grace_seconds,
    )


if __name__ == "__main__":
    main()
