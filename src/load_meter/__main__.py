"""
Server entrypoint: ``python -m load_meter`` or the ``load-meter`` script.

Configures structured JSON logging from LOG_LEVEL and serves the API with
uvicorn on HOST:PORT.

CHANGELOG:
- 2026-10-15: Initial creation

TODO:
- None
"""

import uvicorn

from load_meter.config import Settings
from load_meter.logging_config import configure_logging


def main() -> None:
    """Synchronous entrypoint for the load meter API server."""
    settings = Settings()
    configure_logging(settings.log_level)
    uvicorn.run(
        "load_meter.api.main:app",
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
