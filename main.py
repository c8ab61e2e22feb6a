"""Wine Commerce main entry point.

Serves the commerce API with uvicorn on the configured host and port.
"""

from __future__ import annotations

import uvicorn

from src.api.app import create_app
from src.core.config import get_settings
from src.core.logging import configure_logging, get_logger


def main() -> None:
    """CLI entry point."""
    settings = get_settings()
    configure_logging(json_output=settings.log_json, level=settings.log_level)
    get_logger("main").info("server_starting", host=settings.api_host, port=settings.api_port)
    uvicorn.run(create_app(), host=settings.api_host, port=settings.api_port)


if __name__ == "__main__":
    main()
