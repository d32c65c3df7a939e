# lifecycle_engine/run_api.py
"""Run the lifecycle API server."""

import logging
import os

import uvicorn

from lifecycle_engine.config import LifecycleSettings
from lifecycle_engine.logging_config import configure_logging

logger = logging.getLogger(__name__)


def main():
    """Main entry point."""
    settings = LifecycleSettings()
    configure_logging(settings.log_level)

    host = os.getenv("LIFECYCLE_HOST", "0.0.0.0")
    port = int(os.getenv("LIFECYCLE_PORT", "8080"))

    logger.info(f"Starting Lifecycle API on {host}:{port}")
    uvicorn.run("lifecycle_engine.api.main:app", host=host, port=port)


if __name__ == "__main__":
    main()
