"""
Logging setup.

Modules log through ``logging.getLogger(__name__)``; this only wires the root
handler once for scripts and workers embedding the engine.
"""

import logging
from typing import Optional

from signal_engine.core.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: Optional[str] = None) -> None:
    """Configure root logging with the engine's format."""
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format=LOG_FORMAT,
    )
    # redis client is chatty at DEBUG
    logging.getLogger("redis").setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        f"{settings.app_name} v{settings.app_version} ({settings.environment})"
    )
