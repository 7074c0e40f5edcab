"""Logging setup shared by the API process and the Celery worker."""

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_configured = False


def configure_logging(level: str = "INFO") -> None:
    """Attach one stream handler to the ``banqa`` logger tree.

    Safe to call more than once; only the level is updated on later calls.
    """
    global _configured
    root = logging.getLogger("banqa")
    root.setLevel(level.upper())
    if _configured:
        return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    _configured = True
