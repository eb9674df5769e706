from __future__ import annotations

import logging


def configure_app_logging(level: str = "INFO") -> None:
    """
    Set levels for the ``ticketdesk`` package loggers.

    Notes:
    - Uvicorn already configures handlers; this only sets levels.
    - Role mutations are logged on ``ticketdesk.audit``; it inherits the package
      level unless raised separately.
    - Set ``TICKETDESK_LOG_LEVEL=DEBUG`` (or INFO/WARNING/ERROR) to control verbosity.
    """

    normalized = level.upper()
    logging.getLogger("ticketdesk").setLevel(normalized)
    logging.getLogger("ticketdesk").propagate = True
