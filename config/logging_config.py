# Path: config/logging_config.py
# Purpose: Configure application logging for scripts and the HTTP API.
# Layer: config.
# Details: Installs one stream handler on the root logger; repeated calls only adjust the level.

import logging

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s %(message)s"

_HANDLER_NAME = "labelscan"


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Attach the labelscan stream handler once and set the root level."""

    root = logging.getLogger()
    root.setLevel(level.upper())

    if not any(handler.get_name() == _HANDLER_NAME for handler in root.handlers):
        handler = logging.StreamHandler()
        handler.set_name(_HANDLER_NAME)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)

    logging.getLogger(__name__).debug("Logging configured at %s", level.upper())
    return root


__all__ = ["LOG_FORMAT", "configure_logging"]
