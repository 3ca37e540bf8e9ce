"""Logger factory shared by all recordgate modules."""

import logging
import os

_ROOT_LOGGER_NAME = "recordgate"
_configured = False


def _configure_root() -> None:
    global _configured
    if _configured:
        return
    root = logging.getLogger(_ROOT_LOGGER_NAME)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        root.addHandler(handler)
    level = os.environ.get("RECORDGATE_LOG_LEVEL", "INFO").strip().upper() or "INFO"
    root.setLevel(getattr(logging, level, logging.INFO))
    _configured = True


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger under the recordgate hierarchy.

    Module names outside the package are nested under ``recordgate`` so one
    handler covers everything.
    """
    _configure_root()
    if name != _ROOT_LOGGER_NAME and not name.startswith(_ROOT_LOGGER_NAME + "."):
        name = f"{_ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)
