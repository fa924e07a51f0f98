import logging

from . import config

LOG_FORMAT = "[%(levelname)s] %(message)s"


def _resolve_level(value, default: int = logging.INFO) -> int:
    if not value:
        return default
    value = str(value).strip()
    if value.isdigit():
        return int(value)
    level = logging.getLevelName(value.upper())
    if isinstance(level, str):
        # getLevelName returns "Level X" for unknown names
        return default
    return level


def setup_logging(level=None) -> None:
    """
    Route all application logs through one stream handler using the
    "[INFO] message" layout.
    """
    resolved = _resolve_level(level if level is not None else config.LOG_LEVEL)
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(resolved)
    logging.getLogger("newsreader").setLevel(resolved)
