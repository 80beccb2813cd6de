import logging
import sys
from pathlib import Path

from sheetkit import config as cfg

_configured = False


def setup_logging() -> logging.Logger:
    """
    Configure the root logger for the portal.

    Level comes from LOG_LEVEL; a file handler is added when LOG_FILE is set.
    Streamlit reruns the script on every interaction, so repeated calls are no-ops.
    """
    global _configured
    logger = logging.getLogger("portal")
    if _configured:
        return logger

    handlers = [logging.StreamHandler(sys.stdout)]
    if cfg.LOG_FILE:
        log_path = Path(cfg.LOG_FILE)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    logging.basicConfig(
        level=getattr(logging, cfg.LOG_LEVEL, logging.INFO),
        format=cfg.LOG_FORMAT,
        handlers=handlers,
        force=True,
    )
    # requests/urllib3 are chatty at DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    _configured = True
    logger.info("Logging initialised at %s", cfg.LOG_LEVEL)
    return logger
