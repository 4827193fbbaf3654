import json
import logging
import sys
import time
from typing import Any, Union

LOGGER_NAME = "portprobe"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(level: Union[int, str] = logging.WARNING) -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    # Re-calling only adjusts the level
    if logger.handlers:
        return logger

    sh = logging.StreamHandler(sys.stderr)
    sh.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(sh)
    return logger


def now_iso() -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime())


def log_event(logger: logging.Logger, event: str, **fields: Any) -> None:
    """One JSON object per lifecycle event, logged at INFO."""
    if not logger.isEnabledFor(logging.INFO):
        return
    payload = {"ts": now_iso(), "event": event, **fields}
    logger.info(json.dumps(payload, ensure_ascii=False, default=str))
