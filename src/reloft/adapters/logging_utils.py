# src/reloft/adapters/logging_utils.py
import json
import logging
import sys
from datetime import datetime, timezone

from .config import config

# LogRecord attributes that are never copied into the JSON line
_RESERVED = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None)).keys()) | {"message", "context"}


class JsonLogFormatter(logging.Formatter):
    """
    One JSON object per line. Structured fields come from
    ``extra={"context": {...}}``; plain ``extra`` keys are kept too.
    """

    def __init__(self, env: str = "dev", assumptions_version: str = ""):
        super().__init__()
        self.env = env
        self.assumptions_version = assumptions_version

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "env": self.env,
            "assumptions_version": self.assumptions_version,
            "message": record.getMessage(),
        }
        for key, value in vars(record).items():
            if key not in _RESERVED and not key.startswith("_"):
                payload[key] = value
        ctx = getattr(record, "context", None)
        if isinstance(ctx, dict):
            payload.update(ctx)
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        # numpy scalars, enums and the like fall back to str
        return json.dumps(payload, default=str)


def get_logger(name: str) -> logging.Logger:
    """
    JSON logger on stderr; stdout stays free for CLI output.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(JsonLogFormatter(env=config.ENV, assumptions_version=config.ASSUMPTIONS_VERSION))
        logger.addHandler(handler)
        logger.setLevel(config.LOG_LEVEL.upper())
        logger.propagate = False
    return logger
