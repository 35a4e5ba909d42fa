import json
import logging
import sys
import time

from .config import config

_CORE_KEYS = ("ts", "level", "logger", "message")


class JsonLogFormatter(logging.Formatter):
    def format(self, record):
        payload = {
            "ts": time.time(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        # structured fields from extra=ctx(...); never overwrite the core keys
        context = getattr(record, "context", None)
        if isinstance(context, dict):
            for key, value in context.items():
                payload[f"ctx_{key}" if key in _CORE_KEYS else key] = value
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        # property ids, dates and the like go out as strings
        return json.dumps(payload, default=str)


def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JsonLogFormatter())
        logger.addHandler(handler)
        logger.setLevel(config.LOG_LEVEL)
        logger.propagate = False
    return logger


def ctx(**fields) -> dict:
    # logger.info("expense_overrides_saved", extra=ctx(property_id=3))
    return {"context": fields}
