import json
import logging
import os
import sys

_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s | extras=%(extras)s"


def get_logger(name: str) -> logging.LoggerAdapter:
    base = logging.getLogger(name)
    if not base.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(fmt=_FORMAT))
        base.addHandler(handler)
        base.setLevel(os.getenv("LOG_LEVEL", "INFO").upper())
        base.propagate = False
    # extras must always be present or the formatter fails
    return logging.LoggerAdapter(base, extra={"extras": "{}"})


def with_extras(logger, **extras) -> logging.LoggerAdapter:
    base = logger.logger if hasattr(logger, "logger") else logger
    return logging.LoggerAdapter(base, extra={"extras": json.dumps(extras, ensure_ascii=False, default=str)})
