# projects_api/logger.py
# JSON logging for the Projects API. Import once so handlers attach.

import json
import logging
import os
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler

from projects_api.config import LOG_LEVEL

REQUEST_FIELDS = ("request_id", "method", "path", "status_code", "duration_ms", "user_id")


def json_formatter(record: logging.LogRecord) -> str:
    log = {
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "level": record.levelname,
        "service": "projects-api",
        "logger": record.name,
        "message": record.getMessage(),
    }

    for field in REQUEST_FIELDS:
        if hasattr(record, field):
            log[field] = getattr(record, field)

    if record.exc_info:
        log["exc_info"] = logging.Formatter().formatException(record.exc_info)

    return json.dumps(log)


class JSONFormatter(logging.Formatter):
    def format(self, record):
        return json_formatter(record)


logger = logging.getLogger("projects_api")
logger.setLevel(LOG_LEVEL)
logger.propagate = False

if not logger.handlers:
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(JSONFormatter())
    logger.addHandler(console_handler)

    # Optional rotating file output
    log_file = os.environ.get("LOG_FILE")
    if log_file:
        file_handler = RotatingFileHandler(log_file, maxBytes=5 * 1024 * 1024, backupCount=5)
        file_handler.setFormatter(JSONFormatter())
        logger.addHandler(file_handler)


def get_logger(name: str) -> logging.Logger:
    """Child logger under the projects_api namespace."""
    return logger.getChild(name)
