import logging
import json
import sys
from datetime import datetime, timezone

# LogRecord attributes that are not 'extra' fields.
STANDARD_ATTRS = frozenset([
    'args', 'asctime', 'created', 'exc_info', 'exc_text',
    'filename',
    'funcName', 'levelname', 'levelno',
    'lineno',
    'module', 'msecs',
    'message', 'msg', 'name', 'pathname', 'process', 'processName',
    'relativeCreated', 'stack_info', 'thread', 'threadName'
])
OPTIONAL_ATTRS = frozenset(['taskName'])


class JsonFormatter(logging.Formatter):
    """Custom formatter to output logs in JSON format including 'extra' fields."""
    def format(self, record):
        log_record = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key in STANDARD_ATTRS:
                continue
            if key in OPTIONAL_ATTRS and value is None:
                continue
            log_record[key] = value

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)

        # Tuples such as McuSet and PinLocation are not JSON types; fall back to str.
        return json.dumps(log_record, default=str)


class TaskFilter(logging.Filter):
    """Injects the given task name as the taskName for all records."""
    def __init__(self, task_name: str):
        super().__init__()
        self.task_name = task_name

    def filter(self, record):
        record.taskName = self.task_name
        return True


def setup_logger(name: str, task_name: str = None) -> logging.Logger:
    """
    Configures and returns a logger with JSON formatting. Records go to stderr,
    keeping stdout free for generated output.
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(JsonFormatter())
        if task_name:
            handler.addFilter(TaskFilter(task_name))
        logger.addHandler(handler)
        # Default level
        logger.setLevel(logging.INFO)

    return logger
