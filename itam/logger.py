"""
Application logging

Every module asks for `get_logger("itam.<area>")`. The loggers share one set
of handlers hung off the "itam" logger: a console stream, itam.log (INFO and
up) and errors.log (ERROR and up), all written as one JSON object per line.

Environment:
    LOG_DIR        directory for the log files (default ./logs)
    LOG_LEVEL      console level (default DEBUG)
    LOG_MAX_BYTES  rotation size per file (default 5 MB)
"""

import json
import logging
import os
import threading
from logging.handlers import RotatingFileHandler
from pathlib import Path

ROOT_LOGGER_NAME = "itam"

# Output key -> LogRecord attribute
DEFAULT_FIELDS = {
    "time": "asctime",
    "level": "levelname",
    "logger": "name",
    "module": "module",
    "function": "funcName",
    "line": "lineno",
    "message": "message",
}


class JsonFormatter(logging.Formatter):
    """Renders a record as a JSON object with the configured fields"""

    def __init__(self, fields: dict = None, datefmt: str = "%Y-%m-%dT%H:%M:%S"):
        super().__init__(datefmt=datefmt)
        self.fields = fields or {"message": "message"}

    def format(self, record) -> str:
        record.message = record.getMessage()
        if "asctime" in self.fields.values():
            record.asctime = self.formatTime(record, self.datefmt)

        payload = {key: getattr(record, attribute, None) for key, attribute in self.fields.items()}

        if record.exc_info and not record.exc_text:
            record.exc_text = self.formatException(record.exc_info)
        if record.exc_text:
            payload["exc_info"] = record.exc_text
        if record.stack_info:
            payload["stack_info"] = self.formatStack(record.stack_info)
        return json.dumps(payload, default=str)


class SingletonLogger:
    """Configures the "itam" handlers exactly once per process"""

    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    instance = super().__new__(cls)
                    instance._root = None
                    cls._instance = instance
        return cls._instance

    def get_logger(self, name: str = ROOT_LOGGER_NAME) -> logging.Logger:
        if self._root is None:
            with self._lock:
                if self._root is None:
                    self._root = self._configure()
        if not name or name == ROOT_LOGGER_NAME:
            return self._root
        if not name.startswith(ROOT_LOGGER_NAME + "."):
            name = f"{ROOT_LOGGER_NAME}.{name}"
        return logging.getLogger(name)

    @staticmethod
    def _configure() -> logging.Logger:
        root = logging.getLogger(ROOT_LOGGER_NAME)
        root.setLevel(logging.DEBUG)
        root.propagate = False
        root.handlers.clear()

        formatter = JsonFormatter(DEFAULT_FIELDS)
        log_dir = Path(os.environ.get("LOG_DIR", "logs"))
        log_dir.mkdir(parents=True, exist_ok=True)
        max_bytes = int(os.environ.get("LOG_MAX_BYTES", str(5 * 1024 * 1024)))

        for filename, level in (("itam.log", logging.INFO), ("errors.log", logging.ERROR)):
            handler = RotatingFileHandler(log_dir / filename, maxBytes=max_bytes, backupCount=3, encoding="utf-8")
            handler.setLevel(level)
            handler.setFormatter(formatter)
            root.addHandler(handler)

        console = logging.StreamHandler()
        console.setLevel(os.environ.get("LOG_LEVEL", "DEBUG").upper())
        console.setFormatter(formatter)
        root.addHandler(console)
        return root


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """Logger under "itam"; other names are nested beneath it"""
    return SingletonLogger().get_logger(name)
