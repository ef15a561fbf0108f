"""Logging for the generation flows.

Configured via environment variables:
- LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (default: INFO)
- LOG_TYPE: text, json (default: text)

Flows pass their public name as ``extra={"flow": ...}``; both formatters
render it when present.
"""

import json
import logging
import os
import sys
from typing import Any

# Record attributes copied into the output when a caller sets them via ``extra``
CONTEXT_FIELDS = ("flow",)

# Loggers of third-party libraries that log every Gemini request at INFO
QUIET_LOGGERS = ("google_genai", "httpx")


def _context(record: logging.LogRecord) -> dict[str, Any]:
    return {field: getattr(record, field) for field in CONTEXT_FIELDS if hasattr(record, field)}


class JSONFormatter(logging.Formatter):
    """One JSON object per line, for log shipping."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **_context(record),
        }
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        # Ingredient and recipe names are often Spanish; keep them readable
        return json.dumps(log_data, ensure_ascii=False)


class RichTextFormatter(logging.Formatter):
    """Colored single-line output for terminals, tagged with the flow name."""

    # levelname -> (ANSI color, icon)
    LEVEL_STYLES = {
        "DEBUG": ("\033[36m", "🔍"),
        "INFO": ("\033[32m", "🍳"),
        "WARNING": ("\033[33m", "⚠️"),
        "ERROR": ("\033[31m", "❌"),
        "CRITICAL": ("\033[31m", "❌"),
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color, icon = self.LEVEL_STYLES.get(record.levelname, ("", ""))
        tags = "".join(f"[{value}] " for value in _context(record).values())
        timestamp = self.formatTime(record, "%Y-%m-%d %H:%M:%S")

        line = f"{color}{icon} {timestamp} {record.levelname:<8} {record.name:<20} {tags}{record.getMessage()}{self.RESET}"
        if record.exc_info:
            line += f"\n{self.formatException(record.exc_info)}"
        return line


def get_logger(name: str) -> logging.Logger:
    """Return the logger called ``name``, attaching a stdout handler on first use.

    Level and format come from LOG_LEVEL / LOG_TYPE; an unknown level falls
    back to INFO.
    """
    logger_instance = logging.getLogger(name)
    if logger_instance.handlers:
        return logger_instance

    log_level = getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)
    use_json = os.getenv("LOG_TYPE", "text").lower() == "json"

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(JSONFormatter() if use_json else RichTextFormatter())

    logger_instance.setLevel(log_level)
    logger_instance.addHandler(handler)
    return logger_instance


logger = get_logger("pocket_chef")

for _name in QUIET_LOGGERS:
    logging.getLogger(_name).setLevel(logging.WARNING)
