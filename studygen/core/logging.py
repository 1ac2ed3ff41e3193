import logging
import os
from typing import Any, Optional


DEFAULT_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
DEFAULT_FORMAT = (
    "%(asctime)s | %(levelname)s | %(name)s | [%(session)s:%(artifact)s] %(message)s"
)

# Record fields every formatter may reference
CONTEXT_FIELDS = ("session", "artifact")

# Client libraries that log each request at INFO
_NOISY_LOGGERS = ("httpx", "httpcore", "google_genai", "openai")


class ContextFilter(logging.Filter):
    """Fills missing context fields with "-" so the format never raises."""

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        for name in CONTEXT_FIELDS:
            if not hasattr(record, name):
                setattr(record, name, "-")
        return True


def log_context(session: Optional[str] = None, artifact: Any = None) -> dict[str, str]:
    """Build the ``extra`` mapping for a log call; enums log by value."""
    return {
        "session": session or "-",
        "artifact": getattr(artifact, "value", artifact) or "-",
    }


def setup_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> None:
    """Initialize the root logger with one handler and the context filter."""
    resolved_level = getattr(logging, (level or DEFAULT_LEVEL), logging.INFO)
    formatter = logging.Formatter(fmt or DEFAULT_FORMAT)

    root = logging.getLogger()
    root.setLevel(resolved_level)

    # Clear existing handlers to avoid duplicate logs in reloads
    for h in list(root.handlers):
        root.removeHandler(h)

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    handler.addFilter(ContextFilter())
    root.addHandler(handler)

    if resolved_level <= logging.INFO:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a module logger; ensure root is initialized."""
    if not logging.getLogger().handlers:
        setup_logging()
    return logging.getLogger(name)
