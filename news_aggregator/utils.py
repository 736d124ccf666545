"""Logging and small shared helpers."""

import html
import logging
import re
import sys
from datetime import datetime, timezone

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_TAG_RE = re.compile(r"<[^>]+>")


def setup_logging(level: str = "INFO") -> None:
    """Configure root logging for CLI and server runs."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        stream=sys.stdout,
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Return a module logger."""
    return logging.getLogger(name)


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def strip_html(text: str) -> str:
    """Drop tags, decode entities and collapse whitespace."""
    text = html.unescape(_TAG_RE.sub(" ", text or ""))
    return " ".join(text.split())
