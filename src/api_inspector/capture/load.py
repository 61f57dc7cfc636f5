"""Load captured exchanges from any supported source."""

import logging
from pathlib import Path

from api_inspector.config import Settings
from api_inspector.errors import CaptureFormatError

from .base import CapturedExchange
from .detect import detect_format
from .export import parse_export
from .har import parse_har
from .jsonl import parse_jsonl
from .remote import fetch_exchanges

logger = logging.getLogger(__name__)

FORMATS = ("auto", "har", "jsonl", "export")


def is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


def load_exchanges(source: str, fmt: str = "auto", settings: Settings | None = None) -> list[CapturedExchange]:
    """Load exchanges from a capture file or an inspector base URL."""
    settings = settings or Settings()

    if is_url(source):
        return fetch_exchanges(source, timeout=settings.timeout)

    file_path = Path(source)
    if not file_path.is_file():
        raise CaptureFormatError(f"Capture file not found: {file_path}")

    if fmt == "auto":
        fmt = detect_format(file_path)
        logger.debug("Detected %s format for %s", fmt, file_path)

    if fmt == "har":
        exchanges = parse_har(file_path)
    elif fmt == "jsonl":
        exchanges = parse_jsonl(file_path)
    elif fmt == "export":
        exchanges = parse_export(file_path)
    else:
        raise CaptureFormatError(f"Unsupported capture format: {fmt}")

    logger.info("Loaded %d exchanges from %s", len(exchanges), file_path)
    return exchanges
