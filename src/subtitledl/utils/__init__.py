"""Utility modules."""

from subtitledl.utils.config import Settings, get_settings
from subtitledl.utils.files import (
    decode_subtitle_bytes,
    read_subtitle_text,
    sanitize_filename,
    write_bytes,
)
from subtitledl.utils.logging import setup_logging

__all__ = [
    "Settings",
    "decode_subtitle_bytes",
    "get_settings",
    "read_subtitle_text",
    "sanitize_filename",
    "setup_logging",
    "write_bytes",
]
