"""File-system adapter: encoding-aware reads, whole-file writes."""

from pathlib import Path

from charset_normalizer import from_bytes

# Common subtitle encodings tried before charset detection
_PREFERRED_ENCODINGS = ("utf-8-sig",)

_FORBIDDEN_FILENAME_CHARS = set('<>:/\\\t\n\r\b\a"|?*')


def decode_subtitle_bytes(data: bytes) -> str:
    """Decode subtitle bytes, detecting the encoding when not UTF-8."""
    for encoding in _PREFERRED_ENCODINGS:
        try:
            return data.decode(encoding)
        except UnicodeDecodeError:
            continue
    best = from_bytes(data).best()
    if best is None:
        return data.decode("utf-8", errors="replace")
    return str(best)


def read_subtitle_text(path: Path) -> str:
    """Read a whole subtitle file as text with encoding auto-detection."""
    return decode_subtitle_bytes(path.read_bytes())


def write_bytes(path: Path, data: bytes) -> None:
    """Write ``data`` to ``path``, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)


def sanitize_filename(name: str) -> str:
    """Drop characters that are not allowed in file names."""
    return "".join(ch for ch in name if ch not in _FORBIDDEN_FILENAME_CHARS)
