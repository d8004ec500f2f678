"""Subtitle format handlers."""

from enum import StrEnum

from subtitledl.core.subtitle import CueStore
from subtitledl.formats.srt import (
    MalformedIndexLineError,
    MalformedTimingLineError,
    ParseResult,
    parse_srt,
    serialize_srt,
)
from subtitledl.formats.vtt import (
    VTT_HEADER,
    MissingHeaderError,
    parse_vtt,
    serialize_vtt,
)


class SubtitleFormat(StrEnum):
    """Subtitle containers that can be read and written."""

    SRT = "srt"
    VTT = "vtt"


class UnsupportedFormatError(ValueError):
    """Raised when a subtitle format is unknown or cannot be detected."""


# Extensions whose content has to be sniffed
_AMBIGUOUS_EXTENSIONS = {"txt", "sub"}


def detect_format(content: str) -> SubtitleFormat | None:
    """Guess the container from the first line of ``content``."""
    first_line = next(iter(content.lstrip("\ufeff").splitlines()), "").strip()
    if first_line == "1":
        return SubtitleFormat.SRT
    if first_line.startswith(VTT_HEADER):
        return SubtitleFormat.VTT
    return None


def resolve_format(extension: str, content: str = "") -> SubtitleFormat:
    """Map a file extension to a format, sniffing content for .txt/.sub files.

    Raises:
        UnsupportedFormatError: If the format is unknown or undetectable
    """
    extension = extension.lower().lstrip(".")
    if extension in _AMBIGUOUS_EXTENSIONS:
        detected = detect_format(content)
        if detected is None:
            raise UnsupportedFormatError(
                "Unable to detect subtitle format, append the extension to the file"
            )
        return detected
    try:
        return SubtitleFormat(extension)
    except ValueError as e:
        raise UnsupportedFormatError(f"Unsupported extension: {extension}") from e


def parse(content: str, fmt: SubtitleFormat) -> ParseResult:
    if fmt is SubtitleFormat.VTT:
        return parse_vtt(content)
    return parse_srt(content)


def serialize(store: CueStore, fmt: SubtitleFormat) -> bytes:
    """Serialize ``store`` to ``fmt`` as UTF-8 bytes."""
    if fmt is SubtitleFormat.VTT:
        return serialize_vtt(store).encode("utf-8")
    return serialize_srt(store).encode("utf-8")


__all__ = [
    "MalformedIndexLineError",
    "MalformedTimingLineError",
    "MissingHeaderError",
    "ParseResult",
    "SubtitleFormat",
    "UnsupportedFormatError",
    "detect_format",
    "parse",
    "parse_srt",
    "parse_vtt",
    "resolve_format",
    "serialize",
    "serialize_srt",
    "serialize_vtt",
]
