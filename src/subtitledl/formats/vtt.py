"""WebVTT format parser and serializer."""

from __future__ import annotations

from subtitledl.core.subtitle import Cue, CueStore
from subtitledl.core.timecode import SubtitleParseError, Timecode
from subtitledl.formats.srt import (
    TIMING_SEPARATOR,
    MalformedTimingLineError,
    ParseResult,
    read_body,
    split_lines,
)

VTT_HEADER = "WEBVTT"

# Blocks that carry no cue and are skipped whole
_NON_CUE_BLOCKS = ("NOTE", "STYLE", "REGION")

# Whitespace around the arrow is optional
TIMING_ARROW = "-->"


class MissingHeaderError(SubtitleParseError):
    """Raised when WebVTT content does not start with the WEBVTT marker."""


def parse_vtt_timing_line(line: str) -> tuple[Timecode, Timecode]:
    """Parse ``[HH:]MM:SS.mmm --> [HH:]MM:SS.mmm [settings]``."""
    start_text, separator, rest = line.partition(TIMING_ARROW)
    if not separator or not rest.strip():
        raise MalformedTimingLineError(f"No timecode separator found: '{line}'")
    # Cue settings (position, align, ...) may follow the end timestamp
    end_text = rest.split()[0]
    return Timecode.parse_vtt(start_text), Timecode.parse_vtt(end_text)


def parse_vtt(content: str) -> ParseResult:
    """Parse WebVTT content into a cue store.

    Cue identifiers are dropped, as are NOTE, STYLE and REGION blocks.

    Args:
        content: WebVTT format string content

    Returns:
        ParseResult with the cue store and the error that stopped parsing, if any
    """
    result = ParseResult()
    lines = split_lines(content)

    header = next(lines, "")
    if not header.startswith(VTT_HEADER):
        result.error = MissingHeaderError("No WEBVTT marker found")
        return result
    # Header block runs until the first blank line
    read_body(lines)

    for line in lines:
        if not line.strip():
            continue
        if line.startswith(_NON_CUE_BLOCKS):
            read_body(lines)
            continue

        timing_line = line
        if TIMING_ARROW not in line:
            timing_line = next(lines, "")

        try:
            start, end = parse_vtt_timing_line(timing_line.strip())
        except SubtitleParseError as e:
            result.error = type(e)(f"Cue {len(result.store) + 1}: {e}")
            return result

        result.store.append(Cue(start=start, end=end, lines=read_body(lines)))

    return result


def serialize_vtt(store: CueStore) -> str:
    """Serialize a cue store to WebVTT.

    Args:
        store: Cues to serialize

    Returns:
        WebVTT format string starting with ``WEBVTT`` and a blank line
    """
    blocks = [f"{VTT_HEADER}\n\n"]
    for cue in store:
        timing = f"{cue.start.to_vtt()}{TIMING_SEPARATOR}{cue.end.to_vtt()}"
        body = "".join(f"{line}\n" for line in cue.lines)
        blocks.append(f"{timing}\n{body}\n")
    return "".join(blocks)
