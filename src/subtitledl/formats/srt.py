"""SRT format parser and serializer."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

from subtitledl.core.subtitle import Cue, CueStore
from subtitledl.core.timecode import SubtitleParseError, Timecode

TIMING_SEPARATOR = " --> "

# HH:MM:SS,mmm --> HH:MM:SS,mmm
_START_SLICE = slice(0, 12)
_END_SLICE = slice(17, 29)
_MIN_TIMING_LENGTH = 29


class MalformedTimingLineError(SubtitleParseError):
    """Raised when a cue timing line does not follow the fixed layout."""


class MalformedIndexLineError(SubtitleParseError):
    """Raised when a cue does not start with a numeric index line."""


@dataclass
class ParseResult:
    """Cues parsed from a stream, plus the error that stopped parsing early.

    When ``error`` is set the store holds every cue read before the failure,
    so callers can decide whether a partial result is usable.
    """

    store: CueStore = field(default_factory=CueStore)
    error: SubtitleParseError | None = None

    @property
    def complete(self) -> bool:
        return self.error is None


def split_lines(content: str) -> Iterator[str]:
    """Yield lines without terminators, dropping a leading byte order mark."""
    lines = content.splitlines()
    if lines and lines[0].startswith("\ufeff"):
        lines[0] = lines[0][1:]
    yield from lines


def parse_timing_line(line: str) -> tuple[Timecode, Timecode]:
    """Parse ``HH:MM:SS,mmm --> HH:MM:SS,mmm`` by its fixed offsets.

    Raises:
        MalformedTimingLineError: If the line is too short or lacks the separator
        MalformedTimestampError: If either timestamp is malformed
    """
    if len(line) < _MIN_TIMING_LENGTH or TIMING_SEPARATOR not in line:
        raise MalformedTimingLineError(
            f"Invalid timing line '{line}', "
            "expected 'HH:MM:SS,mmm --> HH:MM:SS,mmm'"
        )
    start = Timecode.parse(line[_START_SLICE])
    end = Timecode.parse(line[_END_SLICE])
    return start, end


def read_body(lines: Iterator[str]) -> list[str]:
    """Collect cue text lines up to a blank line or the end of the stream."""
    body = []
    for line in lines:
        if not line.strip():
            break
        body.append(line)
    return body


def parse_srt(content: str) -> ParseResult:
    """Parse SRT content into a cue store.

    Each cue is read as index line, timing line and text lines terminated by
    a blank line. Blank lines between cues are tolerated. A malformed index
    or timing line stops parsing; the cues read so far are kept.

    Args:
        content: SRT format string content

    Returns:
        ParseResult with the cue store and the error that stopped parsing, if any
    """
    result = ParseResult()
    lines = split_lines(content)

    for line in lines:
        index_line = line.strip()
        if not index_line:
            continue
        if not (index_line.isascii() and index_line.isdigit()):
            result.error = MalformedIndexLineError(
                f"Cue {len(result.store) + 1}: invalid index '{index_line}', "
                "must be integer"
            )
            return result

        timing_line = next(lines, None)
        if timing_line is None:
            result.error = MalformedTimingLineError(
                f"Cue {len(result.store) + 1}: expected timing line, "
                "got end of stream"
            )
            return result

        try:
            start, end = parse_timing_line(timing_line.strip())
        except SubtitleParseError as e:
            result.error = type(e)(f"Cue {len(result.store) + 1}: {e}")
            return result

        result.store.append(Cue(start=start, end=end, lines=read_body(lines)))

    return result


def serialize_srt(store: CueStore) -> str:
    """Serialize a cue store to SRT, numbering cues from 1.

    Every cue is written as ordinal, timing line, text lines and a blank line.

    Args:
        store: Cues to serialize

    Returns:
        SRT format string
    """
    blocks = []
    for ordinal, cue in enumerate(store, start=1):
        timing = f"{cue.start.to_srt()}{TIMING_SEPARATOR}{cue.end.to_srt()}"
        body = "".join(f"{line}\n" for line in cue.lines)
        blocks.append(f"{ordinal}\n{timing}\n{body}\n")
    return "".join(blocks)
