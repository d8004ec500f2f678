"""Exact, carry-propagating subtitle timestamps."""

from __future__ import annotations

from dataclasses import dataclass

_MS_PER_SECOND = 1000
_SECONDS_PER_MINUTE = 60
_MINUTES_PER_HOUR = 60


class SubtitleParseError(ValueError):
    """Base exception for malformed subtitle input."""


class MalformedTimestampError(SubtitleParseError):
    """Raised when a timestamp string cannot be split into numeric groups."""


def _is_digits(text: str) -> bool:
    return bool(text) and text.isascii() and text.isdigit()


@dataclass
class Timecode:
    """A point in time as hours, minutes, seconds and milliseconds.

    Minutes, seconds and milliseconds stay normalized after every shift.
    Hours are never reduced modulo anything and may become negative when a
    backward shift underflows; callers decide what to do with such values.
    """

    hours: int = 0
    minutes: int = 0
    seconds: int = 0
    milliseconds: int = 0

    @classmethod
    def zero(cls) -> Timecode:
        return cls(0, 0, 0, 0)

    @classmethod
    def parse(cls, text: str) -> Timecode:
        """Parse an SRT timestamp of the form ``HH:MM:SS,mmm``.

        Args:
            text: Timestamp string

        Returns:
            Parsed Timecode

        Raises:
            MalformedTimestampError: If the string does not split into three
                colon groups and two comma groups, or a group is not numeric
        """
        groups = text.split(":")
        if len(groups) != 3:
            raise MalformedTimestampError(
                f"Invalid timestamp '{text}', expected 3 colon-separated groups"
            )
        hours, minutes, rest = groups
        sub_groups = rest.split(",")
        if len(sub_groups) != 2:
            raise MalformedTimestampError(
                f"Invalid timestamp '{text}', expected seconds,milliseconds"
            )
        seconds, millis = sub_groups
        for name, value in (
            ("hours", hours),
            ("minutes", minutes),
            ("seconds", seconds),
            ("milliseconds", millis),
        ):
            if not _is_digits(value):
                raise MalformedTimestampError(
                    f"Invalid timestamp '{text}', failed to parse {name}"
                )
        return cls(int(hours), int(minutes), int(seconds), int(millis))

    @classmethod
    def parse_vtt(cls, text: str) -> Timecode:
        """Parse a WebVTT timestamp, ``[HH:]MM:SS.mmm`` (hours optional)."""
        base, dot, millis = text.strip().rpartition(".")
        if not dot:
            raise MalformedTimestampError(
                f"Invalid timestamp '{text}', fraction must follow a dot"
            )
        groups = base.split(":")
        if len(groups) == 2:
            groups.insert(0, "0")
        if len(groups) != 3:
            raise MalformedTimestampError(
                f"Invalid timestamp '{text}', expected 2 or 3 colon-separated groups"
            )
        if not all(_is_digits(group) for group in [*groups, millis]):
            raise MalformedTimestampError(
                f"Invalid timestamp '{text}', groups must be numeric"
            )
        hours, minutes, seconds = groups
        return cls(int(hours), int(minutes), int(seconds), int(millis))

    @property
    def total_milliseconds(self) -> int:
        return (
            (self.hours * _MINUTES_PER_HOUR + self.minutes) * _SECONDS_PER_MINUTE
            + self.seconds
        ) * _MS_PER_SECOND + self.milliseconds

    def is_negative(self) -> bool:
        return (
            self.hours < 0
            or self.minutes < 0
            or self.seconds < 0
            or self.milliseconds < 0
        )

    def shift_by(self, ms: int) -> None:
        """Move this timecode by ``ms`` milliseconds (negative moves back).

        Overflow and underflow carry upward through seconds and minutes into
        hours using floor division, so sub-units always land in range.
        """
        self.milliseconds += ms
        carry, self.milliseconds = divmod(self.milliseconds, _MS_PER_SECOND)
        self.seconds += carry
        carry, self.seconds = divmod(self.seconds, _SECONDS_PER_MINUTE)
        self.minutes += carry
        carry, self.minutes = divmod(self.minutes, _MINUTES_PER_HOUR)
        self.hours += carry

    def to_srt(self) -> str:
        return (
            f"{self.hours:02d}:{self.minutes:02d}:{self.seconds:02d}"
            f",{self.milliseconds:03d}"
        )

    def to_vtt(self) -> str:
        return (
            f"{self.hours:02d}:{self.minutes:02d}:{self.seconds:02d}"
            f".{self.milliseconds:03d}"
        )

    def __str__(self) -> str:
        return self.to_srt()
