"""Subtitle domain models."""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass, field

from subtitledl.core.timecode import Timecode

# <b> <i> <u> <c> <v> <ruby> <rt> <font ...> and their closing tags
_STYLING_TAG = re.compile(r"<[^<>]*>")


@dataclass
class Cue:
    """Single subtitle cue: a time range and the lines shown during it."""

    start: Timecode
    end: Timecode
    lines: list[str] = field(default_factory=list)

    @property
    def text(self) -> str:
        return "\n".join(self.lines)

    def is_empty(self) -> bool:
        return not self.text.strip()

    def shift_by(self, ms: int) -> None:
        self.start.shift_by(ms)
        self.end.shift_by(ms)


@dataclass
class CueStore:
    """Ordered collection of cues, in the order they appeared in the source.

    A store is owned by a single transform invocation; the edit methods
    mutate it in place.
    """

    cues: list[Cue] = field(default_factory=list)

    def __len__(self) -> int:
        """Return number of cues."""
        return len(self.cues)

    def __iter__(self) -> Iterator[Cue]:
        """Iterate over cues."""
        return iter(self.cues)

    def __getitem__(self, index: int) -> Cue:
        """Get cue by position (0-based)."""
        return self.cues[index]

    def append(self, cue: Cue) -> None:
        self.cues.append(cue)

    def shift_by(self, ms: int) -> None:
        """Shift the start and end of every cue by ``ms`` milliseconds."""
        for cue in self.cues:
            cue.shift_by(ms)

    def clamp_negative(self) -> int:
        """Repair cues pushed before zero by a backward shift.

        Cues that end before zero are dropped; cues that only start before
        zero keep their end and start at zero.

        Returns:
            Number of cues dropped
        """
        kept = []
        for cue in self.cues:
            if cue.end.is_negative():
                continue
            if cue.start.is_negative():
                cue.start = Timecode.zero()
            kept.append(cue)
        dropped = len(self.cues) - len(kept)
        self.cues = kept
        return dropped

    def remove_empty(self) -> int:
        """Drop every cue whose text is empty after trimming.

        Returns:
            Number of cues removed
        """
        kept = [cue for cue in self.cues if not cue.is_empty()]
        removed = len(self.cues) - len(kept)
        self.cues = kept
        return removed

    def strip_styling(self) -> int:
        """Remove markup tags such as ``<i>`` from cue lines.

        Lines left blank once their tags are gone are dropped, since a blank
        line inside a cue would end it on the next read.

        Returns:
            Number of cues whose text changed
        """
        changed = 0
        for cue in self.cues:
            stripped = [_STYLING_TAG.sub("", line) for line in cue.lines]
            stripped = [line for line in stripped if line.strip()]
            if stripped != cue.lines:
                cue.lines = stripped
                changed += 1
        return changed
