"""Unit tests for Cue and CueStore edit operations."""

import pytest

from subtitledl.core.subtitle import Cue, CueStore
from subtitledl.core.timecode import Timecode


def at(ms: int) -> Timecode:
    timecode = Timecode.zero()
    timecode.shift_by(ms)
    return timecode


def make_cue(start_ms: int, end_ms: int, *lines: str) -> Cue:
    return Cue(start=at(start_ms), end=at(end_ms), lines=list(lines))


@pytest.mark.unit
class TestCue:
    """Test cases for Cue."""

    def test_text_joins_lines(self):
        cue = make_cue(0, 1000, "Line one", "Line two")
        assert cue.text == "Line one\nLine two"

    @pytest.mark.parametrize("lines", [[], [""], ["   "], ["", "\t"]])
    def test_is_empty(self, lines):
        assert make_cue(0, 1000, *lines).is_empty()

    def test_not_empty(self):
        assert not make_cue(0, 1000, " ", "x").is_empty()


@pytest.mark.unit
class TestCueStore:
    """Test cases for CueStore."""

    def test_sequence_protocol(self):
        store = CueStore([make_cue(0, 1000, "a"), make_cue(1000, 2000, "b")])

        assert len(store) == 2
        assert store[1].text == "b"
        assert [cue.text for cue in store] == ["a", "b"]

    def test_shift_scenario(self):
        """10,800 --> 12,000 shifted by +500 gives 11,300 --> 12,500."""
        store = CueStore([make_cue(10_800, 12_000, "Hi")])
        store.shift_by(500)

        assert store[0].start.to_srt() == "00:00:11,300"
        assert store[0].end.to_srt() == "00:00:12,500"

    def test_remove_empty_returns_count(self):
        store = CueStore(
            [
                make_cue(0, 1000, "keep"),
                make_cue(1000, 2000, "  "),
                make_cue(2000, 3000),
                make_cue(3000, 4000, "also keep"),
            ]
        )

        assert store.remove_empty() == 2
        assert [cue.text for cue in store] == ["keep", "also keep"]

    def test_remove_empty_is_idempotent(self):
        store = CueStore([make_cue(0, 1000, ""), make_cue(1000, 2000, "x")])
        store.remove_empty()

        assert store.remove_empty() == 0
        assert len(store) == 1

    def test_clamp_negative(self):
        """Cues ending before zero are dropped, straddling cues start at zero."""
        store = CueStore(
            [
                make_cue(0, 400, "gone"),
                make_cue(800, 2000, "clamped"),
                make_cue(3000, 4000, "kept"),
            ]
        )
        store.shift_by(-1000)

        assert store.clamp_negative() == 1
        assert [cue.text for cue in store] == ["clamped", "kept"]
        assert store[0].start == Timecode.zero()
        assert store[0].end.to_srt() == "00:00:01,000"
        assert store[1].start.to_srt() == "00:00:02,000"

    def test_strip_styling(self):
        store = CueStore(
            [
                make_cue(0, 1000, "<i>Hello</i>", '<font color="red">there</font>'),
                make_cue(1000, 2000, "plain"),
            ]
        )

        assert store.strip_styling() == 1
        assert store[0].lines == ["Hello", "there"]
        assert store[1].lines == ["plain"]

    def test_strip_styling_drops_tag_only_lines(self):
        store = CueStore([make_cue(0, 1000, "<i>", "Hello", "</i>")])

        assert store.strip_styling() == 1
        assert store[0].lines == ["Hello"]

    def test_strip_styling_keeps_unclosed_angle(self):
        store = CueStore([make_cue(0, 1000, "I <3 you")])

        assert store.strip_styling() == 0
        assert store[0].text == "I <3 you"
