"""Core business logic modules."""

from subtitledl.core.candidates import (
    MOVIE,
    TV,
    Episode,
    Production,
    Season,
    SubtitleRow,
)
from subtitledl.core.metadata import (
    DEFAULT_EXTRACTOR_CONFIG,
    ExtractorConfig,
    Metadata,
    extract_metadata,
)
from subtitledl.core.resolver import (
    CandidateTraits,
    Desired,
    Resolution,
    ResolutionError,
    ResolutionFailure,
    resolve,
    resolve_episode,
    resolve_production,
    resolve_season,
    resolve_subtitle_row,
)
from subtitledl.core.subtitle import Cue, CueStore
from subtitledl.core.timecode import (
    MalformedTimestampError,
    SubtitleParseError,
    Timecode,
)

__all__ = [
    "DEFAULT_EXTRACTOR_CONFIG",
    "MOVIE",
    "TV",
    "CandidateTraits",
    "Cue",
    "CueStore",
    "Desired",
    "Episode",
    "ExtractorConfig",
    "MalformedTimestampError",
    "Metadata",
    "Production",
    "Resolution",
    "ResolutionError",
    "ResolutionFailure",
    "Season",
    "SubtitleParseError",
    "SubtitleRow",
    "Timecode",
    "extract_metadata",
    "resolve",
    "resolve_episode",
    "resolve_production",
    "resolve_season",
    "resolve_subtitle_row",
]
