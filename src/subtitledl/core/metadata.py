"""Infer title, year, season and episode from release names and search phrases."""

from __future__ import annotations

from dataclasses import dataclass, field

import structlog

logger = structlog.get_logger()

# Separators in preference order: ties go to the earlier one
SEPARATORS = (".", "-", " ")


@dataclass(frozen=True)
class ExtractorConfig:
    """Vocabularies and limits used by :func:`extract_metadata`."""

    release_types: frozenset[str] = frozenset(
        {
            "BluRay", "Blu-ray", "BDRip", "BrRip", "BRRip", "DVDRip", "DVDR",
            "WEB-DL", "WEBDL", "WEBRip", "WEB-Rip", "WEB",
            "HDTV", "DVBRip", "PPVRip",
        }
    )  # fmt: skip
    streaming_identifiers: frozenset[str] = frozenset(
        {"nf", "NF", "netflix", "Netflix"}
    )
    encoder_identifiers: frozenset[str] = frozenset(
        {"x264", "H264", "x265", "HEVC", "x266"}
    )
    min_year: int = 1900
    max_seasons: int = 50


DEFAULT_EXTRACTOR_CONFIG = ExtractorConfig()


@dataclass
class Metadata:
    """Canonical description of the requested production."""

    title: str = ""
    year: int | None = None
    season: int | None = None
    episode: int | None = None
    episodes: list[int] = field(default_factory=list)
    release_type: str = ""
    netflix: bool = False

    @property
    def is_movie(self) -> bool:
        return self.season is None and self.episode is None

    def __str__(self) -> str:
        parts = []
        if self.title:
            parts.append(f"Name: {self.title}")
        if self.release_type:
            parts.append(f"ReleaseType: {self.release_type}")
        if self.season is not None:
            parts.append(f"Season: {self.season}")
        if self.episode is not None:
            parts.append(f"Episode: {self.episode}")
        if self.year is not None:
            parts.append(f"Year: {self.year}")
        parts.append(f"Netflix: {'Yes' if self.netflix else 'No'}")
        return "{ " + ", ".join(parts) + " }"


def count_separate_occurrences(text: str, target: str) -> int:
    """Count runs of ``target`` in ``text``; adjacent repeats count once."""
    count = 0
    last_matched = False
    for char in text:
        if char != target:
            last_matched = False
            continue
        if not last_matched:
            count += 1
            last_matched = True
    return count


def get_year(token: str) -> int | None:
    """Return the year held by a ``YYYY`` or ``(YYYY)`` token, else None."""
    if is_enclosed(token):
        token = token[1:-1]
    if len(token) != 4 or not (token.isascii() and token.isdigit()):
        return None
    return int(token)


def is_enclosed(token: str, opening: str = "(", closing: str = ")") -> bool:
    return len(token) >= 2 and token[0] == opening and token[-1] == closing


def choose_separator(text: str) -> str | None:
    """Pick the most frequent separator, or None when none repeats."""
    counts = [count_separate_occurrences(text, sep) for sep in SEPARATORS]
    if max(counts) <= 1:
        return None
    # max() keeps the first of equal counts, which is the preferred separator
    best = max(range(len(SEPARATORS)), key=lambda i: counts[i])
    return SEPARATORS[best]


def _digits_end(text: str, start: int) -> int:
    end = start
    while end < len(text) and text[end].isascii() and text[end].isdigit():
        end += 1
    return end


def _parse_season_token(token: str, config: ExtractorConfig) -> int | None:
    """Parse a bare ``S01`` token."""
    if len(token) < 2 or token[0] not in "Ss":
        return None
    end = _digits_end(token, 1)
    if end != len(token) or end not in (2, 3):
        return None
    season = int(token[1:end])
    return season if season <= config.max_seasons else None


def _parse_episode_token(token: str) -> tuple[int, list[int]] | None:
    """Parse ``S01E05`` or a range such as ``S01E05-E07`` / ``S01E05-07``.

    Returns:
        Season and episode list, or None when the token has another shape
    """
    if len(token) < 4 or token[0] not in "Ss" or not token[1].isdigit():
        return None
    season_end = _digits_end(token, 1)
    if season_end >= len(token) or token[season_end] not in "Ee":
        return None
    if season_end not in (2, 3):
        logger.debug("season_token_skipped", token=token, reason="season digits")
        return None
    episode_end = _digits_end(token, season_end + 1)
    if episode_end == season_end + 1:
        logger.debug("season_token_skipped", token=token, reason="episode digits")
        return None

    season = int(token[1:season_end])
    first = int(token[season_end + 1 : episode_end])
    episodes = [first]

    rest = token[episode_end:]
    if rest.startswith("-"):
        rest = rest[1:].lstrip("Ee")
        last_end = _digits_end(rest, 0)
        if last_end > 0 and last_end == len(rest):
            last = int(rest)
            if last > first:
                episodes = list(range(first, last + 1))
    return season, episodes


def _parse_tag(token: str, meta: Metadata, config: ExtractorConfig) -> bool:
    """Classify release/streaming/quality/season tokens.

    Returns:
        True if the token was recognised as metadata
    """
    if token in config.release_types:
        meta.release_type = token
        return True
    if token in config.streaming_identifiers:
        meta.netflix = True
        return True
    if token.endswith("0p") or token in config.encoder_identifiers:
        return True
    season = _parse_season_token(token, config)
    if season is not None:
        meta.season = season
        return True
    return False


def _parse_separated(tokens: list[str], config: ExtractorConfig) -> Metadata:
    meta = Metadata()
    title: list[str] = []
    appending_title = True

    for index, token in enumerate(tokens):
        if not token:
            continue
        if is_enclosed(token):
            token = token[1:-1]
            appending_title = False

        # The first token always belongs to the title ("1917", "WEB Series")
        if index == 0:
            title.append(token)
            continue

        if _parse_tag(token, meta, config):
            appending_title = False
            continue

        parsed = _parse_episode_token(token)
        if parsed is not None:
            meta.season, meta.episodes = parsed
            meta.episode = meta.episodes[0]
            appending_title = False
            continue

        year = get_year(token)
        if year is not None and year >= config.min_year:
            meta.year = year
            appending_title = False
            continue

        if appending_title:
            title.append(token)

    meta.title = " ".join(title).strip()
    return meta


def _contained_release_type(text: str, config: ExtractorConfig) -> str:
    # Longest first so "WEB-DL" wins over "WEB"
    for release_type in sorted(config.release_types, key=lambda r: (-len(r), r)):
        if release_type in text:
            return release_type
    return ""


def _joined_season(text: str, index: int, config: ExtractorConfig) -> int | None:
    """Read a standalone ``S01`` starting at ``index``."""
    if index == 0 or text[index] not in "Ss" or text[index - 1].isalnum():
        return None
    end = _digits_end(text, index + 1)
    if end not in (index + 2, index + 3):
        return None
    if end < len(text) and text[end].isalnum():
        return None
    season = int(text[index + 1 : end])
    return season if season <= config.max_seasons else None


def _parse_joined(text: str, config: ExtractorConfig) -> Metadata:
    """Scan a name without a repeated separator, e.g. ``Dune (2021)``.

    A parenthesised year or release type and a standalone ``S<nn>`` end the
    title; any other text is kept as the title.
    """
    meta = Metadata()
    title: list[str] = []
    appending_title = True
    index = 0
    while index < len(text):
        char = text[index]
        if index > 0 and char == "(":
            closing = text.find(")", index + 1)
            if closing == -1:
                if appending_title:
                    title.append(text[index:])
                break
            inside = text[index + 1 : closing]
            year = get_year(inside)
            release_type = _contained_release_type(inside, config)
            if year is not None and year >= config.min_year and meta.year is None:
                meta.year = year
                appending_title = False
            elif release_type and not meta.release_type:
                meta.release_type = release_type
                appending_title = False
            index = closing + 1
            continue

        season = _joined_season(text, index, config) if meta.season is None else None
        if season is not None:
            meta.season = season
            appending_title = False
            index = _digits_end(text, index + 1)
            continue

        if appending_title:
            title.append(char)
        index += 1

    meta.title = "".join(title).strip()
    if not meta.release_type:
        meta.release_type = _contained_release_type(text[len(meta.title) :], config)
    return meta


def extract_metadata(
    text: str, config: ExtractorConfig = DEFAULT_EXTRACTOR_CONFIG
) -> Metadata:
    """Derive a Metadata record from a filename-like string or search phrase.

    The string is split on its dominant separator (``.``, ``-`` or space) and
    tokens are classified left to right. Recognised tags (release type,
    streaming service, resolution/encoder, season/episode, year) end the
    title; remaining tokens before the first tag form the title. Input
    without a repeated separator is scanned as one string: a parenthesised
    year or release type and a standalone ``S<nn>`` are picked out, the rest
    is the title.

    Never fails: unrecognised input yields a record with only a title.

    Args:
        text: Release name, filename stem or free text
        config: Vocabularies and limits to classify tokens with

    Returns:
        Metadata record
    """
    text = text.strip()
    separator = choose_separator(text)
    if separator is None:
        meta = _parse_joined(text, config)
    else:
        meta = _parse_separated(text.split(separator), config)
    logger.debug("metadata_extracted", text=text, separator=separator, meta=str(meta))
    return meta
