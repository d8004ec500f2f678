"""Deterministic selection of one candidate among ambiguous catalog entries.

The same ordered policy picks productions, seasons, episodes and subtitle
rows. Each candidate kind supplies a :class:`CandidateTraits` telling the
resolver how to read its name, year and popularity; capabilities a kind
lacks are simply skipped.

Policy, first hit wins:

1. keep candidates of the requested kind (fails when none remain)
2. a single remaining candidate is returned as is
3. when a year is wanted, at least one candidate must have that year or an
   unknown year (0), otherwise resolution fails
4. exact name and year, case-insensitive name and year, exact name,
   case-insensitive name
5. optional substring filter on the candidate filename
6. highest popularity, earliest wins ties; first candidate when all are zero
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Generic, TypeVar

import structlog

from subtitledl.core.candidates import Episode, Production, Season, SubtitleRow
from subtitledl.core.metadata import Metadata

logger = structlog.get_logger()

T = TypeVar("T")


class ResolutionFailure(StrEnum):
    """Why no candidate could be chosen."""

    NO_CANDIDATES_REMAIN = "no_candidates_remain"
    NO_YEAR_MATCH = "no_year_match"


class ResolutionError(Exception):
    """Raised by :meth:`Resolution.unwrap` when resolution failed."""

    def __init__(self, failure: ResolutionFailure, reason: str) -> None:
        self.failure = failure
        self.reason = reason
        super().__init__(reason)


@dataclass(frozen=True)
class Desired:
    """What the caller is looking for. A year of 0 means any year."""

    title: str = ""
    year: int = 0

    @classmethod
    def from_metadata(cls, meta: Metadata) -> Desired:
        return cls(title=meta.title, year=meta.year or 0)


@dataclass(frozen=True)
class CandidateTraits(Generic[T]):
    """How to read the fields the resolver needs from one candidate kind."""

    matches_kind: Callable[[T], bool]
    name: Callable[[T], str] | None = None
    year: Callable[[T], int] | None = None
    popularity: Callable[[T], float] | None = None
    filename: Callable[[T], str] | None = None


@dataclass
class Resolution(Generic[T]):
    """Outcome of a resolution: either a candidate and the rule that chose it,
    or a failure kind with a reason."""

    candidate: T | None = None
    rule: str = ""
    failure: ResolutionFailure | None = None
    reason: str = ""
    remaining: list[T] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.failure is None

    def unwrap(self) -> T:
        if self.failure is not None or self.candidate is None:
            raise ResolutionError(
                self.failure or ResolutionFailure.NO_CANDIDATES_REMAIN, self.reason
            )
        return self.candidate


def _name_passes(
    desired: Desired, traits: CandidateTraits[T]
) -> list[tuple[str, Callable[[T], bool]]]:
    if traits.name is None or not desired.title:
        return []
    name = traits.name
    wanted = desired.title
    wanted_folded = wanted.casefold()
    passes: list[tuple[str, Callable[[T], bool]]] = []
    if traits.year is not None and desired.year:
        year = traits.year
        passes += [
            (
                "exact_name_year",
                lambda c: name(c) == wanted and year(c) == desired.year,
            ),
            (
                "name_year",
                lambda c: name(c).casefold() == wanted_folded
                and year(c) == desired.year,
            ),
        ]
    passes += [
        ("exact_name", lambda c: name(c) == wanted),
        ("name", lambda c: name(c).casefold() == wanted_folded),
    ]
    return passes


def _filter_contains(
    candidates: list[T], contains: str, traits: CandidateTraits[T]
) -> list[T]:
    if not contains or traits.filename is None:
        return candidates
    filename = traits.filename
    needle = contains.casefold()
    matching = [c for c in candidates if needle in filename(c).casefold()]
    if not matching:
        logger.info("contains_filter_skipped", contains=contains, count=len(candidates))
        return candidates
    return matching


def _most_popular(candidates: list[T], traits: CandidateTraits[T]) -> tuple[T, str]:
    if traits.popularity is not None:
        popularity = traits.popularity
        best = candidates[0]
        best_score = 0.0
        for candidate in candidates:
            score = popularity(candidate)
            if score > best_score:
                best, best_score = candidate, score
        if best_score > 0:
            return best, "popularity"
    return candidates[0], "first"


def resolve(
    candidates: Sequence[T],
    desired: Desired,
    traits: CandidateTraits[T],
    *,
    contains: str = "",
) -> Resolution[T]:
    """Choose exactly one candidate, or report why none can be chosen.

    Args:
        candidates: Candidates in catalog order
        desired: Wanted title and year
        traits: Accessors for the candidate kind
        contains: Case-insensitive text the candidate filename should contain

    Returns:
        Resolution holding the chosen candidate or the failure
    """
    remaining = [c for c in candidates if traits.matches_kind(c)]
    if not remaining:
        return Resolution(
            failure=ResolutionFailure.NO_CANDIDATES_REMAIN,
            reason=f"No candidates remained after filtering {len(candidates)}",
        )
    if len(remaining) == 1:
        return Resolution(candidate=remaining[0], rule="single", remaining=remaining)

    if desired.year and traits.year is not None:
        year = traits.year
        if not any(year(c) in (0, desired.year) for c in remaining):
            return Resolution(
                failure=ResolutionFailure.NO_YEAR_MATCH,
                reason=(
                    f"No candidate found where year is matching, given: {desired.year}"
                ),
                remaining=remaining,
            )

    for rule, matches in _name_passes(desired, traits):
        for candidate in remaining:
            if matches(candidate):
                return Resolution(candidate=candidate, rule=rule, remaining=remaining)

    narrowed = _filter_contains(remaining, contains, traits)
    candidate, rule = _most_popular(narrowed, traits)
    return Resolution(candidate=candidate, rule=rule, remaining=remaining)


def production_traits(kind: str) -> CandidateTraits[Production]:
    return CandidateTraits(
        matches_kind=lambda p: p.kind == kind,
        name=lambda p: p.name,
        year=lambda p: p.year,
        popularity=lambda p: p.total,
    )


def subtitle_row_traits(extension: str = "") -> CandidateTraits[SubtitleRow]:
    extension = extension.lower().lstrip(".")
    return CandidateTraits(
        # Rows of unknown format may still be of the wanted format
        matches_kind=lambda r: not extension or r.format in ("", extension),
        popularity=lambda r: r.downloads,
        filename=lambda r: r.base_filename or r.title,
    )


def resolve_production(
    productions: Sequence[Production], desired: Desired, kind: str
) -> Resolution[Production]:
    resolution = resolve(productions, desired, production_traits(kind))
    logger.debug(
        "production_resolution",
        rule=resolution.rule,
        failure=resolution.failure,
        candidates=len(productions),
    )
    return resolution


def resolve_subtitle_row(
    rows: Sequence[SubtitleRow], *, extension: str = "", contains: str = ""
) -> Resolution[SubtitleRow]:
    return resolve(rows, Desired(), subtitle_row_traits(extension), contains=contains)


def resolve_season(seasons: Sequence[Season], number: int) -> Resolution[Season]:
    traits: CandidateTraits[Season] = CandidateTraits(
        matches_kind=lambda s: s.number == number,
        popularity=lambda s: len(s.episodes),
    )
    return resolve(seasons, Desired(), traits)


def resolve_episode(
    episodes: Sequence[Episode], number: int, *, desired: Desired | None = None
) -> Resolution[Episode]:
    traits: CandidateTraits[Episode] = CandidateTraits(
        matches_kind=lambda e: e.number == number,
        name=lambda e: e.name,
        popularity=lambda e: e.downloads,
    )
    return resolve(episodes, desired or Desired(), traits)
