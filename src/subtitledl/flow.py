"""End-to-end flow: find the production, pick a subtitle, download, transform."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import TextIO

import structlog

from subtitledl.catalog import (
    CatalogClient,
    CatalogError,
    DownloadError,
    OpenSubtitlesCatalog,
    SubDLCatalog,
    SubDLQuery,
    fetch_subtitle_files,
    group_seasons,
)
from subtitledl.core.candidates import MOVIE, TV, Production, Season, SubtitleRow
from subtitledl.core.metadata import Metadata
from subtitledl.core.resolver import (
    Desired,
    ResolutionError,
    resolve_episode,
    resolve_production,
    resolve_season,
    resolve_subtitle_row,
)
from subtitledl.core.transform import (
    EmptySubtitleError,
    TransformOptions,
    TransformReport,
    transform_file,
)
from subtitledl.formats import UnsupportedFormatError
from subtitledl.utils.config import Settings
from subtitledl.utils.files import sanitize_filename

logger = structlog.get_logger()

SEASON_SEPARATOR = "-" * 46


class FlowError(Exception):
    """Raised when the flow cannot continue; the message is user-facing."""


@dataclass
class FlowRequest:
    """What to look for and what to do with the result."""

    title: str = ""
    year: int = 0
    season: int | None = None
    episodes: list[int] = field(default_factory=list)
    language: str = "all"
    extension_filter: str = ""
    release_filter: str = ""
    output_dir: Path = Path(".")
    subtitle_path: Path | None = None
    list_seasons: bool = False
    options: TransformOptions = field(default_factory=TransformOptions)

    @property
    def is_movie(self) -> bool:
        return self.season is None and not self.episodes

    @property
    def desired(self) -> Desired:
        return Desired(title=self.title, year=self.year)

    def apply_metadata(self, meta: Metadata) -> None:
        """Fill fields not given explicitly from extracted metadata."""
        if not self.title:
            self.title = meta.title
        if not self.year and meta.year:
            self.year = meta.year
        if self.season is None and meta.season is not None:
            self.season = meta.season
        if not self.episodes and meta.episodes:
            self.episodes = list(meta.episodes)
        if not self.release_filter:
            self.release_filter = meta.release_type


@dataclass
class FlowResult:
    """Files the flow produced."""

    downloaded: list[Path] = field(default_factory=list)
    reports: list[TransformReport] = field(default_factory=list)


def format_season_listing(seasons: list[Season]) -> str:
    lines = []
    for season in seasons:
        pack = " [PACK AVAILABLE]" if season.has_pack else ""
        lines.append(f"Season [{season.number}] Episodes: {len(season.episodes)}{pack}")
        for episode in season.episodes:
            release = episode.rows[0].base_filename if episode.rows else ""
            lines.append(f"  {episode.number}. {release}")
        lines.append(SEASON_SEPARATOR)
    return "\n".join(lines)


class SubtitleFlow:
    """Runs one request against the catalogs."""

    def __init__(
        self,
        request: FlowRequest,
        settings: Settings,
        client: CatalogClient,
        *,
        out: TextIO | None = None,
    ) -> None:
        self.request = request
        self.settings = settings
        self.client = client
        self.opensubtitles = OpenSubtitlesCatalog(client)
        self.subdl = SubDLCatalog(client)
        self.out = out or sys.stdout
        self.log = logger.bind(title=request.title)

    def execute(self) -> FlowResult:
        """Run the request.

        Raises:
            FlowError: If any step fails in a way the user must know about
        """
        result = FlowResult()
        if self.request.subtitle_path is not None:
            if not self.request.options.has_edits() and (
                self.request.options.target_format is None
            ):
                raise FlowError(
                    "No modifications requested for the subtitle file "
                    "(use --shift, --to, --remove-empty or --strip-styling)"
                )
            report = self._process(self.request.subtitle_path)
            if report is not None:
                result.reports.append(report)
            return result

        if not self.request.title:
            raise FlowError("A title is required to search for subtitles")

        production = self._choose_production()
        self.log.info("production_selected", production=str(production))

        for rows, name in self._subtitle_targets(production):
            row = self._choose_row(rows)
            paths = self._download(row, name)
            result.downloaded.extend(paths)

        if not self._modifications_requested():
            self.log.info("finished", files=len(result.downloaded))
            return result

        self.log.info("processing", files=len(result.downloaded))
        for path in result.downloaded:
            report = self._process(path)
            if report is not None:
                result.reports.append(report)
        return result

    def _modifications_requested(self) -> bool:
        options = self.request.options
        return options.has_edits() or options.target_format is not None

    def _search(self, query: SubDLQuery):
        try:
            return self.subdl.search(query)
        except CatalogError as e:
            raise FlowError(f"Subtitle search failed: {e}") from e

    def _query(self, **kwargs) -> SubDLQuery:
        try:
            api_key = self.settings.require_subdl_api_key()
        except ValueError as e:
            raise FlowError(str(e)) from e
        return SubDLQuery(
            api_key=api_key,
            language=self.request.language,
            **kwargs,
        )

    def _choose_production(self) -> Production:
        request = self.request
        kind = MOVIE if request.is_movie else TV
        productions = self.opensubtitles.suggest(request.title)
        if not productions:
            self.log.info("suggestions_empty_falling_back_to_search")
            query = self._query(film_name=request.title, year=request.year, type=kind)
            productions = self._search(query).productions
            if not productions:
                raise FlowError(f"No productions found for '{request.title}'")

        resolution = resolve_production(productions, request.desired, kind)
        try:
            production = resolution.unwrap()
        except ResolutionError as e:
            for candidate in resolution.remaining:
                self.log.info("production_candidate", production=str(candidate))
            raise FlowError(f"{e.failure}: {e.reason}") from e
        self.log.debug("production_rule", rule=resolution.rule)
        return production

    def _subtitle_targets(self, production: Production):
        """Yield (rows, file name) for the movie or for each requested episode."""
        request = self.request
        if request.is_movie:
            query = self._query(
                film_name=production.name, year=production.year, type=MOVIE
            )
            yield self._search(query).rows, None
            return

        season_number = request.season if request.season is not None else 1
        single_episode = request.episodes[0] if len(request.episodes) == 1 else None
        query = self._query(
            film_name=production.name,
            year=production.year,
            type=TV,
            season=season_number,
            episode=single_episode,
        )
        seasons = group_seasons(self._search(query).rows)
        if request.list_seasons:
            print(format_season_listing(seasons), file=self.out)

        try:
            season = resolve_season(seasons, season_number).unwrap()
        except ResolutionError as e:
            raise FlowError(
                f"Season {season_number} wasn't found in {len(seasons)} seasons"
            ) from e

        if not request.episodes:
            if not season.has_pack:
                raise FlowError(f"Season {season.number} has no pack download")
            pack = SubtitleRow(title=production.name, download_url=season.pack_url)
            yield [pack], None
            return

        for number in request.episodes:
            try:
                episode = resolve_episode(season.episodes, number).unwrap()
            except ResolutionError as e:
                raise FlowError(
                    f"Episode {number} wasn't found in "
                    f"{len(season.episodes)} episodes of season {season.number}"
                ) from e
            self.log.info("episode_selected", season=season.number, episode=number)
            yield episode.rows, f"{production.name} S{season.number:02d}E{number:02d}"

    def _choose_row(self, rows: list[SubtitleRow]) -> SubtitleRow:
        resolution = resolve_subtitle_row(
            rows,
            extension=self.request.extension_filter,
            contains=self.request.release_filter,
        )
        try:
            row = resolution.unwrap()
        except ResolutionError as e:
            raise FlowError(
                f"No subtitles remained after filtering by "
                f"extension='{self.request.extension_filter}'"
            ) from e
        self.log.info("subtitle_selected", row=str(row), rule=resolution.rule)
        return row

    def _download(self, row: SubtitleRow, name: str | None) -> list[Path]:
        output_dir = self.request.output_dir
        try:
            paths = fetch_subtitle_files(self.client, row.download_url, output_dir)
        except DownloadError as e:
            raise FlowError(str(e)) from e
        if name is not None and len(paths) == 1:
            renamed = paths[0].with_stem(sanitize_filename(name))
            paths = [paths[0].replace(renamed)]
        return paths

    def _process(self, path: Path) -> TransformReport | None:
        try:
            return transform_file(path, self.request.options, self.request.output_dir)
        except (FileNotFoundError, UnsupportedFormatError, EmptySubtitleError) as e:
            raise FlowError(str(e)) from e
