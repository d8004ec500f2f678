"""SubDL search API adapter."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import structlog
from pydantic import BaseModel, ValidationError, field_validator

from subtitledl.catalog.client import CatalogClient
from subtitledl.core.candidates import MOVIE, Episode, Production, Season, SubtitleRow
from subtitledl.core.metadata import (
    DEFAULT_EXTRACTOR_CONFIG,
    ExtractorConfig,
    extract_metadata,
)

logger = structlog.get_logger()

API_ENDPOINT = "https://api.subdl.com/api/v1/subtitles"
DOWNLOAD_ENDPOINT = "https://dl.subdl.com"

UNCLASSIFIED_SEASON = -1


def _none_as_zero(value: Any) -> Any:
    return 0 if value is None or value == "" else value


class MovieResult(BaseModel):
    """A production entry of the ``results`` array."""

    sd_id: int = 0
    name: str = ""
    type: str = MOVIE
    imdb_id: str | None = None
    tmdb_id: int | str | None = None
    slug: str = ""
    year: int = 0

    @field_validator("year", "sd_id", mode="before")
    @classmethod
    def missing_as_zero(cls, value: Any) -> Any:
        return _none_as_zero(value)

    def to_production(self) -> Production:
        return Production(
            id=self.sd_id, name=self.name, year=self.year, kind=self.type
        )


class SubtitleResult(BaseModel):
    """A subtitle entry of the ``subtitles`` array."""

    release_name: str = ""
    name: str = ""
    lang: str = ""
    language: str = ""
    author: str = ""
    url: str = ""
    subtitle_page: str = ""
    season: int = 0
    episode: int = 0

    @field_validator("season", "episode", mode="before")
    @classmethod
    def missing_as_zero(cls, value: Any) -> Any:
        return _none_as_zero(value)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> SubtitleResult:
        data = dict(payload)
        if "subtitlePage" in data:
            data["subtitle_page"] = data.pop("subtitlePage")
        return cls.model_validate(data)

    def download_url(self) -> str:
        if self.url.startswith("https://"):
            return self.url
        return DOWNLOAD_ENDPOINT + self.url

    def to_row(self) -> SubtitleRow:
        return SubtitleRow(
            title=self.name or self.release_name,
            download_url=self.download_url(),
            base_filename=self.release_name,
            season=self.season,
            episode=self.episode,
        )


@dataclass
class SubDLQuery:
    """Query parameters of a subtitle search."""

    api_key: str
    film_name: str = ""
    year: int = 0
    type: str = MOVIE
    language: str = ""
    season: int | None = None
    episode: int | None = None
    imdb_id: str = ""
    tmdb_id: str = ""

    def to_params(self) -> dict[str, str]:
        params = {"api_key": self.api_key}
        if self.film_name:
            params["film_name"] = self.film_name
        if self.year:
            params["year"] = str(self.year)
        if self.type:
            params["type"] = self.type
        # "all" means no language restriction
        if self.language and self.language.lower() != "all":
            params["languages"] = self.language[:2].upper()
        if self.season is not None:
            params["season_number"] = str(self.season)
        if self.episode is not None:
            params["episode_number"] = str(self.episode)
        if self.imdb_id:
            params["imdb_id"] = self.imdb_id
        if self.tmdb_id:
            params["tmdb_id"] = self.tmdb_id
        return params


@dataclass
class SearchResponse:
    """Productions and subtitle rows returned by one search."""

    productions: list[Production] = field(default_factory=list)
    rows: list[SubtitleRow] = field(default_factory=list)


def parse_search_response(payload: Any) -> SearchResponse:
    """Convert a decoded SubDL payload. A false ``status`` yields no results."""
    response = SearchResponse()
    if not isinstance(payload, dict):
        logger.warning("subdl_unexpected_payload", payload_type=type(payload).__name__)
        return response
    if not payload.get("status", False):
        logger.info("subdl_no_results", error=payload.get("error"))
        return response

    for element in payload.get("results") or []:
        try:
            result = MovieResult.model_validate(element)
            response.productions.append(result.to_production())
        except ValidationError as e:
            logger.warning("subdl_result_skipped", error=str(e))
    for element in payload.get("subtitles") or []:
        try:
            response.rows.append(SubtitleResult.from_payload(element).to_row())
        except ValidationError as e:
            logger.warning("subdl_subtitle_skipped", error=str(e))
    return response


def group_seasons(
    rows: list[SubtitleRow], config: ExtractorConfig = DEFAULT_EXTRACTOR_CONFIG
) -> list[Season]:
    """Group subtitle rows into seasons and episodes.

    Season and episode come from the row when the catalog reports them,
    otherwise from the release name. Rows of a season with no episode are
    season packs. Rows without any season land in season -1. A row season of
    0 means the catalog did not report one; ``S00`` in a release name is the
    specials season 0.
    """
    seasons: dict[int, Season] = {}
    episodes: dict[tuple[int, int], Episode] = {}

    for row in rows:
        meta = extract_metadata(row.base_filename, config)
        if row.season:
            season_number = row.season
        elif meta.season is not None:
            season_number = meta.season
        else:
            season_number = UNCLASSIFIED_SEASON
        if row.episode:
            numbers = [row.episode]
        else:
            numbers = meta.episodes

        season = seasons.setdefault(season_number, Season(number=season_number))
        if not numbers:
            if not season.has_pack:
                season.has_pack = True
                season.pack_url = row.download_url
            continue

        for number in numbers:
            key = (season_number, number)
            if key not in episodes:
                episodes[key] = Episode(number=number)
                season.episodes.append(episodes[key])
            episodes[key].rows.append(row)

    ordered = sorted(seasons.values(), key=lambda s: s.number)
    for season in ordered:
        season.episodes.sort(key=lambda e: e.number)
    return ordered


class SubDLCatalog:
    """Searches SubDL for productions and subtitle rows."""

    def __init__(self, client: CatalogClient) -> None:
        self._client = client

    def search(self, query: SubDLQuery) -> SearchResponse:
        """Run ``query``.

        Raises:
            CatalogError: If the request fails
        """
        payload = self._client.get_json(API_ENDPOINT, params=query.to_params())
        response = parse_search_response(payload)
        logger.info(
            "subdl_search",
            film_name=query.film_name,
            productions=len(response.productions),
            rows=len(response.rows),
        )
        return response
