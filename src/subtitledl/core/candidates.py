"""Catalog entries that have to be disambiguated before download."""

from dataclasses import dataclass, field

MOVIE = "movie"
TV = "tv"


@dataclass
class Production:
    """A movie or TV series as listed by a catalog.

    A year of 0 means the catalog did not report one.
    """

    id: int
    name: str
    year: int = 0
    total: int = 0
    kind: str = MOVIE
    rating: str = ""

    def __str__(self) -> str:
        return (
            f"{self.name} ({self.year}) id:{self.id} "
            f"rating:{self.rating} kind:{self.kind}"
        )


@dataclass
class SubtitleRow:
    """A downloadable subtitle file for a production or episode."""

    title: str
    download_url: str
    base_filename: str = ""
    format: str = ""
    downloads: int = 0
    rating: float = 0.0
    season: int = 0
    episode: int = 0

    def __str__(self) -> str:
        return (
            f"{self.title} {self.download_url} format:{self.format} "
            f"rating:{self.rating} downloads:{self.downloads}"
        )


@dataclass
class Episode:
    """An episode of a season, with the subtitle rows found for it."""

    number: int
    name: str = ""
    rows: list[SubtitleRow] = field(default_factory=list)

    @property
    def downloads(self) -> int:
        return sum(row.downloads for row in self.rows)


@dataclass
class Season:
    """A season listing. ``number`` is -1 for unclassified episodes."""

    number: int
    episodes: list[Episode] = field(default_factory=list)
    has_pack: bool = False
    pack_url: str = ""

    def __str__(self) -> str:
        return f"S{self.number} {self.pack_url}" if self.has_pack else f"S{self.number}"
