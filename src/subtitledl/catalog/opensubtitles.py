"""OpenSubtitles production suggestions (``suggest.php`` JSON endpoint)."""

from __future__ import annotations

from typing import Any

import structlog
from pydantic import BaseModel, ValidationError, field_validator

from subtitledl.catalog.client import CatalogClient, CatalogError
from subtitledl.core.candidates import MOVIE, Production

logger = structlog.get_logger()

SUGGEST_URL = "https://www.opensubtitles.org/libs/suggest.php"


class SuggestItem(BaseModel):
    """One element of the suggestion array."""

    id: int = 0
    name: str = ""
    year: int = 0
    total: int = 0
    kind: str = MOVIE
    rating: str = ""

    @field_validator("year", "total", "id", mode="before")
    @classmethod
    def blank_as_zero(cls, value: Any) -> Any:
        # The endpoint sends numbers as strings, empty when unknown
        if value is None or value == "":
            return 0
        return value

    @field_validator("rating", mode="before")
    @classmethod
    def rating_as_text(cls, value: Any) -> str:
        return "" if value is None else str(value)

    def to_production(self) -> Production:
        return Production(
            id=self.id,
            name=self.name,
            year=self.year,
            total=self.total,
            kind=self.kind,
            rating=self.rating,
        )


def parse_suggestions(payload: Any) -> list[Production]:
    """Convert a decoded suggestion payload into productions.

    Elements that fail validation are skipped and logged.
    """
    if not isinstance(payload, list):
        logger.warning("suggestions_not_a_list", payload_type=type(payload).__name__)
        return []

    productions = []
    for element in payload:
        if not isinstance(element, dict):
            continue
        try:
            productions.append(SuggestItem.model_validate(element).to_production())
        except ValidationError as e:
            logger.warning("suggestion_skipped", error=str(e), element=element)
    return productions


class OpenSubtitlesCatalog:
    """Suggests productions matching a title."""

    def __init__(self, client: CatalogClient) -> None:
        self._client = client

    def suggest(self, title: str) -> list[Production]:
        """Return suggested productions for ``title``; empty on any failure."""
        try:
            payload = self._client.get_json(
                SUGGEST_URL, params={"format": "json3", "MovieName": title}
            )
        except CatalogError as e:
            logger.warning("suggestions_unavailable", title=title, error=str(e))
            return []
        productions = parse_suggestions(payload)
        logger.info("suggestions_fetched", title=title, count=len(productions))
        return productions
