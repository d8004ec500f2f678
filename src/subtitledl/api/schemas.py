"""Pydantic v2 request/response schemas."""

from typing import Literal, Self

from pydantic import BaseModel, Field, model_validator

from subtitledl.core.candidates import Production
from subtitledl.core.metadata import Metadata


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str


class ErrorDetail(BaseModel):
    """Structured error information."""

    code: str
    message: str
    detail: str | None = None


class MetadataResponse(BaseModel):
    """Metadata extracted from a release or file name."""

    title: str
    year: int | None = None
    season: int | None = None
    episode: int | None = None
    episodes: list[int] = []
    release_type: str = ""
    netflix: bool = False
    is_movie: bool

    @classmethod
    def from_metadata(cls, meta: Metadata) -> Self:
        return cls(
            title=meta.title,
            year=meta.year,
            season=meta.season,
            episode=meta.episode,
            episodes=meta.episodes,
            release_type=meta.release_type,
            netflix=meta.netflix,
            is_movie=meta.is_movie,
        )


class ProductionModel(BaseModel):
    """A production candidate as sent and returned by the resolver route."""

    model_config = {"from_attributes": True}

    id: int = 0
    name: str
    year: int = Field(default=0, ge=0)
    total: int = Field(default=0, ge=0)
    kind: Literal["movie", "tv"] = "movie"
    rating: str = ""

    def to_production(self) -> Production:
        return Production(
            id=self.id,
            name=self.name,
            year=self.year,
            total=self.total,
            kind=self.kind,
            rating=self.rating,
        )


class ResolveProductionRequest(BaseModel):
    """Candidates to choose from and what the caller wants."""

    candidates: list[ProductionModel]
    title: str = ""
    year: int = Field(default=0, ge=0)
    kind: Literal["movie", "tv"] = "movie"

    @model_validator(mode="after")
    def validate_candidates(self) -> Self:
        if not self.candidates:
            raise ValueError("candidates must not be empty")
        return self


class ResolveProductionResponse(BaseModel):
    """The chosen production and the rule that chose it."""

    production: ProductionModel
    rule: str
