"""Pytest configuration and shared fixtures for integration tests."""

import io
import zipfile
from collections.abc import Generator
from dataclasses import dataclass, field
from typing import Any

import httpx
import pytest

from subtitledl.catalog import CatalogClient
from subtitledl.utils.config import Settings

# ---------------------------------------------------------------------------
# Module-level helpers
# ---------------------------------------------------------------------------

SUBTITLE_BODY = (
    b"1\n00:00:01,000 --> 00:00:02,500\n<i>Previously...</i>\n\n"
    b"2\n00:00:03,000 --> 00:00:04,000\n \n\n"
    b"3\n00:00:05,000 --> 00:00:06,000\nHello\n"
)


def make_zip(files: dict[str, bytes]) -> bytes:
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as archive:
        for name, data in files.items():
            archive.writestr(name, data)
    return buf.getvalue()


def subdl_row(release: str, url: str, **extra: Any) -> dict[str, Any]:
    return {
        "release_name": release,
        "name": f"SUBDL.com::{release.lower()}.zip",
        "lang": "english",
        "url": url,
        **extra,
    }


@dataclass
class FakeCatalogs:
    """Serves the suggestion, search and download endpoints from memory."""

    suggestions: list[dict[str, Any]] = field(default_factory=list)
    movie_search: dict[str, Any] = field(default_factory=lambda: {"status": False})
    tv_search: dict[str, Any] = field(default_factory=lambda: {"status": False})
    archives: dict[str, bytes] = field(default_factory=dict)
    requests: list[httpx.Request] = field(default_factory=list)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        host = request.url.host
        if host == "www.opensubtitles.org":
            return httpx.Response(200, json=self.suggestions)
        if host == "api.subdl.com":
            if request.url.params.get("type") == "tv":
                return httpx.Response(200, json=self.tv_search)
            return httpx.Response(200, json=self.movie_search)
        if host == "dl.subdl.com" and request.url.path in self.archives:
            return httpx.Response(200, content=self.archives[request.url.path])
        return httpx.Response(404)

    def searches(self) -> list[dict[str, str]]:
        return [
            dict(r.url.params) for r in self.requests if r.url.host == "api.subdl.com"
        ]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def catalogs() -> FakeCatalogs:
    """Catalog endpoints for The Batman (movie) and Silo (series)."""
    return FakeCatalogs(
        suggestions=[
            {"id": 1, "name": "The Batman", "year": "1989", "total": "900"},
            {"id": 2, "name": "The Batman", "year": "2022", "total": "151"},
            {"id": 3, "name": "Silo", "year": "2023", "total": "40", "kind": "tv"},
        ],
        movie_search={
            "status": True,
            "results": [{"sd_id": 10, "name": "The Batman", "year": 2022}],
            "subtitles": [
                subdl_row("The.Batman.2022.1080p.WEB", "/subtitle/10-1.zip"),
                subdl_row("The.Batman.2022.720p.BluRay", "/subtitle/10-2.zip"),
            ],
        },
        tv_search={
            "status": True,
            "results": [{"sd_id": 20, "name": "Silo", "type": "tv", "year": 2023}],
            "subtitles": [
                subdl_row("Silo.S01.1080p.WEB", "/subtitle/20-0.zip"),
                subdl_row(
                    "Silo.S01E03.1080p.WEB",
                    "/subtitle/20-3.zip",
                    season=1,
                    episode=3,
                ),
                subdl_row("Silo.S01E04.1080p.WEB", "/subtitle/20-4.zip"),
            ],
        },
        archives={
            "/subtitle/10-1.zip": make_zip({"The.Batman.2022.WEB.srt": SUBTITLE_BODY}),
            "/subtitle/10-2.zip": make_zip(
                {"The.Batman.2022.BluRay.srt": SUBTITLE_BODY}
            ),
            "/subtitle/20-0.zip": make_zip(
                {
                    "Silo.S01E01.srt": SUBTITLE_BODY,
                    "Silo.S01E02.srt": SUBTITLE_BODY,
                    "release.nfo": b"notes",
                }
            ),
            "/subtitle/20-3.zip": make_zip({"silo.s01e03.web.srt": SUBTITLE_BODY}),
            "/subtitle/20-4.zip": make_zip({"silo.s01e04.web.srt": SUBTITLE_BODY}),
        },
    )


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(subdl_api_key="test-key", output_dir=tmp_path)


@pytest.fixture
def client(catalogs: FakeCatalogs) -> Generator[CatalogClient, None, None]:
    with CatalogClient(transport=httpx.MockTransport(catalogs.handler)) as client:
        yield client
