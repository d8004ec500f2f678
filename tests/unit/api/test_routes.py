"""Tests for API routes."""

import pytest
from httpx import ASGITransport, AsyncClient

from subtitledl import __version__
from subtitledl.api.app import create_app

SRT_BODY = (
    b"1\n00:00:10,800 --> 00:00:12,000\n<i>Hello</i>\n\n"
    b"2\n00:00:13,000 --> 00:00:14,000\n \n"
)

VTT_BODY = b"WEBVTT\n\n00:01.000 --> 00:02.000\nHi\n"


@pytest.fixture
def app():
    return create_app()


@pytest.fixture
async def client(app):
    """Async HTTP client for testing."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.mark.unit
@pytest.mark.asyncio
class TestHealthEndpoint:
    async def test_health_check(self, client: AsyncClient) -> None:
        response = await client.get("/api/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "version": __version__}


@pytest.mark.unit
@pytest.mark.asyncio
class TestTransform:
    async def test_shift_and_convert(self, client: AsyncClient) -> None:
        response = await client.post(
            "/api/transform",
            files={"file": ("movie.srt", SRT_BODY, "application/x-subrip")},
            data={"shift_ms": "500", "target_format": "vtt"},
        )

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/vtt")
        disposition = response.headers["content-disposition"]
        assert 'filename="movie_modified.vtt"' in disposition
        assert response.text.startswith(
            "WEBVTT\n\n00:00:11.300 --> 00:00:12.500\n<i>Hello</i>\n"
        )
        assert "x-parse-error" not in response.headers

    async def test_cleanup_flags(self, client: AsyncClient) -> None:
        response = await client.post(
            "/api/transform",
            files={"file": ("movie.srt", SRT_BODY)},
            data={"remove_empty": "true", "strip_styling": "true"},
        )

        assert response.status_code == 200
        assert response.text == "1\n00:00:10,800 --> 00:00:12,000\nHello\n\n"
        assert response.headers["x-cues-parsed"] == "2"
        assert response.headers["x-cues-written"] == "1"

    async def test_partial_parse_header(self, client: AsyncClient) -> None:
        body = SRT_BODY + b"\n3\nbroken\n"

        response = await client.post(
            "/api/transform", files={"file": ("movie.srt", body)}
        )

        assert response.status_code == 200
        assert response.headers["x-parse-error"].startswith("Cue 3:")

    async def test_nothing_parsed(self, client: AsyncClient) -> None:
        response = await client.post(
            "/api/transform", files={"file": ("movie.srt", b"not a subtitle\n")}
        )

        assert response.status_code == 422
        assert response.json()["code"] == "invalid_request"

    async def test_unsupported_target_format(self, client: AsyncClient) -> None:
        response = await client.post(
            "/api/transform",
            files={"file": ("movie.srt", SRT_BODY)},
            data={"target_format": "ass"},
        )

        assert response.status_code == 422
        assert "ass" in response.json()["message"]

    async def test_unsupported_extension(self, client: AsyncClient) -> None:
        response = await client.post(
            "/api/transform", files={"file": ("movie.ass", b"[Script Info]\n")}
        )

        assert response.status_code == 422

    async def test_sniffed_txt(self, client: AsyncClient) -> None:
        response = await client.post(
            "/api/transform",
            files={"file": ("captions.txt", VTT_BODY)},
            data={"target_format": "srt"},
        )

        assert response.status_code == 200
        assert response.text == "1\n00:00:01,000 --> 00:00:02,000\nHi\n\n"


@pytest.mark.unit
@pytest.mark.asyncio
class TestMetadata:
    async def test_extract(self, client: AsyncClient) -> None:
        response = await client.get(
            "/api/metadata",
            params={"text": "Batman.The.Movie.1966.720p.BluRay.x264-CiNEFiLE"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["title"] == "Batman The Movie"
        assert data["year"] == 1966
        assert data["release_type"] == "BluRay"
        assert data["is_movie"] is True

    async def test_missing_text(self, client: AsyncClient) -> None:
        response = await client.get("/api/metadata")
        assert response.status_code == 422


@pytest.mark.unit
@pytest.mark.asyncio
class TestResolveProduction:
    async def test_year_tie_break(self, client: AsyncClient) -> None:
        response = await client.post(
            "/api/resolve/production",
            json={
                "candidates": [
                    {"id": 1, "name": "Alpha", "year": 1999, "total": 5},
                    {"id": 2, "name": "Alpha", "year": 2005, "total": 9},
                ],
                "title": "Alpha",
                "year": 2005,
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["production"]["id"] == 2
        assert data["rule"] == "exact_name_year"

    async def test_no_year_match(self, client: AsyncClient) -> None:
        response = await client.post(
            "/api/resolve/production",
            json={
                "candidates": [
                    {"name": "Alpha", "year": 1980},
                    {"name": "Beta", "year": 1980},
                ],
                "title": "Alpha",
                "year": 2020,
            },
        )

        assert response.status_code == 404
        assert response.json()["code"] == "no_year_match"

    async def test_kind_filter(self, client: AsyncClient) -> None:
        response = await client.post(
            "/api/resolve/production",
            json={"candidates": [{"name": "Alpha", "kind": "tv"}], "kind": "movie"},
        )

        assert response.status_code == 404
        assert response.json()["code"] == "no_candidates_remain"

    async def test_empty_candidates(self, client: AsyncClient) -> None:
        response = await client.post(
            "/api/resolve/production", json={"candidates": []}
        )

        assert response.status_code == 422
