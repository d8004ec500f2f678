"""Unit tests for the catalog HTTP client and archive handling."""

import io
import zipfile
from pathlib import Path

import httpx
import pytest

from subtitledl.catalog.client import CatalogClient, CatalogError, DownloadError
from subtitledl.catalog.download import fetch_subtitle_files, unzip
from subtitledl.utils.config import Settings


DL = "https://dl.example.test"


def make_zip(files: dict[str, bytes]) -> bytes:
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as archive:
        for name, data in files.items():
            archive.writestr(name, data)
    return buf.getvalue()


def client_for(handler) -> CatalogClient:
    return CatalogClient(transport=httpx.MockTransport(handler))


@pytest.mark.unit
class TestGetJson:
    """Test cases for CatalogClient.get_json."""

    def test_returns_decoded_body(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["params"] = dict(request.url.params)
            seen["agent"] = request.headers["User-Agent"]
            return httpx.Response(200, json=[{"name": "Alpha"}])

        with client_for(handler) as client:
            payload = client.get_json("https://example.test/q", params={"q": "a"})

        assert payload == [{"name": "Alpha"}]
        assert seen["params"] == {"q": "a"}
        assert seen["agent"].startswith("Mozilla/5.0")

    def test_error_status_raises(self):
        with client_for(lambda request: httpx.Response(503)) as client:
            with pytest.raises(CatalogError, match="503"):
                client.get_json("https://example.test/q")

    def test_invalid_json_raises(self):
        with client_for(lambda request: httpx.Response(200, text="<html>")) as client:
            with pytest.raises(CatalogError, match="not valid JSON"):
                client.get_json("https://example.test/q")

    def test_transport_error_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with client_for(handler) as client:
            with pytest.raises(CatalogError, match="failed"):
                client.get_json("https://example.test/q")

    def test_from_settings(self):
        settings = Settings(user_agent="agent/1.0", http_timeout=5)
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["agent"] = request.headers["User-Agent"]
            return httpx.Response(200, json={})

        client = CatalogClient.from_settings(settings, httpx.MockTransport(handler))
        with client:
            client.get_json("https://example.test/q")

        assert seen["agent"] == "agent/1.0"


@pytest.mark.unit
class TestDownload:
    """Test cases for CatalogClient.download."""

    def test_name_from_content_disposition(self, tmp_path: Path):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                content=b"data",
                headers={"Content-Disposition": 'attachment; filename="Movie.srt"'},
            )

        with client_for(handler) as client:
            path = client.download(f"{DL}/abc", tmp_path)

        assert path == tmp_path / "Movie.srt"
        assert path.read_bytes() == b"data"

    def test_name_from_url(self, tmp_path: Path):
        with client_for(lambda request: httpx.Response(200, content=b"z")) as client:
            path = client.download(f"{DL}/subs/1234-5678.zip", tmp_path)

        assert path.name == "1234-5678.zip"

    @pytest.mark.parametrize(
        ("status", "message"),
        [(404, "not found"), (429, "Too many requests"), (500, "status 500")],
    )
    def test_error_status(self, tmp_path: Path, status, message):
        with client_for(lambda request: httpx.Response(status)) as client:
            with pytest.raises(DownloadError, match=message):
                client.download(f"{DL}/x.zip", tmp_path)


@pytest.mark.unit
class TestArchives:
    """Test cases for unzipping downloaded archives."""

    def test_unzip_flattens_and_skips_nfo(self, tmp_path: Path):
        archive = tmp_path / "pack.zip"
        archive.write_bytes(
            make_zip(
                {
                    "Season 1/Show.S01E01.srt": b"1",
                    "Show.S01E02.srt": b"2",
                    "release.nfo": b"notes",
                }
            )
        )

        extracted = unzip(archive, tmp_path)

        names = sorted(p.name for p in extracted)
        assert names == ["Show.S01E01.srt", "Show.S01E02.srt"]
        assert not (tmp_path / "release.nfo").exists()

    def test_unzip_corrupt_archive(self, tmp_path: Path):
        archive = tmp_path / "broken.zip"
        archive.write_bytes(b"PK\x03\x04 not really")

        with pytest.raises(DownloadError):
            unzip(archive, tmp_path)

    def test_fetch_extracts_and_removes_zip(self, tmp_path: Path):
        body = make_zip({"Movie.srt": b"1\n00:00:01,000 --> 00:00:02,000\nHi\n"})

        with client_for(lambda request: httpx.Response(200, content=body)) as client:
            files = fetch_subtitle_files(client, f"{DL}/m.zip", tmp_path)

        assert files == [tmp_path / "Movie.srt"]
        assert not (tmp_path / "m.zip").exists()

    def test_fetch_plain_file(self, tmp_path: Path):
        with client_for(lambda request: httpx.Response(200, content=b"1\n")) as client:
            files = fetch_subtitle_files(client, f"{DL}/a.srt", tmp_path)

        assert files == [tmp_path / "a.srt"]

    def test_fetch_empty_archive(self, tmp_path: Path):
        body = make_zip({"only.nfo": b"notes"})

        with client_for(lambda request: httpx.Response(200, content=body)) as client:
            with pytest.raises(DownloadError, match="is the zip empty"):
                fetch_subtitle_files(client, f"{DL}/e.zip", tmp_path)
