"""HTTP transport shared by the catalog adapters."""

from __future__ import annotations

import re
from pathlib import Path
from types import TracebackType
from typing import Any
from urllib.parse import unquote, urlparse

import httpx
import structlog

from subtitledl.utils.config import Settings
from subtitledl.utils.files import sanitize_filename

logger = structlog.get_logger()

_CONTENT_DISPOSITION_FILENAME = re.compile(r'filename\*?=(?:UTF-8\'\')?"?([^";]+)"?')

DEFAULT_DOWNLOAD_NAME = "unknown.zip"


class CatalogError(Exception):
    """Raised when a catalog request fails or returns an unusable payload."""


class DownloadError(Exception):
    """Raised when a subtitle download or archive extraction fails."""


class CatalogClient:
    """Thin wrapper over :class:`httpx.Client` with catalog-friendly defaults.

    Redirects are followed and every request carries a browser-like
    User-Agent. Pass ``transport`` to route requests elsewhere (tests use
    :class:`httpx.MockTransport`).
    """

    def __init__(
        self,
        *,
        timeout: float = 60.0,
        user_agent: str = "Mozilla/5.0 Gecko/20100101",
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._client = httpx.Client(
            timeout=timeout,
            follow_redirects=True,
            headers={"User-Agent": user_agent},
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls, settings: Settings, transport: httpx.BaseTransport | None = None
    ) -> CatalogClient:
        return cls(
            timeout=settings.http_timeout,
            user_agent=settings.user_agent,
            transport=transport,
        )

    def __enter__(self) -> CatalogClient:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def get_json(self, url: str, params: dict[str, Any] | None = None) -> Any:
        """GET ``url`` and decode the JSON body.

        Raises:
            CatalogError: On transport failure, non-200 status or invalid JSON
        """
        try:
            response = self._client.get(
                url, params=params, headers={"Accept": "application/json"}
            )
        except httpx.HTTPError as e:
            raise CatalogError(f"Request to {url} failed: {e}") from e

        if response.status_code != httpx.codes.OK:
            raise CatalogError(
                f"Request to {url} returned status {response.status_code}"
            )
        try:
            return response.json()
        except ValueError as e:
            raise CatalogError(f"Response from {url} is not valid JSON: {e}") from e

    def download(self, url: str, output_dir: Path) -> Path:
        """Stream ``url`` into ``output_dir`` and return the written file.

        The file name comes from Content-Disposition, then the URL path.

        Raises:
            DownloadError: On transport failure or an error status
        """
        output_dir.mkdir(parents=True, exist_ok=True)
        try:
            with self._client.stream("GET", url) as response:
                if response.status_code == httpx.codes.NOT_FOUND:
                    raise DownloadError(
                        f"Subtitle not found (404) at {url}, "
                        "packs with too many subtitles are not served"
                    )
                if response.status_code == httpx.codes.TOO_MANY_REQUESTS:
                    raise DownloadError("Too many requests (429), try again later")
                if response.status_code != httpx.codes.OK:
                    raise DownloadError(
                        f"Download of {url} returned status {response.status_code}"
                    )

                path = output_dir / _download_name(response, url)
                with path.open("wb") as buf:
                    for chunk in response.iter_bytes():
                        buf.write(chunk)
        except httpx.HTTPError as e:
            raise DownloadError(f"Failed to download {url}: {e}") from e

        logger.info("subtitle_downloaded", url=url, path=str(path))
        return path


def _download_name(response: httpx.Response, url: str) -> str:
    disposition = response.headers.get("Content-Disposition", "")
    match = _CONTENT_DISPOSITION_FILENAME.search(disposition)
    if match:
        name = sanitize_filename(unquote(match.group(1)).strip())
    else:
        name = sanitize_filename(Path(unquote(urlparse(url).path)).name)
    return name or DEFAULT_DOWNLOAD_NAME
