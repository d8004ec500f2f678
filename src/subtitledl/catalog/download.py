"""Download subtitle archives and unpack them."""

import zipfile
from pathlib import Path

import structlog

from subtitledl.catalog.client import CatalogClient, DownloadError
from subtitledl.utils.files import sanitize_filename

logger = structlog.get_logger()

# Release notes shipped next to subtitles
_SKIPPED_SUFFIXES = {".nfo"}


def unzip(zip_path: Path, output_dir: Path) -> list[Path]:
    """Extract subtitle files from ``zip_path`` into ``output_dir``.

    Entries are flattened to their base name; ``.nfo`` files and directories
    are skipped. Existing files are overwritten.

    Returns:
        Paths of the extracted files

    Raises:
        DownloadError: If the archive is corrupt
    """
    extracted = []
    try:
        with zipfile.ZipFile(zip_path) as archive:
            for info in archive.infolist():
                if info.is_dir():
                    continue
                name = sanitize_filename(Path(info.filename).name)
                if not name or Path(name).suffix.lower() in _SKIPPED_SUFFIXES:
                    continue
                destination = output_dir / name
                destination.write_bytes(archive.read(info))
                extracted.append(destination)
    except zipfile.BadZipFile as e:
        raise DownloadError(f"Downloaded file is not a valid zip: {zip_path}") from e
    return extracted


def fetch_subtitle_files(
    client: CatalogClient, url: str, output_dir: Path
) -> list[Path]:
    """Download ``url`` and return the subtitle files it provides.

    Zip archives are extracted and then deleted; any other file is returned
    as downloaded.

    Raises:
        DownloadError: If the download fails or the archive holds no files
    """
    downloaded = client.download(url, output_dir)
    if not zipfile.is_zipfile(downloaded):
        return [downloaded]

    logger.info("unzipping", path=str(downloaded))
    extracted = unzip(downloaded, output_dir)
    downloaded.unlink()
    if not extracted:
        raise DownloadError(
            f"No files were extracted from {downloaded.name}, is the zip empty?"
        )
    return extracted
