"""Catalog, search and download adapters."""

from subtitledl.catalog.client import CatalogClient, CatalogError, DownloadError
from subtitledl.catalog.download import fetch_subtitle_files, unzip
from subtitledl.catalog.opensubtitles import OpenSubtitlesCatalog, parse_suggestions
from subtitledl.catalog.subdl import (
    SearchResponse,
    SubDLCatalog,
    SubDLQuery,
    group_seasons,
    parse_search_response,
)

__all__ = [
    "CatalogClient",
    "CatalogError",
    "DownloadError",
    "OpenSubtitlesCatalog",
    "SearchResponse",
    "SubDLCatalog",
    "SubDLQuery",
    "fetch_subtitle_files",
    "group_seasons",
    "parse_search_response",
    "parse_suggestions",
    "unzip",
]
