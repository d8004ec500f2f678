"""Pytest configuration and shared fixtures."""

from collections.abc import Generator
from pathlib import Path

import pytest

from subtitledl.utils.config import get_settings


@pytest.fixture
def temp_dir(tmp_path: Path) -> Generator[Path, None, None]:
    """Provide a temporary directory for tests."""
    yield tmp_path


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None, None, None]:
    """Clear the get_settings LRU cache before and after each test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def sample_srt_content() -> str:
    """Return sample SRT content for testing."""
    return """1
00:00:01,000 --> 00:00:04,000
Hello, this is a test.

2
00:00:05,000 --> 00:00:08,000
This is the second subtitle.

3
00:00:09,000 --> 00:00:12,000
And this is the third one.
"""


@pytest.fixture
def sample_vtt_content() -> str:
    """Return sample WebVTT content for testing."""
    return """WEBVTT
Kind: captions

NOTE written by hand

1
00:01.000 --> 00:04.000 align:start
Hello, this is a test.

00:00:05.000 --> 00:00:08.000
This is the second subtitle.
"""


@pytest.fixture
def sample_srt_file(tmp_path: Path, sample_srt_content: str) -> Path:
    """Write the sample SRT content to a file and return its path."""
    path = tmp_path / "sample.srt"
    path.write_text(sample_srt_content, encoding="utf-8")
    return path
