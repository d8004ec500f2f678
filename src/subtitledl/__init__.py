"""Find, download and convert subtitles for movies and TV episodes."""

__version__ = "1.0.2"
