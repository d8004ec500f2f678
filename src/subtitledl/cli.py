"""
Command line entry point.

  subtitledl "The Batman" -y 2022
  subtitledl "Breaking Bad" -s 2 -e 1,3-5 --to vtt
  subtitledl --extract "Silo.S01E03.1080p.WEB.H264-NTb"
  subtitledl --from movie.srt --shift -1500 --remove-empty
"""

import argparse
import sys
from pathlib import Path

import structlog

from subtitledl import __version__
from subtitledl.catalog import CatalogClient
from subtitledl.core.metadata import extract_metadata
from subtitledl.core.transform import TransformOptions
from subtitledl.flow import FlowError, FlowRequest, SubtitleFlow
from subtitledl.formats import SubtitleFormat
from subtitledl.utils.config import Settings, get_settings
from subtitledl.utils.logging import setup_logging

logger = structlog.get_logger()

# 12 hours either way
SHIFT_CAP_MS = 12 * 60 * 60 * 1000
MAX_SEASON = 50


def parse_episodes(text: str, limit: int) -> list[int]:
    """Parse ``1,3-5`` style episode lists into sorted unique numbers.

    Raises:
        ValueError: On malformed input, reversed ranges or more than ``limit``
            episodes
    """
    episodes: set[int] = set()
    for part in text.split(","):
        part = part.strip()
        if not part:
            continue
        if "-" in part:
            bounds = part.split("-")
            if len(bounds) != 2 or not all(b.isdigit() for b in bounds):
                raise ValueError(f"Invalid episode range '{part}', usage: -e 2-6")
            start, end = int(bounds[0]), int(bounds[1])
            if start > end:
                raise ValueError(f"Episode range start is larger than end: '{part}'")
            if end - start + 1 > limit:
                raise ValueError(
                    f"The episode range size {end - start + 1} exceeds {limit}"
                )
            episodes.update(range(start, end + 1))
        elif part.isdigit():
            episodes.add(int(part))
        else:
            raise ValueError(f"Failed to parse '{part}' as an episode number")
        if len(episodes) > limit:
            raise ValueError(f"The total number of episodes exceeds {limit}")
    return sorted(episodes)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="subtitledl",
        description="Find, download and convert subtitles for movies and TV episodes",
    )
    parser.add_argument("title", nargs="?", default="", help="Movie or series title")
    parser.add_argument("-s", "--season", type=int, help="Season number")
    parser.add_argument(
        "-e", "--episode", help="Episode numbers, e.g. 4 or 1,3-5 (requires a season)"
    )
    parser.add_argument("-y", "--year", type=int, default=0, help="Release year")
    parser.add_argument("--lang", help="Subtitle language, 'all' for any")
    parser.add_argument(
        "--filter", default="", help="Only consider subtitles with this extension"
    )
    parser.add_argument(
        "--extract",
        metavar="NAME",
        help="Fill title, year, season and episodes from a release name",
    )
    parser.add_argument(
        "--from",
        "--subtitle",
        dest="subtitle",
        type=Path,
        help="Process a local subtitle file instead of downloading one",
    )
    parser.add_argument(
        "--shift", type=int, default=0, help="Shift all cues by milliseconds (+/-)"
    )
    parser.add_argument(
        "--to",
        "--convert-to",
        dest="convert_to",
        choices=[f.value for f in SubtitleFormat],
        help="Output subtitle format",
    )
    parser.add_argument(
        "--remove-empty", action="store_true", help="Drop cues without text"
    )
    parser.add_argument(
        "--strip-styling",
        action="store_true",
        help="Remove <i>, <font> and similar tags",
    )
    parser.add_argument(
        "--out", "--dest", dest="out", type=Path, help="Output directory"
    )
    parser.add_argument(
        "-ls", "--list", action="store_true", help="Print the season listing"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--version", action="version", version=__version__)
    return parser


def build_request(
    args: argparse.Namespace, settings: Settings, parser: argparse.ArgumentParser
) -> FlowRequest:
    """Turn parsed arguments into a flow request, exiting on invalid usage."""
    episodes: list[int] = []
    if args.episode:
        try:
            episodes = parse_episodes(args.episode, settings.max_downloads)
        except ValueError as e:
            parser.error(str(e))

    if args.season is not None and not 0 <= args.season <= MAX_SEASON:
        parser.error(f"Season number must be between 0 and {MAX_SEASON}")
    if not -SHIFT_CAP_MS <= args.shift <= SHIFT_CAP_MS:
        parser.error("The shift must stay within 12 hours either way")

    target_format = SubtitleFormat(args.convert_to) if args.convert_to else None
    request = FlowRequest(
        title=args.title,
        year=args.year,
        season=args.season,
        episodes=episodes,
        language=args.lang or settings.language,
        extension_filter=args.filter.lstrip("."),
        output_dir=args.out or settings.output_dir,
        subtitle_path=args.subtitle,
        list_seasons=args.list,
        options=TransformOptions(
            shift_ms=args.shift,
            target_format=target_format,
            remove_empty=args.remove_empty,
            strip_styling=args.strip_styling,
        ),
    )

    if args.extract:
        meta = extract_metadata(args.extract)
        logger.info("metadata_extracted", metadata=str(meta))
        request.apply_metadata(meta)

    if request.episodes and request.season is None:
        parser.error("Episodes were given without a season (use -s)")
    if request.subtitle_path is None and not request.title:
        parser.error("A title or --extract is required unless --from is given")
    return request


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = get_settings()
    setup_logging(
        "DEBUG" if args.verbose else settings.log_level, json=settings.log_json
    )
    request = build_request(args, settings, parser)

    with CatalogClient.from_settings(settings) as client:
        flow = SubtitleFlow(request, settings, client)
        try:
            result = flow.execute()
        except FlowError as e:
            logger.error("failed", error=str(e))
            print(f"Error: {e}", file=sys.stderr)
            return 1

    for path in result.downloaded:
        print(path)
    for report in result.reports:
        print(report.output_path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
