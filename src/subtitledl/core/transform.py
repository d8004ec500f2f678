"""Subtitle transform pipeline: parse, edit, serialize."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import structlog

from subtitledl.core.subtitle import CueStore
from subtitledl.formats import (
    ParseResult,
    SubtitleFormat,
    parse,
    resolve_format,
    serialize,
)
from subtitledl.utils.files import read_subtitle_text, write_bytes

logger = structlog.get_logger()

MODIFIED_SUFFIX = "_modified"


class EmptySubtitleError(ValueError):
    """Raised when parsing produced no cues at all."""


@dataclass(frozen=True)
class TransformOptions:
    """Edits to apply and the container to write.

    ``target_format`` of None keeps the source format.
    """

    shift_ms: int = 0
    target_format: SubtitleFormat | None = None
    remove_empty: bool = False
    strip_styling: bool = False

    def has_edits(self) -> bool:
        return bool(self.shift_ms or self.remove_empty or self.strip_styling)

    def requires_work(self, source_format: SubtitleFormat) -> bool:
        return self.has_edits() or (
            self.target_format is not None and self.target_format != source_format
        )


@dataclass
class EditReport:
    """What the edit pass did to a cue store."""

    shifted_ms: int = 0
    dropped_negative: int = 0
    restyled: int = 0
    removed_empty: int = 0


@dataclass
class TransformReport:
    """Outcome of transforming one subtitle file or payload."""

    source_format: SubtitleFormat
    target_format: SubtitleFormat
    parsed: int
    written: int
    edits: EditReport
    parse_error: str | None = None
    output_path: Path | None = None


def apply_edits(store: CueStore, options: TransformOptions) -> EditReport:
    """Apply the requested edits in their fixed order.

    Shift first (dropping cues pushed entirely before zero and clamping
    starts), then styling removal, then empty-cue removal.
    """
    report = EditReport()
    if options.shift_ms:
        store.shift_by(options.shift_ms)
        report.shifted_ms = options.shift_ms
        report.dropped_negative = store.clamp_negative()
    if options.strip_styling:
        report.restyled = store.strip_styling()
    if options.remove_empty:
        report.removed_empty = store.remove_empty()
    return report


def transform_content(
    content: str, source_format: SubtitleFormat, options: TransformOptions
) -> tuple[bytes, TransformReport]:
    """Parse ``content``, apply edits and serialize to the target format.

    A parse error after at least one cue keeps the partial result and is
    reported; a parse that yields no cue raises.

    Raises:
        EmptySubtitleError: If no cue could be parsed
    """
    result: ParseResult = parse(content, source_format)
    if not result.complete:
        if not result.store:
            raise EmptySubtitleError(
                f"Parsing failure: {result.error}"
            ) from result.error
        logger.warning(
            "partial_parse", error=str(result.error), parsed=len(result.store)
        )

    parsed = len(result.store)
    edits = apply_edits(result.store, options)
    target_format = options.target_format or source_format
    data = serialize(result.store, target_format)
    report = TransformReport(
        source_format=source_format,
        target_format=target_format,
        parsed=parsed,
        written=len(result.store),
        edits=edits,
        parse_error=str(result.error) if result.error else None,
    )
    return data, report


def modified_path(
    path: Path, target_format: SubtitleFormat, output_dir: Path | None = None
) -> Path:
    directory = output_dir if output_dir is not None else path.parent
    return directory / f"{path.stem}{MODIFIED_SUFFIX}.{target_format}"


def transform_file(
    path: Path, options: TransformOptions, output_dir: Path | None = None
) -> TransformReport | None:
    """Transform a subtitle file into ``<stem>_modified.<ext>``.

    Args:
        path: Subtitle file to read (encoding is detected)
        options: Edits and target format
        output_dir: Directory for the output, defaults to the input's directory

    Returns:
        TransformReport including the written path, or None when the
        options ask for nothing beyond the file's current format

    Raises:
        FileNotFoundError: If path does not exist
        UnsupportedFormatError: If the input format is unknown
        EmptySubtitleError: If no cue could be parsed
    """
    if not path.is_file():
        raise FileNotFoundError(f"Subtitle file does not exist: {path}")

    content = read_subtitle_text(path)
    source_format = resolve_format(path.suffix, content)
    if not options.requires_work(source_format):
        logger.info("nothing_to_do", source=str(path), format=str(source_format))
        return None
    data, report = transform_content(content, source_format, options)

    output_path = modified_path(path, report.target_format, output_dir)
    write_bytes(output_path, data)
    report.output_path = output_path
    logger.info(
        "subtitle_transformed",
        source=str(path),
        output=str(output_path),
        cues=report.written,
        shift_ms=options.shift_ms,
        removed_empty=report.edits.removed_empty,
        dropped_negative=report.edits.dropped_negative,
    )
    return report
