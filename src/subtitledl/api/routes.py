"""API route definitions."""

from __future__ import annotations

from pathlib import Path

import structlog
from fastapi import APIRouter, Form, Query, UploadFile
from fastapi.responses import Response

from subtitledl import __version__
from subtitledl.api.errors import (
    InvalidRequestError,
    PipelineError,
    ResolutionFailedError,
)
from subtitledl.api.schemas import (
    ErrorDetail,
    HealthResponse,
    MetadataResponse,
    ProductionModel,
    ResolveProductionRequest,
    ResolveProductionResponse,
)
from subtitledl.core.metadata import extract_metadata
from subtitledl.core.resolver import Desired, resolve_production
from subtitledl.core.transform import (
    MODIFIED_SUFFIX,
    EmptySubtitleError,
    TransformOptions,
    transform_content,
)
from subtitledl.formats import SubtitleFormat, UnsupportedFormatError, resolve_format
from subtitledl.utils.files import decode_subtitle_bytes, sanitize_filename

router = APIRouter(prefix="/api")
logger = structlog.get_logger()

MAX_UPLOAD_BYTES = 5 * 1024 * 1024

_MEDIA_TYPES = {
    SubtitleFormat.SRT: "application/x-subrip",
    SubtitleFormat.VTT: "text/vtt",
}


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(version=__version__)


@router.post("/transform", responses={422: {"model": ErrorDetail}})
async def transform_upload(
    file: UploadFile,
    shift_ms: int = Form(0),
    target_format: str | None = Form(None),
    remove_empty: bool = Form(False),
    strip_styling: bool = Form(False),
) -> Response:
    """Convert and edit an uploaded subtitle file.

    The converted file is the response body. A parse that stopped early
    still succeeds; the error is reported in the ``X-Parse-Error`` header.
    """
    target: SubtitleFormat | None = None
    if target_format:
        try:
            target = SubtitleFormat(target_format.lower().lstrip("."))
        except ValueError:
            raise InvalidRequestError(
                f"Unsupported target format: {target_format}",
                detail=f"Allowed: {', '.join(f.value for f in SubtitleFormat)}",
            ) from None

    data = await file.read(MAX_UPLOAD_BYTES + 1)
    if len(data) > MAX_UPLOAD_BYTES:
        raise InvalidRequestError(
            "File too large", detail=f"Maximum file size is {MAX_UPLOAD_BYTES} bytes"
        )

    filename = sanitize_filename(Path(file.filename or "").name) or "subtitle.srt"
    content = decode_subtitle_bytes(data)
    try:
        source_format = resolve_format(Path(filename).suffix, content)
    except UnsupportedFormatError as e:
        raise InvalidRequestError(str(e)) from e

    options = TransformOptions(
        shift_ms=shift_ms,
        target_format=target,
        remove_empty=remove_empty,
        strip_styling=strip_styling,
    )
    try:
        body, report = transform_content(content, source_format, options)
    except EmptySubtitleError as e:
        raise InvalidRequestError("No cues could be parsed", detail=str(e)) from e
    except ValueError as e:
        logger.exception("transform_failed", filename=filename)
        raise PipelineError(
            "transform_failed", "Transform failed", detail=str(e)
        ) from e

    output_name = f"{Path(filename).stem}{MODIFIED_SUFFIX}.{report.target_format}"
    headers = {
        "Content-Disposition": f'attachment; filename="{output_name}"',
        "X-Cues-Parsed": str(report.parsed),
        "X-Cues-Written": str(report.written),
    }
    if report.parse_error:
        # Header values must stay latin-1
        error = report.parse_error.encode("ascii", "replace").decode()
        headers["X-Parse-Error"] = error
    logger.info(
        "upload_transformed",
        filename=filename,
        source=source_format,
        target=report.target_format,
        cues=report.written,
    )
    return Response(
        content=body,
        media_type=_MEDIA_TYPES[report.target_format],
        headers=headers,
    )


@router.get("/metadata", response_model=MetadataResponse)
async def metadata(text: str = Query(..., min_length=1)) -> MetadataResponse:
    """Extract title, year, season and episodes from a release name."""
    return MetadataResponse.from_metadata(extract_metadata(text))


@router.post(
    "/resolve/production",
    response_model=ResolveProductionResponse,
    responses={404: {"model": ErrorDetail}},
)
async def resolve_production_route(
    body: ResolveProductionRequest,
) -> ResolveProductionResponse:
    """Choose one production among the candidates."""
    productions = [c.to_production() for c in body.candidates]
    resolution = resolve_production(
        productions, Desired(title=body.title, year=body.year), body.kind
    )
    if not resolution.ok or resolution.candidate is None:
        raise ResolutionFailedError(str(resolution.failure), resolution.reason)
    return ResolveProductionResponse(
        production=ProductionModel.model_validate(resolution.candidate),
        rule=resolution.rule,
    )
