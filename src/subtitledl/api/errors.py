"""API error hierarchy."""


class ApiError(Exception):
    """Base API error with HTTP status code and structured detail."""

    def __init__(
        self,
        *,
        status_code: int,
        code: str,
        message: str,
        detail: str | None = None,
    ) -> None:
        self.status_code = status_code
        self.code = code
        self.message = message
        self.detail = detail
        super().__init__(message)


class InvalidRequestError(ApiError):
    """Raised when the client sends an invalid request."""

    def __init__(self, message: str, *, detail: str | None = None) -> None:
        super().__init__(
            status_code=422,
            code="invalid_request",
            message=message,
            detail=detail,
        )


class ResolutionFailedError(ApiError):
    """Raised when no candidate could be chosen; ``code`` is the failure kind."""

    def __init__(self, code: str, message: str) -> None:
        super().__init__(status_code=404, code=code, message=message)


class PipelineError(ApiError):
    """Raised when a transform stage fails unexpectedly."""

    def __init__(self, code: str, message: str, *, detail: str | None = None) -> None:
        super().__init__(
            status_code=500,
            code=code,
            message=message,
            detail=detail,
        )
