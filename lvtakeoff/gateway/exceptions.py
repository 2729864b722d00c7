class GatewayError(Exception):
    """Raised when a vision-model call does not produce a usable response."""

    def __init__(self, message: str, *, status_code: int | None = None, body: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class GatewayNetworkError(GatewayError):
    """Raised when the provider cannot be reached or the request times out."""


class EmptyResponseError(GatewayError):
    """Raised when a successful response carries no text."""


class UploadError(GatewayError):
    """Raised when a remote upload session fails before the file is usable."""


class ProcessingTimeoutError(GatewayError):
    """Raised when an uploaded file is still processing after the poll budget."""
