"""
Exceptions for File Search client operations.

Every error carries an ``ErrorKind`` so callers can branch on the failure
category (see ``outcome.attempt``) without matching on exception classes.
"""

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Failure categories surfaced by the client."""

    CONFIGURATION = "configuration"
    TRANSPORT = "transport"
    HTTP_STATUS = "http_status"
    PROTOCOL = "protocol"
    POLL_TIMEOUT = "poll_timeout"
    UPLOAD_STATE = "upload_state"
    OPERATION_FAILED = "operation_failed"


def _preview(body: bytes, limit: int = 500) -> str:
    text = body.decode("utf-8", errors="replace")
    if len(text) > limit:
        return text[:limit] + "..."
    return text


class FileSearchError(Exception):
    """Base exception for all File Search client errors."""

    kind: ErrorKind = ErrorKind.PROTOCOL


class ConfigurationError(FileSearchError):
    """Missing or invalid client configuration, e.g. no API key."""

    kind = ErrorKind.CONFIGURATION


class TransportFailure(FileSearchError):
    """The request could not be sent or no response was received."""

    kind = ErrorKind.TRANSPORT

    def __init__(self, url: str, cause: Exception, offset: int | None = None):
        self.url = url
        self.cause = cause
        # Byte offset of the chunk in flight, set by the upload coordinator
        self.offset = offset
        super().__init__(f"HTTP request to {url} failed: {cause}")


class HttpStatusError(FileSearchError):
    """A response arrived with a status outside [200, 300)."""

    kind = ErrorKind.HTTP_STATUS

    def __init__(self, status: int, url: str, body: bytes):
        self.status = status
        self.url = url
        self.body = body
        super().__init__(f"HTTP {status} calling {url} => {_preview(body)}")


class ProtocolError(FileSearchError):
    """The service response did not honor the expected contract."""

    kind = ErrorKind.PROTOCOL

    def __init__(self, message: str, status: int | None = None, body: bytes = b""):
        self.status = status
        self.body = body
        super().__init__(message)


class DecodeError(ProtocolError):
    """A success response body was not valid JSON."""

    def __init__(self, body: bytes, cause: Exception):
        self.cause = cause
        super().__init__(
            f"Failed to decode JSON: {cause} Body: {_preview(body)}", body=body
        )


class SessionInitiationError(ProtocolError):
    """The upload start response carried no X-Goog-Upload-URL header."""

    def __init__(self, status: int, body: bytes):
        super().__init__(
            f"Failed to obtain X-Goog-Upload-URL for resumable upload. "
            f"Status {status} Body: {_preview(body)}",
            status=status,
            body=body,
        )


class UploadStateError(FileSearchError):
    """A chunk was sent to an upload session that is already finalized."""

    kind = ErrorKind.UPLOAD_STATE

    def __init__(self, session_url: str):
        self.session_url = session_url
        super().__init__(f"Upload session already finalized: {session_url}")


class PollTimeoutError(FileSearchError):
    """A long-running operation did not finish before the deadline."""

    kind = ErrorKind.POLL_TIMEOUT

    def __init__(self, operation_name: str, elapsed: float):
        self.operation_name = operation_name
        self.elapsed = elapsed
        super().__init__(
            f"Operation {operation_name} did not complete within timeout "
            f"({elapsed:.1f}s elapsed)"
        )


class OperationFailedError(FileSearchError):
    """A finished operation reported an error payload."""

    kind = ErrorKind.OPERATION_FAILED

    def __init__(self, operation_name: str, error: dict[str, Any]):
        self.operation_name = operation_name
        self.error = error
        message = error.get("message") or str(error)
        super().__init__(f"Operation {operation_name} failed: {message}")
