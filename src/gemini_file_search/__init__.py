"""Gemini File Search - resumable uploads, operation polling and grounded generation."""

import logging

from .client import FileSearchClient
from .config import ClientConfig, get_config
from .decoder import ResponseDecoder
from .errors import (
    ConfigurationError,
    DecodeError,
    ErrorKind,
    FileSearchError,
    HttpStatusError,
    OperationFailedError,
    PollTimeoutError,
    ProtocolError,
    SessionInitiationError,
    TransportFailure,
    UploadStateError,
)
from .grounding import extract_grounding_chunks, extract_text
from .models import FileResource, FileSearchStore, Operation, UploadState, UploadStatus
from .operations import OperationPoller
from .outcome import Failure, Success, attempt
from .transport import Endpoint, HttpTransport, Transport, TransportResponse
from .upload import ResumableUploader, UploadCommand, UploadSession

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    # Client and configuration
    "FileSearchClient",
    "ClientConfig",
    "get_config",
    # Core components
    "Endpoint",
    "Transport",
    "HttpTransport",
    "TransportResponse",
    "ResponseDecoder",
    "ResumableUploader",
    "UploadSession",
    "UploadCommand",
    "OperationPoller",
    # Models
    "FileSearchStore",
    "FileResource",
    "Operation",
    "UploadState",
    "UploadStatus",
    # Errors and outcomes
    "ErrorKind",
    "FileSearchError",
    "ConfigurationError",
    "TransportFailure",
    "HttpStatusError",
    "ProtocolError",
    "DecodeError",
    "SessionInitiationError",
    "UploadStateError",
    "PollTimeoutError",
    "OperationFailedError",
    "Success",
    "Failure",
    "attempt",
    # Response helpers
    "extract_text",
    "extract_grounding_chunks",
]
