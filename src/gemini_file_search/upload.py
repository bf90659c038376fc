"""
Resumable upload protocol.

A session goes Uninitiated -> Open -> Finalized:

1. ``start_session`` posts the declared size and MIME type and reads the
   session URL from the ``X-Goog-Upload-URL`` response header.
2. ``transfer_chunk`` sends raw bytes at an explicit offset. The last chunk
   carries the ``finalize`` command and its response is the file resource.

The coordinator does not remember offsets between calls. Callers pick the
chunk boundaries and must resume from bytes the server has acknowledged
(``query_status`` reports that number).
"""

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, BinaryIO

from .config import ClientConfig
from .decoder import ResponseDecoder
from .errors import (
    DecodeError,
    HttpStatusError,
    SessionInitiationError,
    TransportFailure,
    UploadStateError,
)
from .models import UploadState, UploadStatus
from .transport import Endpoint

logger = logging.getLogger(__name__)

# Default read size for upload_stream; any size the service accepts will do
DEFAULT_CHUNK_SIZE = 8 * 1024 * 1024

UPLOAD_URL_HEADER = "x-goog-upload-url"
UPLOAD_STATUS_HEADER = "x-goog-upload-status"
UPLOAD_SIZE_RECEIVED_HEADER = "x-goog-upload-size-received"


class UploadCommand(str, Enum):
    """Values of the ``X-Goog-Upload-Command`` header."""

    START = "start"
    UPLOAD = "upload"
    UPLOAD_FINALIZE = "upload, finalize"
    QUERY = "query"


@dataclass
class UploadSession:
    """An open resumable upload for exactly one file."""

    url: str
    total_bytes: int
    mime_type: str
    state: UploadState = UploadState.OPEN

    @property
    def finalized(self) -> bool:
        return self.state is UploadState.FINALIZED


def _session_url(session: UploadSession | str) -> str:
    return session.url if isinstance(session, UploadSession) else session


def _decode_ack(body: bytes) -> dict[str, Any]:
    if not body.strip():
        return {}
    try:
        data = json.loads(body)
    except ValueError:
        return {"raw": body.decode("utf-8", errors="replace")}
    return data if isinstance(data, dict) else {"raw": data}


class ResumableUploader:
    """Drives resumable upload sessions over a ``ResponseDecoder``."""

    def __init__(self, decoder: ResponseDecoder, config: ClientConfig):
        self.decoder = decoder
        self.config = config

    def _endpoint(self, url: str, headers: dict[str, str], **body: Any) -> Endpoint:
        return Endpoint(
            "POST",
            url,
            headers={**headers, **self.config.credential_headers()},
            params=self.config.credential_params(),
            **body,
        )

    def start_session(
        self,
        url: str,
        total_bytes: int,
        mime_type: str,
        body: dict[str, Any] | None = None,
    ) -> UploadSession:
        """
        Open a resumable upload session.

        Presence of the ``X-Goog-Upload-URL`` header is the success signal;
        the status code alone is not trusted.

        Args:
            url: Initiation endpoint (store upload or files upload)
            total_bytes: Declared size of the whole payload
            mime_type: Declared content type of the payload
            body: Optional JSON metadata (display name, custom metadata, ...)

        Returns:
            The new session in the Open state

        Raises:
            SessionInitiationError: If the response has no session URL header
        """
        if total_bytes < 0:
            raise ValueError(f"total_bytes must be >= 0, got {total_bytes}")
        if not mime_type:
            raise ValueError("mime_type is required")

        endpoint = self._endpoint(
            url,
            {
                "X-Goog-Upload-Protocol": "resumable",
                "X-Goog-Upload-Command": UploadCommand.START.value,
                "X-Goog-Upload-Header-Content-Length": str(total_bytes),
                "X-Goog-Upload-Header-Content-Type": mime_type,
                "Content-Type": "application/json",
            },
            json=body if body is not None else {},
        )
        response = self.decoder.request_with_headers(endpoint)

        session_url = response.header(UPLOAD_URL_HEADER)
        if not session_url:
            logger.error(f"Upload start returned HTTP {response.status} without a session URL")
            raise SessionInitiationError(response.status, response.body)

        logger.debug(f"Opened upload session for {total_bytes} bytes ({mime_type})")
        return UploadSession(url=session_url, total_bytes=total_bytes, mime_type=mime_type)

    def transfer_chunk(
        self,
        session: UploadSession | str,
        data: bytes,
        offset: int,
        finalize: bool = False,
    ) -> dict[str, Any]:
        """
        Send ``data`` as the bytes ``[offset, offset + len(data))``.

        Each call is a single request; nothing is cached, merged or retried.

        Args:
            session: Session from ``start_session``, or a bare session URL
                (a bare URL gets no local finalize guard)
            data: Chunk bytes
            offset: Byte offset of the chunk; must continue acknowledged bytes
            finalize: Whether this is the last chunk

        Returns:
            The decoded response. For the final chunk this is the file
            resource; intermediate acknowledgements are informational.

        Raises:
            UploadStateError: If the session is already finalized
            HttpStatusError: If the service rejects the chunk
            TransportFailure: If the request could not be completed
        """
        if offset < 0:
            raise ValueError(f"offset must be >= 0, got {offset}")
        if isinstance(session, UploadSession) and session.finalized:
            raise UploadStateError(session.url)

        command = UploadCommand.UPLOAD_FINALIZE if finalize else UploadCommand.UPLOAD
        endpoint = self._endpoint(
            _session_url(session),
            {
                "Content-Length": str(len(data)),
                "X-Goog-Upload-Offset": str(offset),
                "X-Goog-Upload-Command": command.value,
                "Content-Type": "application/octet-stream",
            },
            content=data,
        )
        body = self.decoder.request_bytes(endpoint)

        if finalize:
            if isinstance(session, UploadSession):
                session.state = UploadState.FINALIZED
            logger.info(f"Upload finalized at {offset + len(data)} bytes")
        else:
            logger.debug(f"Uploaded {len(data)} bytes at offset {offset}")
        return _decode_ack(body)

    def query_status(self, session: UploadSession | str) -> UploadStatus:
        """
        Ask the service how many bytes of the session it has accepted.

        Use the result to resume after a failed ``transfer_chunk``.

        Raises:
            HttpStatusError: If the status query is rejected
        """
        url = _session_url(session)
        endpoint = self._endpoint(
            url,
            {
                "Content-Length": "0",
                "X-Goog-Upload-Command": UploadCommand.QUERY.value,
            },
        )
        response = self.decoder.request_with_headers(endpoint)
        if not response.is_success:
            raise HttpStatusError(response.status, endpoint.redacted_url(), response.body)

        received = response.header(UPLOAD_SIZE_RECEIVED_HEADER)
        try:
            bytes_received = int(received) if received else 0
        except ValueError as e:
            raise DecodeError(received.encode(), e) from e

        status = UploadStatus(
            status=response.header(UPLOAD_STATUS_HEADER),
            bytes_received=bytes_received,
        )
        logger.debug(f"Upload status: {status.status}, {status.bytes_received} bytes received")
        return status

    def upload_stream(
        self,
        session: UploadSession | str,
        stream: BinaryIO,
        offset: int = 0,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> dict[str, Any]:
        """
        Upload the rest of ``stream`` from ``offset`` and finalize.

        Chunks are sent strictly in order. The last chunk read carries the
        finalize command; an empty remainder is finalized with an empty chunk.

        Raises:
            TransportFailure: With ``offset`` set to the chunk that failed
        """
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be > 0, got {chunk_size}")
        if offset:
            stream.seek(offset)

        chunk = stream.read(chunk_size)
        while True:
            next_chunk = stream.read(chunk_size) if chunk else b""
            finalize = not next_chunk
            try:
                ack = self.transfer_chunk(session, chunk, offset, finalize=finalize)
            except TransportFailure as e:
                e.offset = offset
                logger.warning(f"Chunk transfer failed at offset {offset}: {e.cause}")
                raise
            if finalize:
                return ack
            offset += len(chunk)
            chunk = next_chunk
