"""Tests for the resumable upload coordinator."""

import io
import json

import httpx
import pytest

from gemini_file_search.decoder import ResponseDecoder
from gemini_file_search.errors import (
    HttpStatusError,
    ProtocolError,
    SessionInitiationError,
    TransportFailure,
    UploadStateError,
)
from gemini_file_search.models import UploadState
from gemini_file_search.upload import ResumableUploader, UploadSession

from .conftest import SESSION_URL

START_URL = "https://generativelanguage.googleapis.com/upload/v1beta/files"


@pytest.fixture
def uploader(transport, config):
    return ResumableUploader(ResponseDecoder(transport), config)


@pytest.fixture
def session():
    return UploadSession(url=SESSION_URL, total_bytes=10, mime_type="text/plain")


def test_start_session_sends_protocol_headers(uploader, service):
    service.queue(200, headers={"X-Goog-Upload-URL": SESSION_URL})

    uploader.start_session(START_URL, 1024, "application/pdf", {"file": {"displayName": "doc"}})

    request = service.requests[0]
    assert request.method == "POST"
    assert request.headers["x-goog-upload-protocol"] == "resumable"
    assert request.headers["x-goog-upload-command"] == "start"
    assert request.headers["x-goog-upload-header-content-length"] == "1024"
    assert request.headers["x-goog-upload-header-content-type"] == "application/pdf"
    assert request.headers["x-goog-api-key"] == "test-key"
    assert json.loads(request.content) == {"file": {"displayName": "doc"}}


def test_start_session_without_body_sends_empty_object(uploader, service):
    service.queue(200, headers={"x-goog-upload-url": SESSION_URL})

    uploader.start_session(START_URL, 5, "text/plain")

    assert json.loads(service.requests[0].content) == {}


@pytest.mark.parametrize("status", [200, 201, 308])
@pytest.mark.parametrize("header_name", ["x-goog-upload-url", "X-Goog-Upload-URL", "X-GOOG-UPLOAD-URL"])
def test_start_session_reads_url_from_header_at_any_status(uploader, service, status, header_name):
    """The header, not the status code, signals success."""
    service.queue(status, headers={header_name: "https://example/session123"})

    session = uploader.start_session(START_URL, 1024, "application/pdf")

    assert session.url == "https://example/session123"
    assert session.state is UploadState.OPEN
    assert session.total_bytes == 1024
    assert session.mime_type == "application/pdf"


@pytest.mark.parametrize("status", [200, 400, 500])
def test_start_session_without_header_fails(uploader, service, status):
    service.queue(status, content=b'{"ok": true}')

    with pytest.raises(SessionInitiationError) as exc_info:
        uploader.start_session(START_URL, 1024, "application/pdf")

    assert isinstance(exc_info.value, ProtocolError)
    assert exc_info.value.status == status
    assert exc_info.value.body == b'{"ok": true}'


def test_start_session_validates_arguments(uploader, service):
    with pytest.raises(ValueError):
        uploader.start_session(START_URL, -1, "text/plain")
    with pytest.raises(ValueError):
        uploader.start_session(START_URL, 10, "")
    assert service.requests == []


def test_transfer_chunk_sends_offset_and_command(uploader, service, session):
    service.queue(200)

    uploader.transfer_chunk(session, b"hello", offset=0)

    request = service.requests[0]
    assert str(request.url) == SESSION_URL
    assert request.content == b"hello"
    assert request.headers["content-length"] == "5"
    assert request.headers["x-goog-upload-offset"] == "0"
    assert request.headers["x-goog-upload-command"] == "upload"
    assert request.headers["content-type"] == "application/octet-stream"
    assert session.state is UploadState.OPEN


def test_final_chunk_finalizes_session_and_returns_file(uploader, service, session):
    service.queue(200, json={"file": {"name": "files/abc123", "mimeType": "text/plain"}})

    ack = uploader.transfer_chunk(session, b"world", offset=5, finalize=True)

    assert ack == {"file": {"name": "files/abc123", "mimeType": "text/plain"}}
    assert service.requests[0].headers["x-goog-upload-command"] == "upload, finalize"
    assert service.requests[0].headers["x-goog-upload-offset"] == "5"
    assert session.state is UploadState.FINALIZED


def test_intermediate_ack_without_json_is_informational(uploader, service, session):
    service.queue(200, content=b"ACK")

    assert uploader.transfer_chunk(session, b"abc", offset=0) == {"raw": "ACK"}


def test_repeated_chunk_is_sent_twice(uploader, service, session):
    """No caching or deduplication between calls."""
    service.queue(200)
    service.queue(200)

    uploader.transfer_chunk(session, b"same", offset=0)
    uploader.transfer_chunk(session, b"same", offset=0)

    assert len(service.requests) == 2
    for request in service.requests:
        assert request.content == b"same"
        assert request.headers["x-goog-upload-offset"] == "0"
    assert session.url == SESSION_URL
    assert session.state is UploadState.OPEN


def test_transfer_after_finalize_is_rejected_locally(uploader, service, session):
    """A finalized session is not reopened, merged or retried."""
    service.queue(200, json={"file": {"name": "files/abc123"}})
    uploader.transfer_chunk(session, b"0123456789", offset=0, finalize=True)

    with pytest.raises(UploadStateError) as exc_info:
        uploader.transfer_chunk(session, b"more", offset=10)

    assert exc_info.value.session_url == SESSION_URL
    assert len(service.requests) == 1
    assert session.state is UploadState.FINALIZED


def test_bare_session_url_has_no_local_guard(uploader, service):
    """With a bare URL the service decides what a second finalize means."""
    service.queue(200, json={"file": {"name": "files/abc123"}})
    service.queue(400, content=b"upload already finalized")

    uploader.transfer_chunk(SESSION_URL, b"data", offset=0, finalize=True)
    with pytest.raises(HttpStatusError) as exc_info:
        uploader.transfer_chunk(SESSION_URL, b"data", offset=4, finalize=True)

    assert exc_info.value.status == 400
    assert len(service.requests) == 2


def test_rejected_chunk_keeps_session_open(uploader, service, session):
    service.queue(503, content=b"unavailable")

    with pytest.raises(HttpStatusError):
        uploader.transfer_chunk(session, b"data", offset=0, finalize=True)

    assert session.state is UploadState.OPEN


def test_negative_offset_is_rejected(uploader, service, session):
    with pytest.raises(ValueError):
        uploader.transfer_chunk(session, b"data", offset=-1)
    assert service.requests == []


def test_query_status_reports_received_bytes(uploader, service, session):
    service.queue(
        200,
        headers={"X-Goog-Upload-Status": "active", "X-Goog-Upload-Size-Received": "524288"},
    )

    status = uploader.query_status(session)

    assert status.status == "active"
    assert status.bytes_received == 524288
    assert not status.is_final
    assert service.requests[0].headers["x-goog-upload-command"] == "query"


def test_upload_stream_sends_ordered_chunks(uploader, service, session):
    for _ in range(3):
        service.queue(200)
    service.queue(200, json={"file": {"name": "files/abc123"}})

    ack = uploader.upload_stream(session, io.BytesIO(b"0123456789"), chunk_size=3)

    assert ack == {"file": {"name": "files/abc123"}}
    offsets = [r.headers["x-goog-upload-offset"] for r in service.requests]
    commands = [r.headers["x-goog-upload-command"] for r in service.requests]
    bodies = [r.content for r in service.requests]
    assert offsets == ["0", "3", "6", "9"]
    assert commands == ["upload", "upload", "upload", "upload, finalize"]
    assert bodies == [b"012", b"345", b"678", b"9"]
    assert session.finalized


def test_upload_stream_resumes_from_offset(uploader, service, session):
    service.queue(200)
    service.queue(200, json={"file": {"name": "files/abc123"}})

    uploader.upload_stream(session, io.BytesIO(b"0123456789"), offset=4, chunk_size=4)

    assert [r.content for r in service.requests] == [b"4567", b"89"]
    assert [r.headers["x-goog-upload-offset"] for r in service.requests] == ["4", "8"]


def test_upload_stream_exact_multiple_finalizes_last_chunk(uploader, service, session):
    service.queue(200)
    service.queue(200, json={"file": {"name": "files/abc123"}})

    uploader.upload_stream(session, io.BytesIO(b"abcdef"), chunk_size=3)

    assert len(service.requests) == 2
    assert service.requests[-1].headers["x-goog-upload-command"] == "upload, finalize"
    assert service.requests[-1].content == b"def"


def test_upload_stream_empty_payload_sends_single_finalize(uploader, service):
    empty = UploadSession(url=SESSION_URL, total_bytes=0, mime_type="text/plain")
    service.queue(200, json={"file": {"name": "files/empty"}})

    uploader.upload_stream(empty, io.BytesIO(b""))

    assert len(service.requests) == 1
    assert service.requests[0].content == b""
    assert service.requests[0].headers["x-goog-upload-command"] == "upload, finalize"


def test_upload_stream_failure_reports_offset(uploader, service, session):
    """A dropped connection leaves the session open at the failing offset."""
    service.queue(200)
    service.fail_with(httpx.ConnectError("connection reset"))

    with pytest.raises(TransportFailure) as exc_info:
        uploader.upload_stream(session, io.BytesIO(b"0123456789"), chunk_size=5)

    assert exc_info.value.offset == 5
    assert session.state is UploadState.OPEN
    assert len(service.requests) == 2


def test_upload_stream_rejects_bad_chunk_size(uploader, session):
    with pytest.raises(ValueError):
        uploader.upload_stream(session, io.BytesIO(b"data"), chunk_size=0)
