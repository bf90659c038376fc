"""Gemini File Search REST client."""

import json
import logging
import mimetypes
from pathlib import Path
from typing import Any, Mapping, Sequence, TypeVar

from pydantic import BaseModel, ValidationError

from .config import ClientConfig, get_config
from .decoder import ResponseDecoder
from .errors import ProtocolError
from .models import FileResource, FileSearchStore, Operation, UploadStatus
from .operations import DEFAULT_POLL_INTERVAL, DEFAULT_TIMEOUT, OperationPoller
from .payloads import document_body, file_body, generate_content_body, import_file_body
from .transport import Endpoint, HttpTransport, Transport
from .upload import DEFAULT_CHUNK_SIZE, ResumableUploader, UploadSession

logger = logging.getLogger(__name__)

API_VERSION = "v1beta"

mimetypes.add_type("text/markdown", ".md")
mimetypes.add_type("text/markdown", ".markdown")

ModelT = TypeVar("ModelT", bound=BaseModel)


def _expect_object(data: Any) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise ProtocolError(
            f"Unexpected response shape: expected a JSON object, got {type(data).__name__}",
            body=json.dumps(data, default=str).encode(),
        )
    return data


def _validate(model: type[ModelT], data: Any) -> ModelT:
    """Validate a decoded response, raising ProtocolError when it does not fit ``model``."""
    try:
        return model.model_validate(_expect_object(data))
    except ValidationError as e:
        raise ProtocolError(
            f"Unexpected response shape for {model.__name__}: {e.error_count()} validation error(s)",
            body=json.dumps(data, default=str).encode(),
        ) from e


class FileSearchClient:
    """
    Small facade over the File Search REST API.

    Builds one request per call and delegates to the transport, the
    resumable upload coordinator and the operation poller. The configuration
    is immutable; ``with_config`` and ``with_model`` return new clients that
    share the same transport.

    Example:
        >>> client = FileSearchClient()
        >>> store = client.create_store("my-docs")
        >>> ack = client.upload_file("paper.pdf", store_name=store.name)
        >>> client.wait_operation(ack["name"])
        >>> response = client.generate_content("Summarize the paper", [store.name])
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        transport: Transport | None = None,
    ):
        self.config = config or get_config()
        self._owns_transport = transport is None
        self.transport = transport or HttpTransport(timeout=self.config.timeout)
        self.decoder = ResponseDecoder(self.transport)
        self.uploader = ResumableUploader(self.decoder, self.config)
        self.poller = OperationPoller(self.get_operation)

    # --- Configuration ---

    def with_config(self, config: ClientConfig) -> "FileSearchClient":
        """Return a client using ``config`` and this client's transport."""
        client = type(self)(config, transport=self.transport)
        client._owns_transport = False
        return client

    def with_model(self, model: str) -> "FileSearchClient":
        """Return a client that generates with ``model``."""
        return self.with_config(self.config.with_overrides(model=model))

    def close(self) -> None:
        if self._owns_transport and isinstance(self.transport, HttpTransport):
            self.transport.close()

    def __enter__(self) -> "FileSearchClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # --- Request building ---

    def _url(self, path: str, upload: bool = False) -> str:
        prefix = f"upload/{API_VERSION}" if upload else API_VERSION
        return f"{self.config.base_url}/{prefix}/{path.lstrip('/')}"

    def _endpoint(
        self,
        method: str,
        path: str,
        json: Any = None,
        params: Mapping[str, str] | None = None,
    ) -> Endpoint:
        headers = self.config.credential_headers()
        if json is not None:
            headers["Content-Type"] = "application/json"
        return Endpoint(
            method,
            self._url(path),
            headers=headers,
            params={**(params or {}), **self.config.credential_params()},
            json=json,
        )

    # --- File Search stores ---

    def create_store(self, display_name: str) -> FileSearchStore:
        """
        Create a File Search store.

        Args:
            display_name: Human-readable name (up to 512 characters)

        Returns:
            The new store, including its assigned resource name
        """
        data = self.decoder.request_json(
            self._endpoint("POST", "fileSearchStores", json={"displayName": display_name})
        )
        store = _validate(FileSearchStore, data)
        logger.info(f"Created File Search store: {store.name}")
        return store

    def list_stores(self, page_size: int | None = None) -> list[FileSearchStore]:
        """List all File Search stores, following pagination."""
        stores: list[FileSearchStore] = []
        page_token: str | None = None
        while True:
            params: dict[str, str] = {}
            if page_size:
                params["pageSize"] = str(page_size)
            if page_token:
                params["pageToken"] = page_token
            data = _expect_object(
                self.decoder.request_json(self._endpoint("GET", "fileSearchStores", params=params))
            )
            stores.extend(
                _validate(FileSearchStore, item)
                for item in data.get("fileSearchStores", [])
            )
            page_token = data.get("nextPageToken")
            if not page_token:
                break
        logger.debug(f"Found {len(stores)} File Search stores")
        return stores

    def get_store(self, store_name: str) -> FileSearchStore:
        data = self.decoder.request_json(self._endpoint("GET", store_name))
        return _validate(FileSearchStore, data)

    def delete_store(self, store_name: str, force: bool = False) -> None:
        """
        Delete a File Search store.

        Args:
            store_name: Store resource name
            force: Also delete the documents in it; without this the service
                refuses to delete a non-empty store
        """
        params = {"force": "true"} if force else None
        self.decoder.request_bytes(self._endpoint("DELETE", store_name, params=params))
        logger.info(f"Deleted File Search store: {store_name}")

    # --- Resumable uploads ---

    def start_upload_to_store(
        self,
        store_name: str,
        total_bytes: int,
        mime_type: str,
        display_name: str | None = None,
        custom_metadata: Mapping[str, Any] | None = None,
        chunking_config: dict[str, Any] | None = None,
    ) -> UploadSession:
        """Open an upload session that ingests straight into ``store_name``."""
        self.config.require_api_key()
        url = self._url(f"{store_name}:uploadToFileSearchStore", upload=True)
        body = document_body(display_name, custom_metadata, chunking_config, mime_type)
        return self.uploader.start_session(url, total_bytes, mime_type, body)

    def start_upload_to_files(
        self,
        total_bytes: int,
        mime_type: str,
        display_name: str | None = None,
    ) -> UploadSession:
        """Open an upload session for a standalone file, to be imported later."""
        self.config.require_api_key()
        url = self._url("files", upload=True)
        return self.uploader.start_session(url, total_bytes, mime_type, file_body(display_name))

    def upload_chunk(
        self,
        session: UploadSession | str,
        data: bytes,
        offset: int,
        finalize: bool = False,
    ) -> dict[str, Any]:
        """Send one chunk; see ``ResumableUploader.transfer_chunk``."""
        return self.uploader.transfer_chunk(session, data, offset, finalize=finalize)

    def query_upload(self, session: UploadSession | str) -> UploadStatus:
        """Ask how many bytes the service has accepted for ``session``."""
        return self.uploader.query_status(session)

    def upload_file(
        self,
        path: str | Path,
        store_name: str | None = None,
        mime_type: str | None = None,
        display_name: str | None = None,
        custom_metadata: Mapping[str, Any] | None = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> dict[str, Any]:
        """
        Upload a local file in chunks.

        With ``store_name`` the file goes straight into that store and the
        result is the ingestion operation; otherwise it becomes a standalone
        file resource (``{"file": {...}}``) that can be passed to
        ``import_file_to_store``.

        Args:
            path: Local file path
            store_name: Optional target store
            mime_type: Content type; guessed from the file name if omitted
            display_name: Name shown in citations; defaults to the file name
            custom_metadata: Key/value metadata for store uploads
            chunk_size: Bytes per chunk

        Returns:
            Decoded response of the finalize request
        """
        path = Path(path)
        if not path.is_file():
            raise FileNotFoundError(f"File not found: {path}")

        total_bytes = path.stat().st_size
        mime_type = mime_type or mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        display_name = display_name or path.name
        logger.debug(f"Uploading {path} ({total_bytes} bytes, {mime_type})")

        if store_name:
            session = self.start_upload_to_store(
                store_name, total_bytes, mime_type, display_name, custom_metadata
            )
        else:
            session = self.start_upload_to_files(total_bytes, mime_type, display_name)

        with path.open("rb") as stream:
            ack = self.uploader.upload_stream(session, stream, chunk_size=chunk_size)
        logger.info(f"Uploaded {display_name}")
        return ack

    # --- Files and import ---

    def get_file(self, file_name: str) -> FileResource:
        data = self.decoder.request_json(self._endpoint("GET", file_name))
        return _validate(FileResource, data)

    def import_file_to_store(
        self,
        store_name: str,
        file_name: str,
        custom_metadata: Mapping[str, Any] | None = None,
    ) -> Operation:
        """
        Import a previously uploaded file resource into a store.

        Returns:
            The long-running import operation; pass its name to ``wait_operation``
        """
        body = import_file_body(file_name, custom_metadata)
        data = self.decoder.request_json(self._endpoint("POST", f"{store_name}:importFile", json=body))
        operation = _validate(Operation, data)
        logger.info(f"Importing {file_name} into {store_name}: {operation.name}")
        return operation

    # --- Operations ---

    def get_operation(self, operation_name: str) -> Operation:
        data = self.decoder.request_json(self._endpoint("GET", operation_name))
        return _validate(Operation, data)

    def wait_operation(
        self,
        operation_name: str,
        timeout: float = DEFAULT_TIMEOUT,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> Operation:
        """Poll until the operation is done; see ``OperationPoller.wait``."""
        return self.poller.wait(operation_name, timeout=timeout, poll_interval=poll_interval)

    # --- Generation ---

    def generate_content(
        self,
        prompt: str,
        store_names: Sequence[str],
        metadata_filter: str | None = None,
        generation_config: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Generate content with the File Search tool attached.

        Args:
            prompt: User prompt
            store_names: Stores the model may retrieve from
            metadata_filter: Optional filter expression (e.g., 'source_type = "wikipedia"')
            generation_config: Optional generationConfig passed through as-is

        Returns:
            The raw generateContent response
        """
        body = generate_content_body(prompt, store_names, metadata_filter, generation_config)
        model = self.config.model.removeprefix("models/")
        return self.decoder.request_json(
            self._endpoint("POST", f"models/{model}:generateContent", json=body)
        )
