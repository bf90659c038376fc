"""Pydantic models for File Search stores, files, uploads and operations."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .errors import OperationFailedError


class ApiModel(BaseModel):
    """Base for API resources: accepts camelCase JSON and keeps unknown fields."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )


class FileSearchStore(ApiModel):
    """A File Search store resource."""

    name: str = Field(..., description="Resource name (e.g., 'fileSearchStores/abc123')")
    display_name: str | None = Field(None, description="Human-readable store name")
    create_time: str | None = Field(None, description="RFC 3339 creation timestamp")
    update_time: str | None = Field(None, description="RFC 3339 update timestamp")
    active_documents_count: int = Field(0, description="Documents ready for retrieval")
    pending_documents_count: int = Field(0, description="Documents still being processed")
    failed_documents_count: int = Field(0, description="Documents that failed processing")
    size_bytes: int | None = Field(None, description="Total size of ingested documents")

    @property
    def total_documents_count(self) -> int:
        return (
            self.active_documents_count
            + self.pending_documents_count
            + self.failed_documents_count
        )


class FileResource(ApiModel):
    """A standalone file uploaded through the files endpoint."""

    name: str = Field(..., description="Resource name (e.g., 'files/abc123')")
    display_name: str | None = None
    mime_type: str | None = None
    size_bytes: int | None = None
    uri: str | None = None
    state: str | None = Field(None, description="PROCESSING, ACTIVE or FAILED")


class OperationError(ApiModel):
    """Error payload embedded in a finished operation."""

    code: int | None = None
    message: str | None = None
    details: list[dict[str, Any]] = Field(default_factory=list)


class Operation(ApiModel):
    """A long-running operation as reported by the service."""

    name: str
    done: bool = False
    metadata: dict[str, Any] | None = None
    response: dict[str, Any] | None = None
    error: OperationError | None = None

    @property
    def succeeded(self) -> bool:
        return self.done and self.error is None

    def raise_for_error(self) -> "Operation":
        """
        Raise if the operation finished with an error payload.

        The poller returns failed operations as-is; call this to opt into
        exception-based handling.

        Raises:
            OperationFailedError: If ``done`` is true and ``error`` is set
        """
        if self.done and self.error is not None:
            raise OperationFailedError(
                self.name, self.error.model_dump(exclude_none=True)
            )
        return self


class UploadState(str, Enum):
    """Local lifecycle of a resumable upload session."""

    OPEN = "open"
    FINALIZED = "finalized"


class UploadStatus(BaseModel):
    """Server-side view of a resumable upload, from a status query."""

    status: str | None = Field(None, description="'active' or 'final'")
    bytes_received: int = Field(0, description="Bytes the server has accepted")

    @property
    def is_final(self) -> bool:
        return self.status == "final"
