"""HTTP transport: sends an endpoint descriptor and returns the raw response."""

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Protocol

import httpx

from .errors import TransportFailure

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60.0


@dataclass(frozen=True)
class Endpoint:
    """
    A single logical request.

    The body is either ``json`` (a structured value encoded as JSON) or
    ``content`` (bytes sent as-is), never both.
    """

    method: str
    url: str
    headers: Mapping[str, str] = field(default_factory=dict)
    params: Mapping[str, str] = field(default_factory=dict)
    json: Any = None
    content: bytes | None = None

    def __post_init__(self) -> None:
        if self.json is not None and self.content is not None:
            raise ValueError("Endpoint body must be either json or content, not both")
        object.__setattr__(self, "method", self.method.upper())

    def redacted_url(self) -> str:
        """URL for logging, without the credential query parameter."""
        url = httpx.URL(self.url)
        if self.params:
            url = url.copy_merge_params(dict(self.params))
        if "key" in url.params:
            url = url.copy_set_param("key", "***")
        return str(url)


@dataclass(frozen=True)
class TransportResponse:
    """Status, case-insensitive headers and raw body of one HTTP exchange."""

    status: int
    headers: httpx.Headers
    body: bytes

    @property
    def is_success(self) -> bool:
        return 200 <= self.status < 300

    def header(self, name: str) -> str | None:
        """Look up a header by name, ignoring case. Repeated values are joined with ', '."""
        return self.headers.get(name)


class Transport(Protocol):
    """Anything that can deliver an ``Endpoint`` and return the response."""

    def send(self, endpoint: Endpoint) -> TransportResponse: ...


class HttpTransport:
    """
    ``Transport`` backed by an ``httpx.Client``.

    Status codes are never interpreted here and nothing is retried. Only
    failures to get a response at all (connection, DNS, timeout) raise.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        client: httpx.Client | None = None,
    ):
        """
        Initialize the transport.

        Args:
            timeout: Per-request timeout in seconds
            client: Optional preconfigured client; the caller keeps ownership
        """
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout, follow_redirects=True)
        self.timeout = timeout

    def send(self, endpoint: Endpoint) -> TransportResponse:
        """
        Send the request and return whatever the server answered.

        Raises:
            TransportFailure: If no response was received
        """
        log_url = endpoint.redacted_url()
        logger.debug(f"{endpoint.method} {log_url}")
        try:
            response = self._client.request(
                endpoint.method,
                endpoint.url,
                headers=dict(endpoint.headers),
                params=dict(endpoint.params) or None,
                json=endpoint.json,
                content=endpoint.content,
                timeout=self.timeout,
            )
        except httpx.RequestError as e:
            logger.debug(f"{endpoint.method} {log_url} failed: {e}")
            raise TransportFailure(log_url, e) from e

        logger.debug(f"{endpoint.method} {log_url} -> {response.status_code}")
        return TransportResponse(
            status=response.status_code,
            headers=httpx.Headers(response.headers),
            body=response.content,
        )

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "HttpTransport":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
