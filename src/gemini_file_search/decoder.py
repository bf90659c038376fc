"""Status classification and JSON decoding on top of a ``Transport``."""

import json
import logging
from typing import Any

from .errors import DecodeError, HttpStatusError
from .transport import Endpoint, Transport, TransportResponse

logger = logging.getLogger(__name__)


def decode_json(body: bytes) -> Any:
    """
    Parse a response body as JSON.

    Empty bodies and a literal ``null`` decode to an empty dict so callers
    never receive ``None``.

    Raises:
        DecodeError: If the body is not valid JSON
    """
    if not body.strip():
        return {}
    try:
        data = json.loads(body)
    except ValueError as e:
        raise DecodeError(body, e) from e
    return {} if data is None else data


class ResponseDecoder:
    """Wraps a transport with status checks and JSON decoding."""

    def __init__(self, transport: Transport):
        self.transport = transport

    def request_with_headers(self, endpoint: Endpoint) -> TransportResponse:
        """Send the request and hand back status, headers and body unclassified."""
        return self.transport.send(endpoint)

    def request_bytes(self, endpoint: Endpoint) -> bytes:
        """
        Send the request and return the raw body of a 2xx response.

        Raises:
            HttpStatusError: If the status is outside [200, 300)
        """
        response = self.transport.send(endpoint)
        if not response.is_success:
            url = endpoint.redacted_url()
            logger.debug(f"{endpoint.method} {url} returned HTTP {response.status}")
            raise HttpStatusError(response.status, url, response.body)
        return response.body

    def request_json(self, endpoint: Endpoint) -> Any:
        """
        Send the request and decode the 2xx response body as JSON.

        Raises:
            HttpStatusError: If the status is outside [200, 300)
            DecodeError: If the body is not valid JSON
        """
        return decode_json(self.request_bytes(endpoint))
