"""
Optional request executor backed by httpx.

Clients never perform I/O themselves; this is one way to run the requests
they build::

    with HttpxTransport() as transport:
        transport.send(queue.send(BrokeredMessage.with_body("hello")))
        message = transport.receive(queue.receive())
        transport.send(queue.complete(message))
"""

import logging
from typing import Optional
from urllib.parse import parse_qs, urlsplit

import httpx

from sbrest.servicebus.client import ServiceBusRequest
from sbrest.servicebus.exceptions import TransportError
from sbrest.servicebus.models import BrokeredMessage
from sbrest.servicebus.responses import check_response, message_from_response

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_PADDING = 5.0
DEFAULT_CLIENT_TIMEOUT = 10.0


class HttpxTransport:
    """Executes ``ServiceBusRequest`` objects with an ``httpx.Client``."""

    def __init__(
        self,
        client: Optional[httpx.Client] = None,
        timeout_padding: float = DEFAULT_TIMEOUT_PADDING,
    ):
        """
        Args:
            client: Client to use; one is created (and owned) when omitted
            timeout_padding: Seconds added to a request's server-side timeout
                so the server answers before the client gives up
        """
        self._owns_client = client is None
        self._client = client or httpx.Client()
        self._timeout_padding = timeout_padding

    def _client_timeout(self, request: ServiceBusRequest) -> float:
        values = parse_qs(urlsplit(request.uri).query).get("timeout")
        if not values:
            return DEFAULT_CLIENT_TIMEOUT
        return float(values[0]) + self._timeout_padding

    def execute(self, request: ServiceBusRequest) -> httpx.Response:
        """
        Run a request and return the raw response.

        Raises:
            TransportError: If the HTTP exchange fails (network, TLS, timeout)
        """
        try:
            response = self._client.request(
                request.method,
                request.uri,
                headers=request.headers,
                content=request.body,
                timeout=self._client_timeout(request),
            )
        except httpx.HTTPError as exc:
            logger.error(f"{request.operation or request.method} request failed: {exc}")
            raise TransportError(exc) from exc
        logger.debug(f"{request.operation}: {request.method} -> {response.status_code}")
        return response

    def send(self, request: ServiceBusRequest) -> httpx.Response:
        """Run a request and raise the typed error for any non-success status."""
        response = self.execute(request)
        check_response(response)
        return response

    def receive(self, request: ServiceBusRequest) -> BrokeredMessage:
        """
        Run a receive request and return the message.

        Raises:
            EmptyBusError: If nothing arrived before the server-side timeout
        """
        return message_from_response(self.execute(request))

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "HttpxTransport":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
