"""
Service Bus Clients

Queue, subscription and topic clients that assemble authenticated HTTP
requests. No client performs network I/O: every operation returns a
``ServiceBusRequest`` for the caller (or ``HttpxTransport``) to execute.

Queues are the simple case: all producers and consumers share one queue, which
gives load balancing across consumers and decouples producers from whether a
consumer is running.

Topics and subscriptions work together. Producers send to the topic; every
subscription receives its own copy of each message and behaves like an
independent queue, so one subscription can feed workers while another feeds,
say, an audit log, without either interfering with the other.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, Union

from sbrest.auth.connection_string import ConnectionString
from sbrest.auth.credentials import Clock, CredentialCache
from sbrest.core.config import ClientSettings
from sbrest.servicebus.addressing import (
    EntityAddress,
    QueueAddress,
    ReceivableAddress,
    SubscriptionAddress,
    Timeout,
    TopicAddress,
)
from sbrest.servicebus.constants import (
    AUTHORIZATION_HEADER,
    BROKER_PROPERTIES_HEADER,
    CONTENT_TYPE_HEADER,
)
from sbrest.servicebus.models import BrokeredMessage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServiceBusRequest:
    """An unexecuted HTTP request."""

    method: str
    uri: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[bytes] = None
    operation: str = ""

    @property
    def authorization(self) -> str:
        return self.headers[AUTHORIZATION_HEADER]


class ServiceBusClientBase:
    """
    State shared by every entity client: endpoint, credentials and settings.

    All attributes are fixed at construction except the credential cache,
    which is safe to use from several threads.
    """

    def __init__(
        self,
        connection_string: Union[str, ConnectionString],
        address_factory: Callable[[str], EntityAddress],
        settings: Optional[ClientSettings] = None,
        credentials: Optional[CredentialCache] = None,
        clock: Optional[Clock] = None,
    ):
        if isinstance(connection_string, str):
            connection_string = ConnectionString.parse(connection_string)
        self._connection = connection_string
        self._settings = settings or ClientSettings()
        self._address = address_factory(connection_string.service_endpoint)
        self._credentials = credentials or CredentialCache(
            connection_string,
            ttl=self._settings.token_ttl,
            buffer_seconds=self._settings.token_expiry_buffer,
            clock=clock,
        )

    @property
    def endpoint(self) -> str:
        """HTTPS endpoint of the namespace, e.g. ``https://{namespace}.servicebus.windows.net/``."""
        return self._address.endpoint

    @property
    def address(self) -> EntityAddress:
        return self._address

    @property
    def settings(self) -> ClientSettings:
        return self._settings

    @property
    def credentials(self) -> CredentialCache:
        return self._credentials

    def _timeout(self, timeout: Optional[Timeout]) -> Timeout:
        return self._settings.default_timeout if timeout is None else timeout

    def _build_request(
        self,
        operation: str,
        method: str,
        path_and_query: str,
        body: Optional[bytes] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> ServiceBusRequest:
        request_headers = {AUTHORIZATION_HEADER: self._credentials.get_token()}
        if headers:
            request_headers.update(headers)
        logger.debug(
            f"{operation}: {self._address.entity_type}{self._address.entity_path} "
            f"-> {method} {path_and_query}"
        )
        return ServiceBusRequest(
            method=method,
            uri=self._address.uri(path_and_query),
            headers=request_headers,
            body=body,
            operation=operation,
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(endpoint={self.endpoint!r}, entity={self._address.entity_path!r})"


class SendOperationsMixin:
    """Send path for entities that accept messages (queues and topics)."""

    def send(self, message: BrokeredMessage, timeout: Optional[Timeout] = None) -> ServiceBusRequest:
        """
        Build a request that enqueues ``message``.

        Args:
            message: Message to send; its broker properties travel as a header
            timeout: Server-side timeout (defaults to the configured 30 seconds)
        """
        headers = {
            CONTENT_TYPE_HEADER: self._settings.content_type,
            BROKER_PROPERTIES_HEADER: message.properties.to_header(),
        }
        return self._build_request(
            "send",
            "POST",
            self._address.messages_path(self._timeout(timeout)),
            body=message.body,
            headers=headers,
        )


class ReceiveOperationsMixin:
    """Receive paths for queues and subscriptions."""

    _address: ReceivableAddress

    def receive(self, timeout: Optional[Timeout] = None) -> ServiceBusRequest:
        """
        Build a peek-lock receive.

        The message stays on the server, locked to this receiver, until it is
        completed, abandoned, or its lock expires. Use this when a message
        must not be lost if processing fails.
        """
        return self._build_request(
            "receive", "POST", self._address.head_path(self._timeout(timeout))
        )

    def receive_and_delete(self, timeout: Optional[Timeout] = None) -> ServiceBusRequest:
        """
        Build a destructive receive.

        The message is removed as it is read; if the application crashes
        while processing it, the message is lost.
        """
        return self._build_request(
            "receive_and_delete", "DELETE", self._address.head_path(self._timeout(timeout))
        )


class LockOperationsMixin:
    """
    Settlement of peek-locked messages.

    Each operation only accepts a ``LeasedMessage``; anything else raises
    ``LocalMessageError`` and no request is built.
    """

    _address: ReceivableAddress

    def complete(self, message: BrokeredMessage) -> ServiceBusRequest:
        """Build a request that deletes a received message from the entity."""
        path = self._address.lock_path(message)
        return self._build_request("complete", "DELETE", path)

    def abandon(self, message: BrokeredMessage) -> ServiceBusRequest:
        """
        Build a request that releases the lock and returns the message to the entity.

        Typically used when the message could not be handled and should be
        retried later; it may be redelivered.
        """
        path = self._address.lock_path(message)
        return self._build_request("abandon", "PUT", path)

    def renew(self, message: BrokeredMessage) -> ServiceBusRequest:
        """Build a request that extends the lock when processing needs more time."""
        path = self._address.lock_path(message)
        return self._build_request("renew", "POST", path)


class QueueClient(SendOperationsMixin, ReceiveOperationsMixin, LockOperationsMixin, ServiceBusClientBase):
    """
    Client for a Service Bus queue.

    Example:
        ```python
        queue = QueueClient(connection_string, "orders")
        request = queue.send(BrokeredMessage.with_body("order 1001"))
        ```
    """

    def __init__(
        self,
        connection_string: Union[str, ConnectionString],
        queue_name: str,
        settings: Optional[ClientSettings] = None,
        credentials: Optional[CredentialCache] = None,
        clock: Optional[Clock] = None,
    ):
        super().__init__(
            connection_string,
            lambda endpoint: QueueAddress(endpoint, queue_name),
            settings=settings,
            credentials=credentials,
            clock=clock,
        )

    @property
    def queue_name(self) -> str:
        return self._address.queue_name


class SubscriptionClient(ReceiveOperationsMixin, LockOperationsMixin, ServiceBusClientBase):
    """
    Client for receiving from a subscription of a topic.

    The subscription must already exist; send to the topic with ``TopicClient``.
    """

    def __init__(
        self,
        connection_string: Union[str, ConnectionString],
        topic_name: str,
        subscription_name: str,
        settings: Optional[ClientSettings] = None,
        credentials: Optional[CredentialCache] = None,
        clock: Optional[Clock] = None,
    ):
        super().__init__(
            connection_string,
            lambda endpoint: SubscriptionAddress(endpoint, topic_name, subscription_name),
            settings=settings,
            credentials=credentials,
            clock=clock,
        )

    @property
    def topic_name(self) -> str:
        return self._address.topic_name

    @property
    def subscription_name(self) -> str:
        return self._address.subscription_name


class TopicClient(SendOperationsMixin, ServiceBusClientBase):
    """Client for publishing to a topic."""

    def __init__(
        self,
        connection_string: Union[str, ConnectionString],
        topic_name: str,
        settings: Optional[ClientSettings] = None,
        credentials: Optional[CredentialCache] = None,
        clock: Optional[Clock] = None,
    ):
        super().__init__(
            connection_string,
            lambda endpoint: TopicAddress(endpoint, topic_name),
            settings=settings,
            credentials=credentials,
            clock=clock,
        )

    @property
    def topic_name(self) -> str:
        return self._address.topic_name
