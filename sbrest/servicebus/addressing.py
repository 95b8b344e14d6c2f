"""
Request addressing for Service Bus entities.

Every entity maps to a path prefix:

- queue:         ``/{queue}``
- subscription:  ``/{topic}/subscriptions/{subscription}``
- topic:         ``/{topic}`` (send only)

and operations append to it:

- send:                 ``{prefix}/messages?timeout={s}``
- receive (any mode):   ``{prefix}/messages/head?timeout={s}``
- complete/abandon/renew: ``{prefix}/messages/{id}/{lock token}``

The request URI keeps only the endpoint's scheme and authority.
"""

from dataclasses import dataclass
from datetime import timedelta
from typing import Union
from urllib.parse import quote, urlsplit, urlunsplit

from sbrest.servicebus.exceptions import LocalMessageError
from sbrest.servicebus.models import BrokeredMessage, LeasedMessage

Timeout = Union[int, float, timedelta]


def timeout_seconds(timeout: Timeout) -> int:
    """Whole seconds of a timeout, for the ``timeout`` query parameter."""
    if isinstance(timeout, timedelta):
        timeout = timeout.total_seconds()
    if timeout < 0:
        raise ValueError(f"timeout must not be negative, got {timeout}")
    return int(timeout)


def _segment(value: str) -> str:
    return quote(value, safe="")


def _entity_name(name: str) -> str:
    # Entity names may be hierarchical ("orders/eu"); "/" separates levels.
    return quote(name, safe="/")


def join_endpoint(endpoint: str, path_and_query: str) -> str:
    """Replace the endpoint's path and query with ``path_and_query``."""
    parts = urlsplit(endpoint)
    path, _, query = path_and_query.partition("?")
    return urlunsplit((parts.scheme, parts.netloc, path, query, ""))


@dataclass(frozen=True)
class EntityAddress:
    """Base address: an HTTPS endpoint plus an entity path prefix."""

    endpoint: str

    @property
    def entity_path(self) -> str:
        raise NotImplementedError

    @property
    def entity_type(self) -> str:
        raise NotImplementedError

    def uri(self, path_and_query: str) -> str:
        return join_endpoint(self.endpoint, path_and_query)

    def messages_path(self, timeout: Timeout) -> str:
        return f"{self.entity_path}/messages?timeout={timeout_seconds(timeout)}"


@dataclass(frozen=True)
class ReceivableAddress(EntityAddress):
    """An entity messages can be received from and settled on."""

    def head_path(self, timeout: Timeout) -> str:
        return f"{self.entity_path}/messages/head?timeout={timeout_seconds(timeout)}"

    def lock_path(self, message: BrokeredMessage) -> str:
        """
        Path addressing the lock a peek-locked message holds.

        Args:
            message: Message to complete, abandon or renew

        Returns:
            ``{prefix}/messages/{id}/{lock token}``

        Raises:
            LocalMessageError: If the message is not a LeasedMessage
        """
        if not isinstance(message, LeasedMessage):
            raise LocalMessageError(details={
                "entity_path": self.entity_path,
                "message_id": message.message_id,
            })
        lease = message.lease
        return (
            f"{self.entity_path}/messages/"
            f"{_segment(lease.server_id)}/{_segment(lease.lock_token)}"
        )


@dataclass(frozen=True)
class QueueAddress(ReceivableAddress):
    queue_name: str

    @property
    def entity_path(self) -> str:
        return f"/{_entity_name(self.queue_name)}"

    @property
    def entity_type(self) -> str:
        return "queue"


@dataclass(frozen=True)
class SubscriptionAddress(ReceivableAddress):
    topic_name: str
    subscription_name: str

    @property
    def entity_path(self) -> str:
        return (
            f"/{_entity_name(self.topic_name)}/subscriptions/"
            f"{_entity_name(self.subscription_name)}"
        )

    @property
    def entity_type(self) -> str:
        return "subscription"


@dataclass(frozen=True)
class TopicAddress(EntityAddress):
    topic_name: str

    @property
    def entity_path(self) -> str:
        return f"/{_entity_name(self.topic_name)}"

    @property
    def entity_type(self) -> str:
        return "topic"
