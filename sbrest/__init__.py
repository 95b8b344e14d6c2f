"""
sbrest: Azure Service Bus REST request client

Builds SAS-authenticated HTTP requests for Service Bus queues, topics and
subscriptions, including the peek-lock settlement protocol. Requests are
returned unexecuted; ``HttpxTransport`` is provided as an optional executor.
"""

__version__ = "0.1.0"

from .auth import ConnectionString, CredentialCache, SasToken, generate_sas_token
from .core import ClientSettings, load_client_settings, setup_logging
from .servicebus.client import QueueClient, ServiceBusRequest, SubscriptionClient, TopicClient
from .servicebus.exceptions import (
    AuthorizationFailureError,
    BadRequestError,
    ConnectionStringError,
    EmptyBusError,
    InternalServerError,
    LocalMessageError,
    NonSerializedBodyError,
    RemoteError,
    ResourceFailureError,
    ResourceNotFoundError,
    ServiceBusError,
    TransportError,
    UnknownStatusError,
    raise_for_status,
)
from .servicebus.models import BrokeredMessage, BrokerProperties, LeasedMessage, MessageLease
from .servicebus.responses import message_from_response
from .servicebus.transport import HttpxTransport

__all__ = [
    "__version__",
    # Credentials
    "ConnectionString",
    "CredentialCache",
    "SasToken",
    "generate_sas_token",
    # Configuration
    "ClientSettings",
    "load_client_settings",
    "setup_logging",
    # Clients
    "QueueClient",
    "SubscriptionClient",
    "TopicClient",
    "ServiceBusRequest",
    "HttpxTransport",
    # Messages
    "BrokeredMessage",
    "BrokerProperties",
    "LeasedMessage",
    "MessageLease",
    "message_from_response",
    # Errors
    "ServiceBusError",
    "ConnectionStringError",
    "LocalMessageError",
    "EmptyBusError",
    "NonSerializedBodyError",
    "TransportError",
    "RemoteError",
    "BadRequestError",
    "AuthorizationFailureError",
    "ResourceFailureError",
    "ResourceNotFoundError",
    "InternalServerError",
    "UnknownStatusError",
    "raise_for_status",
]
