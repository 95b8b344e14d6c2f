"""
Interpretation of Service Bus responses.

Functions here accept any response object exposing ``status_code``,
``headers`` (case-insensitive mapping) and ``content`` (bytes), such as
``httpx.Response``.
"""

import logging
from typing import Any, Mapping, Optional

from pydantic import ValidationError

from sbrest.servicebus.constants import BROKER_PROPERTIES_HEADER, STATUS_NO_CONTENT
from sbrest.servicebus.exceptions import EmptyBusError, raise_for_status
from sbrest.servicebus.models import BrokeredMessage, BrokerProperties

logger = logging.getLogger(__name__)


def parse_broker_properties(headers: Mapping[str, str]) -> BrokerProperties:
    """
    Read the ``BrokerProperties`` header.

    A missing or unparsable header yields empty properties; the resulting
    message is then treated as local.
    """
    value: Optional[str] = headers.get(BROKER_PROPERTIES_HEADER)
    if not value:
        return BrokerProperties()
    try:
        return BrokerProperties.from_header(value)
    except ValidationError:
        logger.warning("Ignoring unparsable BrokerProperties header")
        return BrokerProperties()


def check_response(response: Any) -> None:
    """
    Raise the typed error matching the response status.

    Raises:
        RemoteError: For any status other than 200 or 201
    """
    raise_for_status(response.status_code)


def message_from_response(response: Any) -> BrokeredMessage:
    """
    Build a message from a receive response.

    Returns:
        LeasedMessage for a peek-lock receive, BrokeredMessage for
        receive-and-delete

    Raises:
        EmptyBusError: If the receive timed out with no message (204)
        RemoteError: For any other non-success status
    """
    if response.status_code == STATUS_NO_CONTENT:
        raise EmptyBusError()
    raise_for_status(response.status_code)
    properties = parse_broker_properties(response.headers)
    message = BrokeredMessage.from_received(response.content, properties)
    logger.debug(
        f"Received message id={properties.message_id} "
        f"sequence={properties.sequence_number} leased={message.is_leased}"
    )
    return message
