"""
Service Bus Message Models

Pydantic models for brokered messages and their broker properties.

A message is one of two variants:

- ``BrokeredMessage``: built locally by a producer, or received with
  receive-and-delete. It has no server lock and cannot be completed,
  abandoned or renewed.
- ``LeasedMessage``: received under peek-lock. It carries a ``MessageLease``
  (server id + lock token) that addresses the lock-scoped operations.

Only ``BrokeredMessage.from_received`` produces a ``LeasedMessage``.
"""

import json
from datetime import datetime, timezone
from email.utils import format_datetime, parsedate_to_datetime
from typing import Any, Optional, Type, TypeVar, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_serializer,
    field_validator,
)
from pydantic.alias_generators import to_pascal

from sbrest.servicebus.exceptions import NonSerializedBodyError

ModelT = TypeVar("ModelT", bound=BaseModel)


class BrokerProperties(BaseModel):
    """
    Message metadata carried in the ``BrokerProperties`` header.

    Field names are snake_case in Python and PascalCase on the wire
    (``message_id`` <-> ``MessageId``). Unknown wire fields are kept.
    """
    model_config = ConfigDict(
        alias_generator=to_pascal,
        populate_by_name=True,
        extra='allow',
        frozen=True,
    )

    message_id: Optional[str] = None
    sequence_number: Optional[int] = None
    lock_token: Optional[str] = None
    correlation_id: Optional[str] = None
    session_id: Optional[str] = None
    reply_to_session_id: Optional[str] = None
    label: Optional[str] = None
    reply_to: Optional[str] = None
    to: Optional[str] = None
    partition_key: Optional[str] = None
    time_to_live: Optional[float] = None
    delivery_count: Optional[int] = None
    enqueued_sequence_number: Optional[int] = None
    state: Optional[str] = None
    scheduled_enqueue_time_utc: Optional[datetime] = None
    enqueued_time_utc: Optional[datetime] = None
    locked_until_utc: Optional[datetime] = None

    @field_validator(
        'scheduled_enqueue_time_utc', 'enqueued_time_utc', 'locked_until_utc',
        mode='before',
    )
    @classmethod
    def parse_http_date(cls, v: Any) -> Any:
        """Accept RFC 1123 dates as sent by the service; ISO strings fall through."""
        if isinstance(v, str):
            try:
                return parsedate_to_datetime(v)
            except (TypeError, ValueError):
                return v
        return v

    @field_serializer('scheduled_enqueue_time_utc', 'enqueued_time_utc', 'locked_until_utc')
    def format_http_date(self, v: Optional[datetime]) -> Optional[str]:
        """Serialize timestamps as RFC 1123 GMT strings."""
        if v is None:
            return None
        if v.tzinfo is None:
            v = v.replace(tzinfo=timezone.utc)
        return format_datetime(v.astimezone(timezone.utc), usegmt=True)

    def to_header(self) -> str:
        """
        JSON value for the ``BrokerProperties`` header.

        Non-ASCII characters are ``\\uXXXX``-escaped; header values must be ASCII.
        """
        return json.dumps(
            self.model_dump(mode="json", by_alias=True, exclude_none=True),
            separators=(",", ":"),
        )

    @classmethod
    def from_header(cls, value: str) -> "BrokerProperties":
        """
        Parse a ``BrokerProperties`` header value.

        Raises:
            pydantic.ValidationError: If the value is not a JSON object of properties
        """
        return cls.model_validate_json(value)


class MessageLease(BaseModel):
    """Server identity and lock token of a peek-locked message."""
    model_config = ConfigDict(frozen=True)

    server_id: str
    lock_token: str

    @classmethod
    def from_properties(cls, properties: BrokerProperties) -> Optional["MessageLease"]:
        """
        Derive the lease from broker properties.

        The sequence number is preferred over the message id. Returns None
        when there is no lock token or no id.
        """
        if properties.sequence_number is not None:
            server_id = str(properties.sequence_number)
        else:
            server_id = properties.message_id
        if not server_id or not properties.lock_token:
            return None
        return cls(server_id=server_id, lock_token=properties.lock_token)


class BrokeredMessage(BaseModel):
    """A message body and its broker properties, with no server lock."""
    model_config = ConfigDict(frozen=True)

    body: bytes = b""
    properties: BrokerProperties = Field(default_factory=BrokerProperties)

    @field_validator('body', mode='before')
    @classmethod
    def encode_text_body(cls, v: Union[str, bytes]) -> bytes:
        """Accept str bodies, stored as UTF-8."""
        if isinstance(v, str):
            return v.encode("utf-8")
        return v

    @classmethod
    def with_body(cls, body: Union[str, bytes], **properties: Any) -> "BrokeredMessage":
        """Build a local message; keyword arguments become broker properties."""
        return cls(body=body, properties=BrokerProperties(**properties))

    @classmethod
    def with_json_body(cls, value: Any, **properties: Any) -> "BrokeredMessage":
        """Build a local message whose body is ``value`` serialized as JSON."""
        if isinstance(value, BaseModel):
            body = value.model_dump_json()
        else:
            body = json.dumps(value)
        return cls.with_body(body, **properties)

    @classmethod
    def from_received(
        cls,
        body: Union[str, bytes],
        properties: BrokerProperties,
    ) -> "BrokeredMessage":
        """
        Build the right variant for a message read from the service.

        Returns:
            LeasedMessage when the properties carry a lock token and an id,
            otherwise a plain BrokeredMessage
        """
        lease = MessageLease.from_properties(properties)
        if lease is None:
            return BrokeredMessage(body=body, properties=properties)
        return LeasedMessage(body=body, properties=properties, lease=lease)

    @property
    def is_leased(self) -> bool:
        return False

    @property
    def message_id(self) -> Optional[str]:
        return self.properties.message_id

    @property
    def text(self) -> str:
        """Body decoded as UTF-8."""
        return self.body.decode("utf-8")

    def get_body(self, model: Optional[Type[ModelT]] = None) -> Any:
        """
        Deserialize the body.

        Args:
            model: Optional pydantic model to validate the JSON body into

        Returns:
            Parsed JSON value, or an instance of ``model``

        Raises:
            NonSerializedBodyError: If the body is not JSON (or does not fit ``model``)
        """
        try:
            if model is not None:
                return model.model_validate_json(self.body)
            return json.loads(self.body)
        except (ValueError, ValidationError) as exc:
            raise NonSerializedBodyError() from exc


class LeasedMessage(BrokeredMessage):
    """A message received under peek-lock; the only kind that can be settled."""

    lease: MessageLease

    @property
    def is_leased(self) -> bool:
        return True

    @property
    def lock_token(self) -> str:
        return self.lease.lock_token

    @property
    def sequence_number(self) -> Optional[int]:
        return self.properties.sequence_number
