"""
Service Bus connection string parsing.

Connection strings are copied from the Azure portal and look like::

    Endpoint=sb://<namespace>.servicebus.windows.net/;SharedAccessKeyName=<name>;SharedAccessKey=<key>

Parsing is deliberately tolerant. Unknown keys are ignored and a segment with
no ``=`` is read as a key with an empty value. Nothing is validated here: an
incomplete secret still produces a token, which the service then rejects.
"""

from dataclasses import dataclass
from typing import Dict

from sbrest.servicebus.constants import (
    ENDPOINT_KEY,
    NATIVE_SCHEME,
    SERVICE_SCHEME,
    SHARED_ACCESS_KEY_KEY,
    SHARED_ACCESS_KEY_NAME_KEY,
)
from sbrest.servicebus.exceptions import ConnectionStringError


def parse_connection_string(connection_string: str) -> Dict[str, str]:
    """
    Split a connection string into its ``Key=Value`` fields.

    Args:
        connection_string: Semicolon-delimited connection string

    Returns:
        Mapping of key to value; later duplicates win
    """
    fields: Dict[str, str] = {}
    for segment in connection_string.split(";"):
        key, sep, value = segment.partition("=")
        key = key.strip()
        if not key and not sep:
            continue
        fields[key] = value.strip() if sep else ""
    return fields


def to_service_endpoint(endpoint: str) -> str:
    """
    Rewrite the endpoint's native scheme (``sb``) to HTTPS.

    Other schemes (``http://localhost:8000`` for a local emulator) are kept.
    """
    scheme, sep, rest = endpoint.partition("://")
    if not sep:
        return f"{SERVICE_SCHEME}://{endpoint}"
    if scheme.lower() == NATIVE_SCHEME:
        return f"{SERVICE_SCHEME}://{rest}"
    return endpoint


@dataclass(frozen=True)
class ConnectionString:
    """Credentials and namespace endpoint for a Service Bus namespace."""

    endpoint: str
    shared_access_key_name: str
    shared_access_key: str

    @classmethod
    def parse(cls, connection_string: str) -> "ConnectionString":
        """Parse a connection string; missing fields become empty strings."""
        fields = parse_connection_string(connection_string)
        return cls(
            endpoint=fields.get(ENDPOINT_KEY, ""),
            shared_access_key_name=fields.get(SHARED_ACCESS_KEY_NAME_KEY, ""),
            shared_access_key=fields.get(SHARED_ACCESS_KEY_KEY, ""),
        )

    @property
    def service_endpoint(self) -> str:
        """
        HTTPS endpoint requests are sent to.

        Raises:
            ConnectionStringError: If the connection string had no Endpoint
        """
        if not self.endpoint:
            raise ConnectionStringError()
        return to_service_endpoint(self.endpoint)

    def __repr__(self) -> str:
        return (
            f"ConnectionString(endpoint={self.endpoint!r}, "
            f"shared_access_key_name={self.shared_access_key_name!r}, "
            f"shared_access_key='***')"
        )
