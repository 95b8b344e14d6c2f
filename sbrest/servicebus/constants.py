"""
Service Bus Constants

Centralized header names, media types and policy defaults.
"""

# Header names
AUTHORIZATION_HEADER = "Authorization"
CONTENT_TYPE_HEADER = "Content-Type"
BROKER_PROPERTIES_HEADER = "BrokerProperties"

# Media types
CONTENT_TYPE_ATOM_ENTRY = "application/atom+xml;type=entry;charset=utf-8"

# Connection string keys
ENDPOINT_KEY = "Endpoint"
SHARED_ACCESS_KEY_NAME_KEY = "SharedAccessKeyName"
SHARED_ACCESS_KEY_KEY = "SharedAccessKey"

NATIVE_SCHEME = "sb"
SERVICE_SCHEME = "https"

# Timeout defaults (seconds)
DEFAULT_TIMEOUT = 30

# SAS policy (seconds)
DEFAULT_TOKEN_TTL = 6 * 60
SAS_EXPIRY_BUFFER = 15
MAX_TOKEN_EXPIRY = 2 ** 64 - 1

# Status returned by a receive that timed out with no message
STATUS_NO_CONTENT = 204
