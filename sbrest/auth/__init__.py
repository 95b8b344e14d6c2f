"""
Authentication for Service Bus requests: connection strings and SAS tokens.
"""

from sbrest.auth.connection_string import ConnectionString, parse_connection_string
from sbrest.auth.credentials import CredentialCache
from sbrest.auth.sas import SasToken, encode_resource_uri, generate_sas_token

__all__ = [
    "ConnectionString",
    "CredentialCache",
    "SasToken",
    "encode_resource_uri",
    "generate_sas_token",
    "parse_connection_string",
]
