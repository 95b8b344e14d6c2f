"""SAS (Shared Access Signature) token generation for Service Bus.

A token authorizes requests against one resource URI until its expiry::

    SharedAccessSignature sig=<signature>&se=<expiry>&skn=<key name>&sr=<resource>

The signature is an HMAC-SHA256 over ``<encoded resource>\\n<expiry>`` keyed
by the raw shared access key. Generation never fails: a wrong or incomplete
secret produces a well-formed token that the service rejects with 401.
"""

import base64
import hashlib
import hmac
import time
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional, Union
from urllib.parse import quote

from sbrest.servicebus.constants import MAX_TOKEN_EXPIRY

SAS_TOKEN_PREFIX = "SharedAccessSignature"

# Characters the service expects percent-encoded in the canonical resource URI.
USERINFO_ENCODE_SET = frozenset(' "#<>`?{}/:;=@\\[]^|')

# base64 characters that collide with the token's own separators.
SIGNATURE_ENCODE_SET = frozenset("+=/")

_PRINTABLE_ASCII = frozenset(chr(c) for c in range(0x20, 0x7F))


def _safe_chars(encode_set: frozenset) -> str:
    # quote() always escapes control and non-ASCII bytes, so only printable ASCII matters.
    return "".join(sorted(_PRINTABLE_ASCII - encode_set))


_USERINFO_SAFE = _safe_chars(USERINFO_ENCODE_SET)
_SIGNATURE_SAFE = _safe_chars(SIGNATURE_ENCODE_SET)


def encode_resource_uri(resource_uri: str) -> str:
    """Percent-encode a resource URI with the USERINFO encode set."""
    return quote(resource_uri, safe=_USERINFO_SAFE)


def encode_signature(signature: str) -> str:
    """Percent-encode a base64 signature (``+``, ``=`` and ``/`` only)."""
    return quote(signature, safe=_SIGNATURE_SAFE)


def compute_expiry(ttl: Union[timedelta, int, float], now: Optional[float] = None) -> int:
    """
    Seconds since the epoch at which a token issued ``now`` expires.

    The result is clamped to ``[0, MAX_TOKEN_EXPIRY]``.
    """
    if now is None:
        now = time.time()
    if isinstance(ttl, timedelta):
        ttl = ttl.total_seconds()
    expiry = int(now + ttl)
    return max(0, min(expiry, MAX_TOKEN_EXPIRY))


def sign(key: str, encoded_uri: str, expiry: int) -> str:
    """Return the base64 HMAC-SHA256 signature for a resource and expiry."""
    string_to_sign = f"{encoded_uri}\n{expiry}"
    digest = hmac.new(
        key.encode("utf-8"),
        string_to_sign.encode("utf-8"),
        hashlib.sha256,
    ).digest()
    return base64.b64encode(digest).decode("ascii")


@dataclass(frozen=True)
class SasToken:
    """A generated token and the second at which it stops being usable."""

    token: str
    expires_at: int

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at

    def with_buffer(self, buffer_seconds: int) -> "SasToken":
        """Same token with ``expires_at`` pulled ``buffer_seconds`` earlier."""
        return SasToken(self.token, max(0, self.expires_at - buffer_seconds))

    def __repr__(self) -> str:
        return f"SasToken(token='***', expires_at={self.expires_at})"


def generate_sas_token(
    resource_uri: str,
    key_name: str,
    key: str,
    ttl: Union[timedelta, int, float],
    now: Optional[float] = None,
) -> SasToken:
    """
    Generate a SAS token for a Service Bus resource.

    Args:
        resource_uri: Resource the token is scoped to (the namespace Endpoint)
        key_name: Shared access policy name (``skn``)
        key: Shared access key; used as raw bytes, not base64-decoded
        ttl: Validity window, as a timedelta or seconds
        now: Issue time in epoch seconds (defaults to the current time)

    Returns:
        SasToken whose ``expires_at`` is the signature's true expiry
    """
    encoded_uri = encode_resource_uri(resource_uri)
    expiry = compute_expiry(ttl, now)
    signature = encode_signature(sign(key, encoded_uri, expiry))
    token = (
        f"{SAS_TOKEN_PREFIX} sig={signature}&se={expiry}"
        f"&skn={key_name}&sr={encoded_uri}"
    )
    return SasToken(token=token, expires_at=expiry)
