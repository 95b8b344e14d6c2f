"""
SAS credential cache shared by every operation of one client.

Readers take the current immutable ``SasToken`` snapshot without locking.
When the snapshot is stale a single lock serialises regeneration, so
concurrent callers that noticed staleness at the same moment do not each
publish a token. Publishing is one attribute assignment.
"""

import logging
import threading
import time
from datetime import timedelta
from typing import Callable, Optional, Union

from sbrest.auth.connection_string import ConnectionString
from sbrest.auth.sas import SasToken, generate_sas_token
from sbrest.servicebus.constants import DEFAULT_TOKEN_TTL, SAS_EXPIRY_BUFFER

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class CredentialCache:
    """
    Holds the most recent SAS token for a connection and refreshes it on demand.

    The cached ``expires_at`` is always the token's real expiry minus
    ``buffer_seconds``, so a token is never handed out inside that window.
    """

    def __init__(
        self,
        connection: ConnectionString,
        ttl: Union[timedelta, int, float] = DEFAULT_TOKEN_TTL,
        buffer_seconds: int = SAS_EXPIRY_BUFFER,
        clock: Optional[Clock] = None,
    ):
        """
        Initialize the cache and issue the first token.

        Args:
            connection: Parsed connection string holding the secret
            ttl: Validity window of each generated token
            buffer_seconds: Safety margin subtracted from every expiry
            clock: Returns the current time in epoch seconds (defaults to time.time)

        Raises:
            ValueError: If ttl does not exceed buffer_seconds
        """
        ttl_seconds = ttl.total_seconds() if isinstance(ttl, timedelta) else ttl
        if ttl_seconds <= buffer_seconds:
            raise ValueError(
                f"Token TTL ({ttl_seconds}s) must exceed the expiry buffer ({buffer_seconds}s)"
            )
        self._connection = connection
        self._ttl = ttl
        self._buffer_seconds = buffer_seconds
        self._clock = clock or time.time
        self._refresh_lock = threading.Lock()
        self._snapshot = self._generate(self._clock())

    @property
    def snapshot(self) -> SasToken:
        """Current buffer-adjusted token, without any freshness check."""
        return self._snapshot

    def get_token(self) -> str:
        """
        Return a token that is valid now, regenerating it if stale.

        Returns:
            Value for the ``Authorization`` header
        """
        snapshot = self._snapshot
        if not snapshot.is_expired(self._clock()):
            return snapshot.token

        with self._refresh_lock:
            # Another caller may have refreshed while we waited.
            now = self._clock()
            snapshot = self._snapshot
            if snapshot.is_expired(now):
                snapshot = self._generate(now)
                self._snapshot = snapshot
                logger.debug(
                    "Refreshed SAS token for %s (expires_at=%s)",
                    self._connection.endpoint,
                    snapshot.expires_at,
                )
            return snapshot.token

    def invalidate(self) -> None:
        """Force the next ``get_token`` call to regenerate."""
        with self._refresh_lock:
            self._snapshot = SasToken(self._snapshot.token, 0)

    def _generate(self, now: float) -> SasToken:
        token = generate_sas_token(
            self._connection.endpoint,
            self._connection.shared_access_key_name,
            self._connection.shared_access_key,
            self._ttl,
            now=now,
        )
        return token.with_buffer(self._buffer_seconds)
