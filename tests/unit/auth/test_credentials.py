"""Tests for the SAS credential cache."""

import re
import threading
from datetime import timedelta
from unittest.mock import patch

import pytest

from sbrest.auth.credentials import CredentialCache

SE_PATTERN = re.compile(r"&se=(\d+)&")


def expiry_of(token: str) -> int:
    return int(SE_PATTERN.search(token).group(1))


class TestCredentialCache:
    """Test caching and refresh of SAS tokens."""

    def test_initial_token_is_buffer_adjusted(self, connection, clock):
        """Test expires_at is the signature expiry minus the buffer."""
        cache = CredentialCache(connection, ttl=360, buffer_seconds=15, clock=clock)

        token = cache.get_token()

        assert expiry_of(token) == int(clock.now) + 360
        assert cache.snapshot.expires_at == int(clock.now) + 360 - 15

    def test_repeated_calls_return_identical_token(self, connection, clock):
        """Test no regeneration happens while the token is fresh."""
        cache = CredentialCache(connection, clock=clock)

        first = cache.get_token()
        clock.advance(100)
        second = cache.get_token()

        assert first == second

    def test_no_generation_while_fresh(self, connection, clock):
        """Test the generator is not called on the fast path."""
        cache = CredentialCache(connection, clock=clock)

        with patch("sbrest.auth.credentials.generate_sas_token") as generate:
            cache.get_token()
            cache.get_token()

        generate.assert_not_called()

    def test_refresh_after_expiry(self, connection, clock):
        """Test advancing past expires_at yields a token with a later se."""
        cache = CredentialCache(connection, ttl=360, buffer_seconds=15, clock=clock)
        first = cache.get_token()

        clock.advance(360 - 15 + 1)
        second = cache.get_token()

        assert second != first
        assert expiry_of(second) > expiry_of(first)

    def test_refresh_inside_buffer_window(self, connection, clock):
        """Test a token is refreshed once inside the buffer, before real expiry."""
        cache = CredentialCache(connection, ttl=360, buffer_seconds=15, clock=clock)
        first = cache.get_token()

        clock.advance(350)
        second = cache.get_token()

        assert expiry_of(second) == int(clock.now) + 360
        assert second != first

    def test_refreshed_token_keeps_buffer(self, connection, clock):
        """Test the buffer is applied after refresh as well."""
        cache = CredentialCache(connection, ttl=360, buffer_seconds=15, clock=clock)

        clock.advance(1000)
        cache.get_token()

        assert cache.snapshot.expires_at == int(clock.now) + 360 - 15

    def test_returned_token_never_expired(self, connection, clock):
        """Test every returned token is fresh at return time."""
        cache = CredentialCache(connection, ttl=60, buffer_seconds=15, clock=clock)

        for _ in range(20):
            cache.get_token()
            assert not cache.snapshot.is_expired(clock.now)
            clock.advance(17)

    def test_timedelta_ttl(self, connection, clock):
        cache = CredentialCache(connection, ttl=timedelta(minutes=6), clock=clock)

        assert expiry_of(cache.get_token()) == int(clock.now) + 360

    def test_invalidate_forces_refresh(self, connection, clock):
        """Test invalidate() makes the next call regenerate."""
        cache = CredentialCache(connection, clock=clock)
        first = cache.get_token()

        clock.advance(1)
        cache.invalidate()
        second = cache.get_token()

        assert expiry_of(second) == expiry_of(first) + 1

    def test_ttl_must_exceed_buffer(self, connection, clock):
        with pytest.raises(ValueError):
            CredentialCache(connection, ttl=15, buffer_seconds=15, clock=clock)

    def test_failed_refresh_does_not_wedge_cache(self, connection, clock):
        """Test an exception during refresh leaves the cache usable."""
        cache = CredentialCache(connection, clock=clock)
        previous = cache.snapshot
        clock.advance(1000)

        with patch(
            "sbrest.auth.credentials.generate_sas_token",
            side_effect=RuntimeError("boom"),
        ):
            with pytest.raises(RuntimeError):
                cache.get_token()

        assert cache.snapshot == previous
        token = cache.get_token()
        assert expiry_of(token) == int(clock.now) + 360


class TestCredentialCacheConcurrency:
    """Test the cache when shared between threads."""

    def test_concurrent_callers_get_fresh_tokens(self, connection, clock):
        """Test concurrent refreshes never hand out an expired token."""
        cache = CredentialCache(connection, ttl=60, buffer_seconds=15, clock=clock)
        clock.advance(1000)
        barrier = threading.Barrier(8)
        results = []
        lock = threading.Lock()

        def worker():
            barrier.wait()
            token = cache.get_token()
            with lock:
                results.append(token)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(results) == 8
        assert len(set(results)) == 1
        assert expiry_of(results[0]) == int(clock.now) + 60

    def test_single_regeneration_for_concurrent_staleness(self, connection, clock):
        """Test the re-check inside the lock prevents duplicate regeneration."""
        cache = CredentialCache(connection, ttl=60, buffer_seconds=15, clock=clock)
        clock.advance(1000)

        from sbrest.auth import credentials as credentials_module

        real_generate = credentials_module.generate_sas_token
        calls = []

        def counting_generate(*args, **kwargs):
            calls.append(args)
            return real_generate(*args, **kwargs)

        barrier = threading.Barrier(6)

        def worker():
            barrier.wait()
            cache.get_token()

        with patch.object(credentials_module, "generate_sas_token", side_effect=counting_generate):
            threads = [threading.Thread(target=worker) for _ in range(6)]
            for thread in threads:
                thread.start()
            for thread in threads:
                thread.join()

        assert len(calls) == 1
