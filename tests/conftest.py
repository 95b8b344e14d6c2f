"""Shared fixtures for sbrest tests."""

import pytest

from sbrest.auth.connection_string import ConnectionString

ENDPOINT = "sb://testns.servicebus.windows.net/"
KEY_NAME = "RootManageSharedAccessKey"
KEY = "dGVzdC1rZXktMTIzNDU2Nzg5MA=="
CONNECTION_STRING = f"Endpoint={ENDPOINT};SharedAccessKeyName={KEY_NAME};SharedAccessKey={KEY}"


class FakeClock:
    """Controllable replacement for time.time."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def connection_string():
    return CONNECTION_STRING


@pytest.fixture
def connection():
    return ConnectionString.parse(CONNECTION_STRING)


@pytest.fixture
def endpoint():
    return ENDPOINT


@pytest.fixture
def key_name():
    return KEY_NAME


@pytest.fixture
def key():
    return KEY
