"""Pytest configuration and fixtures."""

import json

import pytest

from bayeux.config import CometdConfig
from bayeux.transport.base import Transport
from bayeux.transport.types import TransportConfig, TransportReply

URL = "https://example.com/cometd/44.0"
ACCESS_TOKEN = "1234"
RETRIES_MAX = 3


class ScriptedTransport(Transport):
    """
    In-memory transport that answers by request channel.

    ``replies`` maps a channel to a list of bodies (str), replies
    (TransportReply) or exceptions. Entries are consumed in order and the
    last one repeats.
    """

    def __init__(self, replies: dict[str, list]):
        super().__init__(TransportConfig(url=URL))
        self.replies = {channel: list(script) for channel, script in replies.items()}
        self.sent: list[dict] = []
        self.headers: list[dict[str, str]] = []
        self.connect_calls = 0
        self._connected = False

    async def connect(self) -> None:
        self.connect_calls += 1
        self._connected = True

    async def disconnect(self) -> None:
        self._connected = False

    def is_connected(self) -> bool:
        return self._connected

    async def send(self, url: str, headers: dict[str, str], body: bytes) -> TransportReply:
        message = json.loads(body)
        self.sent.append(message)
        self.headers.append(headers)

        script = self.replies[message["channel"]]
        entry = script.pop(0) if len(script) > 1 else script[0]
        if isinstance(entry, Exception):
            raise entry
        if isinstance(entry, TransportReply):
            return entry
        return TransportReply(status_code=200, text=entry)

    @property
    def channels(self) -> list[str]:
        return [message["channel"] for message in self.sent]

    def count(self, channel: str) -> int:
        return self.channels.count(channel)


def batch(*messages: dict) -> str:
    """Encode response messages as a wire batch."""
    return json.dumps(list(messages))


HANDSHAKE_OK = {
    "channel": "/meta/handshake",
    "version": "1.0",
    "successful": True,
    "clientId": "1234",
    "supportedConnectionTypes": ["long-polling"],
}

CONNECT_OK = {
    "channel": "/meta/connect",
    "successful": True,
    "clientId": "1234",
}


@pytest.fixture
def config():
    """Client configuration with the default retry budget."""
    return CometdConfig(url=URL, access_token=ACCESS_TOKEN, max_retries=RETRIES_MAX)


@pytest.fixture
def make_transport():
    """Factory for scripted transports."""
    return ScriptedTransport


@pytest.fixture
def encode_batch():
    """Helper turning response dicts into a response body."""
    return batch


@pytest.fixture
def handshake_ok():
    """Successful handshake reply."""
    return dict(HANDSHAKE_OK)


@pytest.fixture
def connect_ok():
    """Successful connect reply."""
    return dict(CONNECT_OK)
