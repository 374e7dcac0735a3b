"""End-to-end tests for CometdClient over a mocked HTTP server."""

import json
from dataclasses import replace

import httpx
import pytest

from bayeux import (
    CometdClient,
    ConnectionError,
    EncodeError,
    EngineState,
    HTTPTransport,
    ProtocolError,
    RetryExhausted,
    SessionError,
    TransportError,
)
from bayeux.protocol.messages import DeliveryResponse, PublishResponse


class BayeuxServer:
    """httpx mock handler answering Bayeux messages by channel."""

    def __init__(self, replies: dict):
        self.replies = replies
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        message = json.loads(request.content)
        reply = self.replies[message["channel"]]
        if callable(reply):
            return reply(request, message)
        return httpx.Response(200, json=reply)

    def messages(self, channel: str | None = None) -> list[dict]:
        messages = [json.loads(r.content) for r in self.requests]
        if channel is None:
            return messages
        return [m for m in messages if m["channel"] == channel]


@pytest.fixture
def client_for(config):
    """Build a client whose HTTP transport talks to a BayeuxServer."""

    def build(replies):
        server = BayeuxServer(replies)
        transport = HTTPTransport(
            config.to_transport_config(),
            http_transport=httpx.MockTransport(server),
        )
        return CometdClient(config, transport=transport), server

    return build


class TestInit:
    """init() is handshake followed by connect."""

    @pytest.mark.asyncio
    async def test_returns_error_on_failure(self, client_for):
        client, server = client_for({
            "/meta/handshake": [{
                "channel": "/meta/handshake",
                "error": "406::Unsupported version, or unsupported minimum version",
                "successful": False,
            }],
        })

        async with client:
            with pytest.raises(ProtocolError, match="406::Unsupported version"):
                await client.init()

        assert client.client_id is None
        assert server.messages("/meta/connect") == []

    @pytest.mark.asyncio
    async def test_works(self, client_for, handshake_ok, connect_ok):
        client, server = client_for({
            "/meta/handshake": [handshake_ok],
            "/meta/connect": [connect_ok],
        })

        async with client:
            await client.init()

        assert client.client_id == "1234"
        assert [m["channel"] for m in server.messages()] == ["/meta/handshake", "/meta/connect"]
        assert server.messages("/meta/handshake")[0] == {
            "channel": "/meta/handshake",
            "version": "1.0",
            "supportedConnectionTypes": ["long-polling"],
        }

    @pytest.mark.asyncio
    async def test_sends_authorization(self, client_for, handshake_ok, connect_ok):
        client, server = client_for({
            "/meta/handshake": [handshake_ok],
            "/meta/connect": [connect_ok],
        })

        async with client:
            await client.init()

        for request in server.requests:
            assert request.headers["Authorization"] == "OAuth 1234"
            assert request.headers["Content-Type"] == "application/json"

    @pytest.mark.asyncio
    async def test_handshake_cookies_sent_afterwards(self, client_for, handshake_ok, connect_ok):
        def handshake(request, message):
            return httpx.Response(
                200,
                json=[handshake_ok],
                headers=[
                    ("Set-Cookie", "BAYEUX_BROWSER=abc; Path=/"),
                    ("Set-Cookie", "BrowserId=xyz; Path=/"),
                ],
            )

        client, server = client_for({
            "/meta/handshake": handshake,
            "/meta/connect": [connect_ok],
        })

        async with client:
            await client.init()

        assert client.session.cookies == ["BAYEUX_BROWSER=abc", "BrowserId=xyz"]
        assert "cookie" not in server.requests[0].headers
        assert server.requests[1].headers["Cookie"] == "BAYEUX_BROWSER=abc; BrowserId=xyz"

    @pytest.mark.asyncio
    async def test_unencodable_token(self, config, handshake_ok):
        server = BayeuxServer({"/meta/handshake": [handshake_ok]})
        config = replace(config, access_token="tökén☃")
        transport = HTTPTransport(
            config.to_transport_config(),
            http_transport=httpx.MockTransport(server),
        )
        client = CometdClient(config, transport=transport)

        async with client:
            with pytest.raises(TransportError, match="Invalid request"):
                await client.handshake()

        assert server.requests == []
        assert client.state == EngineState.FAILED


class TestConnect:
    """Connect follows server advice."""

    @pytest.mark.asyncio
    async def test_retries_if_server_advises_to(self, client_for, handshake_ok, config):
        client, server = client_for({
            "/meta/handshake": [handshake_ok],
            "/meta/connect": [{
                "advice": {"reconnect": "retry"},
                "channel": "/meta/connect",
                "error": "400::Error",
                "successful": False,
            }],
        })

        async with client:
            await client.handshake()
            with pytest.raises(RetryExhausted, match="400::Error"):
                await client.connect()

        assert len(server.messages("/meta/connect")) == config.max_retries + 1

    @pytest.mark.asyncio
    async def test_handshake_if_advises_to(self, client_for, handshake_ok, config):
        client, server = client_for({
            "/meta/handshake": [handshake_ok],
            "/meta/connect": [{
                "advice": {"reconnect": "handshake"},
                "channel": "/meta/connect",
                "successful": False,
                "error": "error",
            }],
        })

        async with client:
            await client.handshake()
            with pytest.raises(RetryExhausted):
                await client.connect()

        channels = [m["channel"] for m in server.messages()]
        assert channels[:4] == [
            "/meta/handshake",
            "/meta/connect",
            "/meta/handshake",
            "/meta/connect",
        ]
        assert channels.count("/meta/handshake") == config.max_retries + 1

    @pytest.mark.asyncio
    async def test_http_error_status_with_bayeux_body(self, client_for, handshake_ok):
        def connect(request, message):
            return httpx.Response(
                500,
                json=[{
                    "channel": "/meta/connect",
                    "successful": False,
                    "error": "500::Internal",
                    "advice": {"reconnect": "none"},
                }],
            )

        client, _ = client_for({
            "/meta/handshake": [handshake_ok],
            "/meta/connect": connect,
        })

        async with client:
            await client.handshake()
            with pytest.raises(ProtocolError, match="500::Internal"):
                await client.connect()

    @pytest.mark.asyncio
    async def test_returns_deliveries(self, client_for, handshake_ok, connect_ok):
        delivery = {"channel": "/topic/orders", "data": {"sobject": {"Id": "001"}}}
        client, _ = client_for({
            "/meta/handshake": [handshake_ok],
            "/meta/connect": [delivery, connect_ok],
        })

        async with client:
            await client.handshake()
            responses = await client.connect()

        assert isinstance(responses[0], DeliveryResponse)
        assert responses[0].data == {"sobject": {"Id": "001"}}

    @pytest.mark.asyncio
    async def test_connection_failure(self, client_for, handshake_ok):
        def refuse(request, message):
            raise httpx.ConnectError("connection refused", request=request)

        client, _ = client_for({"/meta/handshake": refuse})

        async with client:
            with pytest.raises(ConnectionError):
                await client.handshake()

        assert client.state == EngineState.FAILED


class TestSessionRequired:
    """Session operations fail before any request without a handshake."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "operation",
        [
            lambda client: client.connect(),
            lambda client: client.subscribe("/topic/orders"),
            lambda client: client.unsubscribe("/topic/orders"),
            lambda client: client.publish("/topic/orders", {"a": 1}),
            lambda client: client.disconnect(),
        ],
    )
    async def test_no_transport_call(self, client_for, operation):
        client, server = client_for({})

        async with client:
            with pytest.raises(SessionError):
                await operation(client)

        assert server.requests == []


class TestSubscriptions:
    """Subscribe, unsubscribe and publish."""

    @pytest.fixture
    def server_replies(self, handshake_ok):
        def ack(request, message):
            reply = {
                "channel": message["channel"],
                "successful": True,
                "clientId": message["clientId"],
            }
            if "subscription" in message:
                reply["subscription"] = message["subscription"]
            if "data" in message:
                reply["data"] = message["data"]
            return httpx.Response(200, json=[reply])

        return {
            "/meta/handshake": [handshake_ok],
            "/meta/subscribe": ack,
            "/meta/unsubscribe": ack,
            "/topic/orders": ack,
        }

    @pytest.mark.asyncio
    async def test_subscribe(self, client_for, server_replies):
        client, server = client_for(server_replies)

        async with client:
            await client.handshake()
            responses = await client.subscribe("/topic/orders")

        assert responses[0].subscription == "/topic/orders"
        assert server.messages("/meta/subscribe") == [{
            "channel": "/meta/subscribe",
            "clientId": "1234",
            "subscription": "/topic/orders",
        }]

    @pytest.mark.asyncio
    async def test_unsubscribe(self, client_for, server_replies):
        client, server = client_for(server_replies)

        async with client:
            await client.handshake()
            await client.unsubscribe("/topic/orders")

        assert len(server.messages("/meta/unsubscribe")) == 1

    @pytest.mark.asyncio
    async def test_publish(self, client_for, server_replies):
        client, server = client_for(server_replies)
        payload = {"text": "hello", "n": [1, 2, 3]}

        async with client:
            await client.handshake()
            responses = await client.publish("/topic/orders", payload)

        assert isinstance(responses[0], PublishResponse)
        assert server.messages("/topic/orders")[0]["data"] == payload

    @pytest.mark.asyncio
    async def test_subscribe_failure_with_retry(self, client_for, handshake_ok):
        attempts = []

        def subscribe(request, message):
            attempts.append(message)
            if len(attempts) == 1:
                return httpx.Response(200, json=[{
                    "channel": "/meta/subscribe",
                    "successful": False,
                    "error": "403::Busy",
                    "subscription": "/topic/orders",
                    "advice": {"reconnect": "retry"},
                }])
            return httpx.Response(200, json=[{
                "channel": "/meta/subscribe",
                "successful": True,
                "subscription": "/topic/orders",
            }])

        client, _ = client_for({
            "/meta/handshake": [handshake_ok],
            "/meta/subscribe": subscribe,
        })

        async with client:
            await client.handshake()
            await client.subscribe("/topic/orders")

        assert len(attempts) == 2

    @pytest.mark.asyncio
    async def test_publish_unserializable_data(self, client_for, server_replies):
        client, server = client_for(server_replies)

        async with client:
            await client.handshake()
            with pytest.raises(EncodeError):
                await client.publish("/topic/orders", {1, 2})

        assert server.messages("/topic/orders") == []
        assert client.state == EngineState.FAILED

    @pytest.mark.asyncio
    async def test_publish_to_meta_channel_rejected(self, client_for):
        client, _ = client_for({})
        with pytest.raises(ValueError, match="meta channel"):
            await client.publish("/meta/connect", {})

    @pytest.mark.asyncio
    async def test_invalid_channel_rejected(self, client_for):
        client, _ = client_for({})
        with pytest.raises(ValueError, match="Invalid channel"):
            await client.subscribe("topic/orders")


class TestDisconnect:
    """Disconnect is a single attempt and ends the session."""

    @pytest.mark.asyncio
    async def test_resets_session(self, client_for, handshake_ok):
        client, server = client_for({
            "/meta/handshake": [handshake_ok],
            "/meta/disconnect": [{"channel": "/meta/disconnect", "successful": True}],
        })

        async with client:
            await client.handshake()
            await client.disconnect()
            with pytest.raises(SessionError):
                await client.connect()

        assert client.client_id is None
        assert client.state == EngineState.IDLE
        assert server.messages("/meta/disconnect") == [
            {"channel": "/meta/disconnect", "clientId": "1234"}
        ]

    @pytest.mark.asyncio
    async def test_not_retried(self, client_for, handshake_ok):
        client, server = client_for({
            "/meta/handshake": [handshake_ok],
            "/meta/disconnect": [{
                "channel": "/meta/disconnect",
                "successful": False,
                "error": "402::Unknown client",
                "advice": {"reconnect": "handshake"},
            }],
        })

        async with client:
            await client.handshake()
            with pytest.raises(ProtocolError, match="402::Unknown client"):
                await client.disconnect()

        assert len(server.messages("/meta/disconnect")) == 1
        assert len(server.messages("/meta/handshake")) == 1
        assert client.client_id == "1234"
