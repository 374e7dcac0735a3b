"""
Wire codec for Bayeux messages.

Bayeux responses carry no discriminator field, so each element of a
response batch is classified by shape. Shapes overlap (every Errored
response is also a valid Basic response), which makes the order below
part of the contract:

    1. Errored    error: str and successful is False
    2. Handshake  version, clientId, supportedConnectionTypes
    3. Publish    data, clientId, successful
    4. Delivery   data and no successful key
    5. Basic      channel and successful

Every shape also requires a string ``channel``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable

import orjson

from bayeux.protocol.errors import EncodeError, ParseError
from bayeux.protocol.messages import (
    BasicResponse,
    DeliveryResponse,
    ErroredResponse,
    HandshakeResponse,
    PublishResponse,
    Request,
    Response,
)


def _has_str(data: dict[str, Any], key: str) -> bool:
    return isinstance(data.get(key), str)


def _has_bool(data: dict[str, Any], key: str) -> bool:
    return isinstance(data.get(key), bool)


def is_errored(data: dict[str, Any]) -> bool:
    """Check if message has the Errored shape."""
    return (
        _has_str(data, "channel")
        and _has_str(data, "error")
        and data.get("successful") is False
    )


def is_handshake(data: dict[str, Any]) -> bool:
    """Check if message has the Handshake reply shape."""
    types = data.get("supportedConnectionTypes")
    return (
        _has_str(data, "channel")
        and _has_bool(data, "successful")
        and _has_str(data, "version")
        and _has_str(data, "clientId")
        and isinstance(types, list)
        and all(isinstance(t, str) for t in types)
    )


def is_publish(data: dict[str, Any]) -> bool:
    """Check if message has the Publish reply shape."""
    return (
        _has_str(data, "channel")
        and "data" in data
        and _has_str(data, "clientId")
        and _has_bool(data, "successful")
    )


def is_delivery(data: dict[str, Any]) -> bool:
    """Check if message is a server-pushed delivery."""
    return _has_str(data, "channel") and "data" in data and "successful" not in data


def is_basic(data: dict[str, Any]) -> bool:
    """Check if message has the catch-all acknowledgement shape."""
    return _has_str(data, "channel") and _has_bool(data, "successful")


# Priority order; first match wins
SHAPES: list[tuple[Callable[[dict[str, Any]], bool], Callable[[dict[str, Any]], Response]]] = [
    (is_errored, ErroredResponse.from_dict),
    (is_handshake, HandshakeResponse.from_dict),
    (is_publish, PublishResponse.from_dict),
    (is_delivery, DeliveryResponse.from_dict),
    (is_basic, BasicResponse.from_dict),
]


def classify(data: Any) -> Response:
    """
    Classify a single decoded message.

    Raises:
        ParseError: If the message matches no known shape.
    """
    if not isinstance(data, dict):
        raise ParseError("Response element is not an object", payload=data)

    for matches, build in SHAPES:
        if matches(data):
            return build(data)

    raise ParseError("Response matches no known message shape", payload=data)


def classify_batch(payload: Any) -> list[Response]:
    """
    Classify a decoded response batch.

    All-or-nothing: one unclassifiable element rejects the batch.
    """
    if not isinstance(payload, list):
        raise ParseError("Response batch is not a JSON array", payload=payload)
    return [classify(item) for item in payload]


class Codec(ABC):
    """Serialization collaborator used by the engine."""

    @abstractmethod
    def encode(self, request: Request) -> bytes:
        """
        Encode a request into a request body.

        Raises:
            EncodeError: If the request holds values that cannot be serialized.
        """
        pass

    @abstractmethod
    def decode_batch(self, body: bytes | str) -> list[Response]:
        """
        Decode a response body into classified responses.

        Raises:
            ParseError: If the body is not a classifiable batch.
        """
        pass


class JSONCodec(Codec):
    """orjson-backed codec. Requests are sent as a single JSON object."""

    def encode(self, request: Request) -> bytes:
        try:
            return orjson.dumps(request.to_dict())
        except orjson.JSONEncodeError as e:
            raise EncodeError(f"Cannot encode {request.channel} request: {e}", cause=e)

    def decode_batch(self, body: bytes | str) -> list[Response]:
        try:
            payload = orjson.loads(body)
        except orjson.JSONDecodeError as e:
            raise ParseError(f"Invalid JSON in response: {e}", payload=body, cause=e)
        return classify_batch(payload)
