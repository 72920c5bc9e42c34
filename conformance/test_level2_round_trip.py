"""Level 2 -- Round-trip conformance tests.

Verifies that a request built by the client marshaler is reconstructed
unchanged by the server marshaler, for every version the endpoint is
reachable at, and that responses survive the reverse trip.
"""
from __future__ import annotations

import pytest

from mxapi.core.types import EndpointRequest, EndpointResponse, SendAccessToken
from mxapi.endpoints import (
    DeleteProfileKeyRequest,
    DeleteTimezoneKeyRequest,
    GetProfileKeyRequest,
    GetProfileKeyResponse,
    GetProfileRequest,
    GetProfileResponse,
    GetStateEventsForKeyRequest,
    GetStateEventsForKeyResponse,
    GetTimezoneKeyRequest,
    GetTimezoneKeyResponse,
    ReportRoomRequest,
    SetTimezoneKeyRequest,
)
from mxapi.metadata.versions import SupportedVersionSet
from mxapi.wire.incoming import parse, parse_response
from mxapi.wire.messages import WireRequest
from mxapi.wire.outgoing import build, build_response

BASE_URL = "https://matrix.example.org"
CREDENTIAL = SendAccessToken.always("syt_conformance_token")

REQUESTS: list[EndpointRequest] = [
    GetProfileRequest(user_id="@alice:example.org"),
    GetProfileKeyRequest(user_id="@alice:example.org", key="m.status"),
    DeleteProfileKeyRequest(user_id="@alice:example.org", key="m.status", kv_pair={"m.status": None}),
    GetTimezoneKeyRequest(user_id="@bob:example.org"),
    SetTimezoneKeyRequest(user_id="@bob:example.org", tz="Asia/Tokyo"),
    SetTimezoneKeyRequest(user_id="@bob:example.org"),
    DeleteTimezoneKeyRequest(user_id="@bob:example.org"),
    ReportRoomRequest(room_id="!abuse:example.org", reason="spam / phishing"),
    ReportRoomRequest(room_id="!abuse:example.org"),
    GetStateEventsForKeyRequest(room_id="!r:example.org", event_type="m.room.name"),
    GetStateEventsForKeyRequest(
        room_id="!r:example.org",
        event_type="m.room.member",
        state_key="@carol:example.org",
        format="event",
    ),
]

VERSION_SETS = [
    SupportedVersionSet.of("1.0", allow_unstable=True),
    SupportedVersionSet.of("1.1", allow_unstable=True),
]


def _server_side(request_cls: type[EndpointRequest], wire: WireRequest) -> EndpointRequest:
    """Split a wire request the way a router would and parse it."""
    for template in request_cls.METADATA.history.templates:
        segments = template.match(wire.path)
        if segments is not None:
            break
    else:
        raise AssertionError(f"no template of {request_cls.__name__} matches {wire.path}")
    return parse(request_cls, wire.method, segments, wire.query, wire.headers, wire.body)


# ===================================================================
# Requests
# ===================================================================


class TestRequestRoundTrip:
    """parse(build(v)) MUST equal v."""

    @pytest.mark.parametrize("request_value", REQUESTS, ids=lambda r: type(r).__name__)
    @pytest.mark.parametrize("supported", VERSION_SETS, ids=["v1.0", "v1.1"])
    def test_MUST_reconstruct_request(
        self,
        request_value: EndpointRequest,
        supported: SupportedVersionSet,
    ) -> None:
        wire = build(request_value, BASE_URL, CREDENTIAL, supported)
        assert _server_side(type(request_value), wire) == request_value

    def test_MUST_survive_reserved_characters(self) -> None:
        value = GetStateEventsForKeyRequest(
            room_id="!r:example.org",
            event_type="org.example/with slash?and#hash",
            state_key="%already%",
        )
        wire = build(value, BASE_URL, CREDENTIAL, SupportedVersionSet.of("1.1"))
        assert _server_side(GetStateEventsForKeyRequest, wire) == value


# ===================================================================
# Responses
# ===================================================================


class TestResponseRoundTrip:
    """parse_response(build_response(v)) MUST equal v."""

    @pytest.mark.parametrize(
        "response_value",
        [
            GetProfileResponse(displayname="Alice", avatar_url="mxc://example.org/abc"),
            GetProfileResponse(blurhash="LEHV6nWB2yk8", tz="Europe/London"),
            GetProfileResponse(),
            GetProfileKeyResponse(value={"m.status": {"text": "busy"}}),
            GetTimezoneKeyResponse(tz="Asia/Tokyo"),
            GetStateEventsForKeyResponse(content={"name": "Lobby", "m.mentions": {}}),
        ],
        ids=lambda r: type(r).__name__,
    )
    def test_MUST_reconstruct_response(self, response_value: EndpointResponse) -> None:
        wire = build_response(response_value)
        parsed = parse_response(type(response_value), wire.status, wire.headers, wire.body)
        assert parsed == response_value
