"""Tests for the HTTP binding -- HTTPTransport and create_http_handler.

The client side runs against ``httpx.MockTransport``; the server side
calls the generated handler directly.
"""
from __future__ import annotations

import json
import logging

import httpx
import pytest

from mxapi.core.config import MxApiConfig
from mxapi.core.errors import MissingCredential, NoMatchingVersion, ServerError
from mxapi.core.types import SendAccessToken
from mxapi.endpoints import (
    GetProfileRequest,
    GetProfileResponse,
    GetStateEventsForKeyRequest,
    GetStateEventsForKeyResponse,
    SetTimezoneKeyRequest,
    SetTimezoneKeyResponse,
)
from mxapi.metadata.versions import SupportedVersionSet
from mxapi.wire.http import HTTPTransport, create_http_handler


def _unreachable(request: httpx.Request) -> httpx.Response:
    raise AssertionError(f"unexpected network call to {request.url}")


# =========================================================================
# HTTPTransport
# =========================================================================


class TestHTTPTransport:
    """Tests for the async client transport."""

    async def test_send_get_profile(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"displayname": "Alice", "avatar_url": "mxc://hs/abc"})

        transport = HTTPTransport("https://hs.example.org/", transport=httpx.MockTransport(handler))
        response = await transport.send(GetProfileRequest(user_id="@alice:example.org"))

        assert isinstance(response, GetProfileResponse)
        assert response.displayname == "Alice"
        assert response.avatar_url == "mxc://hs/abc"
        assert seen[0].method == "GET"
        assert seen[0].url.raw_path == b"/_matrix/client/v3/profile/%40alice%3Aexample.org"
        assert "authorization" not in seen[0].headers

    async def test_send_with_token_and_body(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={})

        transport = HTTPTransport(
            "https://hs.example.org",
            credential=SendAccessToken.if_required("secret"),
            supported=SupportedVersionSet.of("1.1", allow_unstable=True),
            transport=httpx.MockTransport(handler),
        )
        response = await transport.send(SetTimezoneKeyRequest(user_id="@a:b", tz="Europe/Paris"))

        assert isinstance(response, SetTimezoneKeyResponse)
        assert seen[0].method == "PUT"
        assert seen[0].headers["authorization"] == "Bearer secret"
        assert seen[0].headers["content-type"] == "application/json"
        assert json.loads(seen[0].content) == {"us.cloke.msc4175.tz": "Europe/Paris"}

    async def test_user_id_assertion(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={})

        transport = HTTPTransport("https://hs", transport=httpx.MockTransport(handler))
        await transport.send(GetProfileRequest(user_id="@a:b"), user_id="@bridge_bot:hs")
        assert seen[0].url.params["user_id"] == "@bridge_bot:hs"

    async def test_server_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, json={"errcode": "M_NOT_FOUND", "error": "No such user"})

        transport = HTTPTransport("https://hs", transport=httpx.MockTransport(handler))
        with pytest.raises(ServerError) as exc_info:
            await transport.send(GetProfileRequest(user_id="@ghost:hs"))
        assert exc_info.value.errcode == "M_NOT_FOUND"
        assert exc_info.value.http_status == 404

    async def test_marshaling_errors_never_reach_network(self) -> None:
        transport = HTTPTransport("https://hs", transport=httpx.MockTransport(_unreachable))
        with pytest.raises(MissingCredential):
            await transport.send(GetStateEventsForKeyRequest(room_id="!r:hs", event_type="m.room.name"))
        with pytest.raises(NoMatchingVersion):
            await transport.send(SetTimezoneKeyRequest(user_id="@a:b"))

    async def test_from_config(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"name": "Lobby"})

        config = MxApiConfig(
            base_url="https://hs.example.org",
            supported_versions=["r0.6.1"],
            access_token="secret",
        )
        transport = HTTPTransport.from_config(config, transport=httpx.MockTransport(handler))
        response = await transport.send(
            GetStateEventsForKeyRequest(room_id="!r:hs", event_type="m.room.name")
        )
        assert isinstance(response, GetStateEventsForKeyResponse)
        assert response.content == {"name": "Lobby"}
        assert seen[0].url.path.startswith("/_matrix/client/r0/rooms/")
        assert seen[0].headers["authorization"] == "Bearer secret"


# =========================================================================
# create_http_handler
# =========================================================================


class TestHTTPHandler:
    """Tests for the server-side handler factory."""

    async def test_success(self) -> None:
        async def get_profile(request: GetProfileRequest) -> GetProfileResponse:
            return GetProfileResponse(displayname=request.user_id.split(":")[0][1:])

        handler = create_http_handler(GetProfileRequest, get_profile)
        response = await handler("GET", ["%40alice%3Aexample.org"], "", {}, b"")

        assert response.status == 200
        assert response.json_body() == {"displayname": "alice"}

    async def test_shim_reaches_endpoint(self) -> None:
        received: list[GetStateEventsForKeyRequest] = []

        async def get_state(request: GetStateEventsForKeyRequest) -> GetStateEventsForKeyResponse:
            received.append(request)
            return GetStateEventsForKeyResponse(content={"name": "Lobby"})

        handler = create_http_handler(GetStateEventsForKeyRequest, get_state)
        response = await handler(
            "GET", ["%21r%3Ahs", "m.room.name"], "", {"Authorization": "Bearer t"}, b""
        )

        assert response.status == 200
        assert response.json_body() == {"name": "Lobby"}
        assert received[0].state_key == ""

    async def test_shim_disabled_by_config(self) -> None:
        async def get_state(request: GetStateEventsForKeyRequest) -> GetStateEventsForKeyResponse:
            raise AssertionError("endpoint must not be called")

        handler = create_http_handler(
            GetStateEventsForKeyRequest,
            get_state,
            MxApiConfig(trailing_param_shim=False),
        )
        response = await handler(
            "GET", ["%21r%3Ahs", "m.room.name"], "", {"Authorization": "Bearer t"}, b""
        )
        assert response.status == 400
        assert response.json_body()["errcode"] == "M_INVALID_PARAM"

    async def test_missing_token(self) -> None:
        async def get_state(request: GetStateEventsForKeyRequest) -> GetStateEventsForKeyResponse:
            raise AssertionError("endpoint must not be called")

        handler = create_http_handler(GetStateEventsForKeyRequest, get_state)
        response = await handler("GET", ["!r", "m.room.name", ""], "", {}, b"")
        assert response.status == 401
        assert response.json_body() == {"errcode": "M_MISSING_TOKEN", "error": "Missing access token"}

    async def test_wrong_method(self) -> None:
        async def get_profile(request: GetProfileRequest) -> GetProfileResponse:
            return GetProfileResponse()

        handler = create_http_handler(GetProfileRequest, get_profile)
        response = await handler("PUT", ["@a:b"], "", {}, b"{}")
        assert response.status == 405
        assert response.json_body()["errcode"] == "M_UNRECOGNIZED"

    async def test_body_size_limit(self) -> None:
        async def set_tz(request: SetTimezoneKeyRequest) -> SetTimezoneKeyResponse:
            return SetTimezoneKeyResponse()

        handler = create_http_handler(
            SetTimezoneKeyRequest,
            set_tz,
            MxApiConfig(max_body_size_bytes=16),
        )
        raw = json.dumps({"us.cloke.msc4175.tz": "America/Argentina/Buenos_Aires"}).encode()
        response = await handler("PUT", ["@a:b"], "", {"Authorization": "Bearer t"}, raw)
        assert response.status == 400
        assert response.json_body()["errcode"] == "M_BAD_JSON"

    async def test_endpoint_raising_matrix_error(self) -> None:
        async def get_profile(request: GetProfileRequest) -> GetProfileResponse:
            raise ServerError("M_NOT_FOUND", "Profile not found", http_status=404)

        handler = create_http_handler(GetProfileRequest, get_profile)
        response = await handler("GET", ["@a:b"], "", {}, b"")
        assert response.status == 404
        assert response.json_body() == {"errcode": "M_NOT_FOUND", "error": "Profile not found"}

    async def test_unexpected_exception(self, caplog: pytest.LogCaptureFixture) -> None:
        async def get_profile(request: GetProfileRequest) -> GetProfileResponse:
            raise RuntimeError("database on fire")

        handler = create_http_handler(GetProfileRequest, get_profile)
        with caplog.at_level(logging.ERROR, logger="mxapi.wire.http"):
            response = await handler("GET", ["@a:b"], "", {}, b"")

        assert response.status == 500
        assert response.json_body() == {"errcode": "M_UNKNOWN", "error": "Internal server error"}
        assert "database on fire" not in response.body.decode()
        assert "get_profile" in caplog.text
