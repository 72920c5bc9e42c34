#!/usr/bin/env python3
"""mxapi quickstart -- one endpoint, both sides of the wire.

Demonstrates the core workflow:

1. Serve ``get_profile`` with a handler built by ``create_http_handler``.
2. Route raw requests to the handler with the endpoint's path templates.
3. Send typed requests through ``HTTPTransport`` against older and newer
   servers, and watch the resolver pick the matching path.
4. Handle a Matrix error response.

No network is used: ``httpx.MockTransport`` connects the client to the
in-process handler.

Run:
    python examples/quickstart.py
"""
from __future__ import annotations

import asyncio
import logging

import httpx

from mxapi import (
    HTTPTransport,
    MxApiConfig,
    ServerError,
    SupportedVersionSet,
    create_http_handler,
)
from mxapi.endpoints import GetProfileRequest, GetProfileResponse

PROFILES = {"@alice:example.org": GetProfileResponse(displayname="Alice", tz="Europe/Berlin")}


async def get_profile(request: GetProfileRequest) -> GetProfileResponse:
    profile = PROFILES.get(request.user_id)
    if profile is None:
        raise ServerError("M_NOT_FOUND", "Profile not found", http_status=404)
    return profile


def make_server() -> httpx.MockTransport:
    handler = create_http_handler(GetProfileRequest, get_profile)
    templates = GetProfileRequest.METADATA.history.templates

    async def route(request: httpx.Request) -> httpx.Response:
        raw_path = request.url.raw_path.decode("ascii")
        for template in templates:
            segments = template.match(raw_path)
            if segments is not None:
                break
        else:
            return httpx.Response(404, json={"errcode": "M_UNRECOGNIZED", "error": "Unknown path"})
        print(f"    server saw {request.method} {raw_path}")
        response = await handler(
            request.method,
            segments,
            request.url.query.decode("ascii"),
            request.headers,
            request.content,
        )
        return httpx.Response(response.status, headers=response.headers, content=response.body)

    return httpx.MockTransport(route)


async def main() -> None:
    logging.basicConfig(level=logging.WARNING)
    server = make_server()

    # -- Step 1: A current server --------------------------------------------
    client = HTTPTransport.from_config(
        MxApiConfig(base_url="https://matrix.example.org", supported_versions=["v1.1", "v1.2"]),
        transport=server,
    )
    profile = await client.send(GetProfileRequest(user_id="@alice:example.org"))
    print(f"[1] v1.2 server: displayname={profile.displayname} tz={profile.tz}")

    # -- Step 2: A server that only speaks r0 --------------------------------
    legacy = HTTPTransport(
        "https://old.example.org",
        supported=SupportedVersionSet.from_versions_response(["r0.5.0", "r0.6.1"]),
        transport=server,
    )
    profile = await legacy.send(GetProfileRequest(user_id="@alice:example.org"))
    print(f"[2] r0 server: displayname={profile.displayname}")

    # -- Step 3: Error responses become ServerError --------------------------
    try:
        await client.send(GetProfileRequest(user_id="@nobody:example.org"))
    except ServerError as exc:
        print(f"[3] error: [{exc.errcode}] {exc.message} (HTTP {exc.http_status})")


if __name__ == "__main__":
    asyncio.run(main())
