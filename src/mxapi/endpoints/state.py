"""``GET /_matrix/client/*/rooms/{roomId}/state/{eventType}/{stateKey}``

Get the state event of a room for a given type and state key.

The state key is frequently empty, in which case some routers deliver
only two path arguments.  The request model declares ``state_key`` with
an empty-string default, and the incoming marshaler fills it in when the
trailing segment is missing.
"""
from __future__ import annotations

from typing import Any, ClassVar

from pydantic import Field

from mxapi.core.types import (
    EndpointRequest,
    EndpointResponse,
    FieldSpec,
    body_flatten,
    path,
    query,
)
from mxapi.metadata.endpoint import EndpointMetadata, metadata


class GetStateEventsForKeyResponse(EndpointResponse):
    """Either the event content or, with ``format=event``, the full event.

    Kept as raw JSON: the top level is the content itself, not a wrapper
    object.
    """

    FIELDS: ClassVar[tuple[FieldSpec, ...]] = (body_flatten("content"),)

    content: dict[str, Any] = Field(default_factory=dict)


class GetStateEventsForKeyRequest(EndpointRequest):
    METADATA: ClassVar[EndpointMetadata] = metadata(
        name="get_state_events_for_key",
        method="GET",
        rate_limited=False,
        authentication="access_token",
        history={
            "1.0": "/_matrix/client/r0/rooms/:room_id/state/:event_type/:state_key",
            "1.1": "/_matrix/client/v3/rooms/:room_id/state/:event_type/:state_key",
        },
    )
    FIELDS: ClassVar[tuple[FieldSpec, ...]] = (
        path("room_id"),
        path("event_type"),
        path("state_key"),
        query("format"),
    )
    RESPONSE: ClassVar[type[EndpointResponse]] = GetStateEventsForKeyResponse

    room_id: str
    event_type: str
    state_key: str = ""
    format: str | None = None
