"""``POST /_matrix/client/*/rooms/{roomId}/report`` -- report an abusive room (MSC4151)."""
from __future__ import annotations

from typing import ClassVar

from mxapi.core.types import EndpointRequest, EndpointResponse, FieldSpec, body, path
from mxapi.metadata.endpoint import EndpointMetadata, metadata


class ReportRoomResponse(EndpointResponse):
    pass


class ReportRoomRequest(EndpointRequest):
    METADATA: ClassVar[EndpointMetadata] = metadata(
        name="report_room",
        method="POST",
        rate_limited=False,
        authentication="access_token",
        history={
            "unstable": "/_matrix/client/unstable/org.matrix.msc4151/rooms/:room_id/report",
            "1.0": "/_matrix/client/v3/rooms/:room_id/report",
        },
    )
    FIELDS: ClassVar[tuple[FieldSpec, ...]] = (path("room_id"), body("reason"))
    RESPONSE: ClassVar[type[EndpointResponse]] = ReportRoomResponse

    room_id: str
    # May be blank.
    reason: str | None = None
