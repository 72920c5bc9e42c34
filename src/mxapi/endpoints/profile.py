"""Endpoints for user profiles.

* ``GET    /_matrix/client/*/profile/{userId}``
* ``GET    /_matrix/client/*/profile/{userId}/{keyName}``     (MSC4133)
* ``DELETE /_matrix/client/*/profile/{userId}/{keyName}``     (MSC4133)
* ``GET    /_matrix/client/*/profile/{userId}/m.tz``          (MSC4175)
* ``PUT    /_matrix/client/*/profile/{userId}/m.tz``          (MSC4175)
* ``DELETE /_matrix/client/*/profile/{userId}/m.tz``          (MSC4175)

The extended-profile endpoints only exist as unstable paths so far; they
resolve only when the caller allows unstable paths.
"""
from __future__ import annotations

from typing import Any, ClassVar

from pydantic import Field

from mxapi.core.types import (
    EndpointRequest,
    EndpointResponse,
    FieldSpec,
    body,
    body_flatten,
    path,
)
from mxapi.metadata.endpoint import EndpointMetadata, metadata

TZ_FIELD = "us.cloke.msc4175.tz"
"""Unstable profile field name of the user's timezone."""

_MSC4133 = "/_matrix/client/unstable/uk.tcpip.msc4133/profile/:user_id"


# ---------------------------------------------------------------------------
# get_profile
# ---------------------------------------------------------------------------

class GetProfileResponse(EndpointResponse):
    FIELDS: ClassVar[tuple[FieldSpec, ...]] = (
        body("avatar_url"),
        body("displayname"),
        body("blurhash", "xyz.amorgan.blurhash"),
        body("tz", TZ_FIELD),
    )

    avatar_url: str | None = None
    displayname: str | None = None
    blurhash: str | None = None
    tz: str | None = None


class GetProfileRequest(EndpointRequest):
    """Get all profile information of a user."""

    METADATA: ClassVar[EndpointMetadata] = metadata(
        name="get_profile",
        method="GET",
        rate_limited=False,
        authentication="none",
        history={
            "unstable": _MSC4133,
            "1.0": "/_matrix/client/r0/profile/:user_id",
            "1.1": "/_matrix/client/v3/profile/:user_id",
        },
    )
    FIELDS: ClassVar[tuple[FieldSpec, ...]] = (path("user_id"),)
    RESPONSE: ClassVar[type[EndpointResponse]] = GetProfileResponse

    user_id: str


# ---------------------------------------------------------------------------
# get_profile_key / delete_profile_key (MSC4133)
# ---------------------------------------------------------------------------

class GetProfileKeyResponse(EndpointResponse):
    FIELDS: ClassVar[tuple[FieldSpec, ...]] = (body_flatten("value"),)

    value: dict[str, Any] = Field(default_factory=dict)


class GetProfileKeyRequest(EndpointRequest):
    """Get a custom profile key of a user."""

    METADATA: ClassVar[EndpointMetadata] = metadata(
        name="get_profile_key",
        method="GET",
        rate_limited=False,
        authentication="none",
        history={"unstable": f"{_MSC4133}/:key_name"},
    )
    FIELDS: ClassVar[tuple[FieldSpec, ...]] = (path("user_id"), path("key"))
    RESPONSE: ClassVar[type[EndpointResponse]] = GetProfileKeyResponse

    user_id: str
    key: str


class DeleteProfileKeyResponse(EndpointResponse):
    pass


class DeleteProfileKeyRequest(EndpointRequest):
    """Delete a custom profile key of the user."""

    METADATA: ClassVar[EndpointMetadata] = metadata(
        name="delete_profile_key",
        method="DELETE",
        rate_limited=True,
        authentication="access_token",
        history={"unstable": f"{_MSC4133}/:key_name"},
    )
    FIELDS: ClassVar[tuple[FieldSpec, ...]] = (
        path("user_id"),
        path("key"),
        body_flatten("kv_pair"),
    )
    RESPONSE: ClassVar[type[EndpointResponse]] = DeleteProfileKeyResponse

    user_id: str
    key: str
    kv_pair: dict[str, Any] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Timezone key (MSC4175)
# ---------------------------------------------------------------------------

_TZ_HISTORY = {"unstable": f"{_MSC4133}/{TZ_FIELD}"}


class GetTimezoneKeyResponse(EndpointResponse):
    FIELDS: ClassVar[tuple[FieldSpec, ...]] = (body("tz", TZ_FIELD),)

    tz: str | None = None


class GetTimezoneKeyRequest(EndpointRequest):
    """Get the timezone of a user."""

    METADATA: ClassVar[EndpointMetadata] = metadata(
        name="get_timezone_key",
        method="GET",
        rate_limited=False,
        authentication="none",
        history=_TZ_HISTORY,
    )
    FIELDS: ClassVar[tuple[FieldSpec, ...]] = (path("user_id"),)
    RESPONSE: ClassVar[type[EndpointResponse]] = GetTimezoneKeyResponse

    user_id: str


class SetTimezoneKeyResponse(EndpointResponse):
    pass


class SetTimezoneKeyRequest(EndpointRequest):
    """Set the timezone of the user."""

    METADATA: ClassVar[EndpointMetadata] = metadata(
        name="set_timezone_key",
        method="PUT",
        rate_limited=True,
        authentication="access_token",
        history=_TZ_HISTORY,
    )
    FIELDS: ClassVar[tuple[FieldSpec, ...]] = (path("user_id"), body("tz", TZ_FIELD))
    RESPONSE: ClassVar[type[EndpointResponse]] = SetTimezoneKeyResponse

    user_id: str
    # TODO: validate against the IANA timezone database once MSC4175 is merged.
    tz: str | None = None


class DeleteTimezoneKeyResponse(EndpointResponse):
    pass


class DeleteTimezoneKeyRequest(EndpointRequest):
    """Delete the timezone of the user."""

    METADATA: ClassVar[EndpointMetadata] = metadata(
        name="delete_timezone_key",
        method="DELETE",
        rate_limited=True,
        authentication="access_token",
        history=_TZ_HISTORY,
    )
    FIELDS: ClassVar[tuple[FieldSpec, ...]] = (path("user_id"),)
    RESPONSE: ClassVar[type[EndpointResponse]] = DeleteTimezoneKeyResponse

    user_id: str
