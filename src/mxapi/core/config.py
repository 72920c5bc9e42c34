"""mxapi client and server configuration.

Defines the validated configuration model read by
:class:`~mxapi.wire.http.HTTPTransport` and
:func:`~mxapi.wire.http.create_http_handler`.  The pure marshaling
functions take their inputs as arguments and never read configuration
themselves.
"""
from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from mxapi.core.types import SendAccessToken
from mxapi.metadata.versions import ProtocolVersion, SupportedVersionSet


class MxApiConfig(BaseModel):
    """Configuration for an mxapi client or server.

    All fields carry defaults so that a minimal configuration (just
    ``base_url`` for a client) is sufficient for development.
    """

    model_config = ConfigDict(strict=True)

    base_url: str = Field(
        default="",
        description="Homeserver base URL, e.g. https://matrix.example.org.",
    )
    supported_versions: list[str] = Field(
        default=["v1.1"],
        description=(
            "Protocol versions the server is known to support, as "
            "advertised by GET /_matrix/client/versions."
        ),
    )
    allow_unstable: bool = Field(
        default=False,
        description="Fall back to unstable endpoint paths when no stable path fits.",
    )
    access_token: str | None = Field(
        default=None,
        description="Access token sent to authenticated endpoints.",
        repr=False,
    )
    send_access_token: Literal["if_required", "always"] = Field(
        default="if_required",
        description=(
            "Whether the token is also sent to endpoints where "
            "authentication is optional."
        ),
    )
    trailing_param_shim: bool = Field(
        default=True,
        description=(
            "Accept incoming paths one segment short of the template, "
            "defaulting the trailing parameter to an empty string."
        ),
    )
    max_body_size_bytes: int = Field(
        default=1_048_576,  # 1 MiB
        ge=0,
        description="Maximum accepted incoming request body size in bytes.",
    )
    request_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Outgoing HTTP request timeout in seconds.",
    )

    @field_validator("supported_versions")
    @classmethod
    def _check_versions(cls, value: list[str]) -> list[str]:
        for text in value:
            ProtocolVersion.parse(text)
        return value

    def supported(self) -> SupportedVersionSet:
        """The :class:`SupportedVersionSet` described by this config."""
        return SupportedVersionSet.of(
            *self.supported_versions,
            allow_unstable=self.allow_unstable,
        )

    def credential(self) -> SendAccessToken:
        """The :class:`SendAccessToken` described by this config."""
        if self.access_token is None:
            return SendAccessToken.none()
        if self.send_access_token == "always":
            return SendAccessToken.always(self.access_token)
        return SendAccessToken.if_required(self.access_token)
