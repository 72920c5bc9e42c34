"""mxapi shared domain types.

This module defines the enums and base models shared by the metadata
model and the marshalers.

Key design decisions:
* Per-endpoint requests and responses are Pydantic models.  The role of
  each field on the wire (path, query, body, header) is declared
  *explicitly* in a ``FIELDS`` tuple of :class:`FieldSpec` rather than
  inferred from annotations, so the codec consumes one uniform
  descriptor list.
* Path fields are positional: their order in ``FIELDS`` is the order in
  which they fill the placeholders of whichever path template the
  version resolver selects.
* Enums use *string* values so they serialise cleanly to JSON and log
  lines.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar

from pydantic import BaseModel, ConfigDict

from mxapi.core.errors import InvalidMetadata

if TYPE_CHECKING:
    from mxapi.metadata.endpoint import EndpointMetadata


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class HTTPMethod(enum.StrEnum):
    """HTTP methods used by protocol endpoints."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"


class AuthScheme(enum.StrEnum):
    """Credential requirement declared by an endpoint.

    Consumed identically by the outgoing marshaler (which decides whether
    to attach a bearer token) and the incoming marshaler (which checks
    that a credential is present).

    * **NONE** -- no credential is sent or required.
    * **ACCESS_TOKEN** -- a bearer token is mandatory.
    * **ACCESS_TOKEN_OPTIONAL** -- a bearer token is sent when available.
    * **SERVER_SIGNATURES** -- the request carries an ``X-Matrix``
      signature header added by the federation signing layer.
    """

    NONE = "none"
    ACCESS_TOKEN = "access_token"
    ACCESS_TOKEN_OPTIONAL = "access_token_optional"
    SERVER_SIGNATURES = "server_signatures"


class FieldRole(enum.StrEnum):
    """Where a request or response field lives on the wire."""

    PATH = "path"
    QUERY = "query"
    BODY = "body"
    BODY_FLATTEN = "body_flatten"
    HEADER = "header"


# ---------------------------------------------------------------------------
# SendAccessToken -- credential holder that never prints its token
# ---------------------------------------------------------------------------

class SendAccessToken:
    """The access token offered to the outgoing marshaler.

    * :meth:`if_required` -- send the token only to endpoints that
      require one.
    * :meth:`always` -- also send it to endpoints where it is optional.
    * :meth:`none` -- never send a token.

    ``str()`` and ``repr()`` return a redacted placeholder.
    """

    __slots__ = ("_token", "_always")

    def __init__(self, token: str | None, *, always: bool = False) -> None:
        self._token = token or None
        self._always = always

    @classmethod
    def if_required(cls, token: str) -> SendAccessToken:
        return cls(token)

    @classmethod
    def always(cls, token: str) -> SendAccessToken:
        return cls(token, always=True)

    @classmethod
    def none(cls) -> SendAccessToken:
        return cls(None)

    @classmethod
    def coerce(cls, value: SendAccessToken | str | None) -> SendAccessToken:
        """Accept a holder, a bare token (sent whenever allowed) or ``None``."""
        if isinstance(value, SendAccessToken):
            return value
        if value is None:
            return cls.none()
        return cls.always(value)

    def required(self) -> str | None:
        """The token for an endpoint that requires one, if any."""
        return self._token

    def optional(self) -> str | None:
        """The token for an endpoint where it is optional, if any."""
        return self._token if self._always else None

    def __str__(self) -> str:
        return "[REDACTED]"

    def __repr__(self) -> str:
        mode = "none" if self._token is None else ("always" if self._always else "if_required")
        return f"SendAccessToken({mode}, [REDACTED])"


# ---------------------------------------------------------------------------
# Field descriptors
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class FieldSpec:
    """Wire placement of one model field.

    Parameters
    ----------
    name:
        Attribute name on the Pydantic model.
    role:
        The :class:`FieldRole` deciding how the field is marshaled.
    wire_name:
        Query key, JSON key or header name.  Defaults to *name*.  Ignored
        for ``PATH`` (positional) and ``BODY_FLATTEN`` (merged) fields.
    repeated:
        ``QUERY`` only: the field is a list sent as repeated keys
        (``?a=1&a=2``).
    """

    name: str
    role: FieldRole
    wire_name: str | None = None
    repeated: bool = False

    @property
    def key(self) -> str:
        """The name used on the wire."""
        return self.wire_name or self.name


def path(name: str) -> FieldSpec:
    return FieldSpec(name, FieldRole.PATH)


def query(name: str, wire_name: str | None = None, *, repeated: bool = False) -> FieldSpec:
    return FieldSpec(name, FieldRole.QUERY, wire_name, repeated)


def body(name: str, wire_name: str | None = None) -> FieldSpec:
    return FieldSpec(name, FieldRole.BODY, wire_name)


def body_flatten(name: str) -> FieldSpec:
    return FieldSpec(name, FieldRole.BODY_FLATTEN)


def header(name: str, wire_name: str) -> FieldSpec:
    return FieldSpec(name, FieldRole.HEADER, wire_name)


# ---------------------------------------------------------------------------
# Base models
# ---------------------------------------------------------------------------

class WireModel(BaseModel):
    """Shared behaviour of request and response models."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    FIELDS: ClassVar[tuple[FieldSpec, ...]] = ()

    @classmethod
    def __pydantic_init_subclass__(cls, **kwargs: Any) -> None:
        super().__pydantic_init_subclass__(**kwargs)
        declared = [spec.name for spec in cls.FIELDS]
        if len(declared) != len(set(declared)):
            raise InvalidMetadata(
                f"{cls.__name__}: duplicate field in FIELDS",
                details={"model": cls.__name__, "fields": declared},
            )
        missing = set(cls.model_fields) - set(declared)
        unknown = set(declared) - set(cls.model_fields)
        if missing or unknown:
            raise InvalidMetadata(
                f"{cls.__name__}: FIELDS does not match the model fields",
                details={
                    "model": cls.__name__,
                    "undeclared": sorted(missing),
                    "unknown": sorted(unknown),
                },
            )
        if len(cls.fields_with_role(FieldRole.BODY_FLATTEN)) > 1:
            raise InvalidMetadata(
                f"{cls.__name__}: at most one flattened body field is allowed",
                details={"model": cls.__name__},
            )

    @classmethod
    def fields_with_role(cls, role: FieldRole) -> tuple[FieldSpec, ...]:
        """Return the field specs with *role*, in declaration order."""
        return tuple(spec for spec in cls.FIELDS if spec.role is role)

    @classmethod
    def has_body(cls) -> bool:
        """Whether any field is carried in the JSON body."""
        return any(
            spec.role in (FieldRole.BODY, FieldRole.BODY_FLATTEN)
            for spec in cls.FIELDS
        )


class EndpointRequest(WireModel):
    """Base class for typed endpoint requests.

    Subclasses set ``METADATA`` to the endpoint's
    :class:`~mxapi.metadata.endpoint.EndpointMetadata`, ``FIELDS`` to
    the wire placement of every model field and ``RESPONSE`` to the
    matching :class:`EndpointResponse` subclass.
    """

    METADATA: ClassVar[EndpointMetadata]
    RESPONSE: ClassVar[type[EndpointResponse]]


class EndpointResponse(WireModel):
    """Base class for typed endpoint responses.

    Responses only use the ``BODY``, ``BODY_FLATTEN`` and ``HEADER``
    roles.
    """
