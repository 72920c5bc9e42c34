"""Outgoing marshaling: typed values to wire messages.

* :func:`build` -- the client side; turns a typed request into a
  :class:`~mxapi.wire.messages.WireRequest` for the newest path the peer
  supports.
* :func:`build_response` -- the server side; turns a typed response into
  a :class:`~mxapi.wire.messages.WireResponse`.

Neither function performs I/O or touches shared state.
"""
from __future__ import annotations

import logging
from typing import Any

from pydantic_core import PydanticSerializationError

from mxapi.core.errors import EncodingError
from mxapi.core.types import (
    EndpointRequest,
    EndpointResponse,
    FieldRole,
    HTTPMethod,
    SendAccessToken,
    WireModel,
)
from mxapi.metadata.resolver import resolve
from mxapi.metadata.versions import SupportedVersionSet
from mxapi.wire.auth import authorization_header
from mxapi.wire.codec import encode_path, encode_query, to_wire_string
from mxapi.wire.messages import (
    JSON_CONTENT_TYPE,
    WireRequest,
    WireResponse,
    collect_body,
    serialize_json,
)

logger = logging.getLogger(__name__)


def _dump(model: WireModel) -> dict[str, Any]:
    try:
        return model.model_dump(mode="json")
    except PydanticSerializationError as exc:
        raise EncodingError(
            f"Cannot serialise {type(model).__name__}: {exc}",
            details={"model": type(model).__name__},
        ) from exc


def _header_values(model_cls: type[WireModel], data: dict[str, Any]) -> dict[str, str]:
    headers: dict[str, str] = {}
    for spec in model_cls.fields_with_role(FieldRole.HEADER):
        value = data.get(spec.name)
        if value is not None:
            headers[spec.key] = to_wire_string(value)
    return headers


def build(
    request: EndpointRequest,
    base_url: str,
    credential: SendAccessToken | str | None,
    supported: SupportedVersionSet,
    *,
    allow_unstable: bool | None = None,
    user_id: str | None = None,
) -> WireRequest:
    """Build the wire request for *request*.

    Parameters
    ----------
    request:
        The typed request.  Its class supplies ``METADATA`` and
        ``FIELDS``.
    base_url:
        Homeserver base URL, e.g. ``https://matrix.example.org``.
    credential:
        Access token holder.  A bare string is sent to every endpoint
        that accepts a token.
    supported:
        Versions supported by the server.
    allow_unstable:
        Override ``supported.allow_unstable`` for this call.
    user_id:
        Application-service identity assertion, appended as the
        ``user_id`` query parameter.

    Raises
    ------
    NoMatchingVersion
        If no path in the endpoint history suits *supported*.
    MissingCredential
        If the endpoint requires an access token and none is available.
    EncodingError
        If a path, query, header or body value cannot be encoded.
    """
    cls = type(request)
    meta = cls.METADATA
    template = resolve(meta.history, allow_unstable, supported, endpoint=meta.name)
    data = _dump(request)

    path_values = [data[spec.name] for spec in cls.fields_with_role(FieldRole.PATH)]
    url = encode_path(template, path_values, base_url)

    query_pairs = [(spec.key, data[spec.name]) for spec in cls.fields_with_role(FieldRole.QUERY)]
    if user_id is not None:
        query_pairs.append(("user_id", user_id))
    query_string = encode_query(query_pairs)
    if query_string:
        url = f"{url}?{query_string}"

    headers = _header_values(cls, data)
    if cls.has_body():
        body = serialize_json(collect_body(cls, data))
    elif meta.method is not HTTPMethod.GET:
        body = b"{}"
    else:
        body = b""
    if body:
        headers["Content-Type"] = JSON_CONTENT_TYPE

    auth = authorization_header(
        meta.authentication,
        SendAccessToken.coerce(credential),
        endpoint=meta.name,
    )
    if auth is not None:
        headers["Authorization"] = auth

    logger.debug("Built %s %s for %s", meta.method, template, meta.name or cls.__name__)
    return WireRequest(method=meta.method, url=url, headers=headers, body=body)


def build_response(response: EndpointResponse, *, status: int = 200) -> WireResponse:
    """Build the wire response for *response*.

    The body is always a JSON object, ``{}`` when the response has no
    body fields.

    Raises
    ------
    EncodingError
        If a header or body value cannot be encoded.
    """
    cls = type(response)
    data = _dump(response)
    headers = _header_values(cls, data)
    headers["Content-Type"] = JSON_CONTENT_TYPE
    return WireResponse(
        status=status,
        headers=headers,
        body=serialize_json(collect_body(cls, data)),
    )
