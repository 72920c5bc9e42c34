"""Incoming marshaling: wire messages to typed values.

* :func:`parse` -- the server side; reconstructs a typed request from the
  pieces a router hands over (path arguments, query string, headers,
  body).
* :func:`parse_response` -- the client side; reconstructs a typed
  response, or raises :class:`~mxapi.core.errors.ServerError` for a
  Matrix error response.

The router has already decided *which* endpoint the request is for.  Path
arguments are accepted if they fit any template in the endpoint's
history, including the one-segment-short form described in
:func:`mxapi.wire.codec.decode_path`.
"""
from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, TypeVar

from pydantic import ValidationError

from mxapi.core.errors import (
    BodyDecodingError,
    FromHttpRequestError,
    MalformedPath,
    MethodNotAllowed,
    QueryDecodingError,
    ResponseDecodingError,
    ServerError,
)
from mxapi.core.types import EndpointRequest, EndpointResponse, FieldRole, WireModel
from mxapi.wire.auth import check_authentication
from mxapi.wire.codec import decode_path, decode_query
from mxapi.wire.messages import get_header, parse_json_object, split_body

RequestT = TypeVar("RequestT", bound=EndpointRequest)
ResponseT = TypeVar("ResponseT", bound=EndpointResponse)

_ROLE_ERRORS: dict[FieldRole, type[FromHttpRequestError]] = {
    FieldRole.PATH: MalformedPath,
    FieldRole.QUERY: QueryDecodingError,
    FieldRole.BODY: BodyDecodingError,
    FieldRole.BODY_FLATTEN: BodyDecodingError,
    FieldRole.HEADER: FromHttpRequestError,
}


def _header_fields(model_cls: type[WireModel], headers: Mapping[str, str]) -> dict[str, Any]:
    values: dict[str, Any] = {}
    for spec in model_cls.fields_with_role(FieldRole.HEADER):
        value = get_header(headers, spec.key)
        if value is not None:
            values[spec.name] = value
    return values


def _request_validation_error(
    request_cls: type[EndpointRequest],
    exc: ValidationError,
) -> FromHttpRequestError:
    """Map the first validation failure to the error of its field's role."""
    first = exc.errors()[0]
    name = first["loc"][0] if first["loc"] else ""
    role = next((s.role for s in request_cls.FIELDS if s.name == name), FieldRole.BODY)
    error_cls = _ROLE_ERRORS[role]
    return error_cls(
        f"Invalid value for {name!r}: {first['msg']}",
        details={"field": str(name), "role": str(role)},
    )


def parse(
    request_cls: type[RequestT],
    method: str,
    path_segments: Sequence[str],
    query_string: str,
    headers: Mapping[str, str],
    body: bytes | str,
    *,
    trailing_param_shim: bool = True,
    max_body_size: int | None = None,
) -> RequestT:
    """Reconstruct a typed request from wire pieces.

    Parameters
    ----------
    request_cls:
        The endpoint's request model, chosen by the router.
    method:
        HTTP method of the incoming request.
    path_segments:
        Raw (percent-encoded) path arguments, one per placeholder.
    query_string:
        Raw query string without the leading ``?``.
    headers:
        Request headers.  Lookup is case-insensitive.
    body:
        Raw request body.
    trailing_param_shim:
        Accept one path argument fewer than a template declares,
        defaulting the last parameter to ``""``.
    max_body_size:
        Reject larger bodies with :class:`BodyDecodingError`.

    Raises
    ------
    MethodNotAllowed
        If *method* is not the endpoint's method.
    MalformedPath
        If the path arguments fit no template, or fail validation.
    QueryDecodingError
        If the query string is malformed or fails validation.
    AuthenticationRequired
        If the endpoint requires a credential and none is present.
    BodyDecodingError
        If the body is not a valid JSON object for the endpoint.
    """
    meta = request_cls.METADATA
    if method.upper() != meta.method.value:
        raise MethodNotAllowed(
            f"{method} is not allowed, expected {meta.method}",
            details={"endpoint": meta.name, "method": method},
        )

    _, path_values = decode_path(
        meta.history.templates,
        path_segments,
        trailing_param_shim=trailing_param_shim,
    )
    fields: dict[str, Any] = {
        spec.name: value
        for spec, value in zip(request_cls.fields_with_role(FieldRole.PATH), path_values)
    }

    fields.update(decode_query(query_string, request_cls.fields_with_role(FieldRole.QUERY)))

    check_authentication(meta.authentication, headers, query_string, endpoint=meta.name)

    fields.update(_header_fields(request_cls, headers))

    if request_cls.has_body():
        obj = parse_json_object(body, BodyDecodingError, max_size=max_body_size)
        fields.update(split_body(request_cls, obj))

    try:
        return request_cls.model_validate(fields)
    except ValidationError as exc:
        raise _request_validation_error(request_cls, exc) from exc


def parse_response(
    response_cls: type[ResponseT],
    status: int,
    headers: Mapping[str, str],
    body: bytes | str,
) -> ResponseT:
    """Reconstruct a typed response.

    Raises
    ------
    ServerError
        If *status* is not 2xx.  ``errcode`` and the message come from
        the Matrix error body when there is one.
    ResponseDecodingError
        If a successful response body does not fit *response_cls*.
    """
    if not 200 <= status < 300:
        try:
            obj = parse_json_object(body, ResponseDecodingError)
        except ResponseDecodingError:
            obj = {}
        errcode = obj.get("errcode") if isinstance(obj.get("errcode"), str) else "M_UNKNOWN"
        message = obj.get("error") if isinstance(obj.get("error"), str) else None
        extra = {k: v for k, v in obj.items() if k not in ("errcode", "error")}
        raise ServerError(errcode, message, http_status=status, details=extra)

    obj = parse_json_object(body, ResponseDecodingError)
    fields = split_body(response_cls, obj)
    fields.update(_header_fields(response_cls, headers))
    try:
        return response_cls.model_validate(fields)
    except ValidationError as exc:
        raise ResponseDecodingError(
            f"{response_cls.__name__} does not match the response body: {exc}",
            details={"model": response_cls.__name__},
        ) from exc
