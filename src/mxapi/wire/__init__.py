"""mxapi wire subpackage -- codecs, marshalers and the HTTP binding.

This subpackage provides:

* **Codec** -- path and query encoding/decoding, including the trailing
  path parameter shim (:mod:`~mxapi.wire.codec`).
* **Messages** -- wire request/response models and JSON body helpers
  (:mod:`~mxapi.wire.messages`).
* **Auth** -- bearer token injection and credential presence checks
  (:mod:`~mxapi.wire.auth`).
* **Marshalers** -- :func:`build` / :func:`parse` and their response-side
  counterparts (:mod:`~mxapi.wire.outgoing`, :mod:`~mxapi.wire.incoming`).
* **HTTP** -- ``httpx`` client transport and server handler factory
  (:mod:`~mxapi.wire.http`).
"""
from __future__ import annotations

# -- Auth --------------------------------------------------------------------
from mxapi.wire.auth import (
    XMatrix,
    authorization_header,
    check_authentication,
    extract_access_token,
    parse_x_matrix,
)

# -- Codec -------------------------------------------------------------------
from mxapi.wire.codec import (
    decode_path,
    decode_query,
    encode_path,
    encode_query,
    percent_encode,
)

# -- HTTP binding ------------------------------------------------------------
from mxapi.wire.http import HTTPTransport, create_http_handler

# -- Marshalers --------------------------------------------------------------
from mxapi.wire.incoming import parse, parse_response

# -- Messages ----------------------------------------------------------------
from mxapi.wire.messages import (
    JSON_CONTENT_TYPE,
    WireRequest,
    WireResponse,
    format_error_response,
)
from mxapi.wire.outgoing import build, build_response

__all__ = [
    # Auth
    "XMatrix",
    "authorization_header",
    "check_authentication",
    "extract_access_token",
    "parse_x_matrix",
    # Codec
    "decode_path",
    "decode_query",
    "encode_path",
    "encode_query",
    "percent_encode",
    # Messages
    "JSON_CONTENT_TYPE",
    "WireRequest",
    "WireResponse",
    "format_error_response",
    # Marshalers
    "build",
    "build_response",
    "parse",
    "parse_response",
    # HTTP
    "HTTPTransport",
    "create_http_handler",
]
