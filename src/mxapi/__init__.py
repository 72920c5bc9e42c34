"""mxapi -- versioned endpoint descriptions and request/response marshaling.

One typed request definition maps onto every historical wire form of the
same logical endpoint; clients and servers reconstruct each other's
intent from the shared descriptor alone.

Layers
------
0. Core types, errors, config (:mod:`mxapi.core`)
1. Endpoint metadata and version resolution (:mod:`mxapi.metadata`)
2. Codec, marshalers and HTTP binding (:mod:`mxapi.wire`)
3. Concrete endpoints (:mod:`mxapi.endpoints`)
"""
from __future__ import annotations

__version__ = "0.1.0"

# ---------------------------------------------------------------------------
# Layer 0 -- Core types, errors, config
# ---------------------------------------------------------------------------
from mxapi.core.config import MxApiConfig
from mxapi.core.errors import (
    AuthenticationRequired,
    BodyDecodingError,
    EncodingError,
    FromHttpRequestError,
    FromHttpResponseError,
    IntoHttpError,
    InvalidMetadata,
    MalformedPath,
    MethodNotAllowed,
    MissingCredential,
    MxApiError,
    NoMatchingVersion,
    QueryDecodingError,
    ResponseDecodingError,
    ServerError,
)
from mxapi.core.types import (
    AuthScheme,
    EndpointRequest,
    EndpointResponse,
    FieldRole,
    FieldSpec,
    HTTPMethod,
    SendAccessToken,
)

# ---------------------------------------------------------------------------
# Layer 1 -- Metadata
# ---------------------------------------------------------------------------
from mxapi.metadata import (
    EndpointMetadata,
    History,
    PathTemplate,
    ProtocolVersion,
    SupportedVersionSet,
    VersionKind,
    VersionToken,
    metadata,
    resolve,
)

# ---------------------------------------------------------------------------
# Layer 2 -- Wire
# ---------------------------------------------------------------------------
from mxapi.wire import (
    HTTPTransport,
    WireRequest,
    WireResponse,
    build,
    build_response,
    create_http_handler,
    parse,
    parse_response,
)

__all__ = [
    # Meta
    "__version__",
    # Core types & enums
    "AuthScheme",
    "EndpointRequest",
    "EndpointResponse",
    "FieldRole",
    "FieldSpec",
    "HTTPMethod",
    "SendAccessToken",
    # Config
    "MxApiConfig",
    # Error hierarchy
    "MxApiError",
    "InvalidMetadata",
    "IntoHttpError",
    "NoMatchingVersion",
    "MissingCredential",
    "EncodingError",
    "FromHttpRequestError",
    "MalformedPath",
    "MethodNotAllowed",
    "AuthenticationRequired",
    "QueryDecodingError",
    "BodyDecodingError",
    "FromHttpResponseError",
    "ServerError",
    "ResponseDecodingError",
    # Metadata
    "EndpointMetadata",
    "History",
    "PathTemplate",
    "ProtocolVersion",
    "SupportedVersionSet",
    "VersionKind",
    "VersionToken",
    "metadata",
    "resolve",
    # Wire
    "WireRequest",
    "WireResponse",
    "build",
    "build_response",
    "parse",
    "parse_response",
    "HTTPTransport",
    "create_http_handler",
]
