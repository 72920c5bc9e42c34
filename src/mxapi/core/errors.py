"""mxapi error hierarchy.

Every failure the marshaling layer can report is a concrete exception
class.  Errors carry the Matrix ``errcode`` they map to when a server
turns them into a response body, plus the recommended HTTP status.

Hierarchy
---------
::

    MxApiError
    +-- InvalidMetadata          (endpoint declaration errors)
    +-- IntoHttpError            (typed request -> wire request)
    |   +-- NoMatchingVersion
    |   +-- MissingCredential
    |   +-- EncodingError
    +-- FromHttpRequestError     (wire request -> typed request)
    |   +-- MalformedPath
    |   +-- MethodNotAllowed
    |   +-- AuthenticationRequired
    |   +-- QueryDecodingError
    |   +-- BodyDecodingError
    +-- FromHttpResponseError    (wire response -> typed response)
        +-- ServerError
        +-- ResponseDecodingError

Usage
-----
Raise concrete subclasses directly::

    raise MissingCredential(details={"endpoint": "get_profile"})

Catch by direction::

    try:
        ...
    except FromHttpRequestError as exc:
        return exc.http_status, exc.to_dict()
"""
from __future__ import annotations

from typing import Any

# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------

class MxApiError(Exception):
    """Base exception for all mxapi errors.

    Attributes
    ----------
    errcode : str
        Matrix error code, e.g. ``"M_MISSING_TOKEN"``.
    http_status : int
        Recommended HTTP status code for this error.
    message : str
        Human-readable description.  MUST NOT contain access tokens.
    details : dict[str, Any]
        Machine-readable context specific to the error instance.
    """

    errcode: str = "M_UNKNOWN"
    http_status: int = 500
    message: str = "Unknown error"

    def __init__(
        self,
        message: str | None = None,
        *,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.details: dict[str, Any] = details or {}
        if message is not None:
            self.message = message
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialise the error to the Matrix error body format."""
        return {"errcode": self.errcode, "error": self.message}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(errcode={self.errcode!r}, message={self.message!r})"


class InvalidMetadata(MxApiError):
    """An endpoint declaration (path template or history) is malformed.

    This is a programming error surfaced when metadata is constructed,
    never while a request is being marshaled.
    """

    message = "Invalid endpoint metadata"


# ===================================================================
# Direction base classes
# ===================================================================

class IntoHttpError(MxApiError):
    """A typed request could not be turned into a wire request."""

    http_status = 500
    message = "Could not build the HTTP request"


class FromHttpRequestError(MxApiError):
    """A wire request could not be turned into a typed request."""

    errcode = "M_BAD_JSON"
    http_status = 400
    message = "Could not parse the HTTP request"


class FromHttpResponseError(MxApiError):
    """A wire response could not be turned into a typed response."""

    http_status = 502
    message = "Could not parse the HTTP response"


# ===================================================================
# Outgoing
# ===================================================================

class NoMatchingVersion(IntoHttpError):
    """No history entry is reachable with the supported versions."""

    errcode = "M_UNRECOGNIZED"
    message = "No path in the endpoint history matches the supported versions"


class MissingCredential(IntoHttpError):
    """The endpoint requires an access token and none was supplied."""

    errcode = "M_MISSING_TOKEN"
    http_status = 401
    message = "This endpoint requires an access token"


class EncodingError(IntoHttpError):
    """A path, query or body value could not be encoded."""

    errcode = "M_INVALID_PARAM"
    message = "Could not encode request value"


# ===================================================================
# Incoming
# ===================================================================

class MalformedPath(FromHttpRequestError):
    """Path arguments do not fit any template or cannot be decoded."""

    errcode = "M_INVALID_PARAM"
    message = "Path arguments do not match the endpoint"


class MethodNotAllowed(FromHttpRequestError):
    """The request method differs from the endpoint's declared method."""

    errcode = "M_UNRECOGNIZED"
    http_status = 405
    message = "HTTP method not allowed for this endpoint"


class AuthenticationRequired(FromHttpRequestError):
    """The endpoint requires a credential and the request carries none."""

    errcode = "M_MISSING_TOKEN"
    http_status = 401
    message = "Missing access token"


class QueryDecodingError(FromHttpRequestError):
    """The query string is malformed or fails validation."""

    errcode = "M_INVALID_PARAM"
    message = "Invalid query string"


class BodyDecodingError(FromHttpRequestError):
    """The request body is not the JSON object the endpoint expects."""

    errcode = "M_BAD_JSON"
    message = "Invalid request body"


# ===================================================================
# Response side
# ===================================================================

class ServerError(FromHttpResponseError):
    """The server answered with a Matrix error response.

    ``errcode``, ``message`` and ``http_status`` are copied from the
    response instead of being class defaults.
    """

    message = "Server returned an error"

    def __init__(
        self,
        errcode: str,
        message: str | None = None,
        *,
        http_status: int,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.errcode = errcode
        self.http_status = http_status
        super().__init__(message, details=details)


class ResponseDecodingError(FromHttpResponseError):
    """The response body could not be deserialised."""

    message = "Invalid response body"
