"""Credential handling for both directions.

Outgoing requests get an ``Authorization: Bearer`` header according to
the endpoint's :class:`~mxapi.core.types.AuthScheme` and the
:class:`~mxapi.core.types.SendAccessToken` supplied by the caller.

Incoming requests are only checked for the *presence* of a credential:
a bearer token (header, or the legacy ``access_token`` query parameter)
or an ``X-Matrix`` server signature header.  Verifying tokens and
signatures belongs to the server, not to this layer.
"""
from __future__ import annotations

import re
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict

from mxapi.core.errors import AuthenticationRequired, MissingCredential
from mxapi.core.types import AuthScheme, SendAccessToken
from mxapi.wire.codec import parse_query_pairs
from mxapi.wire.messages import get_header

_BEARER_PREFIX = "bearer "
_XMATRIX_PREFIX = "x-matrix "
_XMATRIX_PARAM_RE = re.compile(r'\s*([A-Za-z_]+)\s*=\s*("(?:[^"\\]|\\.)*"|[^,]*)\s*(?:,|$)')


class XMatrix(BaseModel):
    """Parsed ``Authorization: X-Matrix ...`` server signature header."""

    model_config = ConfigDict(frozen=True)

    origin: str
    key: str
    sig: str
    destination: str | None = None


# ---------------------------------------------------------------------------
# Outgoing
# ---------------------------------------------------------------------------

def authorization_header(
    scheme: AuthScheme,
    credential: SendAccessToken,
    *,
    endpoint: str = "",
) -> str | None:
    """Return the ``Authorization`` header value to send, if any.

    Raises
    ------
    MissingCredential
        If *scheme* requires an access token and *credential* has none.
    """
    if scheme is AuthScheme.ACCESS_TOKEN:
        token = credential.required()
        if token is None:
            raise MissingCredential(details={"endpoint": endpoint})
    elif scheme is AuthScheme.ACCESS_TOKEN_OPTIONAL:
        token = credential.optional()
    else:
        return None
    return f"Bearer {token}" if token else None


# ---------------------------------------------------------------------------
# Incoming
# ---------------------------------------------------------------------------

def extract_access_token(headers: Mapping[str, str], query_string: str = "") -> str | None:
    """Return the bearer token carried by a request, if any.

    The ``Authorization`` header wins over the ``access_token`` query
    parameter.
    """
    value = get_header(headers, "Authorization")
    if value and value.lower().startswith(_BEARER_PREFIX):
        token = value[len(_BEARER_PREFIX):].strip()
        if token:
            return token
    for key, param in parse_query_pairs(query_string):
        if key == "access_token" and param:
            return param
    return None


def parse_x_matrix(value: str) -> XMatrix:
    """Parse an ``X-Matrix`` authorization header value.

    Raises
    ------
    AuthenticationRequired
        If the value is not an ``X-Matrix`` header or lacks a required
        parameter.
    """
    if not value.lower().startswith(_XMATRIX_PREFIX):
        raise AuthenticationRequired("Missing X-Matrix authorization header")
    params: dict[str, str] = {}
    for m in _XMATRIX_PARAM_RE.finditer(value[len(_XMATRIX_PREFIX):]):
        name, raw = m.group(1).lower(), m.group(2).strip()
        if raw.startswith('"') and raw.endswith('"') and len(raw) >= 2:
            raw = re.sub(r"\\(.)", r"\1", raw[1:-1])
        params[name] = raw
    missing = [name for name in ("origin", "key", "sig") if not params.get(name)]
    if missing:
        raise AuthenticationRequired(
            "Malformed X-Matrix authorization header",
            details={"missing": missing},
        )
    return XMatrix(
        origin=params["origin"],
        key=params["key"],
        sig=params["sig"],
        destination=params.get("destination"),
    )


def check_authentication(
    scheme: AuthScheme,
    headers: Mapping[str, str],
    query_string: str = "",
    *,
    endpoint: str = "",
) -> str | XMatrix | None:
    """Verify that a credential required by *scheme* is present.

    Returns the credential found (a bearer token, a parsed
    :class:`XMatrix` header, or ``None``).

    Raises
    ------
    AuthenticationRequired
        If *scheme* makes a credential mandatory and none is present.
    """
    if scheme is AuthScheme.SERVER_SIGNATURES:
        value = get_header(headers, "Authorization")
        if value is None:
            raise AuthenticationRequired(
                "Missing X-Matrix authorization header",
                details={"endpoint": endpoint},
            )
        return parse_x_matrix(value)

    token = extract_access_token(headers, query_string)
    if token is None and scheme is AuthScheme.ACCESS_TOKEN:
        raise AuthenticationRequired(details={"endpoint": endpoint})
    return token
