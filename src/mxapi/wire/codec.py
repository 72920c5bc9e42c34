"""Path and query codec.

Encodes typed values into URL path segments and query strings, and
decodes them back.  All helpers are synchronous and side-effect-free.

Path values are percent-encoded so that only unreserved characters
(``A-Z a-z 0-9 - . _ ~``) survive, which keeps user and room identifiers
like ``@alice:example.org`` inside a single segment.

Decoding tolerates one specific arity mismatch: when the router delivers
exactly one segment fewer than a template declares, the last parameter
is taken to be the empty string.  This keeps endpoints whose trailing
parameter became optional (``.../state/:event_type/:state_key``)
reachable through routers that drop the empty trailing segment.
"""
from __future__ import annotations

import enum
import logging
from collections.abc import Iterable, Sequence
from typing import Any
from urllib.parse import parse_qsl, quote, unquote, urlencode

from mxapi.core.errors import EncodingError, MalformedPath, QueryDecodingError
from mxapi.core.types import FieldSpec
from mxapi.metadata.path import PathTemplate

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Scalars
# ---------------------------------------------------------------------------

def to_wire_string(value: Any) -> str:
    """Render a scalar the way it appears in paths and query strings.

    Raises
    ------
    EncodingError
        If *value* is ``None`` or a container.
    """
    if isinstance(value, enum.Enum):
        value = value.value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if value is None or isinstance(value, (dict, list, tuple, set, bytes)):
        raise EncodingError(
            f"Cannot encode {type(value).__name__} as a URL value",
            details={"type": type(value).__name__},
        )
    return str(value)


def percent_encode(value: Any) -> str:
    """Percent-encode *value* for use as one path segment."""
    text = to_wire_string(value)
    try:
        return quote(text, safe="")
    except UnicodeEncodeError as exc:
        raise EncodingError(
            "Path value is not valid Unicode",
            details={"reason": str(exc)},
        ) from exc


# ---------------------------------------------------------------------------
# Path
# ---------------------------------------------------------------------------

def encode_path(
    template: PathTemplate,
    values: Sequence[Any],
    base_url: str = "",
) -> str:
    """Substitute *values* into *template* and prefix *base_url*.

    Values fill placeholders in order.  Surplus values are dropped: an
    older template may not carry a parameter that was introduced later.

    Raises
    ------
    EncodingError
        If there are fewer values than placeholders, or a value cannot be
        encoded.
    """
    if len(values) < template.arity:
        raise EncodingError(
            f"Path template {template} needs {template.arity} values, got {len(values)}",
            details={"template": str(template), "values": len(values)},
        )
    if len(values) > template.arity:
        logger.debug(
            "Dropping %d surplus path value(s) for %s",
            len(values) - template.arity,
            template,
        )
    params = iter(values)
    parts = [base_url.rstrip("/")]
    for segment in template.segments:
        if segment.is_param:
            parts.append(percent_encode(next(params)))
        else:
            parts.append(segment.value)
    return "/".join(parts)


def decode_path(
    templates: PathTemplate | Sequence[PathTemplate],
    segments: Sequence[str],
    *,
    trailing_param_shim: bool = True,
) -> tuple[PathTemplate, list[str]]:
    """Match raw *segments* against *templates* and percent-decode them.

    An exact arity match against any template wins (newest template
    first).  Failing that, and if *trailing_param_shim* is set, a
    template with exactly one more placeholder accepts the segments with
    its last parameter set to ``""``.

    Returns
    -------
    tuple[PathTemplate, list[str]]
        The matched template and one decoded value per placeholder.

    Raises
    ------
    MalformedPath
        On any other arity mismatch, or if a segment is not valid
        percent-encoded UTF-8.
    """
    if isinstance(templates, PathTemplate):
        templates = (templates,)
    decoded: list[str] = []
    for raw in segments:
        try:
            decoded.append(unquote(raw, errors="strict"))
        except UnicodeDecodeError as exc:
            raise MalformedPath(
                f"Path segment {raw!r} is not valid UTF-8",
                details={"segment": raw},
            ) from exc

    for template in reversed(templates):
        if template.arity == len(decoded):
            return template, decoded

    if trailing_param_shim:
        for template in reversed(templates):
            if template.arity == len(decoded) + 1:
                logger.debug(
                    "Defaulting trailing path parameter %r of %s to ''",
                    template.parameters[-1],
                    template,
                )
                return template, [*decoded, ""]

    raise MalformedPath(
        f"Got {len(decoded)} path argument(s), expected "
        + " or ".join(str(n) for n in sorted({t.arity for t in templates})),
        details={
            "received": len(decoded),
            "templates": [str(t) for t in templates],
        },
    )


# ---------------------------------------------------------------------------
# Query
# ---------------------------------------------------------------------------

def encode_query(pairs: Iterable[tuple[str, Any]]) -> str:
    """Form-encode ``(key, value)`` pairs in the given order.

    ``None`` values are omitted entirely (never ``key=``); list and tuple
    values become repeated keys.

    Raises
    ------
    EncodingError
        If a value cannot be rendered as text.
    """
    items: list[tuple[str, str]] = []
    for key, value in pairs:
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            items.extend((key, to_wire_string(v)) for v in value if v is not None)
        else:
            items.append((key, to_wire_string(value)))
    try:
        return urlencode(items)
    except UnicodeEncodeError as exc:
        raise EncodingError(
            "Query value is not valid Unicode",
            details={"reason": str(exc)},
        ) from exc


def parse_query_pairs(query_string: str) -> list[tuple[str, str]]:
    """Parse a form-encoded query string into ordered pairs.

    Empty pairs (``a=1&&b=2``, a trailing ``&``) are skipped and a bare
    key (``?flag``) becomes ``("flag", "")``.

    Raises
    ------
    QueryDecodingError
        If a key or value is not valid percent-encoded UTF-8.
    """
    if not query_string:
        return []
    try:
        return parse_qsl(query_string, keep_blank_values=True, errors="strict")
    except ValueError as exc:
        raise QueryDecodingError(
            f"Malformed query string: {exc}",
            details={"reason": str(exc)},
        ) from exc


def decode_query(query_string: str, fields: Sequence[FieldSpec]) -> dict[str, Any]:
    """Extract the values of *fields* from *query_string*.

    Returns a mapping from model attribute name to the raw string (or
    list of strings for repeated fields).  Absent fields are left out so
    that model defaults apply; unknown keys are ignored.

    Raises
    ------
    QueryDecodingError
        If the query string is malformed or a scalar field is repeated.
    """
    pairs = parse_query_pairs(query_string)
    values: dict[str, Any] = {}
    for spec in fields:
        found = [v for k, v in pairs if k == spec.key]
        if not found:
            continue
        if spec.repeated:
            values[spec.name] = found
        elif len(found) > 1:
            raise QueryDecodingError(
                f"Query parameter {spec.key!r} given {len(found)} times",
                details={"parameter": spec.key},
            )
        else:
            values[spec.name] = found[0]
    return values
