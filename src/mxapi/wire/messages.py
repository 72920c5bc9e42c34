"""Wire-level request/response models and JSON body helpers.

This module provides:

* **WireRequest / WireResponse** -- the transport-neutral HTTP messages
  produced and consumed by the marshalers.
* **JSON body helpers** -- serialisation of a model's body fields to a
  JSON object and the reverse split of a JSON object into field values.
* **Error responses** -- conversion of an
  :class:`~mxapi.core.errors.MxApiError` into a Matrix error response.

All helpers are *synchronous* and side-effect-free.
"""
from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field

from mxapi.core.errors import EncodingError, MxApiError
from mxapi.core.types import FieldRole, HTTPMethod, WireModel

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

JSON_CONTENT_TYPE: str = "application/json"
"""Content-Type of every JSON request and response body."""


# ---------------------------------------------------------------------------
# Pydantic models
# ---------------------------------------------------------------------------

class WireRequest(BaseModel):
    """A fully built HTTP request, ready to hand to a transport."""

    model_config = ConfigDict(frozen=True, strict=True)

    method: HTTPMethod
    url: str
    headers: dict[str, str] = Field(default_factory=dict)
    body: bytes = b""

    @property
    def path(self) -> str:
        return urlsplit(self.url).path

    @property
    def query(self) -> str:
        return urlsplit(self.url).query

    def json_body(self) -> Any:
        """Decode the body as JSON (``None`` for an empty body)."""
        return json.loads(self.body) if self.body else None


class WireResponse(BaseModel):
    """An HTTP response produced by the server-side marshaler."""

    model_config = ConfigDict(frozen=True, strict=True)

    status: int = 200
    headers: dict[str, str] = Field(default_factory=dict)
    body: bytes = b""

    def json_body(self) -> Any:
        return json.loads(self.body) if self.body else None


# ---------------------------------------------------------------------------
# Header helpers
# ---------------------------------------------------------------------------

def get_header(headers: Mapping[str, str], name: str) -> str | None:
    """Case-insensitive header lookup."""
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            return value
    return None


# ---------------------------------------------------------------------------
# JSON bodies
# ---------------------------------------------------------------------------

def serialize_json(obj: Any) -> bytes:
    """Serialise *obj* to compact UTF-8 JSON.

    Raises
    ------
    EncodingError
        If *obj* contains values JSON cannot represent.
    """
    try:
        return json.dumps(obj, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
    except (TypeError, ValueError) as exc:
        raise EncodingError(
            f"Body is not JSON-serialisable: {exc}",
            details={"reason": str(exc)},
        ) from exc


def parse_json_object(
    raw: bytes | str,
    error_cls: type[MxApiError],
    *,
    max_size: int | None = None,
) -> dict[str, Any]:
    """Parse *raw* as a JSON object, raising *error_cls* on failure.

    An empty body is treated as ``{}``.
    """
    if max_size is not None and len(raw) > max_size:
        raise error_cls(
            f"Body of {len(raw)} bytes exceeds the {max_size} byte limit",
            details={"size": len(raw), "limit": max_size},
        )
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise error_cls("Body is not valid UTF-8") from exc
    if not raw.strip():
        return {}
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise error_cls(f"Invalid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise error_cls("Body must be a JSON object")
    return data


def collect_body(model_cls: type[WireModel], data: Mapping[str, Any]) -> dict[str, Any]:
    """Build the JSON body object from JSON-mode field values.

    ``None`` values are skipped.  A flattened mapping is merged first so
    that named body fields win on key collisions.
    """
    obj: dict[str, Any] = {}
    for spec in model_cls.fields_with_role(FieldRole.BODY_FLATTEN):
        flattened = data.get(spec.name)
        if flattened:
            obj.update(flattened)
    for spec in model_cls.fields_with_role(FieldRole.BODY):
        value = data.get(spec.name)
        if value is not None:
            obj[spec.key] = value
    return obj


def split_body(model_cls: type[WireModel], obj: Mapping[str, Any]) -> dict[str, Any]:
    """Map a JSON body object back onto model attribute names.

    Named body fields take their keys; a flattened field receives every
    remaining key.
    """
    values: dict[str, Any] = {}
    claimed: set[str] = set()
    for spec in model_cls.fields_with_role(FieldRole.BODY):
        claimed.add(spec.key)
        if spec.key in obj:
            values[spec.name] = obj[spec.key]
    for spec in model_cls.fields_with_role(FieldRole.BODY_FLATTEN):
        values[spec.name] = {k: v for k, v in obj.items() if k not in claimed}
    return values


# ---------------------------------------------------------------------------
# Error response formatting
# ---------------------------------------------------------------------------

def format_error_response(error: MxApiError) -> WireResponse:
    """Wrap an :class:`MxApiError` in a Matrix error response."""
    return WireResponse(
        status=error.http_status,
        headers={"Content-Type": JSON_CONTENT_TYPE},
        body=serialize_json(error.to_dict()),
    )
