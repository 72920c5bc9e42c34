"""mxapi metadata subpackage -- endpoint descriptions and version resolution.

* **Path templates** -- ``/a/:b`` patterns (:mod:`~mxapi.metadata.path`).
* **Versions** -- protocol versions, history tokens, supported-version
  sets and endpoint histories (:mod:`~mxapi.metadata.versions`).
* **Endpoint metadata** -- the static per-endpoint record
  (:mod:`~mxapi.metadata.endpoint`).
* **Resolver** -- picks a path template for a set of supported versions
  (:mod:`~mxapi.metadata.resolver`).
"""
from __future__ import annotations

from mxapi.metadata.endpoint import EndpointMetadata, metadata
from mxapi.metadata.path import PathTemplate, Segment
from mxapi.metadata.resolver import resolve
from mxapi.metadata.versions import (
    History,
    HistoryEntry,
    ProtocolVersion,
    SupportedVersionSet,
    VersionKind,
    VersionToken,
)

__all__ = [
    "EndpointMetadata",
    "metadata",
    "PathTemplate",
    "Segment",
    "resolve",
    "History",
    "HistoryEntry",
    "ProtocolVersion",
    "SupportedVersionSet",
    "VersionKind",
    "VersionToken",
]
