"""Shared fixtures for mxapi conformance tests.

Provides the histories, supported-version sets and endpoint definitions
reused by every conformance level.
"""
from __future__ import annotations

from typing import ClassVar

import pytest

from mxapi.core.types import EndpointRequest, EndpointResponse, FieldSpec, path
from mxapi.metadata.endpoint import EndpointMetadata, metadata
from mxapi.metadata.versions import History, SupportedVersionSet


# ---------------------------------------------------------------------------
# Endpoints defined only for conformance checks
# ---------------------------------------------------------------------------
class RemovedEndpointResponse(EndpointResponse):
    pass


class RemovedEndpointRequest(EndpointRequest):
    """An endpoint introduced in 1.0 and removed in 1.2."""

    METADATA: ClassVar[EndpointMetadata] = metadata(
        name="removed_endpoint",
        method="GET",
        rate_limited=False,
        authentication="none",
        history=[("1.0", "/_matrix/client/r0/legacy/:user_id"), ("1.2", "removed")],
    )
    FIELDS: ClassVar[tuple[FieldSpec, ...]] = (path("user_id"),)
    RESPONSE: ClassVar[type[EndpointResponse]] = RemovedEndpointResponse

    user_id: str


@pytest.fixture()
def removed_endpoint() -> type[EndpointRequest]:
    return RemovedEndpointRequest


# ---------------------------------------------------------------------------
# History fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def profile_history() -> History:
    """1.0 and 1.1 share one path."""
    return History.declare(
        {
            "1.0": "/v3/profile/:user_id",
            "1.1": "/v3/profile/:user_id",
        }
    )


@pytest.fixture()
def evolving_history() -> History:
    """Unstable, then r0 at 1.0, then v3 at 1.1."""
    return History.declare(
        {
            "unstable": "/_matrix/client/unstable/org.example/thing",
            "1.0": "/_matrix/client/r0/thing",
            "1.1": "/_matrix/client/v3/thing",
        }
    )


@pytest.fixture()
def removed_history() -> History:
    """Stable at 1.0 with path P, removed at 1.2."""
    return History.declare([("1.0", "/_matrix/client/r0/p"), ("1.2", "removed")])


@pytest.fixture()
def unstable_only_history() -> History:
    return History.declare({"unstable": "/_matrix/client/unstable/org.example/new"})


# ---------------------------------------------------------------------------
# Supported-version fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def v1_1() -> SupportedVersionSet:
    return SupportedVersionSet.of("1.1")


@pytest.fixture()
def nothing_stable() -> SupportedVersionSet:
    return SupportedVersionSet()
