"""Endpoint metadata.

One :class:`EndpointMetadata` value describes one logical endpoint: its
HTTP method, whether it is rate-limited, which credential it requires and
the history of its path shapes.  Values are built once at import time
and shared read-only by every request.
"""
from __future__ import annotations

from dataclasses import dataclass

from mxapi.core.types import AuthScheme, HTTPMethod
from mxapi.metadata.path import PathTemplate
from mxapi.metadata.resolver import resolve
from mxapi.metadata.versions import History, HistoryDeclaration, SupportedVersionSet


@dataclass(frozen=True)
class EndpointMetadata:
    """Static description of an endpoint.

    Attributes
    ----------
    method:
        HTTP method used by every version of the endpoint.
    rate_limited:
        Whether servers apply rate limiting to the endpoint.
    authentication:
        Credential requirement, see :class:`~mxapi.core.types.AuthScheme`.
    history:
        Path shapes over time.
    name:
        Short identifier used in log records and error details.
    """

    method: HTTPMethod
    rate_limited: bool
    authentication: AuthScheme
    history: History
    name: str = ""

    def select_path(
        self,
        supported: SupportedVersionSet,
        allow_unstable: bool | None = None,
    ) -> PathTemplate:
        """Resolve the path template to use against *supported*.

        Shorthand for :func:`mxapi.metadata.resolver.resolve`.
        """
        return resolve(self.history, allow_unstable, supported, endpoint=self.name)


def metadata(
    *,
    method: HTTPMethod | str,
    rate_limited: bool,
    authentication: AuthScheme | str,
    history: HistoryDeclaration,
    name: str = "",
) -> EndpointMetadata:
    """Declare endpoint metadata from plain values.

    Example::

        METADATA = metadata(
            name="get_profile",
            method="GET",
            rate_limited=False,
            authentication="none",
            history={
                "unstable": "/_matrix/client/unstable/uk.tcpip.msc4133/profile/:user_id",
                "1.0": "/_matrix/client/r0/profile/:user_id",
                "1.1": "/_matrix/client/v3/profile/:user_id",
            },
        )
    """
    return EndpointMetadata(
        method=HTTPMethod(method),
        rate_limited=rate_limited,
        authentication=AuthScheme(authentication),
        history=History.declare(history),
        name=name,
    )
