"""Version resolution.

Picks the single path template an outgoing request should use, given the
endpoint's history and the protocol versions the peer supports.

Rules, applied against the *maximum* supported version ``max_v``:

1. If the endpoint was removed at ``X`` and ``max_v >= X``, resolution
   fails: the endpoint no longer exists for this peer, even though older
   stable paths are on record.
2. Otherwise the most recent stable (or deprecated) entry whose version
   is ``<= max_v`` wins.
3. Only when no stable entry qualifies, the unstable path is used, and
   only if unstable paths are allowed.

The function is pure and performs no I/O.
"""
from __future__ import annotations

import logging

from mxapi.core.errors import NoMatchingVersion
from mxapi.metadata.path import PathTemplate
from mxapi.metadata.versions import History, SupportedVersionSet

logger = logging.getLogger(__name__)


def resolve(
    history: History,
    allow_unstable: bool | None,
    supported: SupportedVersionSet,
    *,
    endpoint: str = "",
) -> PathTemplate:
    """Return the path template to use for *supported*.

    Parameters
    ----------
    history:
        The endpoint's version history.
    allow_unstable:
        Whether the unstable path may be chosen.  ``None`` defers to
        ``supported.allow_unstable``.
    supported:
        Versions supported by the peer.
    endpoint:
        Endpoint name, used only for log records and error details.

    Raises
    ------
    NoMatchingVersion
        If the endpoint was removed for the supported versions, or no
        entry is reachable with them.
    """
    if allow_unstable is None:
        allow_unstable = supported.allow_unstable
    max_v = supported.maximum

    removed_in = history.removed_in
    if removed_in is not None and max_v is not None and max_v >= removed_in:
        raise NoMatchingVersion(
            f"Endpoint {endpoint or '<unnamed>'} was removed in {removed_in}",
            details={
                "endpoint": endpoint,
                "removed_in": str(removed_in),
                "supported": sorted(str(v) for v in supported.versions),
            },
        )

    if max_v is not None:
        for entry in reversed(history.reachable):
            version = entry.token.version
            if version is not None and version <= max_v:
                deprecated_in = history.deprecated_in
                if deprecated_in is not None and max_v >= deprecated_in:
                    logger.warning(
                        "Endpoint %s is deprecated since %s (peer supports %s)",
                        endpoint or entry.template,
                        deprecated_in,
                        max_v,
                    )
                logger.debug(
                    "Resolved %s to %s via %s",
                    endpoint or "endpoint",
                    entry.template,
                    entry.token,
                )
                return entry.template

    unstable = history.unstable
    if allow_unstable and unstable is not None:
        logger.debug(
            "Resolved %s to unstable path %s",
            endpoint or "endpoint",
            unstable.template,
        )
        return unstable.template

    raise NoMatchingVersion(
        details={
            "endpoint": endpoint,
            "supported": sorted(str(v) for v in supported.versions),
            "allow_unstable": allow_unstable,
            "added_in": str(history.added_in) if history.added_in else None,
        },
    )
