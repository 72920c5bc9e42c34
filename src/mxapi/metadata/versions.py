"""Protocol versions, version tokens and endpoint histories.

Key design decisions:
* :class:`ProtocolVersion` is a frozen, totally ordered ``(major, minor)``
  pair.  The legacy ``r0.x.y`` release names all map to ``1.0``.
* A :class:`History` is declared once per endpoint and validated at
  construction; malformed declarations raise
  :class:`~mxapi.core.errors.InvalidMetadata` immediately instead of
  failing on the first request.
* ``deprecated`` and ``removed`` entries may be declared without a path:
  they then reuse the most recent stable template.
"""
from __future__ import annotations

import enum
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from mxapi.core.errors import InvalidMetadata
from mxapi.metadata.path import PathTemplate

_VERSION_RE = re.compile(r"^v?(\d+)\.(\d+)$")
_LEGACY_RE = re.compile(r"^r0\.\d+\.\d+$")


# ---------------------------------------------------------------------------
# ProtocolVersion
# ---------------------------------------------------------------------------

@dataclass(frozen=True, order=True, slots=True)
class ProtocolVersion:
    """A stable protocol release, e.g. ``v1.1``."""

    major: int
    minor: int

    @classmethod
    def parse(cls, text: str) -> ProtocolVersion:
        """Parse ``"1.1"``, ``"v1.1"`` or a legacy ``"r0.6.1"`` string.

        Raises
        ------
        ValueError
            If *text* is not a recognised version string.
        """
        text = text.strip()
        if _LEGACY_RE.match(text):
            return cls(1, 0)
        m = _VERSION_RE.match(text)
        if m is None:
            raise ValueError(f"Not a protocol version: {text!r}")
        return cls(int(m.group(1)), int(m.group(2)))

    def __str__(self) -> str:
        return f"v{self.major}.{self.minor}"


def _coerce_version(value: ProtocolVersion | str) -> ProtocolVersion:
    if isinstance(value, ProtocolVersion):
        return value
    return ProtocolVersion.parse(value)


# ---------------------------------------------------------------------------
# VersionToken
# ---------------------------------------------------------------------------

class VersionKind(enum.StrEnum):
    """Status of an endpoint shape at a given protocol version."""

    UNSTABLE = "unstable"
    STABLE = "stable"
    DEPRECATED = "deprecated"
    REMOVED = "removed"


@dataclass(frozen=True, slots=True)
class VersionToken:
    """A history marker: ``unstable`` or a versioned status."""

    kind: VersionKind
    version: ProtocolVersion | None = None

    def __post_init__(self) -> None:
        if (self.kind is VersionKind.UNSTABLE) != (self.version is None):
            raise InvalidMetadata(
                "Only unstable tokens may (and must) omit a version",
                details={"kind": str(self.kind), "version": str(self.version)},
            )

    @classmethod
    def unstable(cls) -> VersionToken:
        return cls(VersionKind.UNSTABLE)

    @classmethod
    def stable(cls, version: ProtocolVersion | str) -> VersionToken:
        return cls(VersionKind.STABLE, _coerce_version(version))

    @classmethod
    def deprecated(cls, version: ProtocolVersion | str) -> VersionToken:
        return cls(VersionKind.DEPRECATED, _coerce_version(version))

    @classmethod
    def removed(cls, version: ProtocolVersion | str) -> VersionToken:
        return cls(VersionKind.REMOVED, _coerce_version(version))

    @property
    def is_unstable(self) -> bool:
        return self.kind is VersionKind.UNSTABLE

    def __str__(self) -> str:
        if self.version is None:
            return "unstable"
        if self.kind is VersionKind.STABLE:
            return f"{self.version.major}.{self.version.minor}"
        return f"{self.kind}@{self.version.major}.{self.version.minor}"


# ---------------------------------------------------------------------------
# SupportedVersionSet
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SupportedVersionSet:
    """Versions the other side is known to support, computed per call.

    Parameters
    ----------
    versions:
        Stable protocol versions supported by the peer.
    allow_unstable:
        Whether unstable endpoint paths may be used as a fallback.
    features:
        Unstable feature flags advertised by the peer.  Informational;
        the resolver only looks at ``allow_unstable``.
    """

    versions: frozenset[ProtocolVersion] = frozenset()
    allow_unstable: bool = False
    features: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def of(
        cls,
        *versions: ProtocolVersion | str,
        allow_unstable: bool = False,
    ) -> SupportedVersionSet:
        """Build a set from version values or strings like ``"1.1"``."""
        return cls(
            frozenset(_coerce_version(v) for v in versions),
            allow_unstable=allow_unstable,
        )

    @classmethod
    def from_versions_response(
        cls,
        versions: Iterable[str],
        unstable_features: Mapping[str, bool] | None = None,
        *,
        allow_unstable: bool = False,
    ) -> SupportedVersionSet:
        """Build a set from a ``GET /_matrix/client/versions`` payload.

        Version strings this implementation does not understand are
        skipped; unstable features are kept only when enabled.
        """
        parsed: set[ProtocolVersion] = set()
        for text in versions:
            try:
                parsed.add(ProtocolVersion.parse(text))
            except ValueError:
                continue
        features = frozenset(
            name for name, enabled in (unstable_features or {}).items() if enabled
        )
        return cls(frozenset(parsed), allow_unstable=allow_unstable, features=features)

    @property
    def maximum(self) -> ProtocolVersion | None:
        """The newest supported version, or ``None`` for an empty set."""
        return max(self.versions, default=None)

    def __contains__(self, version: object) -> bool:
        return version in self.versions


# ---------------------------------------------------------------------------
# History
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class HistoryEntry:
    token: VersionToken
    template: PathTemplate


HistoryDeclaration = Mapping[str, str] | Iterable[tuple[str, str]]


@dataclass(frozen=True)
class History:
    """The ordered version history of one endpoint.

    Entries are ordered by increasing recency of introduction.
    Construction validates the invariants:

    * the history is non-empty;
    * there is at most one unstable entry;
    * versioned entries are strictly increasing;
    * ``deprecated`` and ``removed`` entries follow a stable entry;
    * nothing follows a ``removed`` entry.
    """

    entries: tuple[HistoryEntry, ...]

    def __post_init__(self) -> None:
        if not self.entries:
            raise InvalidMetadata("Endpoint history must not be empty")
        unstable_count = 0
        previous: ProtocolVersion | None = None
        seen_stable = False
        seen_removed = False
        for entry in self.entries:
            token = entry.token
            if seen_removed:
                raise InvalidMetadata(
                    f"History entry {token} follows a removed entry",
                    details=self._describe(),
                )
            version = token.version
            if version is None:
                unstable_count += 1
                continue
            if previous is not None and version <= previous:
                raise InvalidMetadata(
                    f"History versions must be strictly increasing ({token} after {previous})",
                    details=self._describe(),
                )
            previous = version
            if token.kind is VersionKind.STABLE:
                seen_stable = True
            elif not seen_stable:
                raise InvalidMetadata(
                    f"History entry {token} has no earlier stable entry",
                    details=self._describe(),
                )
            seen_removed = token.kind is VersionKind.REMOVED
        if unstable_count > 1:
            raise InvalidMetadata(
                "History may contain at most one unstable entry",
                details=self._describe(),
            )

    @classmethod
    def declare(cls, declaration: HistoryDeclaration) -> History:
        """Build a history from ``version => path`` pairs.

        Keys are ``"unstable"`` or ``"major.minor"``; values are path
        templates, or the words ``"deprecated"`` / ``"removed"`` to mark
        the version at which the most recent stable path was deprecated
        or removed::

            History.declare({
                "unstable": "/_matrix/client/unstable/org.example/thing",
                "1.0": "/_matrix/client/r0/thing",
                "1.1": "/_matrix/client/v3/thing",
                "1.9": "deprecated",
            })
        """
        pairs = declaration.items() if isinstance(declaration, Mapping) else declaration
        entries: list[HistoryEntry] = []
        latest_stable: PathTemplate | None = None
        for key, value in pairs:
            if key == "unstable":
                entries.append(HistoryEntry(VersionToken.unstable(), PathTemplate.parse(value)))
                continue
            try:
                version = ProtocolVersion.parse(key)
            except ValueError as exc:
                raise InvalidMetadata(
                    f"Invalid version token {key!r}",
                    details={"token": key},
                ) from exc
            if value in ("deprecated", "removed"):
                if latest_stable is None:
                    raise InvalidMetadata(
                        f"{value!r} at {key} has no earlier stable path",
                        details={"token": key},
                    )
                kind = VersionKind(value)
                entries.append(HistoryEntry(VersionToken(kind, version), latest_stable))
                continue
            latest_stable = PathTemplate.parse(value)
            entries.append(HistoryEntry(VersionToken.stable(version), latest_stable))
        return cls(tuple(entries))

    # -- Queries --------------------------------------------------------------

    @property
    def unstable(self) -> HistoryEntry | None:
        return next((e for e in self.entries if e.token.is_unstable), None)

    @property
    def reachable(self) -> tuple[HistoryEntry, ...]:
        """Stable and deprecated entries, oldest first."""
        return tuple(
            e
            for e in self.entries
            if e.token.kind in (VersionKind.STABLE, VersionKind.DEPRECATED)
        )

    @property
    def added_in(self) -> ProtocolVersion | None:
        first = next(iter(self.reachable), None)
        return first.token.version if first else None

    @property
    def deprecated_in(self) -> ProtocolVersion | None:
        return self._version_of(VersionKind.DEPRECATED)

    @property
    def removed_in(self) -> ProtocolVersion | None:
        return self._version_of(VersionKind.REMOVED)

    @property
    def templates(self) -> tuple[PathTemplate, ...]:
        """Distinct templates in declaration order."""
        seen: dict[PathTemplate, None] = {}
        for entry in self.entries:
            seen.setdefault(entry.template, None)
        return tuple(seen)

    def _version_of(self, kind: VersionKind) -> ProtocolVersion | None:
        return next(
            (e.token.version for e in self.entries if e.token.kind is kind),
            None,
        )

    def _describe(self) -> dict[str, Any]:
        return {"history": [f"{e.token} => {e.template}" for e in self.entries]}
