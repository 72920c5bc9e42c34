"""Path templates.

A path template is the wire shape of one endpoint path at one protocol
version, written with ``:name`` placeholders::

    /_matrix/client/v3/rooms/:room_id/state/:event_type/:state_key

Templates are immutable values.  They know how to render themselves back
to their declaration string and how to pull raw parameter values out of a
concrete path; substituting values is the codec's job
(:mod:`mxapi.wire.codec`).
"""
from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property

from mxapi.core.errors import InvalidMetadata


@dataclass(frozen=True, slots=True)
class Segment:
    """One ``/``-separated piece of a template.

    ``value`` is the literal text, or the parameter name when
    ``is_param`` is set.
    """

    value: str
    is_param: bool = False

    def __str__(self) -> str:
        return f":{self.value}" if self.is_param else self.value


@dataclass(frozen=True)
class PathTemplate:
    """An ordered sequence of literal and parameter segments."""

    segments: tuple[Segment, ...]

    def __post_init__(self) -> None:
        names = [s.value for s in self.segments if s.is_param]
        if len(names) != len(set(names)):
            raise InvalidMetadata(
                f"Duplicate parameter name in path template {self}",
                details={"template": str(self), "parameters": names},
            )

    @classmethod
    def parse(cls, template: str) -> PathTemplate:
        """Parse a ``/a/:b/c`` declaration.

        Raises
        ------
        InvalidMetadata
            If the template does not start with ``/``, contains an empty
            segment, or repeats a parameter name.
        """
        if not template.startswith("/"):
            raise InvalidMetadata(
                f"Path template must start with '/': {template!r}",
                details={"template": template},
            )
        segments: list[Segment] = []
        for raw in template[1:].split("/"):
            if not raw or raw == ":":
                raise InvalidMetadata(
                    f"Empty segment in path template {template!r}",
                    details={"template": template},
                )
            if raw.startswith(":"):
                segments.append(Segment(raw[1:], is_param=True))
            else:
                segments.append(Segment(raw))
        return cls(tuple(segments))

    @cached_property
    def parameters(self) -> tuple[str, ...]:
        """Parameter names in declaration order."""
        return tuple(s.value for s in self.segments if s.is_param)

    @property
    def arity(self) -> int:
        return len(self.parameters)

    def match(self, path: str) -> list[str] | None:
        """Return the raw (still percent-encoded) parameter values of *path*.

        Returns ``None`` when *path* does not have this template's shape.
        A query string, if present, is ignored.
        """
        path = path.split("?", 1)[0]
        if not path.startswith("/"):
            return None
        parts = path[1:].split("/")
        if len(parts) != len(self.segments):
            return None
        values: list[str] = []
        for part, segment in zip(parts, self.segments):
            if segment.is_param:
                values.append(part)
            elif part != segment.value:
                return None
        return values

    def __str__(self) -> str:
        return "/" + "/".join(str(s) for s in self.segments)
