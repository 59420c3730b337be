"""Route entry value objects.

``RouteEntry`` is a tagged variant:

- ``Template(path)``: a path pattern with ``:name`` placeholder segments.
- ``Group(entries)``: a mapping sub-name → ``RouteEntry`` (recursive). A Group
  never renders directly; it must be resolved further by name.

Both are frozen dataclasses compared by value, so two lookups of the same name
return equal entries even when composition builds fresh objects.

Segments
--------
``Template.segments`` is the tuple of non-empty parts of the path split on
``/``. Prefix composition (``under``) concatenates segment tuples and joins
them with a single ``/`` only when producing the string, so the composed path
never carries doubled or trailing slashes. An empty segment tuple renders as
``/``.

Coercion
--------
``coerce_entry`` accepts the shapes users naturally write: a ``str`` becomes a
``Template`` and a ``dict`` (recursively) becomes a ``Group``. Existing
entries pass through unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple, Union

__all__ = ["Template", "Group", "RouteEntry", "coerce_entry", "SEPARATOR"]

SEPARATOR = "/"


@dataclass(frozen=True)
class Template:
    """A path pattern such as ``/users/:id``."""

    path: str

    @property
    def segments(self) -> Tuple[str, ...]:
        return tuple(part for part in self.path.split(SEPARATOR) if part)

    def under(self, prefix: Optional["Template"]) -> "Template":
        """Return this template composed below ``prefix`` (normalized)."""
        head = prefix.segments if prefix is not None else ()
        return Template(SEPARATOR + SEPARATOR.join(head + self.segments))

    def __str__(self) -> str:
        return self.path


@dataclass(frozen=True)
class Group:
    """Named collection of further route entries.

    ``entries`` is frozen into a read-only mapping on construction, so a Group
    handed out by ``lookup`` cannot add routes behind ``define``.
    """

    entries: Mapping[str, "RouteEntry"] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "entries", MappingProxyType(dict(self.entries)))

    def __hash__(self) -> int:
        return hash(frozenset(self.entries.items()))

    def get(self, name: str) -> Optional["RouteEntry"]:
        return self.entries.get(name)

    def names(self) -> Tuple[str, ...]:
        return tuple(self.entries.keys())

    def under(self, prefix: Optional[Template]) -> "Group":
        return Group({key: entry.under(prefix) for key, entry in self.entries.items()})

    def __iter__(self) -> Iterator[str]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)


RouteEntry = Union[Template, Group]


def coerce_entry(value: Any) -> RouteEntry:
    """Turn ``str``/``dict`` shorthands into ``Template``/``Group`` entries."""
    if isinstance(value, (Template, Group)):
        return value
    if isinstance(value, str):
        return Template(value)
    if isinstance(value, Mapping):
        children: Dict[str, RouteEntry] = {}
        for key, item in value.items():
            if not isinstance(key, str) or not key:
                raise TypeError(f"Group keys must be non-empty strings, got {key!r}")
            children[key] = coerce_entry(item)
        return Group(children)
    raise TypeError(f"Unsupported route entry: {value!r}")
