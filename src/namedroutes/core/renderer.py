"""Path renderer: fill ``:name`` placeholders from a parameter mapping.

Rules
-----
- Keys are processed in the iteration order of ``params`` (not sorted).
- For each key, the *first* path segment starting with ``:key`` is replaced
  by ``str(value)``. Text after the placeholder name inside the same segment
  is kept (``/:id.json`` with ``id=5`` renders ``/5.json``).
- Placeholder names match whole: ``:id`` never matches ``:identity``.
- A substituted segment is not scanned again by later keys.
- Placeholders left without a value pass through unchanged; values are not
  escaped.
- The template text is otherwise preserved as written (slashes included).

Rendering a ``Group`` raises ``NotATemplate``.
"""

from __future__ import annotations

import re
from typing import Any, List, Mapping, Optional

from .entries import SEPARATOR, Group, RouteEntry, Template
from .errors import NotATemplate

__all__ = ["render", "merge_params"]

_NAME_TAIL = re.compile(r"\w")


def render(
    template: RouteEntry,
    params: Optional[Mapping[str, Any]] = None,
    *,
    name: Optional[str] = None,
) -> str:
    """Render ``template`` using ``params`` and return the concrete path."""
    if isinstance(template, Group):
        raise NotATemplate(name or "<group>")
    if isinstance(template, str):
        template = Template(template)
    parts: List[str] = template.path.split(SEPARATOR)
    if not params:
        return template.path
    filled: set[int] = set()
    for key, value in params.items():
        index = _find_placeholder(parts, str(key), filled)
        if index is None:
            continue
        marker = ":" + str(key)
        parts[index] = str(value) + parts[index][len(marker) :]
        filled.add(index)
    return SEPARATOR.join(parts)


def merge_params(
    params: Optional[Mapping[str, Any]], override: Optional[Mapping[str, Any]] = None
) -> dict:
    """Return a new dict with ``override`` winning over ``params``."""
    merged = dict(params or {})
    if override:
        merged.update(override)
    return merged


def _find_placeholder(parts: List[str], key: str, skip: set[int]) -> Optional[int]:
    marker = ":" + key
    for index, part in enumerate(parts):
        if index in skip or not part.startswith(marker):
            continue
        tail = part[len(marker) :]
        if tail and _NAME_TAIL.match(tail):
            continue
        return index
    return None
