"""Decorator helpers for declaring named routes on handler methods.

``route(registry, path, *, name=None, **kwargs)``

- Stores a marker on the function under ``TARGET_ATTR_NAME`` (a list of
  dicts). Each payload starts with ``{"name": registry, "path": path}``.
- ``name`` sets ``entry_name``; otherwise the route is named after the
  function (minus the registry's ``name_prefix``). Dotted names land in
  nested groups.
- Extra ``**kwargs`` are copied verbatim into the payload. Existing markers are
  preserved so one handler can be named in several registries.
- The function itself is returned unchanged.

Registries owned by the instance pick the markers up at construction time.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

from .base_registry import TARGET_ATTR_NAME

__all__ = ["route"]


def route(registry: str, path: str, *, name: Optional[str] = None, **kwargs: Any) -> Callable:
    """Mark a handler method as the target of a named path template.

    Args:
        registry: Registry identifier (e.g. ``"routes"``).
        path: Path template, e.g. ``"/users/:id"``.
        name: Optional explicit route name (overrides the function name).
    """

    def decorator(func: Callable) -> Callable:
        markers = list(getattr(func, TARGET_ATTR_NAME, []))
        payload = {"name": registry, "path": path}
        if name is not None:
            payload["entry_name"] = name
        payload.update(kwargs)
        markers.append(payload)
        setattr(func, TARGET_ATTR_NAME, markers)
        return func

    return decorator
