"""Resolution errors raised by registries, renderers and resolvers.

All three are synchronous, local to one ``lookup``/``render``/resolver call,
and never retried internally.

- ``RouteNotFound`` subclasses ``KeyError`` so callers treating the registry as
  a mapping keep working; ``str()`` is the plain message, not the quoted key.
- ``RouteIsGroup`` subclasses ``TypeError``: the name exists but resolves to a
  Group, which cannot be rendered.
- ``NotATemplate`` is the renderer's flavour of ``RouteIsGroup``.
"""

from __future__ import annotations

__all__ = ["RouteNotFound", "RouteIsGroup", "NotATemplate"]


class RouteNotFound(KeyError):
    """No entry exists at the dotted path in the reachable registries."""

    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Route '{self.name}' does not exist"


class RouteIsGroup(TypeError):
    """The name resolves to a Group, not a Template."""

    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Route '{self.name}' is a group and cannot be rendered"


class NotATemplate(RouteIsGroup):
    def __str__(self) -> str:
        return f"Route '{self.name}' is not a template"
