"""Per-request resolvers (``route_to_path``).

A request may pass through several independently initialised scopes while it
is dispatched. Each scope entering the request pushes a :class:`Resolver` on
the request's :class:`RequestContext`; leaving pops it again, on every exit
path. The resolver that was on top when a scope entered is that scope's
*fallback*.

Resolution (``Resolver.__call__(name, override=None)``):

1. ``registry.path_for(name, params)`` with ``params`` being the request
   parameters merged with ``override`` (override wins).
2. ``RouteNotFound`` with a fallback: the fallback resolves the same arguments
   and its result (or error) is returned as is.
3. ``RouteNotFound`` without a fallback propagates.
4. ``RouteIsGroup`` never falls back; only a missing name does.

The active context is also published through a ``ContextVar`` so helpers that
have no request reference (templates, link builders) can call
:func:`route_to_path`. ``ContextVar`` is task-local under asyncio and
thread-local under threads.
"""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Dict, Iterator, List, Mapping, Optional

from .errors import RouteNotFound
from .renderer import merge_params

__all__ = [
    "RequestContext",
    "Resolver",
    "context_for",
    "current_context",
    "install",
    "route_to_path",
]

CONTEXT_ATTR_NAME = "_namedroutes_context"

_context_var: ContextVar[Optional["RequestContext"]] = ContextVar(
    "namedroutes_context", default=None
)


class Resolver:
    """Request-scoped ``name → path`` function for one registry."""

    __slots__ = ("registry", "context", "fallback")

    def __init__(self, registry: Any, context: "RequestContext", fallback: Optional["Resolver"]):
        self.registry = registry
        self.context = context
        self.fallback = fallback

    def __call__(self, name: str, override: Optional[Mapping[str, Any]] = None) -> str:
        params = merge_params(self.context.params, override)
        try:
            return self.registry.path_for(name, params)
        except RouteNotFound:
            if self.fallback is None:
                raise
        return self.fallback(name, override)

    def __repr__(self) -> str:
        return f"<Resolver {self.registry!r}>"


class RequestContext:
    """Routing state owned by one in-flight request."""

    __slots__ = ("request", "_params", "_stack")

    def __init__(self, request: Any = None, params: Optional[Mapping[str, Any]] = None):
        self.request = request
        self._params: Dict[str, Any] = dict(params or {})
        self._stack: List[Resolver] = []

    @property
    def params(self) -> Mapping[str, Any]:
        # Read live from the request: nested dispatchers may rebind params.
        if self.request is not None and hasattr(self.request, "params"):
            return self.request.params or {}
        return self._params

    @property
    def active(self) -> Optional[Resolver]:
        return self._stack[-1] if self._stack else None

    @property
    def depth(self) -> int:
        return len(self._stack)

    @contextmanager
    def enter(self, registry: Any) -> Iterator[Resolver]:
        """Push a resolver for ``registry`` for the duration of the block."""
        resolver = Resolver(registry, self, self.active)
        self._stack.append(resolver)
        token = _context_var.set(self)
        try:
            yield resolver
        finally:
            _context_var.reset(token)
            self._stack.remove(resolver)

    def resolve(self, name: str, override: Optional[Mapping[str, Any]] = None) -> str:
        resolver = self.active
        if resolver is None:
            raise LookupError("No routing scope is active for this request")
        return resolver(name, override)

    route_to_path = resolve


def context_for(request: Any) -> RequestContext:
    """Return the RequestContext attached to ``request``, creating it once."""
    context = getattr(request, CONTEXT_ATTR_NAME, None)
    if context is None:
        context = RequestContext(request)
        setattr(request, CONTEXT_ATTR_NAME, context)
    return context


@contextmanager
def install(registry: Any, request: Any) -> Iterator[Resolver]:
    """Request-setup hook: expose ``request.route_to_path`` while ``registry`` handles it."""
    context = context_for(request)
    with context.enter(registry) as resolver:
        request.route_to_path = context.resolve
        yield resolver


def current_context() -> RequestContext:
    """Return the routing context of the current request.

    Raises ``LookupError`` outside any scope.
    """
    context = _context_var.get()
    if context is None:
        raise LookupError("No routing scope is active")
    return context


def route_to_path(name: str, override: Optional[Mapping[str, Any]] = None) -> str:
    return current_context().resolve(name, override)
