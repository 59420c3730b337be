"""Plugin-free route registry with mount composition.

The module exposes :class:`BaseRegistry`, which owns the name → entry mapping
of one routing scope, resolves dotted names through nested groups and mounted
child registries, and composes path prefixes across mount links. Subclasses add
plugin middleware around ``path_for`` but must preserve these semantics.

Constructor and slots
---------------------
Constructor signature::

    BaseRegistry(owner=None, name=None, name_prefix=None, *,
                 default_path=None, path_kwargs=None,
                 auto_discover=True, parent=None)

- ``owner``: optional object hosting the registry (usually a ``RoutedClass``).
  When it exposes ``_register_registry`` the registry registers itself there.
  Marker discovery only runs with an owner.
- ``name``: registry identifier; also the mount name when ``parent`` is given.
- ``name_prefix``: string trimmed from function names during marker discovery.
- ``default_path`` / ``path_kwargs``: defaults merged via ``SmartOptions`` in
  ``path_for()``.
- ``parent``: mount under this registry right away (requires ``name``).

Definition
----------
``define(name, entry)`` coerces ``entry`` (``str`` → ``Template``, ``dict`` →
``Group``) and stores it, overwriting any previous value. A dotted name places
the entry inside nested groups, creating missing groups; traversing a Template
raises ``ValueError``. Returns ``self`` for chaining.

Lookup
------
``lookup(name=None)``:

- no name: the local mapping, by reference. Callers must not mutate it.
- a name is first resolved *locally* (``_resolve_local``):
  * ``"mount.rest"`` where ``mount`` is a mounted child: the child's local
    resolution of ``rest`` composed below this registry's entry for ``mount``.
    Children are checked before own entries.
  * otherwise the first segment selects an own entry and each further segment
    walks a Group level.
  * any missing segment, or a walk through a Template, raises
    ``RouteNotFound(name)`` carrying the full dotted name.
- when this registry is itself mounted, the local result is composed below
  ``parent.lookup(mount_name)``. That call is composed too, so prefixes
  accumulate through every ancestor.

Mount prefixes
--------------
- The parent's entry for the mount name is the prefix. When the parent has no
  such entry the child sits at the parent's own root.
- A Group under the mount name raises ``NotATemplate(mount_name)``.
- Composition goes through ``Template.under`` (segment join), so the composed
  path never contains ``//`` or a trailing ``/``.
- Un-mounted lookups return entries exactly as defined.

Mounting
--------
``mount(child, name, *, prefix=None)`` links ``child`` under ``name``:

- ``child`` may have at most one parent. Mounting again under the same parent
  and name returns the child; any other re-mount raises ``ValueError``.
- ``name`` collisions with a different child raise ``ValueError``.
- Cycles (mounting an ancestor) raise ``ValueError``.
- ``prefix`` defines the parent's entry for ``name`` when none exists.
- ``_on_attached_to_parent`` runs after linking (plugin inheritance).

``mount_instance(routed_child, name=None, *, prefix=None)`` mounts the
registries owned by a ``RoutedClass``: a single registry is mounted under
``name`` (or its own name); several registries need ``"registry:alias"``
tokens, or mount under their own names when ``name`` is omitted.

Rendering and requests
----------------------
- ``path_for(name, params=None, **options)``: lookup, reject Groups with
  ``RouteIsGroup``, render with ``params``. With ``default_path`` set a
  missing name returns it instead of raising. Runs through the resolve
  pipeline built by ``_wrap_resolve`` (passthrough here).
- ``handle(request)``: context manager pushing this registry's resolver on the
  request (see ``namedroutes.core.request``).
- ``middleware(handler)``: decorator running ``handler(request, ...)`` inside
  ``handle(request)``.

Hooks for subclasses
--------------------
``_wrap_resolve``, ``_after_define``, ``_on_attached_to_parent``,
``_describe_entry_extra``. Defaults are no-ops/passthrough.
"""

from __future__ import annotations

import inspect
from functools import wraps
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from smartseeds import SmartOptions
from smartseeds.typeutils import safe_is_instance

from .entries import SEPARATOR, Group, RouteEntry, Template, coerce_entry
from .errors import NotATemplate, RouteIsGroup, RouteNotFound
from .renderer import render

__all__ = ["BaseRegistry", "TARGET_ATTR_NAME", "REGISTRY_ATTR_NAME"]

TARGET_ATTR_NAME = "__namedroutes_targets__"
REGISTRY_ATTR_NAME = "__namedroutes_registry__"

_ROOT = Template(SEPARATOR)


class BaseRegistry:
    """Name → route entry mapping for one routing scope.

    Responsibilities:
    - store templates and groups under symbolic names
    - resolve dotted names across groups and mounted children
    - compose mount prefixes so every name yields a fully-qualified path
    - render paths and install per-request resolvers
    """

    __slots__ = (
        "instance",
        "name",
        "name_prefix",
        "parent",
        "mount_name",
        "_entries",
        "_children",
        "_path_defaults",
        "_pipeline",
    )

    def __init__(
        self,
        owner: Any = None,
        name: Optional[str] = None,
        name_prefix: Optional[str] = None,
        *,
        default_path: Optional[str] = None,
        path_kwargs: Optional[Dict[str, Any]] = None,
        auto_discover: bool = True,
        parent: Optional["BaseRegistry"] = None,
    ) -> None:
        self.instance = owner
        self.name = name
        self.name_prefix = name_prefix or ""
        self.parent: Optional[BaseRegistry] = None
        self.mount_name: Optional[str] = None
        self._entries: Dict[str, RouteEntry] = {}
        self._children: Dict[str, BaseRegistry] = {}
        defaults: Dict[str, Any] = dict(path_kwargs or {})
        if default_path is not None:
            defaults.setdefault("default_path", default_path)
        self._path_defaults: Dict[str, Any] = defaults
        self._pipeline: Callable[..., str] = self._render_path
        self._rebuild_pipeline()
        self._register_with_owner()
        if auto_discover and owner is not None:
            self._register_marked()

        if parent is not None:
            if not name:
                raise ValueError("Child registry must have a name when using parent")
            parent.mount(self, name)

    def _register_with_owner(self) -> None:
        hook = getattr(self.instance, "_register_registry", None)
        if callable(hook):
            hook(self)

    # ------------------------------------------------------------------
    # Definition
    # ------------------------------------------------------------------
    def define(self, name: str, entry: Any) -> "BaseRegistry":
        """Store ``entry`` under ``name`` (overwriting) and return self."""
        parts = self._split_name(name)
        value = coerce_entry(entry)
        if len(parts) == 1:
            self._entries[name] = value
        else:
            head = parts[0]
            self._entries[head] = self._nest(self._entries.get(head), parts[1:], value, name)
        self._after_define(name, value)
        return self

    def _nest(
        self, current: Optional[RouteEntry], parts: List[str], value: RouteEntry, name: str
    ) -> RouteEntry:
        if not parts:
            return value
        if current is None:
            current = Group()
        if not isinstance(current, Group):
            raise ValueError(f"Cannot define '{name}': '{parts[0]}' would nest inside a template")
        children = dict(current.entries)
        children[parts[0]] = self._nest(children.get(parts[0]), parts[1:], value, name)
        return Group(children)

    @staticmethod
    def _split_name(name: str) -> List[str]:
        if not isinstance(name, str) or not name.strip():
            raise ValueError(f"Route name must be a non-empty string, got {name!r}")
        parts = name.split(".")
        if any(not part for part in parts):
            raise ValueError(f"Route name has an empty segment: {name!r}")
        return parts

    # ------------------------------------------------------------------
    # Marker discovery
    # ------------------------------------------------------------------
    def _register_marked(self) -> None:
        for func, marker in self._iter_marked_methods():
            entry_name = marker.get("entry_name") or self._resolve_name(func.__name__)
            self.define(entry_name, marker["path"])

    def _iter_marked_methods(self) -> Iterator[Tuple[Callable, Dict[str, Any]]]:
        cls = type(self.instance)
        seen: set[int] = set()
        for base in reversed(cls.__mro__):
            for value in vars(base).values():
                if not inspect.isfunction(value):
                    continue
                if id(value) in seen:
                    continue
                seen.add(id(value))
                for marker in getattr(value, TARGET_ATTR_NAME, None) or ():
                    if marker.get("name") != self.name:
                        continue
                    payload = dict(marker)
                    payload.pop("name", None)
                    yield value, payload

    def _resolve_name(self, func_name: str) -> str:
        if self.name_prefix and func_name.startswith(self.name_prefix):
            return func_name[len(self.name_prefix) :]
        return func_name

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------
    def lookup(self, name: Optional[str] = None) -> Any:
        """Return the entry for ``name`` or, without a name, the whole mapping."""
        if name is None:
            return self._entries
        entry = self._resolve_local(name)
        prefix = self._mount_prefix()
        if prefix is None:
            return entry
        return entry.under(prefix)

    __getitem__ = lookup

    def entries(self) -> Tuple[str, ...]:
        """Return the names defined locally on this registry."""
        return tuple(self._entries.keys())

    def route_names(self) -> Tuple[str, ...]:
        """Return every local name, dotted into groups (groups included)."""
        names: List[str] = []
        pending: List[Tuple[str, RouteEntry]] = list(self._entries.items())
        while pending:
            name, entry = pending.pop(0)
            names.append(name)
            if isinstance(entry, Group):
                pending.extend((f"{name}.{key}", child) for key, child in entry.entries.items())
        return tuple(names)

    def _resolve_local(self, name: str) -> RouteEntry:
        if not isinstance(name, str):
            raise RouteNotFound(str(name))
        head, *rest = name.split(".")
        if not all([head, *rest]):
            raise RouteNotFound(name)
        if rest and head in self._children:
            try:
                found = self._children[head]._resolve_local(".".join(rest))
            except RouteNotFound:
                raise RouteNotFound(name) from None
            return found.under(self._child_prefix(head))
        entry: Optional[RouteEntry] = self._entries.get(head)
        for segment in rest:
            if not isinstance(entry, Group):
                raise RouteNotFound(name)
            entry = entry.get(segment)
        if entry is None:
            raise RouteNotFound(name)
        return entry

    def _child_prefix(self, mount_name: str) -> Template:
        prefix = self._entries.get(mount_name)
        if prefix is None:
            return _ROOT
        if isinstance(prefix, Group):
            raise NotATemplate(mount_name)
        return prefix

    def _mount_prefix(self) -> Optional[Template]:
        if self.parent is None:
            return None
        try:
            prefix = self.parent.lookup(self.mount_name)
        except RouteNotFound:
            prefix = self.parent._mount_prefix() or _ROOT
        if isinstance(prefix, Group):
            raise NotATemplate(self.mount_name or "")
        return prefix

    # ------------------------------------------------------------------
    # Mounting
    # ------------------------------------------------------------------
    def mount(
        self, child: "BaseRegistry", name: str, *, prefix: Optional[str] = None
    ) -> "BaseRegistry":
        """Attach ``child`` under ``name`` and return it."""
        if not isinstance(child, BaseRegistry):
            raise TypeError("mount() requires a registry")
        if not isinstance(name, str) or not name or "." in name:
            raise ValueError(f"Mount name must be a non-empty string without dots, got {name!r}")
        if child.parent is not None:
            if child.parent is self and child.mount_name == name:
                return child
            raise ValueError("mount() rejected: registry already mounted under another parent")
        if name in self._children and self._children[name] is not child:
            raise ValueError(f"Mount name collision: {name!r}")
        node: Optional[BaseRegistry] = self
        while node is not None:
            if node is child:
                raise ValueError("mount() rejected: cannot mount a registry inside itself")
            node = node.parent
        if prefix is not None and name not in self._entries:
            self.define(name, prefix)
        self._children[name] = child
        child.parent = self
        child.mount_name = name
        child._on_attached_to_parent(self)
        return child

    def mount_instance(
        self, routed_child: Any, name: Optional[str] = None, *, prefix: Optional[str] = None
    ) -> "BaseRegistry":
        """Mount the registries exposed by a RoutedClass instance."""
        if not safe_is_instance(routed_child, "namedroutes.core.routed.RoutedClass"):
            raise TypeError("mount_instance() requires a RoutedClass instance")
        candidates = list(routed_child._iter_registered_registries())
        if not candidates:
            raise TypeError(f"Object {routed_child!r} does not expose registries")

        tokens = [chunk.strip() for chunk in (name.split(",") if name else []) if chunk.strip()]
        mapping: Dict[str, str] = {}
        if len(candidates) == 1:
            key, registry = candidates[0]
            mapping[key] = tokens[0] if tokens else (registry.name or key)
        elif not tokens:
            for key, registry in candidates:
                mapping[key] = registry.name or key
        else:
            known = {key for key, _ in candidates}
            for token in tokens:
                if ":" not in token:
                    raise ValueError(
                        "mount_instance() with several registries requires 'registry:alias'"
                    )
                orig, alias = [part.strip() for part in token.split(":", 1)]
                if not orig or not alias:
                    raise ValueError("mount_instance() mapping requires both registry and alias")
                if orig not in known:
                    raise ValueError(f"Unknown registry {orig!r} in mapping")
                mapping[orig] = alias
        if prefix is not None and len(mapping) > 1:
            raise ValueError("prefix can only be used when mounting a single registry")

        mounted: Optional[BaseRegistry] = None
        for key, registry in candidates:
            alias = mapping.get(key)
            if alias is None:
                continue
            mounted = self.mount(registry, alias, prefix=prefix)
        assert mounted is not None
        return mounted

    def children(self) -> Dict[str, "BaseRegistry"]:
        return dict(self._children)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------
    def path_for(self, name: str, params: Optional[Dict[str, Any]] = None, **options: Any) -> str:
        """Resolve ``name`` and render it with ``params``."""
        opts = SmartOptions(options, defaults=self._path_defaults)
        default_path = getattr(opts, "default_path", None)
        return self._pipeline(name, params, default_path=default_path)

    def _render_path(
        self, name: str, params: Optional[Dict[str, Any]] = None, *, default_path: Optional[str] = None
    ) -> str:
        try:
            entry = self.lookup(name)
        except RouteNotFound:
            if default_path is None:
                raise
            return default_path
        if isinstance(entry, Group):
            raise RouteIsGroup(name)
        return render(entry, params, name=name)

    def _rebuild_pipeline(self) -> None:
        self._pipeline = self._wrap_resolve(self._render_path)

    def _wrap_resolve(self, call_next: Callable) -> Callable:
        return call_next

    # ------------------------------------------------------------------
    # Request integration
    # ------------------------------------------------------------------
    def handle(self, request: Any):
        """Context manager installing this registry's resolver on ``request``."""
        from .request import install

        return install(self, request)

    def middleware(self, handler: Callable) -> Callable:
        """Wrap ``handler(request, ...)`` so it runs inside ``handle(request)``."""

        @wraps(handler)
        def wrapper(request, *args, **kwargs):
            with self.handle(request):
                return handler(request, *args, **kwargs)

        return wrapper

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    def members(self) -> Dict[str, Any]:
        """Return a tree of entries and mounted registries."""
        entries = {name: self._entry_member_info(name, entry) for name, entry in self._entries.items()}
        children = {alias: child.members() for alias, child in self._children.items()}
        children = {alias: info for alias, info in children.items() if info}
        if not entries and not children:
            return {}
        result: Dict[str, Any] = {
            "name": self.name,
            "registry": self,
            "instance": self.instance,
            "mount_name": self.mount_name,
            "plugin_info": self._get_plugin_info(),
        }
        if entries:
            result["entries"] = entries
        if children:
            result["children"] = children
        return result

    def _entry_member_info(self, name: str, entry: RouteEntry) -> Dict[str, Any]:
        info: Dict[str, Any] = {
            "name": name,
            "kind": "group" if isinstance(entry, Group) else "template",
            "entry": entry,
        }
        if isinstance(entry, Template):
            info["path"] = self.lookup(name).path
        extra = self._describe_entry_extra(name, entry)
        if extra:
            info.update(extra)
        return info

    def _get_plugin_info(self) -> Dict[str, Any]:
        info_source = getattr(self, "_plugin_info", {}) or {}
        return {
            pname: {
                key: {
                    "config": dict(slot.get("config", {})),
                    "locals": dict(slot.get("locals", {})),
                }
                for key, slot in pdata.items()
            }
            for pname, pdata in info_source.items()
        }

    # ------------------------------------------------------------------
    # Hooks (no-op for BaseRegistry)
    # ------------------------------------------------------------------
    def iter_plugins(self) -> List[Any]:  # pragma: no cover - base registry has no plugins
        return []

    def _after_define(self, name: str, entry: RouteEntry) -> None:
        """Hook invoked after ``define`` stores an entry."""
        return None

    def _on_attached_to_parent(self, parent: "BaseRegistry") -> None:
        """Hook invoked by ``mount`` once the link exists."""
        return None

    def _describe_entry_extra(self, name: str, entry: RouteEntry) -> Dict[str, Any]:
        return {}

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r} entries={len(self._entries)}>"
