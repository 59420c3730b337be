"""RoutedClass mixin and registry proxy.

The mixin lets an application object own one or more registries without
storing routing state in its ``__dict__``, and offers a proxy for lookup and
plugin configuration.

RoutedClass
-----------
- ``__slots__``: proxy cache and ``REGISTRY_ATTR_NAME`` (name → registry).
- ``_register_registry(registry)``: called by ``BaseRegistry.__init__``;
  stores the registry under ``registry.name`` (or ``"routes"`` when unnamed).
- ``_iter_registered_registries()``: yields ``(name, registry)`` pairs.
- ``routedclass``: cached ``_RoutedProxy`` bound to the owner.

_RoutedProxy
------------
- ``get_registry(name, path=None)``: ``"routes.admin"`` splits into the owned
  registry ``routes`` and the mounted child path ``admin``. Falls back to owner
  attributes (cached when they hold a registry). Missing registries raise
  ``AttributeError``; missing children raise ``KeyError``.
- ``configure(target, **options)``:
  * list/tuple: configure each element (no shared options).
  * dict: must carry ``"target"``; the other items are options.
  * ``"?"``: describe every registry.
  * ``"registry:plugin/selector"``: selector defaults to ``"_all_"`` (the
    ``--base--`` bucket); otherwise comma-separated fnmatch patterns against
    the registry's dotted route names. No match raises ``KeyError``.
  Returns ``{"target": target, "updated": [...]}``.
"""

from __future__ import annotations

from fnmatch import fnmatchcase
from typing import TYPE_CHECKING, Any, Dict, Iterator, Optional, Tuple

from smartseeds.typeutils import safe_is_instance

from .base_registry import REGISTRY_ATTR_NAME

if TYPE_CHECKING:  # pragma: no cover - import for typing only
    from .base_registry import BaseRegistry

__all__ = ["RoutedClass", "is_routed_class"]

_PROXY_ATTR_NAME = "__routed_proxy__"
_DEFAULT_REGISTRY_NAME = "routes"


class RoutedClass:
    """Mixin for objects owning route registries."""

    __slots__ = (_PROXY_ATTR_NAME, REGISTRY_ATTR_NAME)

    def _register_registry(self, registry: "BaseRegistry") -> None:
        owned = getattr(self, REGISTRY_ATTR_NAME, None)
        if owned is None:
            owned = {}
            setattr(self, REGISTRY_ATTR_NAME, owned)
        owned[registry.name or _DEFAULT_REGISTRY_NAME] = registry

    def _iter_registered_registries(self) -> Iterator[Tuple[str, "BaseRegistry"]]:
        owned = getattr(self, REGISTRY_ATTR_NAME, None) or {}
        yield from owned.items()

    @property
    def routedclass(self) -> "_RoutedProxy":
        proxy = getattr(self, _PROXY_ATTR_NAME, None)
        if proxy is None:
            proxy = _RoutedProxy(self)
            setattr(self, _PROXY_ATTR_NAME, proxy)
        return proxy


class _RoutedProxy:
    def __init__(self, owner: RoutedClass):
        self._owner = owner

    def get_registry(self, name: str, path: Optional[str] = None) -> "BaseRegistry":
        base_name, extra_path = self._split_spec(name, path)
        registry = self._lookup_registry(base_name)
        if registry is None:
            raise AttributeError(
                f"No registry named '{base_name}' on {type(self._owner).__name__}"
            )
        node = registry
        for segment in (extra_path or "").split("."):
            segment = segment.strip()
            if segment:
                node = node._children[segment]
        return node

    def _lookup_registry(self, name: str) -> Optional["BaseRegistry"]:
        owned = getattr(self._owner, REGISTRY_ATTR_NAME, None)
        if owned and name in owned:
            return owned[name]
        candidate = getattr(self._owner, name, None)
        if safe_is_instance(candidate, "namedroutes.core.base_registry.BaseRegistry"):
            if owned is not None:
                owned[name] = candidate
            return candidate
        return None

    @staticmethod
    def _split_spec(name: str, path: Optional[str]) -> Tuple[str, Optional[str]]:
        if not path and "." in name:
            base_name, extra_path = name.split(".", 1)
            return base_name, extra_path
        return name, path

    @staticmethod
    def _parse_target(target: str) -> Tuple[str, str, str]:
        if ":" not in target:
            raise ValueError("Target must include registry:plugin")
        registry_part, rest = target.split(":", 1)
        registry_part = registry_part.strip()
        if not registry_part:
            raise ValueError("Registry name cannot be empty")
        plugin_part, _, selector = rest.partition("/")
        plugin_part = plugin_part.strip()
        if not plugin_part:
            raise ValueError("Plugin name cannot be empty")
        return registry_part, plugin_part, selector.strip() or "_all_"

    @staticmethod
    def _match_routes(registry: "BaseRegistry", selector: str) -> set[str]:
        patterns = [token.strip() for token in selector.split(",") if token.strip()]
        return {
            route_name
            for route_name in registry.route_names()
            for pattern in patterns
            if fnmatchcase(route_name, pattern)
        }

    def describe(self) -> Dict[str, Any]:
        owned = getattr(self._owner, REGISTRY_ATTR_NAME, None) or {}
        return {name: self._describe_registry(registry) for name, registry in owned.items()}

    def _describe_registry(self, registry: "BaseRegistry") -> Dict[str, Any]:
        return {
            "name": registry.name,
            "mount_name": registry.mount_name,
            "plugins": [
                {
                    "name": plugin.name,
                    "description": plugin.plugin_description,
                    "config": plugin.configuration(),
                    "overrides": {
                        route_name: plugin.configuration(route_name)
                        for route_name in registry.route_names()
                    },
                }
                for plugin in registry.iter_plugins()
            ],
            "entries": list(registry.entries()),
            "children": {
                alias: self._describe_registry(child)
                for alias, child in registry.children().items()
            },
        }

    def configure(self, target: Any, **options: Any):
        if isinstance(target, (list, tuple)):
            if options:
                raise ValueError("Do not mix shared kwargs with list targets")
            return [self.configure(item) for item in target]
        if isinstance(target, dict):
            item = dict(target)
            try:
                item_target = item.pop("target")
            except KeyError:
                raise ValueError("Dict targets must include 'target'") from None
            return self.configure(item_target, **item)
        if not isinstance(target, str):
            raise TypeError("Target must be a string, dict, or list")
        target = target.strip()
        if target == "?":
            if options:
                raise ValueError("Options are not allowed with '?'")
            return self.describe()
        registry_spec, plugin_name, selector = self._parse_target(target)
        registry = self.get_registry(registry_spec)
        plugin = (getattr(registry, "_plugins_by_name", None) or {}).get(plugin_name)
        if plugin is None:
            raise AttributeError(f"No plugin named '{plugin_name}' on registry '{registry_spec}'")
        if not options:
            raise ValueError("No configuration options provided")
        if selector.lower() == "_all_":
            plugin.configure(_target="--base--", **options)
            return {"target": target, "updated": ["_all_"]}
        matches = self._match_routes(registry, selector)
        if not matches:
            raise KeyError(f"No routes matching '{selector}' on registry '{registry_spec}'")
        for route_name in matches:
            plugin.configure(_target=route_name, **options)
        return {"target": target, "updated": sorted(matches)}


def is_routed_class(obj: Any) -> bool:
    """Return True when ``obj`` is a RoutedClass instance."""
    return safe_is_instance(obj, "namedroutes.core.routed.RoutedClass")
