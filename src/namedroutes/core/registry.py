"""Registry with plugin pipeline.

``Registry`` extends ``BaseRegistry`` with a global plugin registry,
per-registry plugin instances, middleware wrapping of ``path_for`` and plugin
state stored on the registry.

Internal state
--------------
- ``_plugin_specs``: ``_PluginSpec`` list (factory + kwargs copy).
- ``_plugins``: instantiated plugins, outermost first.
- ``_plugins_by_name``: plugin code → plugin instance.
- ``_inherited_from``: ids of parents already inherited from.
- ``_plugin_info``: per-plugin store with a ``"--base--"`` bucket and one
  bucket per route name, each holding ``config`` and ``locals``.

Global registry
---------------
``Registry.register_plugin(plugin_class, name=None)`` validates the class and
its ``plugin_code``. Registering a different class under an existing code
raises ``ValueError`` unless ``name`` is given explicitly (replacement).
``available_plugins`` returns a copy.

Attaching plugins
-----------------
``plug(plugin_name, **config)`` instantiates the registered class bound to this
registry, runs ``on_define`` for every existing entry, rebuilds the pipeline
and returns ``self``. ``__getattr__`` exposes attached plugins by code.

Pipeline
--------
``_wrap_resolve(call_next)`` stacks ``plugin.wrap_resolve`` layers in reverse
attachment order (first attached = outermost). Each layer is guarded by
``is_plugin_enabled(name, plugin)`` so a plugin can be switched off per route
name at runtime.

Inheritance
-----------
When mounted, a registry clones the parent's plugin specs it does not carry
yet and prepends them (parent-first order). Inheritance happens once per
parent. Plugins plugged on the parent after the mount are not propagated.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import wraps
from typing import Any, Callable, Dict, List, Optional, Type

from namedroutes.core.base_registry import BaseRegistry
from namedroutes.core.entries import RouteEntry
from namedroutes.plugins._base_plugin import BasePlugin

__all__ = ["Registry"]

_PLUGIN_REGISTRY: Dict[str, Type[BasePlugin]] = {}


@dataclass
class _PluginSpec:
    factory: Type[BasePlugin]
    kwargs: Dict[str, Any]

    def instantiate(self, registry: "Registry") -> BasePlugin:
        return self.factory(registry, **self.kwargs)

    def clone(self) -> "_PluginSpec":
        return _PluginSpec(self.factory, dict(self.kwargs))


class Registry(BaseRegistry):
    """Registry with plugin pipeline support."""

    __slots__ = BaseRegistry.__slots__ + (
        "_plugin_specs",
        "_plugins",
        "_plugins_by_name",
        "_inherited_from",
        "_plugin_info",
    )

    def __init__(self, *args, **kwargs):
        self._plugin_specs: List[_PluginSpec] = []
        self._plugins: List[BasePlugin] = []
        self._plugins_by_name: Dict[str, BasePlugin] = {}
        self._inherited_from: set[int] = set()
        self._plugin_info: Dict[str, Dict[str, Any]] = {}
        super().__init__(*args, **kwargs)

    # ------------------------------------------------------------------
    # Plugin registration
    # ------------------------------------------------------------------
    @classmethod
    def register_plugin(cls, plugin_class: Type[BasePlugin], name: Optional[str] = None) -> None:
        """Register a plugin class globally under its ``plugin_code`` (or ``name``)."""
        if not isinstance(plugin_class, type) or not issubclass(plugin_class, BasePlugin):
            raise TypeError("plugin_class must be a BasePlugin subclass")
        if not getattr(plugin_class, "plugin_code", None):
            raise ValueError(
                f"Plugin {plugin_class.__name__} not following standards: missing plugin_code"
            )
        code = name or plugin_class.plugin_code
        if name is None:
            existing = _PLUGIN_REGISTRY.get(code)
            if existing is not None and existing is not plugin_class:
                raise ValueError(f"Plugin '{code}' already registered")
        _PLUGIN_REGISTRY[code] = plugin_class

    @classmethod
    def available_plugins(cls) -> Dict[str, Type[BasePlugin]]:
        return dict(_PLUGIN_REGISTRY)

    def plug(self, plugin: str, **config: Any) -> "Registry":
        """Attach a plugin by name (previously registered globally)."""
        if not isinstance(plugin, str):
            raise TypeError(
                f"Plugin must be referenced by name string, got {type(plugin).__name__}"
            )
        plugin_class = _PLUGIN_REGISTRY.get(plugin)
        if plugin_class is None:
            available = ", ".join(sorted(_PLUGIN_REGISTRY)) or "none"
            raise ValueError(
                f"Unknown plugin '{plugin}'. Register it first. Available plugins: {available}"
            )
        spec = _PluginSpec(plugin_class, dict(config))
        self._plugin_specs.append(spec)
        instance = spec.instantiate(self)
        self._plugins.append(instance)
        self._plugins_by_name[instance.name] = instance
        self._apply_plugin_to_entries(instance)
        self._rebuild_pipeline()
        return self

    def iter_plugins(self) -> List[BasePlugin]:  # type: ignore[override]
        return list(self._plugins)

    def get_config(self, plugin_name: str, route_name: Optional[str] = None) -> Dict[str, Any]:
        """Return plugin config (registry-wide + per-route overrides)."""
        plugin = self._plugins_by_name.get(plugin_name)
        if plugin is None:
            raise AttributeError(
                f"No plugin named '{plugin_name}' attached to registry '{self.name}'"
            )
        return plugin.configuration(route_name)

    def __getattr__(self, name: str) -> Any:
        # Private names never map to plugins; unset slots must not recurse.
        if name.startswith("_"):
            raise AttributeError(name)
        plugin = self._plugins_by_name.get(name)
        if plugin is None:
            raise AttributeError(f"No plugin named '{name}' attached to registry '{self.name}'")
        return plugin

    def _get_plugin_bucket(self, plugin_name: str) -> Dict[str, Any]:
        bucket = self._plugin_info.get(plugin_name)
        if bucket is None:
            raise AttributeError(
                f"No plugin named '{plugin_name}' attached to registry '{self.name}'"
            )
        bucket.setdefault("--base--", {"config": {}, "locals": {}})
        return bucket

    # ------------------------------------------------------------------
    # Runtime switches
    # ------------------------------------------------------------------
    def set_plugin_enabled(self, route_name: str, plugin_name: str, enabled: bool = True) -> None:
        bucket = self._get_plugin_bucket(plugin_name)
        entry = bucket.setdefault(route_name, {"config": {}, "locals": {}})
        entry.setdefault("locals", {})["enabled"] = bool(enabled)

    def is_plugin_enabled(self, route_name: str, plugin_name: str) -> bool:
        bucket = self._get_plugin_bucket(plugin_name)
        entry_locals = bucket.get(route_name, {}).get("locals", {})
        if "enabled" in entry_locals:
            return bool(entry_locals["enabled"])
        return bool(bucket["--base--"].get("locals", {}).get("enabled", True))

    # ------------------------------------------------------------------
    # Overrides/hooks
    # ------------------------------------------------------------------
    def _wrap_resolve(self, call_next: Callable) -> Callable:  # type: ignore[override]
        wrapped = call_next
        for plugin in reversed(self._plugins):
            plugin_call = plugin.wrap_resolve(self, wrapped)
            wrapped = self._create_wrapper(plugin, plugin_call, wrapped)
        return wrapped

    def _create_wrapper(
        self, plugin: BasePlugin, plugin_call: Callable, next_call: Callable
    ) -> Callable:
        @wraps(next_call)
        def wrapper(name, params=None, **options):
            if not self.is_plugin_enabled(name, plugin.name):
                return next_call(name, params, **options)
            return plugin_call(name, params, **options)

        return wrapper

    def _apply_plugin_to_entries(self, plugin: BasePlugin) -> None:
        for name, entry in self._entries.items():
            plugin.on_define(self, name, entry)

    def _after_define(self, name: str, entry: RouteEntry) -> None:  # type: ignore[override]
        for plugin in self._plugins:
            plugin.on_define(self, name, entry)

    def _on_attached_to_parent(self, parent: BaseRegistry) -> None:  # type: ignore[override]
        if id(parent) in self._inherited_from:
            return
        self._inherited_from.add(id(parent))
        parent_specs = getattr(parent, "_plugin_specs", None) or []
        inherited: List[BasePlugin] = []
        for spec in parent_specs:
            if spec.factory.plugin_code in self._plugins_by_name:
                continue
            clone = spec.clone()
            instance = clone.instantiate(self)
            self._plugin_specs.insert(len(inherited), clone)
            self._plugins_by_name[instance.name] = instance
            inherited.append(instance)
        if not inherited:
            return
        self._plugins[:0] = inherited
        for plugin in inherited:
            self._apply_plugin_to_entries(plugin)
        self._rebuild_pipeline()

    def _describe_entry_extra(  # type: ignore[override]
        self, name: str, entry: RouteEntry
    ) -> Dict[str, Any]:
        plugins_info: Dict[str, Dict[str, Any]] = {}
        for plugin in self._plugins:
            plugin_data: Dict[str, Any] = {}
            config = plugin.configuration(name)
            if config:
                plugin_data["config"] = config
            meta = plugin.entry_metadata(self, name, entry)
            if meta:
                plugin_data["metadata"] = meta
            if plugin_data:
                plugins_info[plugin.name] = plugin_data
        if plugins_info:
            return {"plugins": plugins_info}
        return {}
