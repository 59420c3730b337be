"""Plugin contract used by the Registry pipeline.

``BasePlugin``
    Base class every plugin subclasses. Required class attributes:

    - ``plugin_code``: unique identifier used for registration (``"logging"``)
    - ``plugin_description``: human-readable description

    Constructor: ``BasePlugin(registry, **config)``. ``config`` goes through
    ``configure()``.

    ``configure(**config)``
        Subclasses declare accepted options through the method signature.
        ``__init_subclass__`` wraps it so that:

        - ``flags`` (``"enabled,before:off"``) is parsed into booleans
        - ``_target`` selects the bucket: ``"--base--"`` (registry-wide, the
          default), a route name, or ``"n1,n2"`` for several names
        - parameters are validated with Pydantic's ``validate_call``
        - the validated values are written to the registry's store

    ``configuration(name=None)``
        Merged configuration: registry-wide values overlaid with the bucket of
        ``name`` when given.

    ``on_define(registry, name, entry)`` (default no-op)
        Called whenever a name is defined on a registry carrying the plugin.

    ``wrap_resolve(registry, call_next)`` (default identity)
        Returns a callable with the ``call_next(name, params, **options)``
        signature. The registry stacks these around ``path_for``.

    ``entry_metadata(registry, name, entry)``
        Optional dict contributed to ``members()`` output.

Configuration lives in the registry's ``_plugin_info`` store, never on the
plugin, so inherited plugins read the config of the registry they serve.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Dict, Optional

from pydantic import validate_call

if TYPE_CHECKING:  # pragma: no cover - import for typing only
    from namedroutes.core.entries import RouteEntry

__all__ = ["BasePlugin"]

BASE_BUCKET = "--base--"


def _wrap_configure(original_configure: Callable) -> Callable:
    """Wrap a plugin's configure() to handle flags, _target, validation and storage."""
    validated = validate_call(original_configure)

    def wrapper(
        self: "BasePlugin", *, _target: str = BASE_BUCKET, flags: Optional[str] = None, **kwargs: Any
    ) -> None:
        if flags:
            kwargs.update(self._parse_flags(flags))

        if "," in _target:
            for target in (t.strip() for t in _target.split(",")):
                if target:
                    wrapper(self, _target=target, **kwargs)
            return

        validated(self, **kwargs)
        self._write_config(_target, kwargs)

    return wrapper


class BasePlugin:
    """Hook interface + configuration helpers for registry plugins."""

    __slots__ = ("name", "_registry")

    plugin_code: str = ""
    plugin_description: str = ""

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if "configure" in cls.__dict__:
            cls.configure = _wrap_configure(cls.__dict__["configure"])

    def __init__(self, registry: Any, **config: Any):
        self.name = self.plugin_code
        self._registry = registry
        self._init_store()
        self.configure(**config)

    def _init_store(self) -> None:
        store = self._get_store()
        store.setdefault(self.name, {}).setdefault(
            BASE_BUCKET, {"config": {"enabled": True}, "locals": {}}
        )

    def configure(self, *, _target: str = BASE_BUCKET, flags: Optional[str] = None) -> None:
        """Accept only ``flags``; subclasses override to declare options."""
        if flags:
            self._write_config(_target, self._parse_flags(flags))

    def _write_config(self, target: str, config: Dict[str, Any]) -> None:
        if not config:
            return
        plugin_bucket = self._get_store().setdefault(self.name, {})
        bucket = plugin_bucket.setdefault(target, {"config": {}, "locals": {}})
        bucket["config"].update(config)

    def configuration(self, name: Optional[str] = None) -> Dict[str, Any]:
        plugin_bucket = self._get_store().get(self.name)
        if not plugin_bucket:
            return {}
        merged = dict(plugin_bucket.get(BASE_BUCKET, {}).get("config", {}))
        if name:
            merged.update(plugin_bucket.get(name, {}).get("config", {}))
        return merged

    def _parse_flags(self, flags: str) -> Dict[str, bool]:
        mapping: Dict[str, bool] = {}
        for chunk in flags.split(","):
            chunk = chunk.strip()
            if not chunk:
                continue
            if ":" in chunk:
                key, value = chunk.split(":", 1)
                mapping[key.strip()] = value.strip().lower() != "off"
            else:
                mapping[chunk] = True
        return mapping

    def on_define(
        self, registry: Any, name: str, entry: RouteEntry
    ) -> None:  # pragma: no cover - default no-op
        """Hook run when a name is defined."""

    def wrap_resolve(self, registry: Any, call_next: Callable) -> Callable:
        """Wrap path resolution; default passthrough."""
        return call_next

    def entry_metadata(self, registry: Any, name: str, entry: RouteEntry) -> Dict[str, Any]:
        return {}

    def _get_store(self) -> Dict[str, Any]:
        return getattr(self._registry, "_plugin_info")
