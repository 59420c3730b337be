"""namedroutes public API surface.

- Public exports: ``Registry``, ``RoutedClass``, ``route``, the entry types
  ``Template``/``Group``, the errors and the request helpers.
- Built-in plugins (``logging``) are imported for their side effect of calling
  ``Registry.register_plugin``. Imports go through ``import_module`` to avoid
  cycles.

Import stays lightweight: no registry is instantiated here.
"""

from importlib import import_module

__version__ = "0.3.0"

from .core import (
    BaseRegistry,
    Group,
    NotATemplate,
    Registry,
    RequestContext,
    RoutedClass,
    RouteIsGroup,
    RouteNotFound,
    Template,
    render,
    route,
    route_to_path,
)

for _plugin in ("logging",):
    import_module(f"{__name__}.plugins.{_plugin}")
del _plugin

__all__ = [
    "BaseRegistry",
    "Group",
    "NotATemplate",
    "Registry",
    "RequestContext",
    "RoutedClass",
    "RouteIsGroup",
    "RouteNotFound",
    "Template",
    "render",
    "route",
    "route_to_path",
]
