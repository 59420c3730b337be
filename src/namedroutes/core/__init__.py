"""Core runtime aggregator.

Exposes the building blocks from a single module; importing it only imports:

* ``entries`` → ``Template``, ``Group``
* ``errors`` → ``RouteNotFound``, ``RouteIsGroup``, ``NotATemplate``
* ``renderer`` → ``render``
* ``base_registry`` → ``BaseRegistry`` (plugin-free engine)
* ``registry`` → ``Registry`` (plugin-enabled)
* ``decorators`` → ``route``
* ``routed`` → ``RoutedClass``
* ``request`` → ``RequestContext``, ``route_to_path``
"""

from .base_registry import BaseRegistry
from .decorators import route
from .entries import Group, Template
from .errors import NotATemplate, RouteIsGroup, RouteNotFound
from .registry import Registry
from .renderer import render
from .request import RequestContext, route_to_path
from .routed import RoutedClass

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
