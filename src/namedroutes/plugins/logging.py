"""Logging plugin.

Responsibilities
----------------
- Wrap every ``path_for`` call of the registry and emit:
  * ``before`` (default True): ``"<name> resolve"``
  * ``after`` (default True): ``"<name> -> <path> (<ms> ms)"`` with elapsed
    time in milliseconds formatted ``{elapsed:.2f}``.
- Sinks:
  * ``print`` true → ``print(message)``;
  * else ``log`` true → ``logger.info(message)`` when the logger reports
    handlers via ``hasHandlers()``, otherwise ``print(message)`` so messages
    are not dropped;
  * else no output.
- ``enabled`` gates the plugin (default True).
- Default logger: ``logging.getLogger("namedroutes")``.

Configuration
-------------
Keys ``enabled``, ``before``, ``after``, ``log``, ``print`` are accepted
registry-wide or per route name, as kwargs
(``registry.plug("logging", after=False)``), as a flags string
(``flags="before:off"``) or at runtime through ``registry.logging.configure``
(``_target="users.show"`` for one route).

Errors raised by resolution propagate; the ``after`` message is skipped then.

Registration
------------
Importing the module registers the plugin as ``"logging"``.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from namedroutes.core.registry import Registry
from namedroutes.plugins._base_plugin import BasePlugin


class LoggingPlugin(BasePlugin):
    """Log route resolutions with timing."""

    plugin_code = "logging"
    plugin_description = "Logs route resolutions with timing"

    __slots__ = ("_logger",)

    def __init__(self, registry, *, logger: Optional[logging.Logger] = None, **cfg):
        self._logger = logger or logging.getLogger("namedroutes")
        super().__init__(registry, **cfg)

    def configure(
        self,
        enabled: bool = True,
        before: bool = True,
        after: bool = True,
        log: bool = True,
        print: bool = False,  # noqa: A002 - mirrors the option name
    ):
        """Declare logging options; storage is handled by the wrapper."""
        pass

    def _emit(self, message: str, *, cfg: Optional[dict] = None):
        if cfg is None:
            return
        if cfg.get("print"):
            print(message)
            return
        if cfg.get("log"):
            logger = self._logger
            has_handlers = getattr(logger, "hasHandlers", None) or getattr(
                logger, "has_handlers", None
            )
            if callable(has_handlers) and has_handlers():
                logger.info(message)
            else:
                print(message)

    def wrap_resolve(self, registry, call_next: Callable):
        """Wrap resolution with start/end messages and timing."""

        def logged(name, params=None, **options):
            cfg = self._effective_config(name)
            if not cfg["enabled"]:
                return call_next(name, params, **options)
            if cfg["before"]:
                self._emit(f"{name} resolve", cfg=cfg)
            t0 = time.perf_counter()
            path = call_next(name, params, **options)
            elapsed = (time.perf_counter() - t0) * 1000
            if cfg["after"]:
                self._emit(f"{name} -> {path} ({elapsed:.2f} ms)", cfg=cfg)
            return path

        return logged

    def _effective_config(self, name: str) -> dict:
        defaults = {"enabled": True, "before": True, "after": True, "log": True, "print": False}
        cfg = defaults | self.configuration(name if isinstance(name, str) else None)

        def to_bool(key: str) -> bool:
            val = cfg.get(key)
            return defaults[key] if val is None else bool(val)

        return {key: to_bool(key) for key in defaults}


Registry.register_plugin(LoggingPlugin)
