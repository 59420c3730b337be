"""Plugin pipeline and logging plugin."""

import copy
from types import SimpleNamespace

import pytest
from pydantic import ValidationError

import namedroutes.plugins.logging  # noqa: F401
from namedroutes import Registry
from namedroutes.plugins._base_plugin import BasePlugin  # Not public API
from namedroutes.plugins.logging import LoggingPlugin


class RecordingLogger:
    def __init__(self):
        self.records = []

    def hasHandlers(self):  # noqa: N802 - logging.Logger API
        return True

    def info(self, message):
        self.records.append(message)


class UpperPlugin(BasePlugin):
    plugin_code = "upper"
    plugin_description = "Upper-cases rendered paths"

    def configure(self, enabled: bool = True):
        pass

    def on_define(self, registry, name, entry):
        registry.set_plugin_enabled(name, self.name, True)

    def wrap_resolve(self, registry, call_next):
        def wrapper(name, params=None, **options):
            return call_next(name, params, **options).upper()

        return wrapper

    def entry_metadata(self, registry, name, entry):
        return {"upper": True}


if UpperPlugin.plugin_code not in Registry.available_plugins():
    Registry.register_plugin(UpperPlugin)


def test_logging_plugin_is_registered():
    assert Registry.available_plugins()["logging"] is LoggingPlugin


def test_logging_plugin_logs_resolution():
    registry = Registry(name="app").plug("logging")
    logger = RecordingLogger()
    registry.logging._logger = logger
    registry.define("user", "/users/:id")

    assert registry.path_for("user", {"id": "4"}) == "/users/4"
    assert logger.records[0] == "user resolve"
    assert logger.records[1].startswith("user -> /users/4 (")
    assert logger.records[1].endswith(" ms)")


def test_logging_plugin_print_sink(capsys):
    registry = Registry(name="app").plug("logging", flags="print:on,before:off")
    registry.define("home", "/")
    registry.path_for("home")
    out = capsys.readouterr().out.splitlines()
    assert len(out) == 1
    assert out[0].startswith("home -> / (")


def test_logging_plugin_falls_back_to_print_without_handlers(capsys):
    registry = Registry(name="app").plug("logging", after=False)

    class SilentLogger:
        def hasHandlers(self):  # noqa: N802
            return False

        def info(self, message):  # pragma: no cover - must not be called
            raise AssertionError(message)

    registry.logging._logger = SilentLogger()
    registry.define("home", "/")
    registry.path_for("home")
    assert capsys.readouterr().out.strip() == "home resolve"


def test_logging_plugin_per_route_config():
    registry = Registry(name="app").plug("logging")
    logger = RecordingLogger()
    registry.logging._logger = logger
    registry.define("quiet", "/quiet").define("loud", "/loud")
    registry.logging.configure(_target="quiet", enabled=False)

    registry.path_for("quiet")
    registry.path_for("loud")
    assert all(record.startswith("loud") for record in logger.records)
    assert registry.get_config("logging", "quiet")["enabled"] is False
    assert registry.get_config("logging")["enabled"] is True


def test_logging_plugin_runtime_switch():
    registry = Registry(name="app").plug("logging")
    logger = RecordingLogger()
    registry.logging._logger = logger
    registry.define("home", "/")
    registry.set_plugin_enabled("home", "logging", False)
    registry.path_for("home")
    assert logger.records == []
    assert registry.is_plugin_enabled("home", "logging") is False
    registry.set_plugin_enabled("home", "logging", True)
    registry.path_for("home")
    assert len(logger.records) == 2


def test_logging_plugin_skips_after_message_on_error():
    registry = Registry(name="app").plug("logging")
    logger = RecordingLogger()
    registry.logging._logger = logger
    with pytest.raises(KeyError):
        registry.path_for("missing")
    assert logger.records == ["missing resolve"]


def test_configure_validates_options():
    registry = Registry(name="app").plug("logging")
    with pytest.raises(ValidationError):
        registry.logging.configure(unknown_option=True)


def test_custom_plugin_wraps_and_describes():
    registry = Registry(name="app")
    registry.define("home", "/home")
    registry.plug("upper")
    assert registry.path_for("home") == "/HOME"
    info = registry.members()["entries"]["home"]
    assert info["plugins"]["upper"]["metadata"] == {"upper": True}
    assert [plugin.name for plugin in registry.iter_plugins()] == ["upper"]


def test_plugin_order_first_attached_is_outermost():
    registry = Registry(name="app").plug("logging").plug("upper")
    logger = RecordingLogger()
    registry.logging._logger = logger
    registry.define("home", "/home")
    assert registry.path_for("home") == "/HOME"
    assert logger.records[1].startswith("home -> /HOME (")


def test_plug_errors():
    registry = Registry(name="app")
    with pytest.raises(ValueError):
        registry.plug("does-not-exist")
    with pytest.raises(TypeError):
        registry.plug(LoggingPlugin)
    with pytest.raises(AttributeError):
        registry.upper
    with pytest.raises(AttributeError):
        registry.get_config("logging")
    with pytest.raises(AttributeError):
        registry.is_plugin_enabled("home", "logging")


def test_register_plugin_validation():
    class NoCode(BasePlugin):
        pass

    class Other(BasePlugin):
        plugin_code = "logging"

    with pytest.raises(TypeError):
        Registry.register_plugin(object)  # type: ignore[arg-type]
    with pytest.raises(ValueError):
        Registry.register_plugin(NoCode)
    with pytest.raises(ValueError):
        Registry.register_plugin(Other)
    Registry.register_plugin(LoggingPlugin)


def test_mounted_child_inherits_parent_plugins():
    parent = Registry(name="app").plug("logging", flags="before:off")
    parent.define("blog", "/blog")
    child = Registry(name="blog")
    child.define("post", "/posts/:slug")
    parent.mount(child, "blog")

    assert "logging" in child._plugins_by_name
    assert child.logging is not parent.logging
    logger = RecordingLogger()
    child.logging._logger = logger
    assert child.path_for("post", {"slug": "hello"}) == "/blog/posts/hello"
    assert len(logger.records) == 1
    assert logger.records[0].startswith("post -> /blog/posts/hello (")


def test_child_keeps_its_own_plugin_instance():
    parent = Registry(name="app").plug("logging")
    child = Registry(name="blog").plug("logging", flags="print:on")
    own = child.logging
    parent.mount(child, "blog")
    assert child.logging is own
    assert child.get_config("logging")["print"] is True


def test_plugins_run_for_request_resolution():
    parent = Registry(name="app").plug("logging")
    logger = RecordingLogger()
    parent.logging._logger = logger
    parent.define("user", "/users/:id")
    request = SimpleNamespace(params={"id": "1"})
    with parent.handle(request):
        assert request.route_to_path("user") == "/users/1"
    assert logger.records[0] == "user resolve"


def test_registry_copy_does_not_recurse():
    registry = Registry(name="app").plug("logging")
    registry.define("home", "/")
    clone = copy.copy(registry)
    assert clone.name == "app"
    assert clone.logging is registry.logging
    with pytest.raises(AttributeError):
        registry._not_a_plugin
