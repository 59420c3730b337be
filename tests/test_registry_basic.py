"""Tests for Registry definition and dotted lookup."""

import pytest

from namedroutes import Group, Registry, RouteIsGroup, RouteNotFound, Template


def make_registry():
    registry = Registry(name="app")
    registry.define("home", "/")
    registry.define("users", {"index": "/users", "show": "/users/:id"})
    registry.define("user_posts", "/users/:id/posts/:post")
    return registry


def test_define_returns_registry_for_chaining():
    registry = Registry(name="app")
    assert registry.define("a", "/a").define("b", "/b") is registry
    assert registry.entries() == ("a", "b")


def test_define_then_lookup_returns_equal_entry():
    registry = Registry(name="app")
    entry = Template("/reports/:year")
    registry.define("reports", entry)
    assert registry.lookup("reports") == entry


def test_define_coerces_shorthands():
    registry = make_registry()
    assert registry.lookup("home") == Template("/")
    users = registry.lookup("users")
    assert isinstance(users, Group)
    assert users.names() == ("index", "show")
    assert users.get("show") == Template("/users/:id")


def test_redefine_overwrites():
    registry = Registry(name="app")
    registry.define("about", "/about")
    registry.define("about", "/about-us")
    assert registry.lookup("about") == Template("/about-us")


def test_lookup_without_name_returns_mapping_by_reference():
    registry = make_registry()
    mapping = registry.lookup()
    assert set(mapping) == {"home", "users", "user_posts"}
    assert mapping is registry.lookup()


def test_dotted_lookup_walks_groups():
    registry = Registry(name="app")
    registry.define("admin", {"users": {"list": "/admin/users", "edit": "/admin/users/:id/edit"}})
    walked = registry.lookup("admin").get("users").get("edit")
    assert registry.lookup("admin.users.edit") == walked == Template("/admin/users/:id/edit")


def test_dotted_define_creates_groups():
    registry = Registry(name="app")
    registry.define("users.index", "/users")
    registry.define("users.show", "/users/:id")
    assert registry.lookup("users") == Group(
        {"index": Template("/users"), "show": Template("/users/:id")}
    )


def test_dotted_define_through_template_rejected():
    registry = make_registry()
    with pytest.raises(ValueError):
        registry.define("home.child", "/child")


@pytest.mark.parametrize("bad", ["", " ", "a..b", ".a", "a."])
def test_define_rejects_bad_names(bad):
    with pytest.raises(ValueError):
        Registry(name="app").define(bad, "/x")


def test_define_rejects_unsupported_entry():
    with pytest.raises(TypeError):
        Registry(name="app").define("x", 42)


@pytest.mark.parametrize(
    "name", ["missing", "users.missing", "home.child", "users.show.deeper", "", "users.", ".users"]
)
def test_lookup_missing_raises_route_not_found(name):
    registry = make_registry()
    with pytest.raises(RouteNotFound) as excinfo:
        registry.lookup(name)
    assert excinfo.value.name == name


def test_route_not_found_is_key_error_with_readable_message():
    registry = make_registry()
    with pytest.raises(KeyError) as excinfo:
        registry["nope"]
    assert str(excinfo.value) == "Route 'nope' does not exist"


def test_lookup_is_idempotent():
    registry = make_registry()
    assert registry.lookup("users.show") == registry.lookup("users.show")
    assert registry.lookup("users") == registry.lookup("users")


def test_route_names_include_nested():
    registry = make_registry()
    assert registry.route_names() == (
        "home",
        "users",
        "user_posts",
        "users.index",
        "users.show",
    )


def test_path_for_renders_template():
    registry = make_registry()
    assert registry.path_for("user_posts", {"id": "3", "post": "9"}) == "/users/3/posts/9"
    assert registry.path_for("users.show", {"id": 5}) == "/users/5"


def test_path_for_group_raises():
    registry = make_registry()
    with pytest.raises(RouteIsGroup):
        registry.path_for("users")


def test_path_for_default_path():
    registry = Registry(name="app", default_path="#")
    registry.define("home", "/")
    assert registry.path_for("home") == "/"
    assert registry.path_for("missing") == "#"
    assert registry.path_for("missing", default_path="/404") == "/404"
    with pytest.raises(RouteNotFound):
        make_registry().path_for("missing")


def test_members_tree():
    registry = make_registry()
    info = registry.members()
    assert info["name"] == "app"
    assert info["entries"]["home"]["kind"] == "template"
    assert info["entries"]["home"]["path"] == "/"
    assert info["entries"]["users"]["kind"] == "group"
    assert "children" not in info
    assert Registry(name="empty").members() == {}


def test_looked_up_group_is_read_only_and_hashable():
    registry = make_registry()
    users = registry.lookup("users")
    with pytest.raises(TypeError):
        users.entries["extra"] = Template("/extra")
    with pytest.raises(RouteNotFound):
        registry.lookup("users.extra")
    same = Group({"show": Template("/users/:id"), "index": Template("/users")})
    assert users == same
    assert hash(users) == hash(same)
    assert {users: "users"}[same] == "users"
