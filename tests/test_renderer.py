"""Path rendering: placeholder substitution and parameter merging."""

import pytest

from namedroutes import Group, NotATemplate, RouteIsGroup, Template, render
from namedroutes.core.renderer import merge_params


def test_render_substitutes_placeholder():
    assert render(Template("/a/:x"), {"x": "5"}) == "/a/5"


def test_render_accepts_plain_string_and_non_string_values():
    assert render("/orders/:id/items/:item", {"id": 12, "item": 3}) == "/orders/12/items/3"


def test_render_without_params_returns_template_text():
    assert render(Template("/a/:x")) == "/a/:x"
    assert render(Template("/a/:x"), {}) == "/a/:x"


def test_render_leaves_unknown_placeholders():
    assert render("/a/:x/:y", {"x": "1"}) == "/a/1/:y"
    assert render("/a/:x", {"other": "1"}) == "/a/:x"


def test_render_replaces_first_occurrence_only():
    assert render("/:x/:x", {"x": "1"}) == "/1/:x"


def test_render_matches_whole_placeholder_names():
    template = "/people/:id/:identity"
    assert render(template, {"id": "7", "identity": "me"}) == "/people/7/me"
    assert render(template, {"identity": "me", "id": "7"}) == "/people/7/me"


def test_render_keeps_text_after_placeholder():
    assert render("/files/:name.json", {"name": "report"}) == "/files/report.json"


def test_render_does_not_rescan_substituted_segments():
    assert render("/:a/:b", {"a": ":b", "b": "2"}) == "/:b/2"


def test_render_preserves_template_layout():
    assert render("/a/:x/", {"x": "5"}) == "/a/5/"
    assert render("a//:x", {"x": "5"}) == "a//5"


def test_render_does_not_escape_values():
    assert render("/search/:q", {"q": "a b/c"}) == "/search/a b/c"


def test_render_group_raises_not_a_template():
    group = Group({"index": Template("/")})
    with pytest.raises(NotATemplate) as excinfo:
        render(group, {}, name="pages")
    assert excinfo.value.name == "pages"
    assert isinstance(excinfo.value, RouteIsGroup)


def test_merge_params_override_wins():
    params = {"id": "1", "lang": "en"}
    merged = merge_params(params, {"id": "2"})
    assert merged == {"id": "2", "lang": "en"}
    assert params == {"id": "1", "lang": "en"}
    assert merge_params(None, None) == {}
