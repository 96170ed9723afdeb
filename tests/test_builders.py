import json

import pytest

from politic_network.builders import RequestBuilder, is_valid_url, substitute_route
from politic_network.config import RoutingConfig
from politic_network.http import RequestDescriptor, RequestMethod

BASE = "https://api.test/v1"


def route_builder() -> RequestBuilder:
    return RequestBuilder(RoutingConfig(get_query_mode=False, patch_query_mode=False))


@pytest.mark.parametrize(
    "url",
    ["not a url", "relative/path", "ftp://files.test/a", "https://", "", "https://api.test/a b"],
)
def test_invalid_urls_are_rejected(url):
    assert is_valid_url(url) is False


def test_get_query_mode_appends_query_string():
    request = RequestBuilder().build_get(f"{BASE}/users", {"page": 2, "sort": None})

    assert request == RequestDescriptor(method=RequestMethod.GET, url=f"{BASE}/users?page=2")
    assert request.body is None


def test_get_query_mode_without_params_leaves_url_untouched():
    request = RequestBuilder().build_get(f"{BASE}/users")

    assert request.url == f"{BASE}/users"


def test_query_mode_without_params_appends_no_trailing_slash():
    builder = RequestBuilder()

    assert builder.build_patch(f"{BASE}/users/9", None).url == f"{BASE}/users/9"
    assert builder.build_get(f"{BASE}/users", {"gone": None}).url == f"{BASE}/users"
    assert route_builder().build_get(f"{BASE}/users", None).url == f"{BASE}/users/"


def test_get_query_mode_never_substitutes_route_placeholders():
    request = RequestBuilder().build_get(f"{BASE}/users/{{0}}", None, ["42"])

    assert request.url == f"{BASE}/users/{{0}}"


def test_get_route_mode_substitutes_placeholders_in_order():
    request = route_builder().build_get(f"{BASE}/users/{{0}}/posts/{{1}}", {"page": 1}, ["7", 3])

    assert request.url == f"{BASE}/users/7//posts/3//"


def test_route_mode_leaves_unmatched_placeholders():
    assert substitute_route(f"{BASE}/users/{{0}}/posts/{{1}}", ["7"]) == f"{BASE}/users/7//posts/{{1}}/"
    assert substitute_route(f"{BASE}/users", None) == f"{BASE}/users/"


def test_patch_uses_its_own_addressing_mode():
    builder = RequestBuilder(RoutingConfig(get_query_mode=True, patch_query_mode=False))

    patch = builder.build_patch(f"{BASE}/users/{{0}}", {"x": 1}, ["9"])
    get = builder.build_get(f"{BASE}/users", {"x": 1})

    assert patch.method is RequestMethod.PATCH
    assert patch.url == f"{BASE}/users/9//"
    assert get.url == f"{BASE}/users?x=1"


def test_post_serializes_body_without_none_values():
    request = RequestBuilder().build_post(f"{BASE}/users", {"name": "Ann", "nick": None})

    assert request.method is RequestMethod.POST
    assert request.url == f"{BASE}/users"
    assert json.loads(request.body) == {"name": "Ann"}


def test_post_requires_body_params():
    assert RequestBuilder().build_post(f"{BASE}/users", None) is None


def test_post_fails_for_unserializable_body():
    assert RequestBuilder().build_post(f"{BASE}/users", {"blob": object()}) is None


def test_post_fails_for_malformed_url():
    assert RequestBuilder().build_post("users", {"name": "Ann"}) is None


def test_put_appends_query_before_body():
    request = RequestBuilder().build_put(f"{BASE}/users/1", {"name": "Bo"}, {"force": True})

    assert request.method is RequestMethod.PUT
    assert request.url == f"{BASE}/users/1?force=true"
    assert request.body == b'{"name":"Bo"}'


def test_delete_never_builds():
    builder = RequestBuilder()

    assert builder.build_delete(f"{BASE}/users/1") is None
    assert builder.build("DELETE", f"{BASE}/users/1") is None


def test_build_dispatches_by_method_name():
    builder = RequestBuilder()

    assert builder.build("get", f"{BASE}/users").method is RequestMethod.GET
    assert builder.build(RequestMethod.POST, f"{BASE}/users", body_params={}).body == b"{}"
    assert builder.build("TRACE", f"{BASE}/users") is None


def test_building_twice_yields_equal_descriptors():
    builder = RequestBuilder()
    params = {"name": "Ann", "age": 30}

    assert builder.build_post(f"{BASE}/users", params) == builder.build_post(f"{BASE}/users", params)
    assert builder.build_get(f"{BASE}/users", params) == builder.build_get(f"{BASE}/users", params)


@pytest.mark.parametrize(
    ("value", "expected"),
    [("get", RequestMethod.GET), ("Patch", RequestMethod.PATCH), (RequestMethod.PUT, RequestMethod.PUT)],
)
def test_request_method_parse(value, expected):
    assert RequestMethod.parse(value) is expected


def test_request_method_parse_rejects_unknown_verbs():
    assert RequestMethod.parse("TRACE") is None
    assert RequestMethod.parse("") is None
