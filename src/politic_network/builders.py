"""Per-verb request builders."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from urllib3.exceptions import LocationParseError
from urllib3.util import parse_url

from .config import RoutingConfig
from .encoding import build_query_string, encode_json_body
from .http import RequestDescriptor, RequestMethod

logger = logging.getLogger(__name__)

_ALLOWED_SCHEMES = frozenset({"http", "https"})


def is_valid_url(url: str) -> bool:
    """Return True when ``url`` is an absolute http(s) URL with a host."""

    if not url or not url.isprintable() or any(ch.isspace() for ch in url):
        return False
    try:
        parsed = parse_url(url)
    except LocationParseError:
        return False
    return (parsed.scheme or "").lower() in _ALLOWED_SCHEMES and bool(parsed.host)


def substitute_route(url: str, route_params: Sequence[Any] | None) -> str:
    """Append ``/`` and replace each ``{i}`` placeholder with ``"<param>/"``.

    Placeholders without a matching parameter are left as they are.
    """

    full_url = f"{url}/"
    for index, param in enumerate(route_params or ()):
        full_url = full_url.replace(f"{{{index}}}", f"{param}/")
    return full_url


class RequestBuilder:
    """Turn a URL and parameters into a `RequestDescriptor`.

    Every ``build_*`` method returns ``None`` instead of raising when the
    request cannot be formed.
    """

    def __init__(self, routing: RoutingConfig | None = None) -> None:
        self.routing = routing or RoutingConfig()

    def build(
        self,
        method: RequestMethod | str,
        url: str,
        *,
        query_params: Mapping[str, Any] | None = None,
        body_params: Mapping[str, Any] | None = None,
        route_params: Sequence[Any] | None = None,
    ) -> RequestDescriptor | None:
        verb = RequestMethod.parse(method)
        if verb is None:
            logger.debug("Unsupported request method %r", method)
            return None
        if verb is RequestMethod.GET:
            return self.build_get(url, query_params, route_params)
        if verb is RequestMethod.POST:
            return self.build_post(url, body_params)
        if verb is RequestMethod.PUT:
            return self.build_put(url, body_params, query_params)
        if verb is RequestMethod.PATCH:
            return self.build_patch(url, query_params, route_params)
        return self.build_delete(url)

    def build_get(
        self,
        url: str,
        query_params: Mapping[str, Any] | None = None,
        route_params: Sequence[Any] | None = None,
    ) -> RequestDescriptor | None:
        full_url = self._address(url, query_params, route_params, self.routing.get_query_mode)
        return self._descriptor(RequestMethod.GET, full_url)

    def build_patch(
        self,
        url: str,
        query_params: Mapping[str, Any] | None = None,
        route_params: Sequence[Any] | None = None,
    ) -> RequestDescriptor | None:
        full_url = self._address(url, query_params, route_params, self.routing.patch_query_mode)
        return self._descriptor(RequestMethod.PATCH, full_url)

    def build_post(
        self, url: str, body_params: Mapping[str, Any] | None
    ) -> RequestDescriptor | None:
        return self._with_body(RequestMethod.POST, url, body_params)

    def build_put(
        self,
        url: str,
        body_params: Mapping[str, Any] | None,
        query_params: Mapping[str, Any] | None = None,
    ) -> RequestDescriptor | None:
        full_url = url + build_query_string(query_params) if query_params is not None else url
        return self._with_body(RequestMethod.PUT, full_url, body_params)

    def build_delete(self, url: str) -> None:
        # DELETE has no builder; callers receive a build failure.
        logger.debug("DELETE requests are not supported (%s)", url)
        return None

    # Internal helpers -------------------------------------------------------
    @staticmethod
    def _address(
        url: str,
        query_params: Mapping[str, Any] | None,
        route_params: Sequence[Any] | None,
        query_mode: bool,
    ) -> str:
        if query_mode:
            # Without query parameters nothing is appended; query mode never
            # falls back to route addressing.
            return url + build_query_string(query_params)
        return substitute_route(url, route_params)

    @staticmethod
    def _descriptor(
        method: RequestMethod, url: str, body: bytes | None = None
    ) -> RequestDescriptor | None:
        if not is_valid_url(url):
            logger.debug("Rejected malformed URL for %s: %r", method.value, url)
            return None
        return RequestDescriptor(method=method, url=url, body=body)

    def _with_body(
        self, method: RequestMethod, url: str, body_params: Mapping[str, Any] | None
    ) -> RequestDescriptor | None:
        if not is_valid_url(url):
            logger.debug("Rejected malformed URL for %s: %r", method.value, url)
            return None
        if body_params is None:
            logger.debug("%s %s requires body parameters", method.value, url)
            return None
        try:
            body = encode_json_body(body_params)
        except (TypeError, ValueError) as exc:
            logger.debug("Could not serialize %s body for %s: %s", method.value, url, exc)
            return None
        return RequestDescriptor(method=method, url=url, body=body)
