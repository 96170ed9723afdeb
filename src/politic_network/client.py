"""High-level request dispatcher."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, MutableMapping, Sequence
from concurrent.futures import Future
from typing import Any
from urllib.parse import urljoin, urlparse

import requests
import urllib3
from urllib3.exceptions import InsecureRequestWarning

from .auth.base import AuthStrategy
from .auth.bearer import BearerAuth
from .builders import RequestBuilder
from .classifier import classify_response
from .config import DEFAULT_CONNECTIVITY_MESSAGE, ClientConfig, RoutingConfig
from .exceptions import BadRequestError, UndecodableError
from .http import RequestDescriptor, RequestMethod, RequestsTransport, Transport, TransportResponse
from .results import Failure, Outcome

logger = logging.getLogger(__name__)

Callback = Callable[[Outcome[Any]], None]


class PoliticClient:
    """Build, send and classify requests against an envelope-speaking API."""

    def __init__(
        self,
        *,
        base_url: str | None = None,
        auth_strategy: AuthStrategy | None = None,
        verify_ssl: bool | str = True,
        timeout: float = 30.0,
        default_headers: Mapping[str, str] | None = None,
        routing: RoutingConfig | None = None,
        connectivity_message: str = DEFAULT_CONNECTIVITY_MESSAGE,
        max_workers: int = 4,
        session: requests.Session | None = None,
        transport: Transport | None = None,
    ) -> None:
        self.config = ClientConfig(
            base_url=base_url.rstrip("/") if base_url else None,
            verify_ssl=verify_ssl,
            timeout=timeout,
            default_headers=default_headers,
            routing=routing or RoutingConfig(),
            connectivity_message=connectivity_message,
            max_workers=max_workers,
        )
        self._suppress_insecure_warning_if_needed()
        self._auth = auth_strategy
        self._builder = RequestBuilder(self.config.routing)
        self._transport = transport or RequestsTransport(
            session=session,
            timeout=self.config.timeout,
            verify=self.config.verify_ssl,
            max_workers=self.config.max_workers,
        )

    # Context manager helpers -------------------------------------------------
    def __enter__(self) -> PoliticClient:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # pragma: no cover - passthrough
        self.close()

    # Public API --------------------------------------------------------------
    def request(
        self,
        url: str,
        method: RequestMethod | str,
        parameters: Mapping[str, Any] | None = None,
        token: str = "",
        callback: Callback | None = None,
        *,
        route_params: Sequence[Any] | None = None,
        query_params: Mapping[str, Any] | None = None,
        result_type: Any = None,
    ) -> Future[Outcome[Any]]:
        """Dispatch a request and deliver its outcome.

        ``parameters`` become the query string for GET and PATCH and the JSON
        body for POST and PUT. ``callback`` is invoked exactly once with the
        outcome, on the transport's worker thread or, when the request cannot
        be built, on the calling thread. The returned future resolves to the
        same outcome after the callback has run.
        """

        future: Future[Outcome[Any]] = Future()
        full_url = self._resolve_url(url)
        descriptor = self._build(full_url, method, parameters, route_params, query_params)
        if descriptor is None:
            logger.info("Could not build %s request for %s", _method_label(method), full_url)
            self._complete(future, callback, Failure(BadRequestError()))
            return future

        headers, auth_label = self._prepare_headers(token)
        descriptor = descriptor.with_headers(headers)
        self._log_request(descriptor, auth_label)

        def on_response(response: TransportResponse) -> None:
            if response.error is not None:
                reason = str(response.error).strip() or response.error.__class__.__name__
                logger.warning(
                    "Transport failure for %s %s: %s",
                    descriptor.method.value,
                    descriptor.url,
                    reason,
                )
            try:
                outcome = classify_response(
                    response.content,
                    response.status_code,
                    result_type,
                    connectivity_message=self.config.connectivity_message,
                )
            except Exception:
                logger.exception(
                    "Could not classify response for %s %s (result_type=%r)",
                    descriptor.method.value,
                    descriptor.url,
                    result_type,
                )
                outcome = Failure(UndecodableError(status_code=response.status_code))
            self._complete(future, callback, outcome)

        self._transport.send(descriptor, on_response)
        return future

    def close(self) -> None:
        self._transport.close()

    # Internal helpers -------------------------------------------------------
    def _build(
        self,
        url: str,
        method: RequestMethod | str,
        parameters: Mapping[str, Any] | None,
        route_params: Sequence[Any] | None,
        query_params: Mapping[str, Any] | None,
    ) -> RequestDescriptor | None:
        verb = RequestMethod.parse(method)
        if verb is None:
            return None
        if verb in (RequestMethod.POST, RequestMethod.PUT):
            return self._builder.build(
                verb, url, body_params=parameters, query_params=query_params
            )
        return self._builder.build(
            verb, url, query_params=parameters, route_params=route_params
        )

    def _resolve_url(self, url: str) -> str:
        parsed = urlparse(url)
        if (parsed.scheme and parsed.netloc) or not self.config.base_url:
            return url
        return urljoin(f"{self.config.base_url}/", url.lstrip("/"))

    def _prepare_headers(self, token: str) -> tuple[MutableMapping[str, str], str]:
        headers = self.config.resolved_headers()
        strategy = BearerAuth(token) if token else self._auth
        if strategy is None:
            return headers, "none"
        strategy.apply(headers)
        return headers, strategy.describe()

    @staticmethod
    def _complete(
        future: Future[Outcome[Any]], callback: Callback | None, outcome: Outcome[Any]
    ) -> None:
        if callback is not None:
            try:
                callback(outcome)
            except Exception as exc:
                future.set_exception(exc)
                return
        future.set_result(outcome)

    def _log_request(self, request: RequestDescriptor, auth_label: str) -> None:
        logger.info(
            "Request %s %s (auth=%s)",
            request.method.value,
            request.url,
            auth_label,
        )

    def _suppress_insecure_warning_if_needed(self) -> None:
        if isinstance(self.config.verify_ssl, bool) and not self.config.verify_ssl:
            urllib3.disable_warnings(InsecureRequestWarning)


def _method_label(method: RequestMethod | str) -> str:
    verb = RequestMethod.parse(method)
    return verb.value if verb is not None else str(method).upper()
