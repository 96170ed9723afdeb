"""HTTP request descriptors and the transport they are sent over."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from enum import Enum

import requests
from requests import Session


class RequestMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"

    @classmethod
    def parse(cls, value: RequestMethod | str) -> RequestMethod | None:
        """Return the method named by ``value`` (case-insensitive), or ``None``."""
        try:
            return cls(value.upper() if isinstance(value, str) else value)
        except ValueError:
            return None


@dataclass(frozen=True, slots=True)
class RequestDescriptor:
    """Fully formed request, ready to hand to a transport."""

    method: RequestMethod
    url: str
    body: bytes | None = None
    headers: Mapping[str, str] = field(default_factory=dict)

    def with_headers(self, headers: Mapping[str, str]) -> RequestDescriptor:
        merged = dict(self.headers)
        merged.update(headers)
        return replace(self, headers=merged)


@dataclass(frozen=True, slots=True)
class TransportResponse:
    """Raw transport result: body bytes and status, or the failure that prevented them."""

    content: bytes | None
    status_code: int = 0
    error: Exception | None = None


Completion = Callable[[TransportResponse], None]


class Transport(ABC):
    """Interface each transport must implement."""

    @abstractmethod
    def send(self, request: RequestDescriptor, completion: Completion) -> None:
        """Dispatch ``request`` and invoke ``completion`` exactly once."""

    def close(self) -> None:
        """Release transport resources."""


class RequestsTransport(Transport):
    """Send requests with a `requests.Session` on a worker pool."""

    def __init__(
        self,
        *,
        session: Session | None = None,
        timeout: float | tuple[float, float] | None = 30.0,
        verify: bool | str = True,
        max_workers: int = 4,
    ) -> None:
        self._session = session or requests.Session()
        self._timeout = timeout
        self._verify = verify
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="politic-network"
        )

    def send(self, request: RequestDescriptor, completion: Completion) -> None:
        try:
            self._executor.submit(self._deliver, request, completion)
        except RuntimeError as exc:
            # Raised once the executor has been shut down.
            completion(TransportResponse(content=None, status_code=0, error=exc))

    def perform(self, request: RequestDescriptor) -> TransportResponse:
        """Send ``request`` on the calling thread."""

        try:
            response = self._session.request(
                method=request.method.value,
                url=request.url,
                headers=dict(request.headers),
                data=request.body,
                timeout=self._timeout,
                verify=self._verify,
            )
        except requests.RequestException as exc:
            return TransportResponse(content=None, status_code=0, error=exc)
        return TransportResponse(content=response.content, status_code=response.status_code)

    def close(self) -> None:
        self._executor.shutdown(wait=True)
        self._session.close()

    def _deliver(self, request: RequestDescriptor, completion: Completion) -> None:
        completion(self.perform(request))
