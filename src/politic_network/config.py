"""Configuration helpers for the politic-network client."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

DEFAULT_CONNECTIVITY_MESSAGE = "Something went wrong, check your connection, and try again"


@dataclass(frozen=True, slots=True)
class RoutingConfig:
    """Addressing mode for the verbs that accept route parameters.

    When a flag is true the verb appends its parameters as a query string;
    otherwise positional route parameters are substituted into ``{i}``
    placeholders of the URL template.
    """

    get_query_mode: bool = True
    patch_query_mode: bool = True


@dataclass(slots=True)
class ClientConfig:
    """Typed configuration for `PoliticClient`."""

    base_url: str | None = None
    verify_ssl: bool | str = True
    timeout: float = 30.0
    default_headers: Mapping[str, str] | None = None
    routing: RoutingConfig = field(default_factory=RoutingConfig)
    connectivity_message: str = DEFAULT_CONNECTIVITY_MESSAGE
    max_workers: int = 4

    def resolved_headers(self) -> dict[str, str]:
        headers: dict[str, str] = {
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        if self.default_headers:
            headers.update(self.default_headers)
        return headers
