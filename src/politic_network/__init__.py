"""Envelope-decoding HTTP client entrypoints."""
from .client import PoliticClient
from .config import ClientConfig, RoutingConfig
from .envelope import Envelope, WireDateTime
from .exceptions import ErrorKind, PoliticNetworkError
from .http import RequestMethod
from .results import Failure, Outcome, Success

__all__ = [
    "PoliticClient",
    "ClientConfig",
    "RoutingConfig",
    "Envelope",
    "WireDateTime",
    "ErrorKind",
    "PoliticNetworkError",
    "RequestMethod",
    "Failure",
    "Outcome",
    "Success",
]
