"""Terminal request outcomes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from .exceptions import ErrorKind, PoliticNetworkError

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Success(Generic[T]):
    """Decoded result payload of a successful request."""

    value: T

    @property
    def is_success(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True, slots=True)
class Failure:
    """Classified failure of a request."""

    error: PoliticNetworkError

    @property
    def is_success(self) -> bool:
        return False

    @property
    def kind(self) -> ErrorKind:
        return self.error.kind

    @property
    def message(self) -> str:
        return str(self.error)

    def unwrap(self):
        """Raise the carried error."""
        raise self.error


Outcome = Union[Success[T], Failure]

__all__ = ["Failure", "Outcome", "Success"]
