"""Ok/Err values for operations that fail in expected ways.

An unreachable corpus or a rejected model call travels back as ``Err`` so
the caller picks the degradation (keyword fallback, HTTP 500, CLI exit).
Programming errors such as an invalid ``top_k`` still raise.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")
U = TypeVar("U")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """A completed operation and its value."""

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def map(self, fn: Callable[[T], U]) -> Result[U, E]:  # type: ignore[type-var]
        """Transform the value, keeping the Ok wrapper."""
        return Ok(fn(self.value))


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """A failed operation and a description of what went wrong."""

    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> T:  # type: ignore[type-var]
        raise ValueError(f"Called unwrap on Err: {self.error}")

    def map(self, fn: Callable[[T], U]) -> Result[U, E]:  # type: ignore[type-var]
        return Err(self.error)  # type: ignore[return-value]


Result = Union[Ok[T], Err[E]]
