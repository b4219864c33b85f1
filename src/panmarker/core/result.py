"""
Result type for functional error handling.

Every stage of the marker pipeline (parsing, aggregation, selection,
orchestration) reports failure by returning an ``Err`` carrying a typed
``MarkerError`` instead of raising or terminating the process. The CLI is
the only place that turns an ``Err`` into an exit status.

Usage:
    >>> result = load_allow_list(path)
    >>> if result.is_err():
    ...     echo_error(str(result.unwrap_err()))
    >>> allow_list = result.unwrap()

    >>> match run_markers(config):
    ...     case Ok(run):
    ...         write_document(run, "-")
    ...     case Err(error):
    ...         print(f"Failed: {error}")
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import TypeVar, Generic, Union, Any

T = TypeVar("T")  # Success type
E = TypeVar("E")  # Error type


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful outcome holding a value."""

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_err(self) -> Any:
        raise ValueError("Called unwrap_err on Ok value")

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Failed outcome holding an error (usually a ``MarkerError``)."""

    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> Any:
        """Raises ValueError naming the contained error."""
        raise ValueError(f"Called unwrap on Err: {self.error}")

    def unwrap_err(self) -> E:
        return self.error

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


# Type alias for Result
Result = Union[Ok[T], Err[E]]
