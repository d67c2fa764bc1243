"""
MockTap Outcomes

What an expectation produces once it is matched. An outcome is exactly one of:
- ResponseOutcome: a canned httpx.Response
- ErrorOutcome: an exception the call fails with
- DeferredOutcome: a Deferred settled elsewhere
- GeneratorOutcome: a function (request, options) -> one of the above
"""

from concurrent.futures import Future
from dataclasses import dataclass
from typing import Any, Callable, Union

import httpx

from ..common import describe_type
from ..exceptions import TypeMismatchError
from ..promise import Deferred


@dataclass(frozen=True)
class ResponseOutcome:
    """A literal response."""

    response: httpx.Response

    @property
    def value(self) -> Any:
        return self.response


@dataclass(frozen=True)
class ErrorOutcome:
    """A literal error, delivered through the deferred's failure channel."""

    error: BaseException

    @property
    def value(self) -> Any:
        return self.error


@dataclass(frozen=True)
class DeferredOutcome:
    """A deferred value, handed to the caller unchanged."""

    deferred: Deferred

    @property
    def value(self) -> Any:
        return self.deferred


@dataclass(frozen=True)
class GeneratorOutcome:
    """A function called with (request, options) to produce the real outcome."""

    func: Callable[..., Any]

    @property
    def value(self) -> Any:
        return self.func


Outcome = Union[ResponseOutcome, ErrorOutcome, DeferredOutcome, GeneratorOutcome]

OUTCOME_TYPES = (ResponseOutcome, ErrorOutcome, DeferredOutcome, GeneratorOutcome)


def classify(value: Any, allow_generator: bool = True) -> Outcome:
    """
    Map a raw value onto its outcome variant.

    Values that already are outcome variants are returned as they are.
    A concurrent.futures.Future is adapted to a Deferred.

    Args:
        value: Response, exception, Deferred, Future or callable
        allow_generator: Accept callables as generator outcomes

    Returns:
        The matching outcome variant

    Raises:
        TypeMismatchError: If the value is none of the accepted kinds
    """
    if isinstance(value, OUTCOME_TYPES):
        if isinstance(value, GeneratorOutcome) and not allow_generator:
            raise TypeMismatchError("A generator outcome cannot produce another generator")
        return value

    if isinstance(value, httpx.Response):
        return ResponseOutcome(value)
    if isinstance(value, BaseException):
        return ErrorOutcome(value)
    if isinstance(value, Deferred):
        return DeferredOutcome(value)
    if isinstance(value, Future):
        return DeferredOutcome(Deferred.from_future(value))

    if callable(value):
        if not allow_generator:
            raise TypeMismatchError(
                f"A generator outcome must produce a Response, exception or Deferred. "
                f"Found callable {describe_type(value)}"
            )
        return GeneratorOutcome(value)

    expected = "a Response, Deferred, exception or callable" if allow_generator \
        else "a Response, Deferred or exception"
    raise TypeMismatchError(f"Expected outcome to be {expected}. Found {describe_type(value)}")
