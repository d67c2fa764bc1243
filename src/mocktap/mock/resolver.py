"""
MockTap Outcome Resolver

Turns a matched outcome into a Deferred.
"""

import logging
from typing import Any

import httpx

from .outcome import (
    DeferredOutcome,
    ErrorOutcome,
    GeneratorOutcome,
    Outcome,
    ResponseOutcome,
    classify,
)
from ..promise import Deferred

logger = logging.getLogger("mocktap.resolver")


class OutcomeResolver:
    """
    Resolves outcomes in two steps.

    expand() replaces a generator with the outcome it produces; wrap() turns
    the final outcome into a settled (or, for deferred outcomes, pending)
    Deferred. The handler runs the on_headers hook between the two.

    Example:
        resolver = OutcomeResolver()
        deferred = resolver.resolve(classify(httpx.Response(200)), request, {})
        assert deferred.wait().status_code == 200
    """

    def resolve(self, outcome: Outcome, request: httpx.Request, options: Any) -> Deferred:
        return self.wrap(self.expand(outcome, request, options))

    def expand(self, outcome: Outcome, request: httpx.Request, options: Any) -> Outcome:
        """
        Replace a generator outcome with its result.

        The generator is called with the actual request and the options as the
        caller passed them. Only one level of indirection is supported.

        Raises:
            TypeMismatchError: If the generator returns another generator or a
                value that is not an outcome
        """
        if not isinstance(outcome, GeneratorOutcome):
            return outcome

        produced = outcome.func(request, options)
        logger.debug(f"Generator produced {type(produced).__name__} for {request.method} {request.url}")
        return classify(produced, allow_generator=False)

    def wrap(self, outcome: Outcome) -> Deferred:
        """Convert a non-generator outcome into a Deferred."""
        if isinstance(outcome, ErrorOutcome):
            return Deferred.rejected(outcome.error)
        if isinstance(outcome, ResponseOutcome):
            return Deferred.fulfilled(outcome.response)
        if isinstance(outcome, DeferredOutcome):
            return outcome.deferred

        # Generators must be expanded first
        raise TypeError(f"Cannot wrap unexpanded outcome {outcome!r}")
