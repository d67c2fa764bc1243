"""
MockTap Expectation Store

Ordered collection of registered (pattern, outcome) pairs.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Any, Iterator, List, Optional

import httpx

from .matcher import RequestMatcher
from .outcome import Outcome, classify
from .pattern import RequestPattern
from ..exceptions import NoMatchFoundError

logger = logging.getLogger("mocktap.store")


@dataclass(frozen=True)
class Expectation:
    """A registered request pattern and the outcome it produces."""

    pattern: RequestPattern
    outcome: Outcome


class ExpectationStore:
    """
    Ordered store of expectations.

    Entries are kept in insertion order. Selection scans the most recently
    appended entries first, so a later registration shadows an earlier one
    for the same request. A selected entry is removed and never matched twice.

    Example:
        store = ExpectationStore()
        store.append(RequestPattern('GET', 'https://example.com'), httpx.Response(200))
        expectation = store.pop_match(request, RequestMatcher())
    """

    def __init__(self, lock: Optional[threading.RLock] = None):
        """
        Initialize the store.

        Args:
            lock: Lock guarding mutations; shared with the owning handler
        """
        self._entries: List[Expectation] = []
        self._lock = lock or threading.RLock()

    def append(self, pattern: Any, outcome: Any) -> Expectation:
        """
        Register an expectation.

        Args:
            pattern: RequestPattern or httpx.Request to match against
            outcome: Response, exception, Deferred, Future or generator callable

        Returns:
            The stored Expectation

        Raises:
            TypeMismatchError: If pattern or outcome has an unsupported type
        """
        expectation = Expectation(RequestPattern.coerce(pattern), classify(outcome))
        with self._lock:
            self._entries.append(expectation)
        logger.debug(f"Registered expectation for {expectation.pattern}")
        return expectation

    def count(self) -> int:
        return len(self._entries)

    def reset(self):
        """Remove all expectations."""
        with self._lock:
            self._entries.clear()

    def pop_match(self, request: httpx.Request, matcher: RequestMatcher) -> Expectation:
        """
        Select and remove the newest expectation suitable for a request.

        Raises:
            NoMatchFoundError: If no expectation is suitable
        """
        with self._lock:
            for index in range(len(self._entries) - 1, -1, -1):
                expectation = self._entries[index]
                if matcher.suitable(expectation.pattern, request):
                    del self._entries[index]
                    return expectation

        raise NoMatchFoundError.for_request(request)

    def __len__(self) -> int:
        return self.count()

    def __iter__(self) -> Iterator[Expectation]:
        with self._lock:
            return iter(list(self._entries))
