"""
MockTap Deferred

A small promise primitive for mock transports.

Continuations run synchronously on the thread that settles the deferred, in
the order they were attached. wait() returns only once the deferred has
settled and all of its continuations have run.

Example:
    deferred = Deferred.fulfilled(response)
    chained = deferred.then(lambda r: r.status_code)
    assert chained.wait() == 200
"""

import threading
from concurrent.futures import CancelledError, Future
from typing import Any, Callable, List, Optional, Tuple

from .exceptions import RejectionError

PENDING = 'pending'
FULFILLED = 'fulfilled'
REJECTED = 'rejected'

Continuation = Optional[Callable[[Any], Any]]


class Deferred:
    """A value that may not be settled yet."""

    def __init__(self):
        self._state = PENDING
        self._value: Any = None
        self._lock = threading.Lock()
        self._settled = threading.Event()
        self._continuations: List[Tuple['Deferred', Continuation, Continuation]] = []

    @classmethod
    def fulfilled(cls, value: Any) -> 'Deferred':
        """Create an already-fulfilled deferred."""
        deferred = cls()
        deferred.resolve(value)
        return deferred

    @classmethod
    def rejected(cls, reason: Any) -> 'Deferred':
        """Create an already-rejected deferred."""
        deferred = cls()
        deferred.reject(reason)
        return deferred

    @classmethod
    def from_future(cls, future: Future) -> 'Deferred':
        """
        Adapt a concurrent.futures.Future.

        The deferred settles when the future completes; a cancelled future
        rejects with CancelledError.
        """
        deferred = cls()

        def _done(completed: Future):
            if completed.cancelled():
                deferred.reject(CancelledError())
            elif completed.exception() is not None:
                deferred.reject(completed.exception())
            else:
                deferred.resolve(completed.result())

        future.add_done_callback(_done)
        return deferred

    @property
    def state(self) -> str:
        """One of 'pending', 'fulfilled' or 'rejected'."""
        return self._state

    def is_pending(self) -> bool:
        return self._state == PENDING

    def resolve(self, value: Any):
        """
        Fulfil the deferred with a value.

        Resolving with another Deferred adopts that deferred's eventual state.

        Raises:
            RuntimeError: If the deferred is already settled
        """
        if isinstance(value, Deferred):
            if value is self:
                raise TypeError("Cannot resolve a deferred with itself")
            value.then(self.resolve, self.reject)
            return
        self._settle(FULFILLED, value)

    def reject(self, reason: Any):
        """
        Reject the deferred with a reason.

        Raises:
            RuntimeError: If the deferred is already settled
        """
        self._settle(REJECTED, reason)

    def then(
        self,
        on_fulfilled: Continuation = None,
        on_rejected: Continuation = None
    ) -> 'Deferred':
        """
        Attach continuations and return a deferred for their result.

        A continuation's return value fulfils the returned deferred (or is
        adopted, if it is a Deferred); an exception raised by a continuation
        rejects it. A missing continuation passes the value or reason through.
        """
        child = Deferred()
        with self._lock:
            if self._state == PENDING:
                self._continuations.append((child, on_fulfilled, on_rejected))
                return child
        self._run(child, on_fulfilled, on_rejected)
        return child

    def otherwise(self, on_rejected: Callable[[Any], Any]) -> 'Deferred':
        """Attach a failure continuation only."""
        return self.then(None, on_rejected)

    def wait(self, unwrap: bool = True, timeout: Optional[float] = None) -> Any:
        """
        Block until the deferred settles.

        Args:
            unwrap: Raise the rejection reason on failure. When False, a
                rejected deferred returns None instead.
            timeout: Seconds to wait, or None to wait indefinitely

        Returns:
            The fulfilled value

        Raises:
            TimeoutError: If the deferred is still pending after timeout
            RejectionError: If unwrapping a reason that is not an exception
        """
        if not self._settled.wait(timeout):
            raise TimeoutError(f"Deferred still pending after {timeout} seconds")

        if self._state == REJECTED:
            if not unwrap:
                return None
            if isinstance(self._value, BaseException):
                raise self._value
            raise RejectionError(self._value)

        return self._value

    def _settle(self, state: str, value: Any):
        with self._lock:
            if self._state != PENDING:
                raise RuntimeError(f"Deferred is already {self._state}")
            self._state = state
            self._value = value
            continuations, self._continuations = self._continuations, []

        for child, on_fulfilled, on_rejected in continuations:
            self._run(child, on_fulfilled, on_rejected)

        self._settled.set()

    def _run(self, child: 'Deferred', on_fulfilled: Continuation, on_rejected: Continuation):
        callback = on_fulfilled if self._state == FULFILLED else on_rejected

        if callback is None:
            if self._state == FULFILLED:
                child.resolve(self._value)
            else:
                child.reject(self._value)
            return

        try:
            result = callback(self._value)
        except Exception as e:
            child.reject(e)
            return

        child.resolve(result)

    def __repr__(self) -> str:
        return f"<Deferred {self._state}>"
