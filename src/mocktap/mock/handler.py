"""
MockTap Mock Handler

Queue-based stand-in for an HTTP client's transport.

Features:
- Ordered expectations, newest registration matched first
- Literal-or-regex matching on method, URI, headers and body
- Canned responses, errors, deferred values and generator functions
- Simulated latency (delay option)
- on_headers / on_stats hooks, body sinks and global callbacks
- Last request/options bookkeeping for assertions
"""

import io
import logging
import os
import threading
import time
from pathlib import Path
from typing import Any, Callable, Iterable, Optional, Sequence, Tuple, Union

import httpx
import requests

from .config import CallOptions, OptionsLike
from .fixtures import load_expectations
from .matcher import RequestMatcher
from .outcome import ErrorOutcome, Outcome
from .resolver import OutcomeResolver
from .stats import TransferStats
from .store import Expectation, ExpectationStore
from ..exceptions import (
    ON_HEADERS_ERROR_MESSAGE,
    EmptyQueueError,
    HeadersHookError,
    NoMatchFoundError,
    TypeMismatchError,
)
from ..promise import Deferred
from ..transport import MockAdapter, MockTransport

logger = logging.getLogger("mocktap.handler")


class MockHandler:
    """
    Mock transport handler.

    Register the requests you expect together with what they should produce,
    then hand the handler to a client (or call it directly). Each call consumes
    one matching expectation and returns a Deferred.

    Example:
        handler = MockHandler([
            (httpx.Request('GET', 'https://api.example.com/users/1'), httpx.Response(200, json={'id': 1})),
            (RequestPattern('GET', r'https://api.example.com/users/\\d+'), httpx.Response(404)),
        ])

        response = handler(httpx.Request('GET', 'https://api.example.com/users/1')).wait()
        assert response.status_code == 200

        # Or through a client
        with handler.create_client() as client:
            client.get('https://api.example.com/users/7')   # 404
    """

    def __init__(
        self,
        queue: Optional[Iterable[Sequence[Any]]] = None,
        on_fulfilled: Optional[Callable[[Any], Any]] = None,
        on_rejected: Optional[Callable[[Any], Any]] = None,
        matcher: Optional[RequestMatcher] = None,
        resolver: Optional[OutcomeResolver] = None
    ):
        """
        Initialize mock handler.

        Args:
            queue: Initial (pattern, outcome) pairs, appended in order
            on_fulfilled: Called with every successful response
            on_rejected: Called with every failure reason
            matcher: Optional RequestMatcher instance (will create if None)
            resolver: Optional OutcomeResolver instance (will create if None)

        Raises:
            TypeMismatchError: If an initial entry is not a valid pair
        """
        self.on_fulfilled = on_fulfilled
        self.on_rejected = on_rejected
        self.matcher = matcher or RequestMatcher()
        self.resolver = resolver or OutcomeResolver()

        # One lock for the store and the last-call record
        self._lock = threading.RLock()
        self.store = ExpectationStore(lock=self._lock)

        self._last_request: Optional[httpx.Request] = None
        self._last_options: OptionsLike = None

        for item in queue or []:
            if not isinstance(item, (tuple, list)) or len(item) != 2:
                raise TypeMismatchError(
                    f"Expected a (request, outcome) pair. Found {type(item).__name__}"
                )
            self.append(*item)

    @classmethod
    def from_file(
        cls,
        file_path: Union[str, Path],
        interesting_headers_only: bool = True,
        **kwargs
    ) -> 'MockHandler':
        """
        Create a handler preloaded from a capture file.

        Args:
            file_path: JSON or YAML capture file
            interesting_headers_only: Only match on the headers worth matching
            **kwargs: Passed to the constructor

        Returns:
            MockHandler with one expectation per capture
        """
        handler = cls(**kwargs)
        for pattern, response in load_expectations(file_path, interesting_headers_only):
            handler.append(pattern, response)
        logger.info(f"Loaded {handler.count()} expectations from {file_path}")
        return handler

    def append(self, request: Any, outcome: Any) -> Expectation:
        """
        Register an expected request.

        Args:
            request: httpx.Request or RequestPattern to match against
            outcome: httpx.Response, exception, Deferred, Future, or a callable
                (request, options) -> one of those

        Raises:
            TypeMismatchError: If the outcome is none of the accepted kinds
        """
        return self.store.append(request, outcome)

    def count(self) -> int:
        return self.store.count()

    def __len__(self) -> int:
        return self.count()

    def reset(self):
        """Drop all registered expectations. Calls already made are unaffected."""
        self.store.reset()

    @property
    def last_request(self) -> Optional[httpx.Request]:
        """The most recent request handled, whether or not it matched."""
        return self._last_request

    @property
    def last_options(self) -> OptionsLike:
        """The options passed with the most recent request."""
        return self._last_options

    def __call__(self, request: httpx.Request, options: OptionsLike = None) -> Deferred:
        return self.handle(request, options)

    def handle(self, request: httpx.Request, options: OptionsLike = None) -> Deferred:
        """
        Handle an outgoing request.

        Args:
            request: The actual request
            options: Per-call options (mapping or CallOptions)

        Returns:
            Deferred that settles with the response, or fails with the error
            outcome (or HeadersHookError). Settlement hooks have run by the
            time the deferred is observable through wait().

        Raises:
            EmptyQueueError: If no expectations are registered
            InvalidConfigError: If a hook option is not callable
            NoMatchFoundError: If no expectation is suitable
            TypeMismatchError: If a generator returns an unsupported value
        """
        if not self.count():
            raise EmptyQueueError('Mock queue is empty')

        call_options = CallOptions.from_dict(options)
        raw_options = options if options is not None else {}

        logger.debug(f"Incoming: {request.method} {request.url}")

        if call_options.delay is not None:
            time.sleep(call_options.delay_seconds)

        with self._lock:
            if not self.store.count():
                raise EmptyQueueError('Mock queue is empty')

            self._last_request = request
            self._last_options = raw_options

            try:
                expectation = self.store.pop_match(request, self.matcher)
            except NoMatchFoundError:
                logger.warning(f"No match found for {request.method} {request.url}")
                self._log_candidates(request)
                raise

        logger.debug(f"Matched {request.method} {request.url} against {expectation.pattern}")

        outcome = self.resolver.expand(expectation.outcome, request, raw_options)
        outcome = self._invoke_on_headers(request, call_options, outcome)
        deferred = self.resolver.wrap(outcome)

        return deferred.then(
            lambda value: self._fulfilled(request, call_options, value),
            lambda reason: self._rejected(request, call_options, reason)
        )

    def create_client(self, default_options: OptionsLike = None, **kwargs) -> httpx.Client:
        """Create an httpx.Client whose transport is this handler."""
        return httpx.Client(transport=MockTransport(self, default_options), **kwargs)

    def create_async_client(self, default_options: OptionsLike = None, **kwargs) -> httpx.AsyncClient:
        """Create an httpx.AsyncClient whose transport is this handler."""
        return httpx.AsyncClient(transport=MockTransport(self, default_options), **kwargs)

    def create_session(self, default_options: OptionsLike = None) -> requests.Session:
        """Create a requests.Session with this handler mounted for http and https."""
        session = requests.Session()
        adapter = MockAdapter(self, default_options)
        session.mount('http://', adapter)
        session.mount('https://', adapter)
        return session

    def _invoke_on_headers(self, request: httpx.Request, options: CallOptions, outcome: Outcome) -> Outcome:
        if options.on_headers is None:
            return outcome

        try:
            options.on_headers(outcome.value)
        except Exception as e:
            error = HeadersHookError(ON_HEADERS_ERROR_MESSAGE, request=request, response=outcome.value)
            error.__cause__ = e
            return ErrorOutcome(error)

        return outcome

    def _fulfilled(self, request: httpx.Request, options: CallOptions, value: Any) -> Any:
        response = value if isinstance(value, httpx.Response) else None
        self._invoke_stats(request, options, response)

        if self.on_fulfilled:
            self.on_fulfilled(value)

        if response is not None and options.sink is not None:
            self._write_sink(options.sink, response)

        return value

    def _rejected(self, request: httpx.Request, options: CallOptions, reason: Any) -> Deferred:
        self._invoke_stats(request, options, None, reason)

        if self.on_rejected:
            self.on_rejected(reason)

        return Deferred.rejected(reason)

    def _invoke_stats(
        self,
        request: httpx.Request,
        options: CallOptions,
        response: Optional[httpx.Response] = None,
        reason: Any = None
    ):
        if options.on_stats is None:
            return

        stats = TransferStats(
            request=request,
            response=response,
            transfer_time=options.transfer_time,
            handler_error_data=reason
        )
        options.on_stats(stats)

    def _write_sink(self, sink: Any, response: httpx.Response):
        """Write the response body to a path, text stream or writable object."""
        content = response.read()

        if isinstance(sink, (str, os.PathLike)):
            Path(sink).write_bytes(content)
        elif isinstance(sink, io.TextIOBase):
            sink.write(response.text)
        elif hasattr(sink, 'write'):
            sink.write(content)
        else:
            logger.warning(f"Ignoring sink of unsupported type {type(sink).__name__}")
            return

        logger.debug(f"Wrote {len(content)} bytes to sink {sink!r}")

    def _log_candidates(self, request: httpx.Request):
        if not logger.isEnabledFor(logging.DEBUG):
            return

        for expectation in reversed(list(self.store)):
            result = self.matcher.explain(expectation.pattern, request)
            logger.debug(f"  Candidate {expectation.pattern}: {result.reason}")


def create_mock_client(
    queue: Optional[Iterable[Tuple[Any, Any]]] = None,
    on_fulfilled: Optional[Callable[[Any], Any]] = None,
    on_rejected: Optional[Callable[[Any], Any]] = None,
    **client_kwargs
) -> Tuple[MockHandler, httpx.Client]:
    """
    Convenience function to create a handler and an httpx client using it.

    Returns:
        (handler, client) so expectations can still be added and inspected

    Example:
        handler, client = create_mock_client([
            (httpx.Request('GET', 'https://example.com/'), httpx.Response(200, text='ok'))
        ])
        assert client.get('https://example.com/').text == 'ok'
    """
    handler = MockHandler(queue, on_fulfilled=on_fulfilled, on_rejected=on_rejected)
    return handler, handler.create_client(**client_kwargs)
