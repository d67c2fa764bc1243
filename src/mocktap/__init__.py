"""
MockTap

Deterministic mock transport for HTTP client tests: register the requests
you expect, paired with what they should produce, and run your client code
without touching the network.
"""

from .exceptions import (
    EmptyQueueError,
    HeadersHookError,
    InvalidConfigError,
    MockTapError,
    NoMatchFoundError,
    RejectionError,
    TypeMismatchError,
)
from .promise import Deferred
from .mock import (
    CallOptions,
    MockHandler,
    RequestMatcher,
    RequestPattern,
    TransferStats,
    create_mock_client,
    load_expectations,
)
from .transport import MockAdapter, MockTransport

__all__ = [
    'MockHandler',
    'create_mock_client',
    'RequestPattern',
    'RequestMatcher',
    'CallOptions',
    'TransferStats',
    'load_expectations',
    'Deferred',
    'MockTransport',
    'MockAdapter',

    # Errors
    'MockTapError',
    'EmptyQueueError',
    'InvalidConfigError',
    'TypeMismatchError',
    'NoMatchFoundError',
    'HeadersHookError',
    'RejectionError',
]

__version__ = '1.0.0'
