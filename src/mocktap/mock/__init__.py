"""
MockTap Mock Module

Queue-based mock transport for HTTP clients.

This module provides:
- Mock handler with ordered, consumable expectations
- Request matching engine (literal or regex per field)
- Outcome resolution (responses, errors, deferreds, generators)
- Per-call hooks: delay, on_headers, on_stats, sink
- Expectations from recorded capture files
"""

from .handler import MockHandler, create_mock_client
from .store import Expectation, ExpectationStore
from .matcher import RequestMatcher, MatchResult
from .pattern import RequestPattern
from .outcome import (
    DeferredOutcome,
    ErrorOutcome,
    GeneratorOutcome,
    ResponseOutcome,
    classify,
)
from .resolver import OutcomeResolver
from .config import CallOptions
from .stats import TransferStats
from .fixtures import load_expectations

__all__ = [
    # Handler
    'MockHandler',
    'create_mock_client',

    # Store
    'Expectation',
    'ExpectationStore',

    # Matcher
    'RequestMatcher',
    'MatchResult',
    'RequestPattern',

    # Outcomes
    'ResponseOutcome',
    'ErrorOutcome',
    'DeferredOutcome',
    'GeneratorOutcome',
    'classify',
    'OutcomeResolver',

    # Options and hooks
    'CallOptions',
    'TransferStats',

    # Fixtures
    'load_expectations',
]
