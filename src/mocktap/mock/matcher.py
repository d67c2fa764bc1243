"""
MockTap Request Matcher

Decides whether a registered request pattern is suitable for an actual request.

A pattern is suitable when all four checks pass:
- Method: literal-or-pattern, case-insensitive
- URI: both sides percent-decoded, then literal-or-pattern
- Headers: every pattern header present on the request with matching values
  (headers only on the request are ignored)
- Body: decoded body, literal-or-pattern

Literal-or-pattern: exact case-insensitive equality first; failing that the
expected value is used as a regular expression anchored to the whole actual
value (case-insensitive). A malformed expression is a non-match.
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Dict

import httpx

from .pattern import RequestPattern
from ..common import URLMatcher, decode_body, normalize_headers


@dataclass
class MatchResult:
    """Breakdown of a pattern/request comparison."""

    method_match: bool = False
    uri_match: bool = False
    body_match: bool = False
    headers_diff: Dict[Any, Any] = field(default_factory=dict)

    @property
    def matched(self) -> bool:
        return self.method_match and self.uri_match and self.body_match and not self.headers_diff

    @property
    def reason(self) -> str:
        """Human readable summary of what did not match."""
        if self.matched:
            return "Match"

        reasons = []
        if not self.method_match:
            reasons.append("method differs")
        if not self.uri_match:
            reasons.append("URI differs")
        if self.headers_diff:
            reasons.append(f"headers differ ({', '.join(str(k) for k in self.headers_diff)})")
        if not self.body_match:
            reasons.append("body differs")
        return "; ".join(reasons)


class RequestMatcher:
    """
    Suitability predicate for request patterns.

    Example:
        matcher = RequestMatcher()
        pattern = RequestPattern('GET', r'https://api.example.com/users/\\d+')
        request = httpx.Request('GET', 'https://api.example.com/users/123')

        if matcher.suitable(pattern, request):
            print("Pattern accepts request")
    """

    def suitable(self, pattern: RequestPattern, request: httpx.Request) -> bool:
        """Check all four criteria, stopping at the first failure."""
        return (
            self.is_suitable_method(pattern, request)
            and self.is_suitable_uri(pattern, request)
            and self.is_suitable_headers(pattern, request)
            and self.is_suitable_body(pattern, request)
        )

    def explain(self, pattern: RequestPattern, request: httpx.Request) -> MatchResult:
        """Run every check and report each outcome."""
        return MatchResult(
            method_match=self.is_suitable_method(pattern, request),
            uri_match=self.is_suitable_uri(pattern, request),
            body_match=self.is_suitable_body(pattern, request),
            headers_diff=self.headers_diff(pattern.headers, normalize_headers(request.headers))
        )

    def is_suitable_method(self, pattern: RequestPattern, request: httpx.Request) -> bool:
        return self.is_suitable_string(pattern.method, request.method)

    def is_suitable_uri(self, pattern: RequestPattern, request: httpx.Request) -> bool:
        return self.is_suitable_string(
            URLMatcher.decode_uri(pattern.url),
            URLMatcher.decode_uri(request.url)
        )

    def is_suitable_headers(self, pattern: RequestPattern, request: httpx.Request) -> bool:
        return not self.headers_diff(pattern.headers, normalize_headers(request.headers))

    def is_suitable_body(self, pattern: RequestPattern, request: httpx.Request) -> bool:
        return self.is_suitable_string(pattern.body, decode_body(request.read()))

    def headers_diff(self, expected: Any, actual: Any) -> Dict[Any, Any]:
        """
        Recursive difference between expected and actual header structures.

        Mapping keys are compared case-insensitively; list elements are
        compared by position. Entries only present in `actual` are ignored.

        Args:
            expected: Pattern headers (name -> list of values)
            actual: Request headers (name -> list of values)

        Returns:
            The expected entries that are missing or unsuitable (empty when
            the pattern's headers are satisfied)
        """
        if isinstance(expected, Mapping):
            expected_items = list(expected.items())
        else:
            expected_items = list(enumerate(expected))

        if isinstance(actual, Mapping):
            lookup = {self._key(k): v for k, v in actual.items()}
        elif isinstance(actual, (list, tuple)):
            lookup = dict(enumerate(actual))
        else:
            lookup = {0: actual}

        result: Dict[Any, Any] = {}
        for key, value in expected_items:
            actual_key = self._key(key)
            if actual_key not in lookup:
                result[key] = value
            elif isinstance(value, (Mapping, list, tuple)):
                diff = self.headers_diff(value, lookup[actual_key])
                if diff:
                    result[key] = diff
            elif not self.is_suitable_string(str(value), str(lookup[actual_key])):
                result[key] = value

        return result

    @staticmethod
    def _key(key: Any) -> Any:
        return key.lower() if isinstance(key, str) else key

    @staticmethod
    def is_suitable_string(expected: str, actual: str) -> bool:
        """
        Literal-or-pattern comparison.

        Example:
            RequestMatcher.is_suitable_string('GET', 'get')                 # True
            RequestMatcher.is_suitable_string(r'/users/\\d+', '/users/42')  # True
            RequestMatcher.is_suitable_string('/users/(', '/users/(')      # True, literal
        """
        if expected.lower() == actual.lower():
            return True

        try:
            return re.fullmatch(expected, actual, re.IGNORECASE) is not None
        except re.error:
            return False
