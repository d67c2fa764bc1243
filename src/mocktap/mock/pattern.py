"""
MockTap Request Pattern

Description of the request an expectation waits for.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

import httpx

from ..common import decode_body, describe_type, normalize_headers
from ..exceptions import TypeMismatchError


@dataclass(frozen=True)
class RequestPattern:
    """
    Pattern for an expected request.

    Every field is compared with the literal-or-pattern rule: a
    case-insensitive literal first, then the field as an anchored,
    case-insensitive regular expression.

    Example:
        pattern = RequestPattern('GET', r'https://api.example.com/users/\\d+')
        pattern = RequestPattern(
            'POST',
            'https://api.example.com/users',
            headers={'Content-Type': 'application/json'},
            body='{"name": ".*"}'
        )
    """

    method: str
    url: str
    headers: Dict[str, List[str]] = field(default_factory=dict)
    body: str = ""

    def __post_init__(self):
        object.__setattr__(self, 'headers', normalize_headers(self.headers))
        object.__setattr__(self, 'body', decode_body(self.body))

    @classmethod
    def from_request(cls, request: httpx.Request) -> 'RequestPattern':
        """
        Build a pattern from an httpx.Request.

        The pattern keeps all of the request's headers, including the
        Host header httpx adds on its own.
        """
        return cls(
            method=request.method,
            url=str(request.url),
            headers=request.headers,
            body=request.read()
        )

    @classmethod
    def coerce(cls, value: Any) -> 'RequestPattern':
        """Accept either a RequestPattern or an httpx.Request."""
        if isinstance(value, cls):
            return value
        if isinstance(value, httpx.Request):
            return cls.from_request(value)
        raise TypeMismatchError(
            f"Expected a RequestPattern or httpx.Request. Found {describe_type(value)}"
        )

    def __str__(self) -> str:
        return f"{self.method} {self.url}"
