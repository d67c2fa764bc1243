"""
MockTap Exceptions

Errors raised by the mock handler.

EmptyQueueError, InvalidConfigError, TypeMismatchError and NoMatchFoundError
are raised directly to the caller of the failing operation. HeadersHookError
only ever travels through a Deferred's failure channel.
"""

from pprint import pformat
from typing import Any, Dict, Optional

from .common import decode_body, normalize_headers

ON_HEADERS_ERROR_MESSAGE = 'An error was encountered during the on_headers event'


class MockTapError(Exception):
    """Base class for all MockTap errors."""


class EmptyQueueError(MockTapError, LookupError):
    """A call was made while no expectations were registered."""


class InvalidConfigError(MockTapError, ValueError):
    """A per-call option has an unusable value."""


class TypeMismatchError(MockTapError, TypeError):
    """An outcome is not a response, error, deferred or generator."""


class NoMatchFoundError(MockTapError, LookupError):
    """
    No registered expectation is suitable for a request.

    Attributes:
        data: Diagnostic dump of the request (method, uri, body, and
            protocol_version / headers when non-empty)
    """

    def __init__(self, message: str, data: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.data = data or {}

    @classmethod
    def for_request(cls, request: Any) -> 'NoMatchFoundError':
        """Build the error for an unmatched httpx.Request."""
        data: Dict[str, Any] = {
            'method': request.method,
            'uri': str(request.url),
            'body': decode_body(request.read()),
        }

        protocol_version = request.extensions.get('http_version', b'HTTP/1.1')
        if isinstance(protocol_version, bytes):
            protocol_version = protocol_version.decode('ascii')
        protocol_version = protocol_version.replace('HTTP/', '')
        if protocol_version:
            data['protocol_version'] = protocol_version

        headers = normalize_headers(request.headers)
        if headers:
            data['headers'] = headers

        message = "Can't find suitable response for request [%s]" % pformat(data, sort_dicts=False)
        return cls(message, data)


class HeadersHookError(MockTapError):
    """
    The on_headers hook raised.

    The hook's exception is available as __cause__.

    Attributes:
        request: The request being handled
        response: The outcome the hook was inspecting
    """

    def __init__(self, message: str, request: Any = None, response: Any = None):
        super().__init__(message)
        self.request = request
        self.response = response


class RejectionError(MockTapError):
    """A Deferred was rejected with a reason that is not an exception."""

    def __init__(self, reason: Any):
        super().__init__(f"The deferred was rejected with reason: {reason!r}")
        self.reason = reason
