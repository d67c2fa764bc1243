"""
MockTap Transports

Installs a MockHandler as the transport of an HTTP client:
- MockTransport for httpx.Client / httpx.AsyncClient
- MockAdapter for requests.Session

Example:
    handler = MockHandler([(httpx.Request('GET', 'https://example.com/'), httpx.Response(204))])

    client = httpx.Client(transport=MockTransport(handler))
    client.get('https://example.com/', extensions={'mocktap': {'delay': 50}})

    session = requests.Session()
    session.mount('https://', MockAdapter(handler))
"""

import io
from typing import Any, Dict, Mapping, Optional

import httpx
import requests
from requests.adapters import BaseAdapter
from requests.structures import CaseInsensitiveDict
from requests.utils import get_encoding_from_headers

from .exceptions import TypeMismatchError

EXTENSION_KEY = 'mocktap'


def _options_dict(options: Any) -> Dict[str, Any]:
    if options is None:
        return {}
    if hasattr(options, 'to_dict'):
        return options.to_dict()
    return dict(options)


def _expect_response(value: Any) -> httpx.Response:
    if not isinstance(value, httpx.Response):
        raise TypeMismatchError(
            f"Mock outcome settled with {type(value).__name__}, expected httpx.Response"
        )
    return value


class MockTransport(httpx.BaseTransport, httpx.AsyncBaseTransport):
    """
    httpx transport backed by a MockHandler.

    Per-request options are read from the request's "mocktap" extension and
    layered over the transport's default options.
    """

    def __init__(self, handler: Any, default_options: Optional[Mapping[str, Any]] = None):
        """
        Args:
            handler: MockHandler (or any callable (request, options) -> Deferred)
            default_options: Options applied to every request
        """
        self.handler = handler
        self.default_options = _options_dict(default_options)

    def options_for(self, request: httpx.Request) -> Dict[str, Any]:
        options = dict(self.default_options)
        options.update(request.extensions.get(EXTENSION_KEY) or {})
        return options

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        deferred = self.handler(request, self.options_for(request))
        return _expect_response(deferred.wait())

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        await request.aread()
        deferred = self.handler(request, self.options_for(request))
        return _expect_response(deferred.wait())


class MockAdapter(BaseAdapter):
    """
    requests transport adapter backed by a MockHandler.

    The PreparedRequest is converted to an httpx.Request for matching and the
    resulting httpx.Response is converted back. The keyword arguments requests
    passes to send() (timeout, verify, ...) reach the handler as extra options.
    """

    def __init__(self, handler: Any, default_options: Optional[Mapping[str, Any]] = None):
        super().__init__()
        self.handler = handler
        self.default_options = _options_dict(default_options)

    def send(
        self,
        request: requests.PreparedRequest,
        stream: bool = False,
        timeout: Any = None,
        verify: Any = True,
        cert: Any = None,
        proxies: Any = None
    ) -> requests.Response:
        options = dict(self.default_options)
        options.update({
            'stream': stream,
            'timeout': timeout,
            'verify': verify,
            'cert': cert,
            'proxies': proxies,
        })

        http_request = self.to_httpx_request(request)
        deferred = self.handler(http_request, options)
        return self.build_response(request, _expect_response(deferred.wait()))

    @staticmethod
    def to_httpx_request(request: requests.PreparedRequest) -> httpx.Request:
        body = request.body
        if body is None:
            content = b''
        elif isinstance(body, str):
            content = body.encode('utf-8')
        elif isinstance(body, bytes):
            content = body
        elif hasattr(body, 'read'):
            content = body.read()
        else:
            content = b''.join(body)

        return httpx.Request(
            method=request.method,
            url=request.url,
            headers=list(request.headers.items()),
            content=content
        )

    def build_response(self, request: requests.PreparedRequest, http_response: httpx.Response) -> requests.Response:
        """Build a fully read requests.Response from an httpx.Response."""
        content = http_response.read()

        response = requests.Response()
        response.status_code = http_response.status_code
        response.headers = CaseInsensitiveDict(http_response.headers.items())
        response.encoding = get_encoding_from_headers(response.headers)
        response.reason = http_response.reason_phrase
        response.url = request.url
        response.request = request
        response.connection = self
        response.raw = io.BytesIO(content)
        response._content = content
        response._content_consumed = True
        return response

    def close(self):
        pass
